from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid4())


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    MISSED = "missed"
    RESCHEDULED = "rescheduled"

    @property
    def blocks_time(self) -> bool:
        """Cancelled and missed appointments leave their interval free."""
        return self not in (AppointmentStatus.CANCELLED, AppointmentStatus.MISSED)


class AppointmentType(str, Enum):
    INITIAL = "initial"
    FOLLOWUP = "followup"
    ROUTINE = "routine"
    URGENT = "urgent"
    PROCEDURE = "procedure"
    LAB_RESULTS = "lab_results"
    VACCINATION = "vaccination"
    TELEHEALTH = "telehealth"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]

    @property
    def color(self) -> str:
        return _TYPE_COLORS[self]


_TYPE_LABELS = {
    AppointmentType.INITIAL: "Initial consultation",
    AppointmentType.FOLLOWUP: "Follow-up",
    AppointmentType.ROUTINE: "Routine",
    AppointmentType.URGENT: "Urgent",
    AppointmentType.PROCEDURE: "Procedure",
    AppointmentType.LAB_RESULTS: "Lab results",
    AppointmentType.VACCINATION: "Vaccination",
    AppointmentType.TELEHEALTH: "Telehealth",
}

_TYPE_COLORS = {
    AppointmentType.INITIAL: "#4299E1",
    AppointmentType.FOLLOWUP: "#48BB78",
    AppointmentType.ROUTINE: "#805AD5",
    AppointmentType.URGENT: "#F56565",
    AppointmentType.PROCEDURE: "#ED8936",
    AppointmentType.LAB_RESULTS: "#38B2AC",
    AppointmentType.VACCINATION: "#667EEA",
    AppointmentType.TELEHEALTH: "#D53F8C",
}


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=_new_id, primary_key=True)
    tenant_id: str = Field(index=True)
    doctor_id: str | None = Field(default=None, foreign_key="doctors.id", index=True)
    patient_id: str = Field(foreign_key="patients.id", index=True)
    patient_name: str
    date: datetime = Field(index=True)  # naive UTC start
    duration: int  # minutes
    appointment_type: AppointmentType = AppointmentType.INITIAL
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str | None = None
    reminder_sent: bool = False
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AppointmentCreate(SQLModel):
    patient_id: str
    doctor_id: str | None = None
    date: datetime
    duration: int = Field(gt=0, le=24 * 60)
    appointment_type: AppointmentType = AppointmentType.INITIAL
    notes: str | None = None


class AppointmentUpdate(SQLModel):
    patient_id: str | None = None
    date: datetime | None = None
    duration: int | None = Field(default=None, gt=0, le=24 * 60)
    appointment_type: AppointmentType | None = None
    status: AppointmentStatus | None = None
    notes: str | None = None


class AppointmentPublic(SQLModel):
    id: str
    doctor_id: str | None = None
    patient_id: str
    patient_name: str
    date: datetime
    duration: int
    appointment_type: AppointmentType
    status: AppointmentStatus
    notes: str | None = None
    reminder_sent: bool
    created_at: datetime
