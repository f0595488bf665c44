from enum import Enum
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class PatientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class PatientBase(SQLModel):
    record_number: str = Field(index=True)
    name: str
    age: int | None = Field(default=None, ge=0)
    phone: str
    email: str | None = None
    status: PatientStatus = PatientStatus.ACTIVE


class Patient(PatientBase, table=True):
    __tablename__ = "patients"
    __table_args__ = (UniqueConstraint("tenant_id", "record_number", name="uq_patients_tenant_record"),)
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    tenant_id: str = Field(index=True)


class PatientCreate(PatientBase):
    pass


class PatientPublic(PatientBase):
    id: str
