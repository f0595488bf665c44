import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
)
from clinicslots.services.doctor_service import get_doctor
from clinicslots.services.patient_service import get_patient
from clinicslots.services.slot_service import find_conflicting_appointment

logger = logging.getLogger(__name__)


def _to_naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


async def get_appointment(
    session: AsyncSession, tenant_id: str, appointment_id: str
) -> Appointment | None:
    result = await session.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.tenant_id == tenant_id,
        )
    )
    return result.scalar_one_or_none()


async def create_appointment(
    session: AsyncSession, tenant_id: str, data: AppointmentCreate
) -> Appointment | None:
    patient = await get_patient(session, tenant_id, data.patient_id)
    if not patient:
        logger.warning("Appointment rejected: unknown patient %s for tenant %s", data.patient_id, tenant_id)
        return None
    if data.doctor_id is not None and not await get_doctor(session, tenant_id, data.doctor_id):
        logger.warning("Appointment rejected: unknown doctor %s for tenant %s", data.doctor_id, tenant_id)
        return None
    start = _to_naive_utc(data.date)
    # Enforce no overlapping for the same doctor
    conflict = await find_conflicting_appointment(
        session, tenant_id, data.doctor_id, start, data.duration
    )
    if conflict:
        logger.info("Appointment rejected: overlaps %s", conflict.id)
        return None
    appointment = Appointment(
        tenant_id=tenant_id,
        doctor_id=data.doctor_id,
        patient_id=patient.id,
        patient_name=patient.name,
        date=start,
        duration=data.duration,
        appointment_type=data.appointment_type,
        status=AppointmentStatus.SCHEDULED,
        notes=data.notes,
        reminder_sent=False,
    )
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %s created for patient %s at %s", appointment.id, patient.id, start)
    return appointment


async def update_appointment(
    session: AsyncSession, tenant_id: str, appointment_id: str, data: AppointmentUpdate
) -> tuple[Appointment | None, bool]:
    """Returns (appointment, rejected). appointment is None when not found or rejected;
    rejected is set for an unknown patient or an overlap with another appointment."""
    appointment = await get_appointment(session, tenant_id, appointment_id)
    if not appointment:
        return None, False
    changes = data.model_dump(exclude_unset=True)
    # Only notes can be cleared; null elsewhere leaves the field as it is
    changes = {k: v for k, v in changes.items() if v is not None or k == "notes"}
    patient = None
    if "patient_id" in changes:
        patient = await get_patient(session, tenant_id, changes.pop("patient_id"))
        if not patient:
            return None, True
    if "date" in changes:
        changes["date"] = _to_naive_utc(changes["date"])
    status = changes.get("status", appointment.status)
    if status.blocks_time:
        conflict = await find_conflicting_appointment(
            session,
            tenant_id,
            appointment.doctor_id,
            changes.get("date", appointment.date),
            changes.get("duration", appointment.duration),
            exclude_id=appointment.id,
        )
        if conflict:
            logger.info("Appointment %s update rejected: overlaps %s", appointment.id, conflict.id)
            return None, True
    if patient:
        appointment.patient_id = patient.id
        appointment.patient_name = patient.name
    for field, value in changes.items():
        setattr(appointment, field, value)
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    return appointment, False


async def cancel_appointment(session: AsyncSession, tenant_id: str, appointment_id: str) -> bool:
    appointment = await get_appointment(session, tenant_id, appointment_id)
    if not appointment:
        return False
    appointment.status = AppointmentStatus.CANCELLED
    session.add(appointment)
    await session.flush()
    logger.info("Appointment %s cancelled", appointment_id)
    return True
