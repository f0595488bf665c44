import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.models.patient import Patient, PatientCreate

logger = logging.getLogger(__name__)


async def get_patient(session: AsyncSession, tenant_id: str, patient_id: str) -> Patient | None:
    result = await session.execute(
        select(Patient).where(Patient.id == patient_id, Patient.tenant_id == tenant_id)
    )
    return result.scalar_one_or_none()


async def list_patients(
    session: AsyncSession, tenant_id: str, search: str | None = None
) -> list[Patient]:
    """Tenant's patients by name; ``search`` matches name or record number, case-insensitive."""
    q = select(Patient).where(Patient.tenant_id == tenant_id).order_by(Patient.name)
    if search:
        pattern = f"%{search.lower()}%"
        q = q.where(
            or_(
                func.lower(Patient.name).like(pattern),
                func.lower(Patient.record_number).like(pattern),
            )
        )
    result = await session.execute(q)
    return list(result.scalars().all())


async def create_patient(
    session: AsyncSession, tenant_id: str, data: PatientCreate
) -> Patient | None:
    """None if the record number is already used within the tenant."""
    existing = await session.execute(
        select(Patient).where(
            Patient.tenant_id == tenant_id,
            Patient.record_number == data.record_number,
        )
    )
    if existing.scalar_one_or_none():
        return None
    patient = Patient(tenant_id=tenant_id, **data.model_dump())
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    logger.info("Patient %s created for tenant %s", patient.id, tenant_id)
    return patient
