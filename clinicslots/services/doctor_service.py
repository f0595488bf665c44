import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.models.doctor import Doctor, DoctorCreate

logger = logging.getLogger(__name__)


async def get_doctor(session: AsyncSession, tenant_id: str, doctor_id: str) -> Doctor | None:
    result = await session.execute(
        select(Doctor).where(Doctor.id == doctor_id, Doctor.tenant_id == tenant_id)
    )
    return result.scalar_one_or_none()


async def list_doctors(session: AsyncSession, tenant_id: str) -> list[Doctor]:
    result = await session.execute(
        select(Doctor).where(Doctor.tenant_id == tenant_id).order_by(Doctor.name)
    )
    return list(result.scalars().all())


async def create_doctor(session: AsyncSession, tenant_id: str, data: DoctorCreate) -> Doctor:
    doctor = Doctor(tenant_id=tenant_id, **data.model_dump())
    session.add(doctor)
    await session.flush()
    await session.refresh(doctor)
    logger.info("Doctor %s created for tenant %s", doctor.id, tenant_id)
    return doctor
