from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.api.deps import get_session, get_tenant_id
from clinicslots.models.doctor import DoctorCreate, DoctorPublic
from clinicslots.services.doctor_service import create_doctor, get_doctor, list_doctors

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.get("", response_model=list[DoctorPublic])
async def read_doctors(
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> list[DoctorPublic]:
    doctors = await list_doctors(session, tenant_id)
    return [DoctorPublic.model_validate(d, from_attributes=True) for d in doctors]


@router.post("", response_model=DoctorPublic, status_code=status.HTTP_201_CREATED)
async def register_doctor(
    body: DoctorCreate,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> DoctorPublic:
    doctor = await create_doctor(session, tenant_id, body)
    return DoctorPublic.model_validate(doctor, from_attributes=True)


@router.get("/{doctor_id}", response_model=DoctorPublic)
async def read_doctor(
    doctor_id: str,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> DoctorPublic:
    doctor = await get_doctor(session, tenant_id, doctor_id)
    if not doctor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return DoctorPublic.model_validate(doctor, from_attributes=True)
