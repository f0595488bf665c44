from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.api.deps import get_session, get_tenant_id
from clinicslots.models.patient import PatientCreate, PatientPublic
from clinicslots.services.patient_service import create_patient, get_patient, list_patients

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientPublic])
async def search_patients(
    search: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> list[PatientPublic]:
    patients = await list_patients(session, tenant_id, search)
    return [PatientPublic.model_validate(p, from_attributes=True) for p in patients]


@router.post("", response_model=PatientPublic, status_code=status.HTTP_201_CREATED)
async def register_patient(
    body: PatientCreate,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> PatientPublic:
    patient = await create_patient(session, tenant_id, body)
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A patient with this record number already exists",
        )
    return PatientPublic.model_validate(patient, from_attributes=True)


@router.get("/{patient_id}", response_model=PatientPublic)
async def read_patient(
    patient_id: str,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> PatientPublic:
    patient = await get_patient(session, tenant_id, patient_id)
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return PatientPublic.model_validate(patient, from_attributes=True)
