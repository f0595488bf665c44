import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.api.deps import get_session, get_tenant_id
from clinicslots.api.schemas.appointment import AppointmentTypeInfo
from clinicslots.core.config import settings
from clinicslots.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentType,
    AppointmentUpdate,
)
from clinicslots.services.appointment_service import (
    cancel_appointment,
    create_appointment,
    get_appointment,
    update_appointment,
)
from clinicslots.services.slot_service import load_appointments

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(a, from_attributes=True)


@router.get("/types", response_model=list[AppointmentTypeInfo])
async def list_appointment_types() -> list[AppointmentTypeInfo]:
    return [AppointmentTypeInfo(value=t, label=t.label, color=t.color) for t in AppointmentType]


@router.get("", response_model=list[AppointmentPublic])
async def list_appointments_for_day(
    date_param: date = Query(..., alias="date"),
    doctor_id: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> list[AppointmentPublic]:
    appointments = await load_appointments(
        session, tenant_id, date_param, settings.clinic_timezone, doctor_id
    )
    return [_to_public(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def read_appointment(
    appointment_id: str,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> AppointmentPublic:
    appointment = await get_appointment(session, tenant_id, appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return _to_public(appointment)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> AppointmentPublic:
    appointment = await create_appointment(session, tenant_id, body)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Patient or doctor not found, or the time overlaps another appointment.",
        )
    return _to_public(appointment)


@router.patch("/{appointment_id}", response_model=AppointmentPublic)
async def edit_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> AppointmentPublic:
    appointment, rejected = await update_appointment(session, tenant_id, appointment_id, body)
    if rejected:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Patient or doctor not found, or the time overlaps another appointment.",
        )
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return _to_public(appointment)


@router.post("/{appointment_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel(
    appointment_id: str,
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> None:
    ok = await cancel_appointment(session, tenant_id, appointment_id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
