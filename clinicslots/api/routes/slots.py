from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.api.deps import get_session, get_tenant_id
from clinicslots.api.schemas.appointment import (
    AppointmentDraftInfo,
    AvailableSlotsResponse,
    SlotInfo,
    SlotSelectionResponse,
)
from clinicslots.core.config import settings
from clinicslots.models.appointment import AppointmentPublic
from clinicslots.services.slot_service import (
    SlotConfig,
    as_utc,
    compute_slots,
    load_appointments,
    resolve_slot_selection,
)

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: date = Query(..., alias="date"),
    doctor_id: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> AvailableSlotsResponse:
    """Return all slots of the working day. Each slot has start, end, available and the occupying appointment."""
    config = SlotConfig.from_settings()
    appointments = await load_appointments(session, tenant_id, date_param, config.timezone, doctor_id)
    slots = compute_slots(date_param, appointments, config)
    return AvailableSlotsResponse(
        date=date_param.isoformat(),
        timezone=config.timezone,
        slots=[
            SlotInfo(start=s.start_time, end=s.end_time, available=s.available, appointment_id=s.appointment_id)
            for s in slots
        ],
    )


@router.get("/selection", response_model=SlotSelectionResponse)
async def slot_selection(
    start: datetime = Query(...),
    doctor_id: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    tenant_id: str = Depends(get_tenant_id),
) -> SlotSelectionResponse:
    """Resolve a click on the slot starting at ``start``: a draft for a free slot, the appointment otherwise."""
    config = SlotConfig.from_settings()
    # Naive times are UTC, as for every stored appointment time
    local_start = as_utc(start).astimezone(config.zone)
    day = local_start.date()
    appointments = await load_appointments(session, tenant_id, day, config.timezone, doctor_id)
    slot = next(
        (s for s in compute_slots(day, appointments, config) if as_utc(s.start_time) == as_utc(local_start)),
        None,
    )
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No slot starts at that time")
    selection = resolve_slot_selection(slot, appointments, settings.default_appointment_duration)
    if selection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment for slot not found")
    if selection.action == "edit":
        return SlotSelectionResponse(
            action="edit",
            appointment=AppointmentPublic.model_validate(selection.appointment, from_attributes=True),
        )
    return SlotSelectionResponse(
        action="create",
        draft=AppointmentDraftInfo(**selection.draft.model_dump()),
    )
