from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from clinicslots.models.appointment import AppointmentPublic, AppointmentType


class SlotInfo(BaseModel):
    start: datetime
    end: datetime
    available: bool
    appointment_id: str | None = None


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    timezone: str
    slots: list[SlotInfo]


class AppointmentDraftInfo(BaseModel):
    date: datetime
    duration: int
    appointment_type: AppointmentType


class SlotSelectionResponse(BaseModel):
    action: Literal["create", "edit"]
    draft: AppointmentDraftInfo | None = None
    appointment: AppointmentPublic | None = None


class AppointmentTypeInfo(BaseModel):
    value: AppointmentType
    label: str
    color: str
