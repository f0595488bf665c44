"""Slot availability for the medical scheduler.

The working day is cut into fixed-length slots; each slot is marked occupied by the
first time-blocking appointment (in input order) whose interval overlaps it.
Everything up to ``compute_slots`` is pure; the async helpers below it only load the
appointments the grid is computed from.
"""
import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicslots.core.config import settings
from clinicslots.core.errors import InvalidArgument
from clinicslots.models.appointment import Appointment, AppointmentStatus, AppointmentType

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_MINUTES = 24 * 60


class SlotConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    work_start_hour: int = 8
    work_end_hour: int = 18  # exclusive
    slot_duration_minutes: int = 30
    timezone: str = "UTC"

    @classmethod
    def from_settings(cls) -> "SlotConfig":
        return cls(
            work_start_hour=settings.work_start_hour,
            work_end_hour=settings.work_end_hour,
            slot_duration_minutes=settings.slot_duration_minutes,
            timezone=settings.clinic_timezone,
        )

    @property
    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise InvalidArgument(f"Unknown timezone: {self.timezone!r}", field="timezone") from None

    def check(self) -> None:
        if not 0 <= self.work_start_hour < self.work_end_hour <= 24:
            raise InvalidArgument(
                f"Working hours must satisfy 0 <= start < end <= 24, "
                f"got {self.work_start_hour}-{self.work_end_hour}",
                field="work_start_hour",
            )
        if self.slot_duration_minutes <= 0:
            raise InvalidArgument("Slot duration must be positive", field="slot_duration_minutes")
        self.zone  # raises InvalidArgument for unknown names


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    available: bool
    appointment_id: str | None = None


class AppointmentDraft(BaseModel):
    date: datetime
    duration: int
    appointment_type: AppointmentType = AppointmentType.INITIAL


class SlotSelection(BaseModel):
    action: Literal["create", "edit"]
    draft: AppointmentDraft | None = None
    appointment: Appointment | None = None


def as_utc(dt: datetime) -> datetime:
    """Aware UTC instant; naive values are stored UTC, so they are tagged, not shifted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open interval overlap: [start, end) and [other_start, other_end)."""
    return start < other_end and end > other_start


def local_midnight(day: date | datetime, zone: ZoneInfo) -> datetime:
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(zone)
        day = day.date()
    elif not isinstance(day, date):
        raise InvalidArgument(f"Expected a date, got {type(day).__name__}", field="day")
    return datetime.combine(day, time(0), tzinfo=zone)


def _occupied_interval(appointment: Appointment) -> tuple[str, datetime, datetime] | None:
    """(id, start, end) in UTC for a time-blocking appointment, None otherwise."""
    start = appointment.date
    if not isinstance(start, datetime):
        raise InvalidArgument(f"Appointment {appointment.id} has no valid start", field="date")
    duration = appointment.duration
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise InvalidArgument(f"Appointment {appointment.id} duration must be an integer", field="duration")
    if duration <= 0:
        raise InvalidArgument(f"Appointment {appointment.id} duration must be positive", field="duration")
    try:
        status = AppointmentStatus(appointment.status)
    except ValueError:
        raise InvalidArgument(
            f"Appointment {appointment.id} has unknown status {appointment.status!r}", field="status"
        ) from None
    if not status.blocks_time:
        return None
    start_utc = as_utc(start)
    return str(appointment.id), start_utc, start_utc + timedelta(minutes=duration)


def compute_slots(
    day: date | datetime,
    appointments: Sequence[Appointment],
    config: SlotConfig | None = None,
) -> list[TimeSlot]:
    """Return every slot of the working day, available and occupied, in chronological order.

    An occupied slot carries the id of the first appointment in ``appointments`` that
    overlaps it. Cancelled and missed appointments are ignored. Inputs are not mutated.
    """
    config = config or SlotConfig()
    config.check()
    midnight = local_midnight(day, config.zone)

    intervals = []
    for appointment in appointments:
        interval = _occupied_interval(appointment)
        if interval is not None:
            intervals.append(interval)

    window_end = midnight + timedelta(hours=config.work_end_hour)
    step = timedelta(minutes=config.slot_duration_minutes)
    current = midnight + timedelta(hours=config.work_start_hour)
    slots: list[TimeSlot] = []
    while current + step <= window_end:
        end = current + step
        start_utc, end_utc = as_utc(current), as_utc(end)
        occupant = next(
            (appt_id for appt_id, a_start, a_end in intervals if overlaps(start_utc, end_utc, a_start, a_end)),
            None,
        )
        slots.append(
            TimeSlot(start_time=current, end_time=end, available=occupant is None, appointment_id=occupant)
        )
        current = end
    return slots


def resolve_slot_selection(
    slot: TimeSlot,
    appointments: Sequence[Appointment],
    default_duration: int,
) -> SlotSelection | None:
    """What clicking a slot opens: the occupying appointment, or a draft for a new one."""
    if not slot.available and slot.appointment_id:
        for appointment in appointments:
            if str(appointment.id) == slot.appointment_id:
                return SlotSelection(action="edit", appointment=appointment)
        return None
    if slot.available:
        return SlotSelection(
            action="create",
            draft=AppointmentDraft(date=slot.start_time, duration=default_duration),
        )
    return None


def day_bounds_utc(d: date, timezone: str) -> tuple[datetime, datetime]:
    """Naive UTC [start, end) of the local calendar day, for querying stored timestamps."""
    zone = SlotConfig(timezone=timezone).zone
    start = local_midnight(d, zone)
    end = local_midnight(d + timedelta(days=1), zone)
    return as_utc(start).replace(tzinfo=None), as_utc(end).replace(tzinfo=None)


async def load_appointments(
    session: AsyncSession,
    tenant_id: str,
    d: date,
    timezone: str,
    doctor_id: str | None = None,
) -> list[Appointment]:
    """Appointments occupying any part of the local day, including ones carried over from the day before."""
    start, end = day_bounds_utc(d, timezone)
    q = (
        select(Appointment)
        .where(
            Appointment.tenant_id == tenant_id,
            Appointment.date >= start - timedelta(minutes=MAX_APPOINTMENT_MINUTES),
            Appointment.date < end,
        )
        .order_by(Appointment.date, Appointment.created_at)
    )
    if doctor_id is not None:
        q = q.where(Appointment.doctor_id == doctor_id)
    result = await session.execute(q)
    appointments = [
        a for a in result.scalars().all()
        if a.date + timedelta(minutes=a.duration) > start
    ]
    logger.debug("Loaded %d appointment(s) for tenant=%s date=%s doctor=%s", len(appointments), tenant_id, d, doctor_id)
    return appointments


async def find_conflicting_appointment(
    session: AsyncSession,
    tenant_id: str,
    doctor_id: str | None,
    start: datetime,
    duration: int,
    exclude_id: str | None = None,
) -> Appointment | None:
    """First time-blocking appointment of the same doctor overlapping [start, start + duration)."""
    start_utc = as_utc(start)
    end_utc = start_utc + timedelta(minutes=duration)
    blocking = [s for s in AppointmentStatus if s.blocks_time]
    q = select(Appointment).where(
        Appointment.tenant_id == tenant_id,
        Appointment.status.in_(blocking),
        Appointment.date < end_utc.replace(tzinfo=None),
        Appointment.date >= (start_utc - timedelta(minutes=MAX_APPOINTMENT_MINUTES)).replace(tzinfo=None),
    ).order_by(Appointment.date)
    if doctor_id is None:
        q = q.where(Appointment.doctor_id.is_(None))
    else:
        q = q.where(Appointment.doctor_id == doctor_id)
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q)
    for appointment in result.scalars().all():
        a_start = as_utc(appointment.date)
        if overlaps(start_utc, end_utc, a_start, a_start + timedelta(minutes=appointment.duration)):
            return appointment
    return None
