from datetime import date, datetime, timedelta, time as dt_time
from typing import Any, Dict, Iterable, List, Optional, Set
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.config_loader import get_business_hours, get_services
from app.core.logger import logger
from app.models.booking import TimeSlot
from app.services.validation import normalize_time

DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DEFAULT_SLOT_INTERVAL = 30
DEFAULT_BUFFER_MINUTES = 30


def get_slot_timezone() -> ZoneInfo:
    return ZoneInfo(settings.SLOT_TIMEZONE)


def _to_time(value: str) -> dt_time:
    hours, minutes = value.split(":")
    return dt_time(int(hours), int(minutes))


def earliest_bookable(now: datetime, buffer_minutes: int, interval: int) -> datetime:
    """
    First bookable moment: now + buffer, rounded up to the next slot boundary.
    """
    cutoff = now + timedelta(minutes=buffer_minutes)
    remainder = cutoff.minute % interval
    if remainder or cutoff.second or cutoff.microsecond:
        cutoff = cutoff.replace(second=0, microsecond=0) + timedelta(minutes=interval - remainder)
    return cutoff


def generate_time_slots(
    day: str,
    booked: Iterable[str],
    config: Dict[str, Any],
    now: Optional[datetime] = None,
) -> List[TimeSlot]:
    """
    Builds the slot grid for `day` from the business hours of its weekday.

    A slot is available when it is not booked and starts no earlier than the
    minimum buffer from `now`. Every slot of a past day is therefore
    unavailable. Closed days return an empty list.
    """
    tz = get_slot_timezone()
    day_date = date.fromisoformat(day)
    hours = get_business_hours(config, DAY_NAMES[day_date.weekday()])
    if not hours:
        return []

    interval = int(config.get("slot_interval_minutes", DEFAULT_SLOT_INTERVAL))
    buffer_minutes = int(config.get("minimum_buffer_minutes", DEFAULT_BUFFER_MINUTES))

    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)
    cutoff = earliest_bookable(now, buffer_minutes, interval)

    booked_set = set(booked)
    current = datetime.combine(day_date, _to_time(hours["start"]), tzinfo=tz)
    closing = datetime.combine(day_date, _to_time(hours["end"]), tzinfo=tz)

    slots = []
    while current < closing:
        label = current.strftime("%H:%M")
        slots.append(TimeSlot(time=label, available=label not in booked_set and current >= cutoff))
        current += timedelta(minutes=interval)
    return slots


def _entry_start(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        start = entry.get("start")
        if isinstance(start, dict):
            # all-day events only carry "date" and are ignored
            return start.get("dateTime")
        if isinstance(start, str):
            return start
    return None


def _time_on_day(value: str, day: str, tz: ZoneInfo) -> Optional[str]:
    bare_time = normalize_time(value)
    if bare_time:
        return bare_time

    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Skipping unparseable booked time: {value!r}")
        return None

    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    if moment.date().isoformat() != day:
        return None
    return moment.strftime("%H:%M")


def parse_booked_times(data: Any, day: str) -> Set[str]:
    """
    Normalises a fetch-times webhook response into the HH:MM times booked on `day`.

    Tolerated shapes:
      [{"start": {"dateTime": "2024-05-20T10:00:00Z"}}, ...]
      {"bookedTimes": ["10:00", "2:30 PM", "2024-05-20T11:00:00Z"]}
      {"items": [...]} or {"events": [...]} holding calendar events
    Anything else yields an empty set.
    """
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        entries = None
        for key in ("bookedTimes", "items", "events"):
            if isinstance(data.get(key), list):
                entries = data[key]
                break
        if entries is None:
            return set()
    else:
        return set()

    tz = get_slot_timezone()
    booked = set()
    for entry in entries:
        value = _entry_start(entry)
        if not isinstance(value, str) or not value:
            continue
        booked_time = _time_on_day(value, day, tz)
        if booked_time:
            booked.add(booked_time)
    return booked


def format_datetime_for_webhook(day: str, booking_time: str) -> str:
    """ISO string for the calendar automation, e.g. 2024-05-20T09:30:00Z."""
    return f"{day}T{normalize_time(booking_time) or booking_time}:00Z"


def format_date_for_display(day: str) -> str:
    """'2024-01-01' -> 'Monday, January 1, 2024'"""
    try:
        d = date.fromisoformat(day)
    except ValueError:
        return day
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def resolve_service_names(values: Iterable[str], config: Dict[str, Any]) -> List[str]:
    """Maps catalogue ids to display names. Names and free text pass through; blanks are dropped."""
    by_id = {s["id"]: s["name"] for s in get_services(config)}
    names = []
    for value in values:
        value = value.strip()
        if value:
            names.append(by_id.get(value, value))
    return names


def format_selected_services(values: Iterable[str], config: Dict[str, Any]) -> Dict[str, str]:
    names = resolve_service_names(values, config)
    return {f"service{index + 1}": name for index, name in enumerate(names)}


def upcoming_days(start: Optional[date] = None, count: int = 30) -> List[str]:
    start = start or datetime.now(get_slot_timezone()).date()
    return [(start + timedelta(days=offset)).isoformat() for offset in range(count)]
