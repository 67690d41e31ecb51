import re
from datetime import datetime
from typing import Optional

IRISH_MOBILE_RE = re.compile(r"^08[0-9][0-9]{7}$")
TIME_24H_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")
TIME_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_irish_phone(phone: Optional[str]) -> bool:
    """Irish mobile: 08x followed by 7 digits, spaces ignored (0871234567 or 087 123 4567)."""
    if not phone:
        return False
    clean_phone = re.sub(r"\s", "", phone)
    return bool(IRISH_MOBILE_RE.match(clean_phone))


def is_valid_date(value: Optional[str]) -> bool:
    if not value or not DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def normalize_time(value: Optional[str]) -> Optional[str]:
    """
    Returns zero-padded 24h HH:MM for '9:30', '09:30' or '2:30 PM'.
    None if the value is not a recognisable time.
    """
    if not value:
        return None
    value = value.strip()

    match = TIME_24H_RE.match(value)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    match = TIME_12H_RE.match(value)
    if not match:
        return None
    hour, minutes, period = int(match.group(1)), match.group(2), match.group(3).upper()
    if not 1 <= hour <= 12 or int(minutes) > 59:
        return None
    if period == "PM" and hour < 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minutes}"
