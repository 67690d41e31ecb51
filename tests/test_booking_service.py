import re
import sqlite3
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from app.models.booking import BookingRequest
from app.services.booking_service import BookingService, BookingValidationError
from app.services.db_service import SlotAlreadyBookedError

DAY = "2030-01-07"
BEFORE = datetime(2029, 12, 1, 8, 0, tzinfo=timezone.utc)

def request(**overrides) -> BookingRequest:
    data = {
        "firstName": " Liam ",
        "lastName": "Walsh",
        "email": "liam@example.ie",
        "phone": "0861234567",
        "services": ["touchplus"],
        "date": DAY,
        "time": "9:00",
        "location": "Limerick",
    }
    data.update(overrides)
    return BookingRequest(**data)

def test_build_booking_normalises_fields():
    booking = BookingService().build_booking(request())
    assert booking.firstName == "Liam"
    assert booking.services == "Touch+"
    assert booking.time == "09:00"
    assert booking.message == ""

def test_build_booking_accepts_service_string():
    booking = BookingService().build_booking(request(services="Photography, Videography"))
    assert booking.services == "Photography, Videography"

@pytest.mark.parametrize("overrides, message", [
    ({"firstName": "   "}, "All required fields must be provided"),
    ({"phone": "0861234"}, "Please provide a valid Irish mobile number (08xxxxxxxx or 08x xxx xxxx)"),
    ({"date": "2030-13-01"}, "Please provide a valid date (YYYY-MM-DD)"),
    ({"time": "half past nine"}, "Please provide a valid time (HH:MM)"),
])
def test_build_booking_rejects(overrides, message):
    with pytest.raises(BookingValidationError, match=re.escape(message)):
        BookingService().build_booking(request(**overrides))

@pytest.mark.asyncio
async def test_storage_failure_does_not_block_notifications(outbound):
    with patch("app.services.db_service.db_service.reserve", new_callable=AsyncMock) as mock_reserve:
        mock_reserve.side_effect = sqlite3.OperationalError("disk I/O error")

        booking = await BookingService().create_booking(request())

    assert booking.id is None
    outbound["booking"].assert_awaited_once()
    assert outbound["email"].await_count == 2

@pytest.mark.asyncio
async def test_conflict_skips_notifications(temp_db, outbound):
    service = BookingService()
    await service.create_booking(request())
    outbound["email"].reset_mock()
    outbound["booking"].reset_mock()

    with pytest.raises(SlotAlreadyBookedError):
        await service.create_booking(request(firstName="Emma"))

    outbound["booking"].assert_not_awaited()
    outbound["email"].assert_not_awaited()

@pytest.mark.asyncio
async def test_local_booking_never_offered_even_if_webhook_disagrees(temp_db, outbound):
    service = BookingService()
    await service.create_booking(request(time="15:00"))
    outbound["fetch"].return_value = set()

    slots, source = await service.get_time_slots(DAY, ["photography"], now=BEFORE)

    assert source == "webhook"
    assert {s.time: s.available for s in slots}["15:00"] is False

@pytest.mark.asyncio
async def test_time_slots_fall_back_to_local(temp_db, outbound):
    slots, source = await BookingService().get_time_slots(DAY, [], now=BEFORE)
    assert source == "local"
    assert all(s.available for s in slots)
