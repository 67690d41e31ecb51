import pytest
from unittest.mock import AsyncMock, patch

from app.services.db_service import db_service


@pytest.fixture
def temp_db(tmp_path):
    """Points the booking store at a throwaway SQLite file."""
    original = db_service._db_path
    db_service.db_path = str(tmp_path / "bookings.db")
    yield db_service
    db_service.db_path = original


@pytest.fixture
def outbound():
    """Replaces webhook and email delivery with mocks."""
    with patch("app.services.webhook_service.fetch_booked_times", new_callable=AsyncMock) as mock_fetch, \
         patch("app.services.webhook_service.send_booking", new_callable=AsyncMock) as mock_booking, \
         patch("app.services.webhook_service.send_contact", new_callable=AsyncMock) as mock_contact, \
         patch("app.services.webhook_service.send_service_selection", new_callable=AsyncMock) as mock_selection, \
         patch("app.services.booking_service.send_email_async", new_callable=AsyncMock) as mock_email:
        mock_fetch.return_value = None
        mock_booking.return_value = True
        mock_contact.return_value = True
        mock_selection.return_value = True
        mock_email.return_value = True
        yield {
            "fetch": mock_fetch,
            "booking": mock_booking,
            "contact": mock_contact,
            "selection": mock_selection,
            "email": mock_email,
        }
