import pytest
from fastapi.testclient import TestClient
from email import message_from_string
from unittest.mock import patch
from app.main import app

client = TestClient(app)

DAY = "2030-01-07"

def booking_payload(**overrides):
    payload = {
        "firstName": "Sean",
        "lastName": "Byrne",
        "email": "sean@example.ie",
        "phone": "087 123 4567",
        "services": ["360 Booth", "Photography"],
        "date": DAY,
        "time": "14:00",
        "location": "Galway",
        "message": "Corporate event"
    }
    payload.update(overrides)
    return payload

@pytest.fixture(autouse=True)
def isolated(temp_db, outbound):
    yield outbound

def test_check_availability_requires_date():
    response = client.get("/api/check-availability")
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Date parameter is required"}

def test_check_availability_rejects_bad_date():
    response = client.get("/api/check-availability", params={"date": "07-01-2030"})
    assert response.status_code == 400
    assert response.json()["success"] is False

def test_check_availability_empty_day():
    response = client.get("/api/check-availability", params={"date": DAY})
    assert response.status_code == 200
    assert response.json() == {"success": True, "bookedTimes": []}

def test_booking_then_availability(isolated):
    response = client.post("/api/send-booking", json=booking_payload())
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Booking submitted successfully!"}

    response = client.get("/api/check-availability", params={"date": DAY})
    assert response.json()["bookedTimes"] == ["14:00"]

    # Webhook and both emails (owner + customer) attempted
    isolated["booking"].assert_awaited_once()
    payload = isolated["booking"].call_args.args[0].model_dump()
    assert payload["fullName"] == "Sean Byrne"
    assert payload["service1"] == "360 Booth"
    assert payload["service2"] == "Photography"
    assert payload["dateTime"] == "2030-01-07T14:00:00Z"
    assert payload["type"] == "booking"
    assert isolated["email"].await_count == 2

def test_duplicate_booking_conflicts(temp_db):
    assert client.post("/api/send-booking", json=booking_payload()).status_code == 200

    response = client.post("/api/send-booking", json=booking_payload(firstName="Niamh", email="niamh@example.ie"))
    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "This time slot has already been booked. Please select another time."
    }
    assert len(temp_db._list_bookings(100)) == 1

def test_booked_time_not_offered_again():
    client.post("/api/send-booking", json=booking_payload(time="10:30"))

    response = client.get("/api/time-slots", params={"date": DAY, "services": "photography"})
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "local"
    slots = {s["time"]: s["available"] for s in data["slots"]}
    assert slots["10:30"] is False
    assert slots["11:00"] is True

def test_time_slots_merge_webhook_times(isolated):
    isolated["fetch"].return_value = {"12:00"}

    response = client.get("/api/time-slots", params={"date": DAY, "services": "photography,videography"})
    data = response.json()
    assert data["source"] == "webhook"
    slots = {s["time"]: s["available"] for s in data["slots"]}
    assert slots["12:00"] is False
    day, services = isolated["fetch"].call_args.args
    assert day == DAY
    assert services == {"service1": "Photography", "service2": "Videography"}

@pytest.mark.parametrize("phone", ["0123456789", "+353871234567", "087 12"])
def test_invalid_phone_rejected(phone, temp_db):
    response = client.post("/api/send-booking", json=booking_payload(phone=phone))
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a valid Irish mobile number (08xxxxxxxx or 08x xxx xxxx)"
    assert temp_db._list_bookings(100) == []

def test_missing_fields_rejected():
    payload = booking_payload()
    del payload["location"]
    response = client.post("/api/send-booking", json=payload)
    assert response.status_code == 400
    assert response.json()["message"] == "All required fields must be provided"

    response = client.post("/api/send-booking", json=booking_payload(services=[]))
    assert response.status_code == 400

def test_twelve_hour_time_is_normalised():
    response = client.post("/api/send-booking", json=booking_payload(time="2:30 PM", services="Videography"))
    assert response.status_code == 200
    response = client.get("/api/check-availability", params={"date": DAY})
    assert response.json()["bookedTimes"] == ["14:30"]

def test_email_failure_keeps_reservation(isolated, temp_db):
    isolated["email"].return_value = False
    isolated["booking"].return_value = False

    response = client.post("/api/send-booking", json=booking_payload())
    assert response.status_code == 200
    assert len(temp_db._list_bookings(100)) == 1

def test_wrong_method():
    response = client.get("/api/send-booking")
    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method not allowed"}

def test_malformed_body():
    response = client.post("/api/send-booking", content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["success"] is False

def test_contact_form(isolated):
    response = client.post("/api/send-contact", json={
        "name": "Sean",
        "email": "sean@example.ie",
        "subject": "Wedding video",
        "message": "Are you free in June?"
    })
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Message sent successfully!"}
    assert isolated["email"].await_count == 2
    isolated["contact"].assert_awaited_once()
    assert isolated["contact"].call_args.args[0].formType == "Contact Form"

def test_contact_requires_all_fields():
    response = client.post("/api/send-contact", json={"name": "Sean", "email": "sean@example.ie"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "All fields are required"}

def test_contact_email_failure(isolated):
    isolated["email"].return_value = False
    response = client.post("/api/send-contact", json={
        "name": "Sean", "email": "sean@example.ie", "subject": "Hi", "message": "Hello"
    })
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send message. Please try again."

def test_services_and_days():
    services = client.get("/api/services").json()["services"]
    assert [s["id"] for s in services] == ["360-booth", "photography", "videography", "touchplus"]
    assert len(client.get("/api/booking-days").json()["days"]) == 30

def test_free_text_service_is_forwarded(isolated, temp_db):
    response = client.post("/api/send-booking", json=booking_payload(services=["photography", "Drone footage"]))
    assert response.status_code == 200
    assert temp_db._list_bookings(100)[0].services == "Photography, Drone footage"
    payload = isolated["booking"].call_args.args[0].model_dump()
    assert payload["service1"] == "Photography"
    assert payload["service2"] == "Drone footage"

def test_service_selection(isolated):
    response = client.post("/api/service-selection", json={"services": ["360-booth"]})
    assert response.status_code == 200
    isolated["selection"].assert_awaited_once_with({"service1": "360 Booth"})

def test_health():
    assert client.get("/health").json()["status"] == "ok"

@pytest.fixture
def real_smtp(monkeypatch):
    """Real email building and sending, over a mocked SMTP connection."""
    from app.core.config import settings
    from app.services.notification_service import send_email_async
    monkeypatch.setattr(settings, "EMAIL_USER", "bookings@touchmedia.ie")
    monkeypatch.setattr(settings, "EMAIL_PASS", "secret")
    monkeypatch.setattr(settings, "EMAIL_PORT", 587)
    with patch("app.services.booking_service.send_email_async", new=send_email_async), \
         patch("app.services.notification_service.smtplib.SMTP") as mock_smtp_cls:
        yield mock_smtp_cls.return_value.__enter__.return_value

def test_line_break_in_name_keeps_booking(real_smtp, temp_db):
    response = client.post("/api/send-booking", json=booking_payload(firstName="Eve\nBcc: someone@else.test"))

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(temp_db._list_bookings(100)) == 1
    # Owner notice and customer confirmation both go out with single-line subjects
    assert real_smtp.sendmail.call_count == 2
    for call in real_smtp.sendmail.call_args_list:
        sent = message_from_string(call.args[2])
        assert "\n" not in sent["Subject"]
        assert sent["Bcc"] is None

def test_line_break_in_recipient_is_not_sent(real_smtp, temp_db):
    response = client.post("/api/send-booking", json=booking_payload(email="eve@example.ie\nBcc: someone@else.test"))

    assert response.status_code == 200
    assert len(temp_db._list_bookings(100)) == 1
    # Only the owner notice is sent
    assert real_smtp.sendmail.call_count == 1

def test_line_break_in_contact_subject(real_smtp):
    response = client.post("/api/send-contact", json={
        "name": "Sean", "email": "sean@example.ie", "subject": "Hi\nBcc: someone@else.test", "message": "Hello"
    })
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Message sent successfully!"}
