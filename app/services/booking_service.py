import sqlite3
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from app.core.config import settings
from app.core.config_loader import load_business_config
from app.core.logger import logger
from app.models.booking import Booking, BookingRequest, ContactRequest, TimeSlot
from app.models.webhook_models import BookingWebhookPayload, ContactWebhookPayload
from app.services import webhook_service
from app.services.db_service import db_service, SlotAlreadyBookedError
from app.services.email_templates import (
    booking_confirmation,
    booking_owner_notice,
    contact_acknowledgement,
    contact_owner_notice,
)
from app.services.notification_service import send_email_async
from app.services.slot_service import (
    format_date_for_display,
    format_datetime_for_webhook,
    format_selected_services,
    generate_time_slots,
    resolve_service_names,
)
from app.services.validation import is_valid_date, normalize_time, validate_irish_phone

REQUIRED_BOOKING_FIELDS = ("firstName", "lastName", "email", "phone", "services", "date", "time", "location")
REQUIRED_CONTACT_FIELDS = ("name", "email", "subject", "message")

PHONE_ERROR = "Please provide a valid Irish mobile number (08xxxxxxxx or 08x xxx xxxx)"


class BookingValidationError(Exception):
    """Request is incomplete or malformed (HTTP 400)."""


class NotificationError(Exception):
    """A required notification could not be delivered (HTTP 500)."""


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class BookingService:
    def __init__(self):
        self.config = load_business_config()

    @property
    def owner_email(self) -> str:
        return self.config.get("owner_email") or settings.EMAIL_USER

    # --- Availability ---

    async def check_availability(self, day: Optional[str]) -> List[str]:
        """
        Times already booked on `day`, from local storage.
        """
        if not day:
            raise BookingValidationError("Date parameter is required")
        if not is_valid_date(day):
            raise BookingValidationError("Date must be in YYYY-MM-DD format")
        return await db_service.get_booked_times(day)

    async def get_time_slots(
        self,
        day: Optional[str],
        services: Iterable[str] = (),
        now: Optional[datetime] = None,
    ) -> Tuple[List[TimeSlot], str]:
        """
        Slot grid for `day`. Remote booked times (calendar automation) are merged
        with local ones, so a locally booked time is never offered.
        Returns (slots, source) where source is "webhook" or "local".
        """
        booked = set(await self.check_availability(day))

        selected = format_selected_services(services, self.config)
        remote = await webhook_service.fetch_booked_times(day, selected)
        if remote is None:
            source = "local"
        else:
            source = "webhook"
            booked |= remote

        slots = generate_time_slots(day, booked, self.config, now)
        logger.info(f"🗓️ {day}: {sum(s.available for s in slots)}/{len(slots)} slots free (source: {source})")
        return slots, source

    async def record_service_selection(self, services: Iterable[str]) -> bool:
        selected = format_selected_services(services, self.config)
        if not selected:
            return False
        return await webhook_service.send_service_selection(selected)

    # --- Booking ---

    def build_booking(self, req: BookingRequest) -> Booking:
        """
        Validates a booking request and converts it to a storable record.
        Raises BookingValidationError with a user-facing message.
        """
        services = req.services
        if isinstance(services, str):
            services = [services]
        service_names = resolve_service_names(services or [], self.config)

        values = {field: _clean(getattr(req, field)) for field in REQUIRED_BOOKING_FIELDS if field != "services"}
        if not all(values.values()) or not service_names:
            raise BookingValidationError("All required fields must be provided")

        if not validate_irish_phone(values["phone"]):
            raise BookingValidationError(PHONE_ERROR)

        if not is_valid_date(values["date"]):
            raise BookingValidationError("Please provide a valid date (YYYY-MM-DD)")

        booking_time = normalize_time(values["time"])
        if not booking_time:
            raise BookingValidationError("Please provide a valid time (HH:MM)")

        return Booking(
            firstName=values["firstName"],
            lastName=values["lastName"],
            email=values["email"],
            phone=values["phone"],
            services=", ".join(service_names),
            date=values["date"],
            time=booking_time,
            location=values["location"],
            message=_clean(req.message),
        )

    async def create_booking(self, req: BookingRequest) -> Booking:
        """
        Reserve the slot, then forward to the booking webhook and send emails.

        A taken slot raises SlotAlreadyBookedError. Other storage failures are
        logged and do not stop the notifications; notification failures never
        undo the reservation.
        """
        booking = self.build_booking(req)
        logger.info(f"📥 Booking Request - {booking.full_name}, {booking.date} {booking.time}, services: {booking.services}")

        try:
            booking = await db_service.reserve(booking)
        except SlotAlreadyBookedError:
            logger.warning(f"⛔ Slot {booking.date} {booking.time} already booked, rejecting {booking.full_name}")
            raise
        except sqlite3.Error as e:
            logger.error(f"❌ Database error while saving booking: {e}", exc_info=True)

        await self.forward_booking(booking)
        await self.send_booking_notifications(booking)
        return booking

    async def forward_booking(self, booking: Booking) -> bool:
        payload = BookingWebhookPayload.with_services(
            format_selected_services(booking.services.split(","), self.config),
            firstName=booking.firstName,
            lastName=booking.lastName,
            fullName=booking.full_name,
            email=booking.email,
            phone=booking.phone,
            date=booking.date,
            time=booking.time,
            dateTime=format_datetime_for_webhook(booking.date, booking.time),
            location=booking.location,
            message=booking.message,
        )
        return await webhook_service.send_booking(payload)

    async def send_booking_notifications(self, booking: Booking):
        """
        Sends the owner notice and the customer confirmation.
        """
        display_date = format_date_for_display(booking.date)
        received_at = datetime.now().strftime("%d/%m/%Y, %H:%M:%S")
        business_name = self.config.get("company_name", settings.BUSINESS_NAME)

        subject, text, html = booking_owner_notice(booking, display_date, received_at)
        if not await send_email_async(subject, text, html, self.owner_email):
            logger.warning(f"⚠️ Owner was not notified about booking {booking.id}")

        subject, text, html = booking_confirmation(booking, display_date, business_name, self.owner_email)
        if not await send_email_async(subject, text, html, booking.email):
            logger.warning(f"⚠️ Confirmation email to {booking.email} was not sent")

    # --- Contact ---

    async def send_contact(self, req: ContactRequest):
        values = {field: _clean(getattr(req, field)) for field in REQUIRED_CONTACT_FIELDS}
        if not all(values.values()):
            raise BookingValidationError("All fields are required")

        logger.info(f"📨 Contact form from {values['name']} <{values['email']}>")

        await webhook_service.send_contact(ContactWebhookPayload(**values))

        received_at = datetime.now().strftime("%d/%m/%Y, %H:%M:%S")
        subject, text, html = contact_owner_notice(
            values["name"], values["email"], values["subject"], values["message"], received_at
        )
        if not await send_email_async(subject, text, html, self.owner_email):
            raise NotificationError("Contact message could not be delivered")

        business_name = self.config.get("company_name", settings.BUSINESS_NAME)
        subject, text, html = contact_acknowledgement(values["name"], business_name)
        if not await send_email_async(subject, text, html, values["email"]):
            logger.warning(f"⚠️ Acknowledgement email to {values['email']} was not sent")
