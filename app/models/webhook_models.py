from datetime import datetime, timezone
from typing import Dict, Literal
from pydantic import BaseModel, ConfigDict, Field

# Outbound payloads posted to the automation webhooks.
# Selected services are flattened into extra keys: service1, service2, ...

SOURCE = "Touch Media Website"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    timestamp: str = Field(default_factory=utc_timestamp)
    source: str = SOURCE

    @classmethod
    def with_services(cls, services: Dict[str, str], **fields):
        return cls(**fields, **services)


class TimeSlotRequestPayload(WebhookPayload):
    date: str
    source: str = f"{SOURCE} - Booking Page Time Slot Request"


class ServiceSelectionPayload(WebhookPayload):
    source: str = f"{SOURCE} - Booking Page Service Selection"
    action: str = "Next button clicked"
    sessionId: str


class BookingWebhookPayload(WebhookPayload):
    firstName: str
    lastName: str
    fullName: str
    email: str
    phone: str
    date: str
    time: str
    dateTime: str
    location: str
    message: str = ""
    source: str = f"{SOURCE} - Booking Form"
    type: Literal["booking"] = "booking"


class ContactWebhookPayload(WebhookPayload):
    name: str
    email: str
    subject: str
    message: str
    formType: Literal["Contact Form"] = "Contact Form"
