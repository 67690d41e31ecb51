import asyncio
import uuid
from typing import Any, Dict, Optional, Set

import requests

from app.core.config import settings
from app.core.logger import logger
from app.models.webhook_models import (
    BookingWebhookPayload,
    ContactWebhookPayload,
    ServiceSelectionPayload,
    TimeSlotRequestPayload,
    WebhookPayload,
)
from app.services.slot_service import parse_booked_times


def _post(url: str, payload: WebhookPayload) -> requests.Response:
    response = requests.post(
        url,
        json=payload.model_dump(),
        headers={"Content-Type": "application/json"},
        timeout=settings.WEBHOOK_TIMEOUT,
    )
    response.raise_for_status()
    return response


def _deliver(url: str, payload: WebhookPayload, name: str) -> bool:
    if not url:
        logger.info(f"ℹ️ {name} webhook is not configured, skipping.")
        return False
    try:
        response = _post(url, payload)
        logger.info(f"✅ {name} webhook delivered ({response.status_code}): {response.text[:200]}")
        return True
    except requests.RequestException as e:
        logger.error(f"❌ Error sending {name} webhook: {e}")
        return False


def _fetch_booked_times(day: str, services: Dict[str, str]) -> Optional[Set[str]]:
    url = settings.FETCH_TIMES_WEBHOOK_URL
    if not url:
        return None

    payload = TimeSlotRequestPayload.with_services(services, date=day)
    try:
        response = _post(url, payload)
    except requests.RequestException as e:
        logger.error(f"❌ Error fetching time slots from webhook: {e}")
        return None

    try:
        data: Any = response.json()
    except ValueError:
        logger.warning(f"⚠️ Fetch-times webhook returned non-JSON body: {response.text[:200]!r}")
        return None

    booked = parse_booked_times(data, day)
    logger.info(f"📅 Webhook reports {len(booked)} booked slot(s) on {day}")
    return booked


async def fetch_booked_times(day: str, services: Dict[str, str]) -> Optional[Set[str]]:
    """
    Asks the calendar automation which times are taken on `day`.
    Returns None when the webhook is disabled or did not give a usable answer.
    """
    return await asyncio.to_thread(_fetch_booked_times, day, services)


async def send_service_selection(services: Dict[str, str]) -> bool:
    payload = ServiceSelectionPayload.with_services(services, sessionId=uuid.uuid4().hex[:13])
    return await asyncio.to_thread(_deliver, settings.FETCH_TIMES_WEBHOOK_URL, payload, "Service selection")


async def send_booking(payload: BookingWebhookPayload) -> bool:
    return await asyncio.to_thread(_deliver, settings.SUBMIT_BOOKING_WEBHOOK_URL, payload, "Booking")


async def send_contact(payload: ContactWebhookPayload) -> bool:
    return await asyncio.to_thread(_deliver, settings.NOTIFY_WEBHOOK_URL, payload, "Contact")
