import sqlite3
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.core.config_loader import get_services
from app.core.logger import logger
from app.models.booking import (
    ApiResponse,
    AvailabilityResponse,
    BookingRequest,
    ServiceSelectionRequest,
    TimeSlotsResponse,
)
from app.services.booking_service import BookingService, BookingValidationError
from app.services.db_service import SlotAlreadyBookedError
from app.services.slot_service import upcoming_days

router = APIRouter()
booking_service = BookingService()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(success=False, message=message).model_dump(),
    )


@router.get("/check-availability", response_model=AvailabilityResponse)
async def check_availability(date: Optional[str] = None):
    try:
        booked_times = await booking_service.check_availability(date)
    except BookingValidationError as e:
        return error_response(400, str(e))
    except sqlite3.Error as e:
        logger.error(f"❌ Error checking availability: {e}", exc_info=True)
        return error_response(500, "Failed to check availability. Please try again.")
    return AvailabilityResponse(bookedTimes=booked_times)


@router.get("/time-slots", response_model=TimeSlotsResponse)
async def time_slots(date: Optional[str] = None, services: Optional[str] = Query(default=None)):
    """
    Slot grid for a date. `services` is a comma-separated list of ids or names.
    """
    selected = [s for s in (services or "").split(",") if s.strip()]
    try:
        slots, source = await booking_service.get_time_slots(date, selected)
    except BookingValidationError as e:
        return error_response(400, str(e))
    except sqlite3.Error as e:
        logger.error(f"❌ Error loading time slots: {e}", exc_info=True)
        return error_response(500, "Failed to check availability. Please try again.")
    return TimeSlotsResponse(date=date, slots=slots, source=source)


@router.get("/services")
async def list_services():
    return {"success": True, "services": get_services(booking_service.config)}


@router.get("/booking-days")
async def booking_days():
    return {"success": True, "days": upcoming_days()}


@router.post("/service-selection", response_model=ApiResponse)
async def service_selection(req: ServiceSelectionRequest):
    forwarded = await booking_service.record_service_selection(req.services)
    return ApiResponse(success=True, message="Selection forwarded" if forwarded else "Selection recorded")


@router.post("/send-booking", response_model=ApiResponse)
async def send_booking(req: BookingRequest):
    try:
        await booking_service.create_booking(req)
    except BookingValidationError as e:
        return error_response(400, str(e))
    except SlotAlreadyBookedError:
        return error_response(409, "This time slot has already been booked. Please select another time.")
    except Exception as e:
        logger.error(f"❌ Error sending email or saving booking: {e}", exc_info=True)
        return error_response(500, "Failed to send booking. Please try again.")
    return ApiResponse(success=True, message="Booking submitted successfully!")
