from fastapi import APIRouter

from app.api.booking import booking_service, error_response
from app.core.logger import logger
from app.models.booking import ApiResponse, ContactRequest
from app.services.booking_service import BookingValidationError, NotificationError

router = APIRouter()


@router.post("/send-contact", response_model=ApiResponse)
async def send_contact(req: ContactRequest):
    try:
        await booking_service.send_contact(req)
    except BookingValidationError as e:
        return error_response(400, str(e))
    except NotificationError as e:
        logger.error(f"❌ Error sending contact email: {e}")
        return error_response(500, "Failed to send message. Please try again.")
    return ApiResponse(success=True, message="Message sent successfully!")
