from typing import Optional, List, Union
from datetime import datetime
from pydantic import BaseModel, Field

# --- Incoming Request Models ---
# Fields are optional so that missing values get the booking flow's own
# 400 message instead of a schema error.

class BookingRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    services: Optional[Union[List[str], str]] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    message: Optional[str] = None

class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None

class ServiceSelectionRequest(BaseModel):
    services: List[str] = Field(default_factory=list)


# --- Stored Record ---

class Booking(BaseModel):
    id: Optional[int] = None
    firstName: str
    lastName: str
    email: str
    phone: str
    services: str  # comma-joined service names
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    location: str
    message: str = ""
    createdAt: datetime = Field(default_factory=datetime.now)

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}"


# --- Outgoing Response Models ---

class TimeSlot(BaseModel):
    time: str
    available: bool

class ApiResponse(BaseModel):
    success: bool
    message: str

class AvailabilityResponse(BaseModel):
    success: bool = True
    bookedTimes: List[str]

class TimeSlotsResponse(BaseModel):
    success: bool = True
    date: str
    slots: List[TimeSlot]
    source: str
