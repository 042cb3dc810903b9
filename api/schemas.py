"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import Dict, List, Optional

from domain.enums import RoomType, BedType, RoomFacing


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class BookingRequest(BaseModel):
    """Confirmed or waitlisted booking request DTO"""
    guest_contact: str
    room_number: str
    check_in: datetime
    check_out: datetime
    adults: int
    children: int = 0


class WalkInRequest(BaseModel):
    """Walk-in request DTO"""
    guest_contact: str
    room_number: str
    expected_check_out: datetime
    adults: int
    children: int = 0


class ConfirmWaitlistRequest(BaseModel):
    """Confirm waitlisted reservation request DTO"""
    room_number: Optional[str] = None


class CheckInRequest(BaseModel):
    """Check-in request DTO, defaults to now"""
    actual_time: Optional[datetime] = None


class CheckOutRequest(BaseModel):
    """Check-out request DTO, defaults to now"""
    actual_time: Optional[datetime] = None


class BillRequest(BaseModel):
    """Bill request DTO"""
    has_promotion: bool = False


class EditCheckInRequest(BaseModel):
    check_in: datetime


class EditCheckOutRequest(BaseModel):
    check_out: datetime


class EditGuestCountRequest(BaseModel):
    adults: int
    children: int


class EditContactRequest(BaseModel):
    contact: str


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_code: UUID
    status: str
    room_number: str
    guest_name: str
    guest_contact: str
    adults: int
    children: int
    check_in: datetime
    check_out: Optional[datetime] = None
    notice: Optional[str] = None


class BillResponse(BaseModel):
    """Bill response DTO"""
    reservation_code: UUID
    room_number: str
    days_stayed: int
    weekdays_stayed: int
    weekends_stayed: int
    room_price: Decimal
    service_price: Decimal
    promotion_discount: Optional[Decimal] = None
    tax: Decimal
    total: Decimal
    invoice: str


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    room_number: str
    room_type: RoomType
    bed_type: BedType
    facing: RoomFacing
    rate: Decimal = Field(ge=0)
    has_wifi: bool = False
    smoking_free: bool = True


class UpdateRateRequest(BaseModel):
    rate: Decimal = Field(ge=0)


class AvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    room_type: RoomType
    bed_type: Optional[BedType] = None
    facing: Optional[RoomFacing] = None
    start: datetime
    end: datetime


class ReleaseRoomRequest(BaseModel):
    """Release room request DTO, defaults to now"""
    reference_time: Optional[datetime] = None


class RoomResponse(BaseModel):
    """Room response DTO"""
    room_number: str
    room_type: str
    bed_type: str
    facing: str
    rate: Decimal
    has_wifi: bool
    smoking_free: bool
    status: str
    current_guest: Optional[str] = None


class ReleaseRoomResponse(BaseModel):
    room_number: str
    vacant: bool
    status: str


class OccupancyEntry(BaseModel):
    total: int
    vacant: int
    vacant_rooms: List[str]


class OccupancyReportResponse(BaseModel):
    by_type: Dict[str, OccupancyEntry]


class StatusReportResponse(BaseModel):
    by_status: Dict[str, List[str]]
