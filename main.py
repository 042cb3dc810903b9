from contextlib import asynccontextmanager
from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse

from api.schemas import (
    # Reservation
    BookingRequest, WalkInRequest, ConfirmWaitlistRequest, CheckInRequest, CheckOutRequest,
    BillRequest, EditCheckInRequest, EditCheckOutRequest, EditGuestCountRequest, EditContactRequest,
    ReservationResponse, BillResponse,
    # Room
    CreateRoomRequest, UpdateRateRequest, AvailabilityRequest, ReleaseRoomRequest,
    RoomResponse, ReleaseRoomResponse, OccupancyReportResponse, OccupancyEntry, StatusReportResponse
)
from api.dependencies import (
    init_context, get_context, get_reservation_service, get_room_service, resolve_guest
)
from application.context import HotelContext
from application.services import ReservationService, RoomService
from config.logging import setup_logging
from config.settings import get_settings
from domain.billing import Bill
from domain.entities import ExpiredReservation
from domain.enums import RoomStatus, RoomType, BedType, RoomFacing, ReservationStatus
from domain.exceptions import ErrorKind, ReservationError

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    await init_context(settings)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Room allocation, reservation lifecycle and billing",
    version=settings.API_VERSION,
    lifespan=lifespan
)

ERROR_STATUS = {
    ErrorKind.ROOM_NOT_FOUND: 404,
    ErrorKind.RESERVATION_NOT_FOUND: 404,
    ErrorKind.ROOM_UNAVAILABLE: 409,
    ErrorKind.INVALID_STATUS_CHANGE: 409,
    ErrorKind.ILLEGAL_CHANGE_OF_DATE: 409,
}


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    return JSONResponse(status_code=ERROR_STATUS.get(exc.kind, 400), content={"detail": exc.to_dict()})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/room-status", tags=["Enum Reference"])
async def get_room_statuses():
    """Get all RoomStatus enum values"""
    return {"values": [item.name for item in RoomStatus]}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {"values": [item.name for item in ReservationStatus]}

@app.get("/api/enums/room-attributes", tags=["Enum Reference"])
async def get_room_attributes():
    """Get room type, bed type and facing values"""
    return {
        "room_type": [item.name for item in RoomType],
        "bed_type": [item.name for item in BedType],
        "facing": [item.name for item in RoomFacing],
    }

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.post("/api/rooms", response_model=RoomResponse, status_code=201, tags=["Rooms"])
async def create_room(request: CreateRoomRequest, service: RoomService = Depends(get_room_service)):
    """Register a room"""
    room = await service.register_room(
        room_number=request.room_number,
        room_type=request.room_type,
        bed_type=request.bed_type,
        facing=request.facing,
        rate=request.rate,
        has_wifi=request.has_wifi,
        smoking_free=request.smoking_free
    )
    return _room_to_response(room)

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Rooms"])
async def list_rooms(
    room_type: Optional[RoomType] = None,
    bed_type: Optional[BedType] = None,
    facing: Optional[RoomFacing] = None,
    status: Optional[RoomStatus] = None,
    service: RoomService = Depends(get_room_service)
):
    """List rooms, optionally filtered"""
    rooms = await service.list_rooms(room_type, bed_type, facing, status)
    return [_room_to_response(r) for r in rooms]

@app.get("/api/rooms/{room_number}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(room_number: str, service: RoomService = Depends(get_room_service)):
    """Get room by number"""
    return _room_to_response(await service.get_room(room_number))

@app.put("/api/rooms/{room_number}/rate", response_model=RoomResponse, tags=["Rooms"])
async def update_room_rate(
    room_number: str,
    request: UpdateRateRequest,
    service: RoomService = Depends(get_room_service)
):
    """Change the nightly rate"""
    return _room_to_response(await service.update_rate(room_number, request.rate))

@app.post("/api/rooms/{room_number}/maintenance", response_model=RoomResponse, tags=["Rooms"])
async def start_maintenance(room_number: str, service: RoomService = Depends(get_room_service)):
    """Put a vacant room under maintenance"""
    return _room_to_response(await service.start_maintenance(room_number))

@app.delete("/api/rooms/{room_number}/maintenance", response_model=RoomResponse, tags=["Rooms"])
async def finish_maintenance(room_number: str, service: RoomService = Depends(get_room_service)):
    """Return a room to service"""
    return _room_to_response(await service.finish_maintenance(room_number))

@app.post("/api/rooms/{room_number}/release", response_model=ReleaseRoomResponse, tags=["Rooms"])
async def release_room(
    room_number: str,
    request: ReleaseRoomRequest,
    service: ReservationService = Depends(get_reservation_service),
    context: HotelContext = Depends(get_context)
):
    """Offer a freed room to the next claimant"""
    vacant = await service.release_room(room_number, request.reference_time)
    room = context.get_room(room_number)
    return ReleaseRoomResponse(room_number=room_number, vacant=vacant, status=room.status.value)

@app.get("/api/rooms/{room_number}/waitlist", response_model=List[ReservationResponse], tags=["Rooms"])
async def get_room_wait_list(room_number: str, service: ReservationService = Depends(get_reservation_service)):
    """Waitlisted requests for a room"""
    entries = await service.get_room_wait_list(room_number)
    return [_reservation_to_response(r) for r in entries]

@app.post("/api/availability", response_model=List[RoomResponse], tags=["Rooms"])
async def check_availability(
    request: AvailabilityRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Rooms free for the requested stay"""
    rooms = await service.check_availability(
        request.room_type, request.start, request.end, request.bed_type, request.facing
    )
    return [_room_to_response(r) for r in rooms]

@app.get("/api/reports/occupancy", response_model=OccupancyReportResponse, tags=["Reports"])
async def occupancy_report(service: RoomService = Depends(get_room_service)):
    """Vacant rooms per room type"""
    report = await service.occupancy_report()
    return OccupancyReportResponse(
        by_type={room_type.value: OccupancyEntry(**entry) for room_type, entry in report.items()}
    )

@app.get("/api/reports/status", response_model=StatusReportResponse, tags=["Reports"])
async def status_report(service: RoomService = Depends(get_room_service)):
    """Room numbers per status"""
    report = await service.status_report()
    return StatusReportResponse(by_status={status.value: rooms for status, rooms in report.items()})

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def book_confirmed(
    request: BookingRequest,
    service: ReservationService = Depends(get_reservation_service),
    context: HotelContext = Depends(get_context)
):
    """Book a room"""
    guest = await resolve_guest(request.guest_contact, context)
    reservation = await service.book_confirmed(
        guest, request.check_in, request.check_out, request.adults, request.children, request.room_number
    )
    return _reservation_to_response(reservation)

@app.post("/api/reservations/waitlist", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def book_wait_list(
    request: BookingRequest,
    service: ReservationService = Depends(get_reservation_service),
    context: HotelContext = Depends(get_context)
):
    """Waitlist a booking request"""
    guest = await resolve_guest(request.guest_contact, context)
    reservation = await service.book_wait_list(
        guest, request.check_in, request.check_out, request.adults, request.children, request.room_number
    )
    return _reservation_to_response(reservation)

@app.post("/api/reservations/walk-in", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def book_walk_in(
    request: WalkInRequest,
    service: ReservationService = Depends(get_reservation_service),
    context: HotelContext = Depends(get_context)
):
    """Check a walk-in guest in"""
    guest = await resolve_guest(request.guest_contact, context)
    reservation = await service.book_walk_in(
        guest, request.expected_check_out, request.adults, request.children, request.room_number
    )
    return _reservation_to_response(reservation)

@app.get("/api/reservations/contact/{contact}", response_model=List[ReservationResponse], tags=["Reservations"])
async def search_by_contact(contact: str, service: ReservationService = Depends(get_reservation_service)):
    """Reservations for a guest contact"""
    reservations = await service.search_by_contact(contact)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservations/{reservation_code}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(reservation_code: UUID, service: ReservationService = Depends(get_reservation_service)):
    """Get reservation by code"""
    return _reservation_to_response(await service.get_reservation(reservation_code))

@app.post("/api/reservations/{reservation_code}/confirm", response_model=ReservationResponse, tags=["Reservations"])
async def confirm_waitlisted(
    reservation_code: UUID,
    request: ConfirmWaitlistRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Confirm a waitlisted reservation"""
    reservation = await service.confirm_waitlisted(reservation_code, request.room_number)
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_code}/check-in", response_model=ReservationResponse, tags=["Reservations"])
async def check_in(
    reservation_code: UUID,
    request: CheckInRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Check a guest in; late arrivals come back EXPIRED with a notice"""
    reservation = await service.check_in(reservation_code, request.actual_time)
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_code}/check-out", response_model=ReservationResponse, tags=["Reservations"])
async def check_out(
    reservation_code: UUID,
    request: CheckOutRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Check a guest out"""
    reservation = await service.check_out(reservation_code, request.actual_time)
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_code}/bill", response_model=BillResponse, tags=["Reservations"])
async def generate_bill(
    reservation_code: UUID,
    request: BillRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Bill a checked-out reservation"""
    bill = await service.generate_bill(reservation_code, request.has_promotion)
    return _bill_to_response(bill)

@app.post("/api/reservations/{reservation_code}/cancel", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(reservation_code: UUID, service: ReservationService = Depends(get_reservation_service)):
    """Cancel a waitlisted or confirmed reservation"""
    return _reservation_to_response(await service.cancel(reservation_code))

@app.put("/api/reservations/{reservation_code}/check-in-time", response_model=ReservationResponse, tags=["Reservations"])
async def edit_check_in(
    reservation_code: UUID,
    request: EditCheckInRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Change the check-in time"""
    return _reservation_to_response(await service.edit_check_in(reservation_code, request.check_in))

@app.put("/api/reservations/{reservation_code}/check-out-time", response_model=ReservationResponse, tags=["Reservations"])
async def edit_check_out(
    reservation_code: UUID,
    request: EditCheckOutRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Change the check-out time"""
    return _reservation_to_response(await service.edit_check_out(reservation_code, request.check_out))

@app.put("/api/reservations/{reservation_code}/guests", response_model=ReservationResponse, tags=["Reservations"])
async def edit_guest_count(
    reservation_code: UUID,
    request: EditGuestCountRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Change the number of guests"""
    reservation = await service.edit_guest_count(reservation_code, request.adults, request.children)
    return _reservation_to_response(reservation)

@app.put("/api/reservations/{reservation_code}/contact", response_model=ReservationResponse, tags=["Reservations"])
async def edit_contact(
    reservation_code: UUID,
    request: EditContactRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Change the guest contact"""
    return _reservation_to_response(await service.edit_contact(reservation_code, request.contact))

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert a reservation variant to ReservationResponse"""
    is_expired = isinstance(reservation, ExpiredReservation)
    return ReservationResponse(
        reservation_code=reservation.reservation_code,
        status=reservation.status,
        room_number=reservation.room_number,
        guest_name=reservation.guest.name,
        guest_contact=reservation.guest.contact,
        adults=reservation.adults,
        children=reservation.children,
        check_in=reservation.check_in,
        check_out=None if is_expired else reservation.check_out,
        notice=reservation.notice() if is_expired else None
    )

def _room_to_response(room) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        room_number=room.room_number,
        room_type=room.room_type.value,
        bed_type=room.bed_type.value,
        facing=room.facing.value,
        rate=room.rate,
        has_wifi=room.has_wifi,
        smoking_free=room.smoking_free,
        status=room.status.value,
        current_guest=room.current_guest.name if room.current_guest else None
    )

def _bill_to_response(bill: Bill) -> BillResponse:
    """Convert Bill to BillResponse"""
    return BillResponse(
        reservation_code=bill.reservation_code,
        room_number=bill.room_number,
        days_stayed=bill.days_stayed,
        weekdays_stayed=bill.weekdays_stayed,
        weekends_stayed=bill.weekends_stayed,
        room_price=bill.room_price,
        service_price=bill.service_price,
        promotion_discount=bill.promotion_discount,
        tax=bill.tax,
        total=bill.total,
        invoice=bill.render()
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
