"""API Dependencies - application context wiring"""
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException

from application.context import HotelContext
from application.services import ReservationService, RoomService
from config.settings import Settings, get_settings
from domain.entities import Room, Reservation, WaitListReservation
from domain.value_objects import Guest
from infrastructure.repositories.in_memory_repositories import (
    InMemorySnapshotRepository, InMemoryServiceChargeLedger
)
from infrastructure.repositories.json_file_repositories import JsonFileSnapshotRepository, JsonFileGuestDirectory

_context: Optional[HotelContext] = None


async def build_context(settings: Settings) -> HotelContext:
    """Create the repositories selected by settings and load the context"""
    if settings.STORAGE_BACKEND == "json":
        room_repo = JsonFileSnapshotRepository(settings.rooms_file, Room)
        reservation_repo = JsonFileSnapshotRepository(settings.reservations_file, Reservation)
        wait_list_repo = JsonFileSnapshotRepository(settings.wait_list_file, WaitListReservation)
    else:
        room_repo = InMemorySnapshotRepository()
        reservation_repo = InMemorySnapshotRepository()
        wait_list_repo = InMemorySnapshotRepository()

    return await HotelContext.load(
        room_repo,
        reservation_repo,
        wait_list_repo,
        await JsonFileGuestDirectory.load(settings.guests_file),
        InMemoryServiceChargeLedger(),
        grace_period=timedelta(hours=settings.GRACE_PERIOD_HOURS)
    )


async def init_context(settings: Optional[Settings] = None) -> HotelContext:
    global _context
    _context = await build_context(settings or get_settings())
    return _context


def get_context() -> HotelContext:
    if _context is None:
        raise HTTPException(status_code=503, detail="Application context is not initialised")
    return _context


def get_reservation_service(context: HotelContext = Depends(get_context)) -> ReservationService:
    return ReservationService(context)


def get_room_service(context: HotelContext = Depends(get_context)) -> RoomService:
    return RoomService(context)


async def resolve_guest(contact: str, context: HotelContext) -> Guest:
    guest = await context.guest_directory.find_guest_by_contact(contact)
    if guest is None:
        raise HTTPException(status_code=404, detail=f"Guest with contact {contact} not found")
    return guest
