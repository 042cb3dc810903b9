"""Application context - in-memory stores, per-room locks and collaborators"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Dict, Iterable, List, Optional
from uuid import UUID

from domain.entities import (
    Room,
    ReservationBase,
    WaitListReservation,
    ConfirmedReservation,
    CheckedInReservation,
)
from domain.exceptions import RoomNotFoundError, ReservationNotFoundError
from domain.repositories import SnapshotRepository, GuestDirectory, ServiceChargeProvider
from domain.state_machine import GRACE_PERIOD

logger = logging.getLogger(__name__)


class HotelContext:
    """
    Everything the reservation core operates on, built once at startup.

    ``reservations`` holds confirmed, checked-in, checked-out and expired
    records in insertion order; ``wait_list`` holds waitlisted requests.
    Mutations happen inside ``room_scope`` and are followed by ``flush``.
    """

    def __init__(
        self,
        room_repo: SnapshotRepository,
        reservation_repo: SnapshotRepository,
        wait_list_repo: SnapshotRepository,
        guest_directory: GuestDirectory,
        service_charges: ServiceChargeProvider,
        clock: Callable[[], datetime] = datetime.now,
        grace_period: timedelta = GRACE_PERIOD
    ):
        self.room_repo = room_repo
        self.reservation_repo = reservation_repo
        self.wait_list_repo = wait_list_repo
        self.guest_directory = guest_directory
        self.service_charges = service_charges
        self.clock = clock
        self.grace_period = grace_period

        self.rooms: Dict[str, Room] = {}
        self.reservations: List[ReservationBase] = []
        self.wait_list: List[WaitListReservation] = []
        self._room_locks: Dict[str, asyncio.Lock] = {}

    @classmethod
    async def load(cls, *args, **kwargs) -> "HotelContext":
        """Build a context and load every collection from its repository"""
        context = cls(*args, **kwargs)
        await context.reload()
        return context

    async def reload(self) -> None:
        rooms = await self.room_repo.load_all()
        self.rooms = {room.room_number: room for room in rooms}
        self.reservations = list(await self.reservation_repo.load_all())
        self.wait_list = list(await self.wait_list_repo.load_all())
        logger.info(
            "Loaded %d rooms, %d reservations, %d waitlisted",
            len(self.rooms), len(self.reservations), len(self.wait_list)
        )

    # ==================== SERIALIZATION SCOPE ====================
    def _lock_for(self, room_number: str) -> asyncio.Lock:
        if room_number not in self._room_locks:
            self._room_locks[room_number] = asyncio.Lock()
        return self._room_locks[room_number]

    @asynccontextmanager
    async def room_scope(self, *room_numbers: str) -> AsyncIterator[None]:
        """Hold the locks of the given rooms; acquired in sorted order"""
        locks = [self._lock_for(number) for number in sorted(set(room_numbers))]
        acquired: List[asyncio.Lock] = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    async def flush(self) -> None:
        """Replace every collection in its repository; failures propagate unchanged"""
        try:
            await self.room_repo.replace_all(list(self.rooms.values()))
            await self.reservation_repo.replace_all(list(self.reservations))
            await self.wait_list_repo.replace_all(list(self.wait_list))
        except Exception:
            logger.exception("Failed to persist hotel state")
            raise

    # ==================== LOOKUPS ====================
    def now(self) -> datetime:
        return self.clock()

    def get_room(self, room_number: str) -> Room:
        room = self.rooms.get(room_number)
        if room is None:
            raise RoomNotFoundError(f"Room {room_number} not found")
        return room

    def get_reservation(self, reservation_code: UUID) -> ReservationBase:
        for reservation in self.reservations:
            if reservation.reservation_code == reservation_code:
                return reservation
        for reservation in self.wait_list:
            if reservation.reservation_code == reservation_code:
                return reservation
        raise ReservationNotFoundError(f"Reservation {reservation_code} not found")

    def confirmed_for(self, room_number: str) -> List[ConfirmedReservation]:
        return [
            r for r in self.reservations
            if isinstance(r, ConfirmedReservation) and r.room_number == room_number
        ]

    def wait_list_for(self, room_number: str) -> List[WaitListReservation]:
        return [r for r in self.wait_list if r.room_number == room_number]

    def occupant_of(self, room_number: str) -> Optional[CheckedInReservation]:
        for reservation in self.reservations:
            if isinstance(reservation, CheckedInReservation) and reservation.room_number == room_number:
                return reservation
        return None

    def all_confirmed(self) -> List[ConfirmedReservation]:
        return [r for r in self.reservations if isinstance(r, ConfirmedReservation)]

    def all_checked_in(self) -> List[CheckedInReservation]:
        return [r for r in self.reservations if isinstance(r, CheckedInReservation)]

    # ==================== STORE MUTATIONS ====================
    def add(self, reservation: ReservationBase) -> None:
        if isinstance(reservation, WaitListReservation):
            self.wait_list.append(reservation)
        else:
            self.reservations.append(reservation)

    def remove(self, reservation: ReservationBase) -> None:
        store = self.wait_list if isinstance(reservation, WaitListReservation) else self.reservations
        for index, existing in enumerate(store):
            if existing is reservation:
                del store[index]
                return
        raise ReservationNotFoundError(f"Reservation {reservation.reservation_code} not found")

    def replace(self, old: ReservationBase, new: ReservationBase) -> None:
        """Retire ``old`` and store ``new`` in its place"""
        self.remove(old)
        self.add(new)

    def add_rooms(self, rooms: Iterable[Room]) -> None:
        for room in rooms:
            self.rooms[room.room_number] = room
