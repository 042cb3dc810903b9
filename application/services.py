"""Application Services - Business use cases"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Union
from uuid import UUID

from application.context import HotelContext
from application.release import release_room
from domain import state_machine
from domain.availability import check_availability, find_similar_rooms, is_room_available
from domain.billing import Bill, generate_bill
from domain.entities import (
    Room,
    ReservationBase,
    WaitListReservation,
    ConfirmedReservation,
    CheckedInReservation,
    CheckedOutReservation,
    ExpiredReservation,
)
from domain.enums import RoomStatus, RoomType, BedType, RoomFacing
from domain.exceptions import (
    ReservationError,
    RoomUnavailableError,
    InvalidStatusChangeError,
)
from domain.value_objects import Guest, StayInterval

logger = logging.getLogger(__name__)


class ReservationService:
    """Service for Reservation business use cases"""

    def __init__(self, context: HotelContext):
        self.context = context

    # ==================== AVAILABILITY ====================
    async def check_availability(
        self,
        room_type: RoomType,
        start: datetime,
        end: datetime,
        bed_type: Optional[BedType] = None,
        facing: Optional[RoomFacing] = None
    ) -> List[Room]:
        """Rooms of the requested kind free for [start, end)"""
        candidates = find_similar_rooms(self.context.rooms.values(), room_type, bed_type, facing)
        return check_availability(
            candidates,
            start,
            end,
            self.context.all_confirmed(),
            self.context.all_checked_in()
        )

    def _ensure_room_fits(
        self,
        room: Room,
        start: datetime,
        end: datetime,
        ignore: Optional[ReservationBase] = None
    ) -> None:
        requested = StayInterval.between(start, end)
        if room.is_under_maintenance():
            raise RoomUnavailableError(f"Room {room.room_number} is under maintenance")
        confirmed = [r for r in self.context.confirmed_for(room.room_number) if r is not ignore]
        if not is_room_available(room, requested, confirmed, self.context.occupant_of(room.room_number)):
            raise RoomUnavailableError(
                f"Room {room.room_number} is not available from {start:%Y-%m-%d %H:%M} to {end:%Y-%m-%d %H:%M}"
            )

    def _ensure_no_other_occupant(self, room: Room) -> None:
        occupant = self.context.occupant_of(room.room_number)
        if occupant is not None:
            raise RoomUnavailableError(
                f"Room {room.room_number} is still occupied by {occupant.guest} ({occupant.reservation_code})"
            )

    @asynccontextmanager
    async def _reservation_scope(self, reservation_code: UUID, *other_rooms: str) -> AsyncIterator[ReservationBase]:
        """
        Lock the room a reservation is bound to and yield the live record.

        The record is looked up again once the locks are held, so a caller that
        queued behind another operation never acts on a retired record.
        """
        while True:
            room_number = self.context.get_reservation(reservation_code).room_number
            held = {room_number, *other_rooms}
            async with self.context.room_scope(*held):
                reservation = self.context.get_reservation(reservation_code)
                if reservation.room_number in held:
                    yield reservation
                    return

    # ==================== BOOKING ====================
    async def book_confirmed(
        self,
        guest: Guest,
        check_in: datetime,
        check_out: datetime,
        adults: int,
        children: int,
        room_number: str
    ) -> ConfirmedReservation:
        """Book a room for a stay; the room must be free for the whole stay"""
        async with self.context.room_scope(room_number):
            try:
                room = self.context.get_room(room_number)
                reservation = state_machine.book_confirmed(guest, check_in, check_out, adults, children, room_number)
                self._ensure_room_fits(room, check_in, check_out)
            except ReservationError as e:
                logger.warning("Cannot book room %s: %s", room_number, e)
                raise

            self.context.add(reservation)
            if room.status == RoomStatus.VACANT:
                room.reserve()
            await self.context.flush()

        logger.info("Reservation %s confirmed for room %s", reservation.reservation_code, room_number)
        return reservation

    async def book_wait_list(
        self,
        guest: Guest,
        check_in: datetime,
        check_out: datetime,
        adults: int,
        children: int,
        room_number: str
    ) -> WaitListReservation:
        """Waitlist a request for a room regardless of its availability"""
        async with self.context.room_scope(room_number):
            try:
                room = self.context.get_room(room_number)
                if room.is_under_maintenance():
                    raise RoomUnavailableError(f"Room {room_number} is under maintenance")
                reservation = state_machine.book_wait_list(guest, check_in, check_out, adults, children, room_number)
            except ReservationError as e:
                logger.warning("Cannot waitlist room %s: %s", room_number, e)
                raise

            self.context.add(reservation)
            await self.context.flush()

        logger.info("Reservation %s waitlisted for room %s", reservation.reservation_code, room_number)
        return reservation

    async def book_walk_in(
        self,
        guest: Guest,
        expected_check_out: datetime,
        adults: int,
        children: int,
        room_number: str
    ) -> CheckedInReservation:
        """Check a walk-in guest straight into a room nobody is staying in"""
        async with self.context.room_scope(room_number):
            now = self.context.now()
            try:
                room = self.context.get_room(room_number)
                reservation = state_machine.book_walk_in(guest, now, expected_check_out, adults, children, room_number)
                self._ensure_no_other_occupant(room)
                self._ensure_room_fits(room, now, expected_check_out)
            except ReservationError as e:
                logger.warning("Cannot check walk-in guest into room %s: %s", room_number, e)
                raise

            self.context.add(reservation)
            room.occupy(guest)
            await self.context.flush()

        logger.info("Walk-in reservation %s checked in to room %s", reservation.reservation_code, room_number)
        return reservation

    async def confirm_waitlisted(
        self,
        reservation_code: UUID,
        room_number: Optional[str] = None
    ) -> ConfirmedReservation:
        """Confirm a waitlisted request, optionally into another room"""
        other_rooms = [room_number] if room_number else []
        async with self._reservation_scope(reservation_code, *other_rooms) as reservation:
            target = room_number or reservation.room_number
            try:
                room = self.context.get_room(target)
                if not isinstance(reservation, WaitListReservation):
                    raise InvalidStatusChangeError(
                        f"Cannot confirm reservation {reservation_code} with status {reservation.status}"
                    )
                self._ensure_room_fits(room, reservation.check_in, reservation.check_out)
                confirmed = state_machine.confirm(reservation, target)
            except ReservationError as e:
                logger.warning("Cannot confirm waitlisted reservation %s: %s", reservation_code, e)
                raise

            self.context.replace(reservation, confirmed)
            if room.status == RoomStatus.VACANT:
                room.reserve()
            await self.context.flush()

        return confirmed

    # ==================== CHECK IN / CHECK OUT ====================
    async def check_in(
        self,
        reservation_code: UUID,
        actual_time: Optional[datetime] = None
    ) -> Union[CheckedInReservation, ExpiredReservation]:
        """
        Check a confirmed reservation in.

        A guest arriving after the grace period gets an ExpiredReservation back;
        the record is discarded and the room released as of the grace cutoff.
        The room must no longer hold a checked-in guest.
        """
        async with self._reservation_scope(reservation_code) as reservation:
            actual_time = actual_time or self.context.now()
            try:
                room = self.context.get_room(reservation.room_number)
                result = state_machine.check_in(reservation, actual_time, self.context.grace_period)
                if isinstance(result, CheckedInReservation):
                    self._ensure_no_other_occupant(room)
            except ReservationError as e:
                logger.warning("Cannot check in reservation %s: %s", reservation_code, e)
                raise

            if isinstance(result, ExpiredReservation):
                self.context.remove(reservation)
                if room.status != RoomStatus.OCCUPIED:
                    cutoff = state_machine.grace_cutoff(reservation, self.context.grace_period)
                    release_room(self.context, room, cutoff)
                logger.info(result.notice())
            else:
                self.context.replace(reservation, result)
                room.occupy(result.guest)
                logger.info("Reservation %s checked in to room %s", reservation_code, room.room_number)
            await self.context.flush()

        return result

    async def check_out(
        self,
        reservation_code: UUID,
        actual_time: Optional[datetime] = None
    ) -> CheckedOutReservation:
        """Check a guest out and hand the room to the next claimant"""
        async with self._reservation_scope(reservation_code) as reservation:
            actual_time = actual_time or self.context.now()
            try:
                room = self.context.get_room(reservation.room_number)
                checked_out = state_machine.check_out(reservation, actual_time)
            except ReservationError as e:
                logger.warning("Cannot check out reservation %s: %s", reservation_code, e)
                raise

            self.context.replace(reservation, checked_out)
            room.vacate()
            release_room(self.context, room, actual_time)
            await self.context.flush()

        logger.info("Reservation %s checked out of room %s", reservation_code, checked_out.room_number)
        return checked_out

    async def generate_bill(self, reservation_code: UUID, has_promotion: bool = False) -> Bill:
        """Bill a checked-out stay; the record and the room's service charges are discarded afterwards"""
        async with self._reservation_scope(reservation_code) as reservation:
            try:
                if not isinstance(reservation, CheckedOutReservation):
                    raise InvalidStatusChangeError(
                        f"Cannot bill reservation {reservation_code} with status {reservation.status}"
                    )
                room = self.context.get_room(reservation.room_number)
                service_price = await self.context.service_charges.accrued_service_total(room.room_number)
                bill = generate_bill(reservation, room.rate, service_price, has_promotion)
            except ReservationError as e:
                logger.warning("Cannot bill reservation %s: %s", reservation_code, e)
                raise

            self.context.remove(reservation)
            await self.context.service_charges.clear_room_charges(room.room_number)
            await self.context.flush()

        logger.info("Bill for reservation %s totals %s", reservation_code, bill.total)
        return bill

    # ==================== CANCELLATION ====================
    async def cancel(self, reservation_code: UUID) -> ExpiredReservation:
        """Cancel a waitlisted or confirmed reservation"""
        async with self._reservation_scope(reservation_code) as reservation:
            try:
                expired = state_machine.cancel(reservation)
                room = self.context.get_room(reservation.room_number)
            except ReservationError as e:
                logger.warning("Cannot cancel reservation %s: %s", reservation_code, e)
                raise

            self.context.remove(reservation)
            if isinstance(reservation, ConfirmedReservation) and room.status != RoomStatus.OCCUPIED:
                release_room(self.context, room, self.context.now())
            await self.context.flush()

        logger.info("Reservation %s cancelled", reservation_code)
        return expired

    # ==================== EDITS ====================
    async def edit_check_in(self, reservation_code: UUID, new_check_in: datetime) -> ReservationBase:
        """Change the check-in time, moving a confirmed stay to a similar room if needed"""
        return await self._edit_dates(reservation_code, new_check_in, None)

    async def edit_check_out(self, reservation_code: UUID, new_check_out: datetime) -> ReservationBase:
        """Change the check-out time, moving a confirmed stay to a similar room if needed"""
        return await self._edit_dates(reservation_code, None, new_check_out)

    async def _edit_dates(
        self,
        reservation_code: UUID,
        new_check_in: Optional[datetime],
        new_check_out: Optional[datetime]
    ) -> ReservationBase:
        field = "check-in time" if new_check_in is not None else "check-out time"
        try:
            booked_room = self.context.get_room(self.context.get_reservation(reservation_code).room_number)
        except ReservationError as e:
            logger.warning("Cannot change %s of reservation %s: %s", field, reservation_code, e)
            raise
        # stays only move between similar rooms
        similar = [room.room_number for room in self.context.rooms.values() if room.is_similar_to(booked_room)]

        async with self._reservation_scope(reservation_code, *similar) as reservation:
            try:
                state_machine.require_editable(reservation, field)
                start = new_check_in if new_check_in is not None else reservation.check_in
                end = new_check_out if new_check_out is not None else reservation.check_out
                current_room = self.context.get_room(reservation.room_number)
                StayInterval.between(start, end)
                target = current_room
                if isinstance(reservation, ConfirmedReservation):
                    candidates = [self.context.get_room(number) for number in similar]
                    target = self._pick_room(reservation, current_room, candidates, start, end)
            except ReservationError as e:
                logger.warning("Cannot change %s of reservation %s: %s", field, reservation_code, e)
                raise

            if new_check_in is not None:
                state_machine.set_check_in(reservation, new_check_in)
            else:
                state_machine.set_check_out(reservation, new_check_out)

            if target is not current_room:
                state_machine.set_room(reservation, target.room_number)
                if target.status == RoomStatus.VACANT:
                    target.reserve()
                if current_room.status != RoomStatus.OCCUPIED:
                    release_room(self.context, current_room, self.context.now())
                logger.info(
                    "Reservation %s moved from room %s to room %s",
                    reservation_code, current_room.room_number, target.room_number
                )
            await self.context.flush()

        return reservation

    def _pick_room(
        self,
        reservation: ConfirmedReservation,
        current_room: Room,
        similar: List[Room],
        start: datetime,
        end: datetime
    ) -> Room:
        """Keep the current room if it still fits, otherwise the first similar room that does"""
        requested = StayInterval.between(start, end)
        for room in [current_room] + [r for r in similar if r is not current_room]:
            if room.is_under_maintenance():
                continue
            confirmed = [r for r in self.context.confirmed_for(room.room_number) if r is not reservation]
            if is_room_available(room, requested, confirmed, self.context.occupant_of(room.room_number)):
                return room
        raise RoomUnavailableError(
            f"No room similar to {current_room.room_number} is free from {start:%Y-%m-%d %H:%M} to {end:%Y-%m-%d %H:%M}"
        )

    async def edit_guest_count(self, reservation_code: UUID, adults: int, children: int) -> ReservationBase:
        """Change the number of adults and children"""
        async with self._reservation_scope(reservation_code) as reservation:
            try:
                state_machine.set_guest_count(reservation, adults, children)
            except ReservationError as e:
                logger.warning("Cannot change guest count of reservation %s: %s", reservation_code, e)
                raise
            await self.context.flush()
        return reservation

    async def edit_contact(self, reservation_code: UUID, contact: str) -> ReservationBase:
        """Change the guest contact recorded on the reservation"""
        async with self._reservation_scope(reservation_code) as reservation:
            try:
                state_machine.set_contact(reservation, contact)
            except ReservationError as e:
                logger.warning("Cannot change contact of reservation %s: %s", reservation_code, e)
                raise
            await self.context.flush()
        return reservation

    # ==================== RELEASE ====================
    async def release_room(self, room_number: str, reference_time: Optional[datetime] = None) -> bool:
        """Run the release cascade for a room; True if it ended vacant. Occupied rooms are left alone"""
        async with self.context.room_scope(room_number):
            room = self.context.get_room(room_number)
            if room.status == RoomStatus.OCCUPIED:
                logger.warning("Room %s is occupied and cannot be released", room_number)
                return False
            vacant = release_room(self.context, room, reference_time or self.context.now())
            await self.context.flush()
        return vacant

    # ==================== QUERIES ====================
    async def get_reservation(self, reservation_code: UUID) -> ReservationBase:
        """Get reservation by code"""
        return self.context.get_reservation(reservation_code)

    async def search_by_contact(self, contact: str) -> List[ReservationBase]:
        """Get all reservations, waitlisted ones included, for a guest contact"""
        return [
            r for r in self.context.reservations + self.context.wait_list
            if r.guest.contact == contact
        ]

    async def get_room_wait_list(self, room_number: str) -> List[WaitListReservation]:
        """Get waitlisted requests for a room"""
        self.context.get_room(room_number)
        return self.context.wait_list_for(room_number)

    async def find_checked_in_by_room(self, room_number: str) -> Optional[CheckedInReservation]:
        """Get the stay currently occupying a room"""
        self.context.get_room(room_number)
        return self.context.occupant_of(room_number)


class RoomService:
    """Service for Room business use cases"""

    def __init__(self, context: HotelContext):
        self.context = context

    async def register_room(
        self,
        room_number: str,
        room_type: RoomType,
        bed_type: BedType,
        facing: RoomFacing,
        rate: Decimal,
        has_wifi: bool = False,
        smoking_free: bool = True
    ) -> Room:
        """Add a room to the hotel"""
        room = Room.create(room_number, room_type, bed_type, facing, rate, has_wifi, smoking_free)
        async with self.context.room_scope(room_number):
            if room_number in self.context.rooms:
                raise ValueError(f"Room {room_number} already exists")
            self.context.add_rooms([room])
            await self.context.flush()
        logger.info("Room %s registered", room_number)
        return room

    async def get_room(self, room_number: str) -> Room:
        """Get room by number"""
        return self.context.get_room(room_number)

    async def list_rooms(
        self,
        room_type: Optional[RoomType] = None,
        bed_type: Optional[BedType] = None,
        facing: Optional[RoomFacing] = None,
        status: Optional[RoomStatus] = None
    ) -> List[Room]:
        """Rooms matching every given attribute"""
        return [
            room for room in self.context.rooms.values()
            if (room_type is None or room.room_type == room_type)
            and (bed_type is None or room.bed_type == bed_type)
            and (facing is None or room.facing == facing)
            and (status is None or room.status == status)
        ]

    async def update_rate(self, room_number: str, rate: Decimal) -> Room:
        """Change the nightly rate of a room"""
        if rate < 0:
            raise ValueError("Rate cannot be negative")
        async with self.context.room_scope(room_number):
            room = self.context.get_room(room_number)
            room.rate = rate
            await self.context.flush()
        return room

    async def start_maintenance(self, room_number: str) -> Room:
        """Put a vacant room under maintenance; other rooms are returned unchanged"""
        async with self.context.room_scope(room_number):
            room = self.context.get_room(room_number)
            if room.start_maintenance():
                logger.info("Room %s is under maintenance", room_number)
                await self.context.flush()
        return room

    async def finish_maintenance(self, room_number: str) -> Room:
        """Return a room under maintenance to service"""
        async with self.context.room_scope(room_number):
            room = self.context.get_room(room_number)
            if room.finish_maintenance():
                logger.info("Room %s is back in service", room_number)
                await self.context.flush()
        return room

    async def occupancy_report(self) -> Dict[RoomType, Dict[str, object]]:
        """Vacant rooms out of the total, per room type"""
        report: Dict[RoomType, Dict[str, object]] = {}
        for room_type in RoomType:
            rooms = [room for room in self.context.rooms.values() if room.room_type == room_type]
            vacant = [room.room_number for room in rooms if room.status == RoomStatus.VACANT]
            report[room_type] = {"total": len(rooms), "vacant": len(vacant), "vacant_rooms": vacant}
        return report

    async def status_report(self) -> Dict[RoomStatus, List[str]]:
        """Room numbers grouped by current status"""
        return {
            status: [room.room_number for room in self.context.rooms.values() if room.status == status]
            for status in RoomStatus
        }
