"""Interval overlap checking for room availability"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from domain.entities import Room, ConfirmedReservation, CheckedInReservation
from domain.enums import RoomStatus, RoomType, BedType, RoomFacing
from domain.value_objects import StayInterval


def find_similar_rooms(
    rooms: Iterable[Room],
    room_type: RoomType,
    bed_type: Optional[BedType] = None,
    facing: Optional[RoomFacing] = None
) -> List[Room]:
    """Rooms matching the requested attributes, excluding those under maintenance"""
    return [
        room for room in rooms
        if room.room_type == room_type
        and (bed_type is None or room.bed_type == bed_type)
        and (facing is None or room.facing == facing)
        and not room.is_under_maintenance()
    ]


def is_room_available(
    room: Room,
    requested: StayInterval,
    confirmed: Iterable[ConfirmedReservation],
    occupant: Optional[CheckedInReservation] = None
) -> bool:
    """
    Whether ``room`` can take ``requested``.

    ``confirmed`` are the confirmed reservations bound to the room and
    ``occupant`` its current checked-in stay, if any. Touching endpoints
    count as a conflict.
    """
    if room.status == RoomStatus.VACANT:
        return True
    if room.status not in (RoomStatus.RESERVED, RoomStatus.OCCUPIED):
        return False

    for reservation in confirmed:
        if requested.overlaps(reservation.interval):
            return False

    if room.status == RoomStatus.OCCUPIED:
        # an occupied room without a checked-in record is treated as taken
        if occupant is None or not requested.start > occupant.check_out:
            return False

    return True


def check_availability(
    rooms: Iterable[Room],
    start: datetime,
    end: datetime,
    confirmed: Iterable[ConfirmedReservation],
    checked_in: Iterable[CheckedInReservation]
) -> List[Room]:
    """Subset of candidate ``rooms`` free for [start, end); may be empty"""
    requested = StayInterval.between(start, end)

    confirmed_by_room: Dict[str, List[ConfirmedReservation]] = {}
    for reservation in confirmed:
        confirmed_by_room.setdefault(reservation.room_number, []).append(reservation)
    occupant_by_room = {reservation.room_number: reservation for reservation in checked_in}

    return [
        room for room in rooms
        if is_room_available(
            room,
            requested,
            confirmed_by_room.get(room.room_number, []),
            occupant_by_room.get(room.room_number)
        )
    ]
