"""Release / reassignment of a room that has just been freed"""
import logging
from datetime import datetime
from typing import Optional

from application.context import HotelContext
from domain.entities import Room, ConfirmedReservation
from domain import state_machine

logger = logging.getLogger(__name__)


def release_room(context: HotelContext, room: Room, reference_time: datetime) -> bool:
    """
    Offer ``room`` to the next claimant as of ``reference_time``.

    Candidates are taken first-fit in store order. A future confirmed
    reservation keeps the room RESERVED; waitlisted requests that start after
    ``reference_time`` (and, if a confirmed stay follows, end no later than
    its check-in) are promoted. Returns True when the room ends up VACANT.

    Must be called inside ``context.room_scope(room.room_number)``.
    """
    next_confirmed: Optional[ConfirmedReservation] = None
    for reservation in context.confirmed_for(room.room_number):
        if reservation.check_in > reference_time:
            next_confirmed = reservation

    if next_confirmed is not None:
        room.reserve()

    for candidate in context.wait_list_for(room.room_number):
        if candidate.check_in <= reference_time:
            continue
        if next_confirmed is not None and candidate.check_out > next_confirmed.check_in:
            continue
        promoted = state_machine.confirm(candidate, room.room_number)
        context.remove(candidate)
        context.add(promoted)
        room.reserve()
        next_confirmed = promoted
        logger.info(
            "Room %s reassigned to waitlisted guest %s (%s)",
            room.room_number, promoted.guest, promoted.reservation_code
        )

    if next_confirmed is None:
        room.vacate()
        logger.info("Room %s is now vacant", room.room_number)
        return True

    logger.info("Room %s is reserved from %s", room.room_number, next_confirmed.check_in)
    return False
