"""
Reservation State Machine

Legal edges:

    WAITLIST -> CONFIRMED -> CHECKED_IN -> CHECKED_OUT
    WAITLIST | CONFIRMED -> EXPIRED

Every transition takes the current record and returns a new record in the
target state; the caller retires the old one. The only in-place mutations
are the date/count/contact edits allowed while a reservation is still
WAITLIST or CONFIRMED.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple, Type, Union
from uuid import uuid4

from domain.entities import (
    ReservationBase,
    WaitListReservation,
    ConfirmedReservation,
    CheckedInReservation,
    CheckedOutReservation,
    ExpiredReservation,
)
from domain.exceptions import (
    IllegalChangeOfDateError,
    InvalidCheckOutTimeError,
    InvalidStatusChangeError,
)
from domain.value_objects import Guest, GuestCount, StayInterval

logger = logging.getLogger(__name__)

GRACE_PERIOD = timedelta(hours=24)

EDITABLE_STATES: Tuple[Type[ReservationBase], ...] = (WaitListReservation, ConfirmedReservation)


def _require_state(reservation: ReservationBase, allowed: Tuple[Type[ReservationBase], ...], action: str) -> None:
    if not isinstance(reservation, allowed):
        raise InvalidStatusChangeError(
            f"Cannot {action} reservation {reservation.reservation_code} with status {reservation.status}"
        )


def require_editable(reservation: ReservationBase, field: str) -> None:
    if not isinstance(reservation, EDITABLE_STATES):
        raise IllegalChangeOfDateError(
            f"Cannot change {field} of reservation {reservation.reservation_code} with status {reservation.status}"
        )


# ==================== CREATION ====================
def book_confirmed(
    guest: Guest,
    check_in: datetime,
    check_out: datetime,
    adults: int,
    children: int,
    room_number: str
) -> ConfirmedReservation:
    """Create a confirmed reservation for a room"""
    StayInterval.between(check_in, check_out)
    GuestCount.of(adults, children)
    return ConfirmedReservation(
        adults=adults,
        children=children,
        guest=guest,
        room_number=room_number,
        check_in=check_in,
        check_out=check_out
    )


def book_wait_list(
    guest: Guest,
    check_in: datetime,
    check_out: datetime,
    adults: int,
    children: int,
    room_number: str
) -> WaitListReservation:
    """Create a waitlisted request; waitlisting is always allowed"""
    StayInterval.between(check_in, check_out)
    GuestCount.of(adults, children)
    return WaitListReservation(
        adults=adults,
        children=children,
        guest=guest,
        room_number=room_number,
        check_in=check_in,
        check_out=check_out
    )


def book_walk_in(
    guest: Guest,
    check_in: datetime,
    expected_check_out: datetime,
    adults: int,
    children: int,
    room_number: str
) -> CheckedInReservation:
    """Create a reservation that is checked in on arrival"""
    StayInterval.between(check_in, expected_check_out)
    GuestCount.of(adults, children)
    return CheckedInReservation(
        adults=adults,
        children=children,
        guest=guest,
        room_number=room_number,
        check_in=check_in,
        check_out=expected_check_out
    )


# ==================== TRANSITIONS ====================
def confirm(reservation: ReservationBase, room_number: Optional[str] = None) -> ConfirmedReservation:
    """Promote a waitlisted request; the confirmed record gets a new reservation code"""
    _require_state(reservation, (WaitListReservation,), "confirm")
    confirmed = ConfirmedReservation(
        reservation_code=uuid4(),
        adults=reservation.adults,
        children=reservation.children,
        guest=reservation.guest,
        room_number=room_number or reservation.room_number,
        check_in=reservation.check_in,
        check_out=reservation.check_out
    )
    logger.info(
        "Waitlisted reservation %s confirmed as %s for room %s",
        reservation.reservation_code, confirmed.reservation_code, confirmed.room_number
    )
    return confirmed


def grace_cutoff(reservation: ReservationBase, grace_period: timedelta = GRACE_PERIOD) -> datetime:
    """Latest moment a late arrival is still honoured"""
    return reservation.check_in + grace_period


def check_in(
    reservation: ReservationBase,
    actual_time: datetime,
    grace_period: timedelta = GRACE_PERIOD
) -> Union[CheckedInReservation, ExpiredReservation]:
    """
    Check a confirmed reservation in.

    Arrivals later than the grace period expire the reservation instead; the
    caller releases the room as of ``grace_cutoff(reservation)``, not as of
    ``actual_time``.
    """
    _require_state(reservation, (ConfirmedReservation,), "check in")
    if actual_time > grace_cutoff(reservation, grace_period):
        logger.info(
            "Reservation %s expired: arrival %s is past the grace cutoff %s",
            reservation.reservation_code, actual_time, grace_cutoff(reservation, grace_period)
        )
        return cancel(reservation)

    return CheckedInReservation(
        reservation_code=reservation.reservation_code,
        adults=reservation.adults,
        children=reservation.children,
        guest=reservation.guest,
        room_number=reservation.room_number,
        check_in=actual_time,
        check_out=reservation.check_out
    )


def check_out(reservation: ReservationBase, actual_time: datetime) -> CheckedOutReservation:
    """Check a guest out, keeping the reservation code and the actual check-in"""
    _require_state(reservation, (CheckedInReservation,), "check out")
    if actual_time < reservation.check_in:
        raise InvalidCheckOutTimeError(
            f"Check-out {actual_time:%Y-%m-%d %H:%M} is earlier than check-in {reservation.check_in:%Y-%m-%d %H:%M}"
        )
    return CheckedOutReservation(
        reservation_code=reservation.reservation_code,
        adults=reservation.adults,
        children=reservation.children,
        guest=reservation.guest,
        room_number=reservation.room_number,
        check_in=reservation.check_in,
        check_out=actual_time
    )


def cancel(reservation: ReservationBase) -> ExpiredReservation:
    """Expire a waitlisted or confirmed reservation"""
    _require_state(reservation, EDITABLE_STATES, "cancel")
    return ExpiredReservation(
        reservation_code=reservation.reservation_code,
        adults=reservation.adults,
        children=reservation.children,
        guest=reservation.guest,
        room_number=reservation.room_number,
        check_in=reservation.check_in
    )


# ==================== IN-PLACE EDITS ====================
def set_check_in(reservation: ReservationBase, new_check_in: datetime) -> None:
    require_editable(reservation, "check-in time")
    StayInterval.between(new_check_in, reservation.check_out)
    reservation.check_in = new_check_in


def set_check_out(reservation: ReservationBase, new_check_out: datetime) -> None:
    require_editable(reservation, "check-out time")
    StayInterval.between(reservation.check_in, new_check_out)
    reservation.check_out = new_check_out


def set_guest_count(reservation: ReservationBase, adults: int, children: int) -> None:
    require_editable(reservation, "guest count")
    GuestCount.of(adults, children)
    reservation.adults = adults
    reservation.children = children


def set_contact(reservation: ReservationBase, contact: str) -> None:
    require_editable(reservation, "contact")
    reservation.guest = reservation.guest.model_copy(update={"contact": contact})


def set_room(reservation: ReservationBase, room_number: str) -> None:
    """Move a waitlisted or confirmed reservation to another room"""
    require_editable(reservation, "room")
    reservation.room_number = room_number
