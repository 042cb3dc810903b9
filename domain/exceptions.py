"""
Domain Exceptions

Every core operation either returns its result or raises one of the
ReservationError subclasses below. The ``kind`` attribute is stable and is
what callers (and the HTTP adapter) should branch on.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure kinds raised by the reservation core"""
    INVALID_INTERVAL = "INVALID_INTERVAL"
    NEGATIVE_COUNT = "NEGATIVE_COUNT"
    INVALID_STATUS_CHANGE = "INVALID_STATUS_CHANGE"
    ILLEGAL_CHANGE_OF_DATE = "ILLEGAL_CHANGE_OF_DATE"
    INVALID_CHECK_OUT_TIME = "INVALID_CHECK_OUT_TIME"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    INVALID_ROOM_NUMBER = "INVALID_ROOM_NUMBER"


class ReservationError(Exception):
    """Base class for all reservation core failures"""

    kind: ErrorKind = ErrorKind.INVALID_STATUS_CHANGE
    default_message = "Reservation operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class InvalidIntervalError(ReservationError):
    kind = ErrorKind.INVALID_INTERVAL
    default_message = "Check-in time must be earlier than check-out time"


class NegativeCountError(ReservationError):
    kind = ErrorKind.NEGATIVE_COUNT
    default_message = "Number of adults and children cannot be negative"


class InvalidStatusChangeError(ReservationError):
    kind = ErrorKind.INVALID_STATUS_CHANGE
    default_message = "Illegal reservation status change"


class IllegalChangeOfDateError(ReservationError):
    kind = ErrorKind.ILLEGAL_CHANGE_OF_DATE
    default_message = "Reservation can no longer be changed"


class InvalidCheckOutTimeError(ReservationError):
    kind = ErrorKind.INVALID_CHECK_OUT_TIME
    default_message = "Check-out time cannot be earlier than check-in time"


class RoomNotFoundError(ReservationError):
    kind = ErrorKind.ROOM_NOT_FOUND
    default_message = "Room not found"


class ReservationNotFoundError(ReservationError):
    kind = ErrorKind.RESERVATION_NOT_FOUND
    default_message = "Reservation not found"


class RoomUnavailableError(ReservationError):
    kind = ErrorKind.ROOM_UNAVAILABLE
    default_message = "Room is not available for the requested stay"


class InvalidRoomNumberError(ReservationError):
    kind = ErrorKind.INVALID_ROOM_NUMBER
    default_message = "Room number must be in the format NN-NN"
