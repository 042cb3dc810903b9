"""Domain Enums"""
from enum import Enum


class RoomStatus(str, Enum):
    VACANT = "VACANT"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"


class RoomType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    DELUXE = "DELUXE"
    VIP = "VIP"
    SUITE = "SUITE"


class BedType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    MASTER = "MASTER"


class RoomFacing(str, Enum):
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"


class ReservationStatus(str, Enum):
    WAITLIST = "WAITLIST"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    EXPIRED = "EXPIRED"
