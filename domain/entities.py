"""Domain Entities - Room and the Reservation variants"""
import re
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional, Union, Literal

from domain.enums import RoomStatus, RoomType, BedType, RoomFacing, ReservationStatus
from domain.exceptions import InvalidRoomNumberError
from domain.value_objects import Guest, GuestCount, StayInterval

ROOM_NUMBER_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{2}$")


class Room(BaseModel):
    """Room Entity"""
    model_config = ConfigDict(from_attributes=True)

    # Identity
    room_number: str = Field(frozen=True)

    # Attributes
    room_type: RoomType
    bed_type: BedType
    facing: RoomFacing
    rate: Decimal = Field(ge=0)
    has_wifi: bool = False
    smoking_free: bool = True

    # State
    status: RoomStatus = RoomStatus.VACANT
    current_guest: Optional[Guest] = None

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_number: str,
        room_type: RoomType,
        bed_type: BedType,
        facing: RoomFacing,
        rate: Decimal,
        has_wifi: bool = False,
        smoking_free: bool = True,
        status: RoomStatus = RoomStatus.VACANT
    ) -> "Room":
        """Create a room, validating the NN-NN room number format"""
        if not ROOM_NUMBER_PATTERN.match(room_number):
            raise InvalidRoomNumberError(f"Room number {room_number!r} must be in the format NN-NN")
        return Room(
            room_number=room_number,
            room_type=room_type,
            bed_type=bed_type,
            facing=facing,
            rate=rate,
            has_wifi=has_wifi,
            smoking_free=smoking_free,
            status=status
        )

    # ==================== STATE TRANSITION METHODS ====================
    def reserve(self) -> None:
        self.status = RoomStatus.RESERVED

    def occupy(self, guest: Guest) -> None:
        self.status = RoomStatus.OCCUPIED
        self.current_guest = guest

    def vacate(self) -> None:
        self.status = RoomStatus.VACANT
        self.current_guest = None

    def start_maintenance(self) -> bool:
        """Put a vacant room under maintenance; rooms in any other state are left alone"""
        if self.status != RoomStatus.VACANT:
            return False
        self.status = RoomStatus.MAINTENANCE
        return True

    def finish_maintenance(self) -> bool:
        if self.status != RoomStatus.MAINTENANCE:
            return False
        self.status = RoomStatus.VACANT
        return True

    # ==================== QUERY METHODS ====================
    def is_under_maintenance(self) -> bool:
        return self.status == RoomStatus.MAINTENANCE

    def is_similar_to(self, other: "Room") -> bool:
        """Same type, bed type and facing"""
        return (
            self.room_type == other.room_type
            and self.bed_type == other.bed_type
            and self.facing == other.facing
        )


class ReservationBase(BaseModel):
    """Fields shared by every reservation state"""
    model_config = ConfigDict(from_attributes=True)

    reservation_code: UUID = Field(default_factory=uuid4)
    adults: int = Field(ge=0)
    children: int = Field(ge=0)
    guest: Guest
    room_number: str

    @property
    def guest_count(self) -> GuestCount:
        return GuestCount(adults=self.adults, children=self.children)

    @property
    def interval(self) -> StayInterval:
        return StayInterval(start=self.check_in, end=self.check_out)


class WaitListReservation(ReservationBase):
    """Request for a room with no guarantee, eligible for promotion"""
    status: Literal["WAITLIST"] = ReservationStatus.WAITLIST.value
    check_in: datetime
    check_out: datetime


class ConfirmedReservation(ReservationBase):
    """Committed room and date range, not yet occupied"""
    status: Literal["CONFIRMED"] = ReservationStatus.CONFIRMED.value
    check_in: datetime
    check_out: datetime


class CheckedInReservation(ReservationBase):
    """Guest is in the room; check_in is the actual time, check_out the expected one"""
    status: Literal["CHECKED_IN"] = ReservationStatus.CHECKED_IN.value
    check_in: datetime = Field(frozen=True)
    check_out: datetime


class CheckedOutReservation(ReservationBase):
    """Terminal record used once to produce a bill"""
    model_config = ConfigDict(frozen=True)

    status: Literal["CHECKED_OUT"] = ReservationStatus.CHECKED_OUT.value
    check_in: datetime
    check_out: datetime

    def days_stayed(self) -> int:
        return self.interval.whole_days()


class ExpiredReservation(ReservationBase):
    """Terminal record for a missed or cancelled stay"""
    model_config = ConfigDict(frozen=True)

    status: Literal["EXPIRED"] = ReservationStatus.EXPIRED.value
    check_in: datetime

    def notice(self) -> str:
        """Apology message for the guest"""
        return (
            f"Sorry. {self.guest}'s reservation with expected check-in time on "
            f"{self.check_in:%Y-%m-%d %H:%M} has expired."
        )


Reservation = Annotated[
    Union[
        WaitListReservation,
        ConfirmedReservation,
        CheckedInReservation,
        CheckedOutReservation,
        ExpiredReservation,
    ],
    Field(discriminator="status"),
]
