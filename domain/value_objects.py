"""Domain Value Objects"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from domain.exceptions import InvalidIntervalError, NegativeCountError


class StayInterval(BaseModel):
    """Value Object for a stay between two points in time"""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @classmethod
    def between(cls, start: datetime, end: datetime) -> "StayInterval":
        """Build an interval, rejecting start >= end"""
        if start >= end:
            raise InvalidIntervalError(
                f"Check-in {start:%Y-%m-%d %H:%M} must be earlier than check-out {end:%Y-%m-%d %H:%M}"
            )
        return cls(start=start, end=end)

    def overlaps(self, other: "StayInterval") -> bool:
        """Closed-interval conflict test: touching endpoints count as overlapping"""
        return not (self.start > other.end or self.end < other.start)

    def whole_days(self) -> int:
        """Number of whole days in the interval, fractional days truncated"""
        return (self.end - self.start) // timedelta(days=1)


class GuestCount(BaseModel):
    """Value Object for guest count"""
    model_config = ConfigDict(frozen=True)

    adults: int = Field(ge=0)
    children: int = Field(ge=0)

    @classmethod
    def of(cls, adults: int, children: int) -> "GuestCount":
        if adults < 0 or children < 0:
            raise NegativeCountError(
                f"Number of adults ({adults}) and children ({children}) cannot be negative"
            )
        return cls(adults=adults, children=children)


class Guest(BaseModel):
    """Reference to a guest owned by the guest directory"""
    model_config = ConfigDict(from_attributes=True)

    guest_id: UUID = Field(default_factory=uuid4)
    name: str
    contact: str

    def __str__(self) -> str:
        return self.name
