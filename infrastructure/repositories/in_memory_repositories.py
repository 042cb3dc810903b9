"""In-Memory Repository Implementations"""
from decimal import Decimal
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from domain.repositories import SnapshotRepository, GuestDirectory, ServiceChargeProvider
from domain.value_objects import Guest

T = TypeVar("T", bound=BaseModel)


class InMemorySnapshotRepository(SnapshotRepository[T], Generic[T]):
    """In-memory implementation of SnapshotRepository"""

    def __init__(self, initial: Optional[List[T]] = None):
        self._storage: List[T] = [item.model_copy(deep=True) for item in initial or []]
        self.replace_count = 0

    async def load_all(self) -> List[T]:
        """Load a detached copy of the stored collection"""
        return [item.model_copy(deep=True) for item in self._storage]

    async def replace_all(self, items: List[T]) -> None:
        """Replace the stored collection"""
        self._storage = [item.model_copy(deep=True) for item in items]
        self.replace_count += 1

    @property
    def snapshot(self) -> List[T]:
        return list(self._storage)


class InMemoryGuestDirectory(GuestDirectory):
    """In-memory implementation of GuestDirectory"""

    def __init__(self, guests: Optional[List[Guest]] = None):
        self._storage: Dict[str, Guest] = {guest.contact: guest for guest in guests or []}

    def add(self, guest: Guest) -> Guest:
        self._storage[guest.contact] = guest
        return guest

    async def find_guest_by_contact(self, contact: str) -> Optional[Guest]:
        """Find guest by contact"""
        return self._storage.get(contact)


class InMemoryServiceChargeLedger(ServiceChargeProvider):
    """In-memory implementation of ServiceChargeProvider"""

    def __init__(self):
        self._charges: Dict[str, Decimal] = {}

    def charge(self, room_number: str, amount: Decimal) -> None:
        self._charges[room_number] = self._charges.get(room_number, Decimal("0")) + Decimal(amount)

    async def accrued_service_total(self, room_number: str) -> Decimal:
        """Accrued total for a room, zero when nothing was ordered"""
        return self._charges.get(room_number, Decimal("0"))

    async def clear_room_charges(self, room_number: str) -> None:
        self._charges.pop(room_number, None)
