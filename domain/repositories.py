"""Domain Repository and Collaborator Interfaces"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from domain.value_objects import Guest

T = TypeVar("T")


class SnapshotRepository(ABC, Generic[T]):
    """Repository interface for a whole record collection

    Loaded once at startup and replaced after every mutating operation. No
    atomicity is assumed from implementations.
    """

    @abstractmethod
    async def load_all(self) -> List[T]:
        """Load every record of the collection"""
        pass

    @abstractmethod
    async def replace_all(self, items: List[T]) -> None:
        """Durably replace the whole collection"""
        pass


class GuestDirectory(ABC):
    """Read-only view of the guest directory"""

    @abstractmethod
    async def find_guest_by_contact(self, contact: str) -> Optional[Guest]:
        """Find guest by contact"""
        pass


class ServiceChargeProvider(ABC):
    """Room-service ledger, consumed only by billing"""

    @abstractmethod
    async def accrued_service_total(self, room_number: str) -> Decimal:
        """Total of the room-service orders charged to a room"""
        pass

    @abstractmethod
    async def clear_room_charges(self, room_number: str) -> None:
        """Drop every order charged to a room once its stay has been billed"""
        pass
