from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from missionhub.services.realtime_notifier import RealtimeChannel


class IConnectionRegistry(ABC):
    """Live connections by user and by household.

    The in-memory registry covers one process; a broker-backed one can take its place.
    """

    @abstractmethod
    async def register(
        self, user_id: str, channel: "RealtimeChannel", household_id: Optional[str] = None
    ) -> Optional["RealtimeChannel"]:
        """Store the user's channel; returns the channel it replaced, if any."""
        pass

    @abstractmethod
    async def unregister(
        self, user_id: str, channel: Optional["RealtimeChannel"] = None
    ) -> Optional["RealtimeChannel"]:
        """Remove the user everywhere and return the removed channel.

        With ``channel`` given, nothing happens unless it is still the registered one.
        """
        pass

    @abstractmethod
    async def get_channel(self, user_id: str) -> Optional["RealtimeChannel"]:
        pass

    @abstractmethod
    async def household_members(self, household_id: str) -> set[str]:
        """Connected user ids of a household."""
        pass

    @abstractmethod
    async def connected_count(self) -> int:
        pass
