from abc import ABC, abstractmethod

from src.app.use_cases.logs.dtos import EventRecordInput


class ICriticalAlertNotifier(ABC):
    """Out-of-band alert raised once a CRITICAL event has been stored"""

    @abstractmethod
    async def notify(self, record_id: int, event: EventRecordInput) -> None:
        """Deliver the alert; raise on delivery failure"""
        pass
