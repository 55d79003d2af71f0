"""Event sinks для уведомлений кошелька.

Доставка уведомлений — внешняя забота; кошелёк только публикует закоммиченные события.
"""

from typing import List, Protocol

from src.core.domain.events import EventType, WalletEvent
from src.core.observability import get_logger

log = get_logger(__name__, component="notifications")


class EventSink(Protocol):
    def publish(self, event: WalletEvent) -> None: ...


class LoggingEventSink:
    """Sink по умолчанию: пишет каждое событие в structlog."""
    
    def publish(self, event: WalletEvent) -> None:
        log.info("wallet_event", **event.model_dump(mode="json"))


class InMemoryEventSink:
    """Sink, накапливающий события в памяти (для тестов и наблюдателей в процессе)."""
    
    def __init__(self):
        self.events: List[WalletEvent] = []
    
    def publish(self, event: WalletEvent) -> None:
        self.events.append(event)
    
    def of_type(self, event_type: EventType) -> List[WalletEvent]:
        return [e for e in self.events if e.event_type == event_type]
    
    def clear(self) -> None:
        self.events.clear()
