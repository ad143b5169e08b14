import logging
import threading
from typing import Callable, List

from src.binmonitoring.domain.model.events import DomainEvent

logger = logging.getLogger(__name__)

EventListener = Callable[[DomainEvent], None]


class EventBroadcaster:
    """
    Single event-producer seam between the simulation and its observers

    The engine and scheduler publish here; transports (WebSocket hub,
    MQTT mirror, test recorders) subscribe as listeners. Delivery is
    fire-and-forget: a failing listener is logged and skipped.
    """

    def __init__(self):
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: EventListener):
        """Register a listener called with every published event"""
        with self._lock:
            self._listeners.append(listener)
        logger.info(f"Event listener subscribed: {_name_of(listener)}")

    def unsubscribe(self, listener: EventListener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, event: DomainEvent):
        """
        Deliver an event to every listener

        Args:
            event: Domain event to deliver
        """
        with self._lock:
            listeners = list(self._listeners)

        logger.debug(f"Publishing {event.event_type} to {len(listeners)} listeners")

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    f"Event listener {_name_of(listener)} failed on "
                    f"{event.event_type}: {e}",
                    exc_info=True
                )

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


def _name_of(listener) -> str:
    return getattr(listener, '__qualname__', repr(listener))
