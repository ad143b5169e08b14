import logging
import queue
import threading
from typing import Callable, Dict, List

from config.simulation_config import SimulationSettings
from src.binmonitoring.domain.model.events import (
    BinUpdateEvent,
    DomainEvent,
    SimulationStatusEvent
)
from src.binmonitoring.infrastructure.persistence import BinStorage

logger = logging.getLogger(__name__)


class ChannelOutbox:
    """
    Outbound queue of one channel, drained by its own daemon thread

    Publishers only enqueue, so a channel whose socket has stalled blocks
    nothing but its own sender thread.
    """

    # How often the sender thread re-checks for close()
    POLL_SECONDS = 0.5

    def __init__(self, channel, max_pending: int, on_failure: Callable):
        """
        Args:
            channel: Anything with a `send(str)` method
            max_pending: Backlog size at which offer() gives up
            on_failure: Called with the channel when a send raises
        """
        self.channel = channel
        self.max_pending = max_pending
        self.on_failure = on_failure
        self._queue: queue.Queue = queue.Queue()
        self._closed = threading.Event()
        self.thread = threading.Thread(
            target=self._drain,
            daemon=True,
            name="WebSocketOutbox"
        )

    def start(self, initial_messages: List[str]):
        """Queue the bootstrap messages ahead of everything else and start sending"""
        for message in initial_messages:
            self._queue.put(message)
        self.thread.start()

    def offer(self, message: str) -> bool:
        """Queue a message; False when the backlog is full or the outbox is closed"""
        if self._closed.is_set() or self._queue.qsize() >= self.max_pending:
            return False
        self._queue.put(message)
        return True

    def close(self):
        self._closed.set()

    def pending(self) -> int:
        return self._queue.qsize()

    def _drain(self):
        while not self._closed.is_set():
            try:
                message = self._queue.get(timeout=self.POLL_SECONDS)
            except queue.Empty:
                continue

            try:
                self.channel.send(message)
            except Exception as e:
                logger.debug(f"Dropping WebSocket observer after failed send: {e}")
                self.close()
                self.on_failure(self.channel)


class WebSocketHub:
    """
    Push strategy: relays simulation events to connected WebSocket channels

    Responsibilities:
    - Bootstrap new channels with the full current state
    - Relay every published event to every open channel
    - Drop channels on disconnect, failed send, or a backlog of more than
      `max_pending` undelivered messages (no retry)

    Delivery is fire-and-forget: broadcast() only enqueues, each channel is
    written by its own outbox thread.
    """

    def __init__(self, storage: BinStorage,
                 max_pending: int = SimulationSettings.WEBSOCKET_MAX_PENDING):
        """
        Args:
            storage: Source of the bootstrap state
            max_pending: Per-channel backlog limit
        """
        self.storage = storage
        self.max_pending = max_pending
        self._outboxes: Dict[object, ChannelOutbox] = {}
        self._lock = threading.Lock()

    def register(self, channel):
        """
        Send the current simulation status and one binUpdate per bin, then
        start relaying events

        Storage is read before the channel is added, so a failing read leaves
        nothing registered.

        Raises:
            StorageError: If the bootstrap state cannot be read
        """
        config = self.storage.get_simulation_config()
        bootstrap = [SimulationStatusEvent(config=config)]
        bootstrap.extend(
            BinUpdateEvent.from_bin(dustbin)
            for dustbin in self.storage.get_all_bins()
        )

        outbox = ChannelOutbox(channel, self.max_pending, on_failure=self.unregister)
        with self._lock:
            self._outboxes[channel] = outbox
            outbox.start([event.to_json() for event in bootstrap])

        logger.info(f"WebSocket observer connected ({self.connection_count()} total)")

    def unregister(self, channel):
        with self._lock:
            outbox = self._outboxes.pop(channel, None)
        if outbox is None:
            return

        outbox.close()
        logger.info(f"WebSocket observer disconnected ({self.connection_count()} total)")

    def broadcast(self, event: DomainEvent):
        """Event listener: queue the event for every open channel"""
        message = event.to_json()

        with self._lock:
            outboxes = list(self._outboxes.values())

        for outbox in outboxes:
            if not outbox.offer(message):
                logger.warning(
                    f"WebSocket observer fell {outbox.pending()} messages behind, dropping it"
                )
                self.unregister(outbox.channel)
                self._close_in_background(outbox.channel)

    def _close_in_background(self, channel):
        # close() waits for the closing handshake, which a stalled peer never sends
        close = getattr(channel, 'close', None)
        if close is not None:
            threading.Thread(target=close, daemon=True, name="WebSocketClose").start()

    def connection_count(self) -> int:
        with self._lock:
            return len(self._outboxes)
