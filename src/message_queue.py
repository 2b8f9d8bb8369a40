import threading
from queue import Empty, Queue
from typing import Optional

from models import TransactionRecord


class InMemoryQueue:
    """
    FIFO hand-off between the publisher and one partition worker.
    All synchronization is internal - callers never need to lock.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self._timeout = timeout
        self._queue: Queue[TransactionRecord] = Queue()
        self._shutdown_event = threading.Event()

    def publish_message(self, message: TransactionRecord) -> None:
        """Add message to the queue. Thread-safe."""
        self._queue.put(message)

    def consume_message(self) -> Optional[TransactionRecord]:
        """
        Get next message in publish order.
        Returns None if the queue is still empty after the timeout.
        """
        try:
            return self._queue.get(timeout=self._timeout)
        except Empty:
            return None

    def is_empty(self) -> bool:
        return self._queue.empty()

    def shutdown(self) -> None:
        """Signal no more messages will be published."""
        self._shutdown_event.set()

    def is_shutdown(self) -> bool:
        return self._shutdown_event.is_set()

    def is_drained(self) -> bool:
        """True once shutdown was signaled and every message was consumed."""
        return self.is_shutdown() and self.is_empty()
