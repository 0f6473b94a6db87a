import logging
from datetime import datetime
from typing import Callable

from .errors import TrackerError
from .models import TransferRecord
from .utils import bytes32_equals

logger = logging.getLogger(__name__)

Listener = Callable[["TrackStore"], None]


class TrackStore:
    """The one piece of shared state: the current query, its generation and its result.

    Writers pass the ``(query_string, generation)`` they were started with; a
    write is applied only while both still match. The check and the write
    happen without suspending, so concurrent sessions on one event loop can
    never interleave them.
    """

    def __init__(self) -> None:
        self.query_string: str | None = None
        self.generation = 0
        self.transfer: TransferRecord | None = None
        self.full_page_error: TrackerError | None = None
        self.updated_at: float | None = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"store listener {listener!r} failed: {e!r}")

    def reset(self, query_string: str | None, generation: int | None = None) -> int:
        """Start a new query session; every older session loses the right to write."""
        if generation is None:
            generation = self.generation + 1
        if generation <= self.generation:
            raise ValueError(
                f"generation must increase: {generation} <= {self.generation}"
            )
        self.query_string = query_string
        self.generation = generation
        self.transfer = None
        self.full_page_error = None
        self.updated_at = None
        self._notify()
        return generation

    def is_current(self, query_string: str | None, generation: int) -> bool:
        return self.generation == generation and bytes32_equals(
            query_string, self.query_string
        )

    def set_transfer(
        self, query_string: str, generation: int, transfer: TransferRecord
    ) -> bool:
        if not self.is_current(query_string, generation):
            return False
        if not bytes32_equals(transfer.source.tx_hash, self.query_string):
            logger.warning(
                f"set_transfer: spurious input; tx hash {transfer.source.tx_hash}"
            )
            return True
        self.transfer = transfer
        self.updated_at = datetime.now().timestamp()
        self._notify()
        return True

    def set_full_page_error(
        self, query_string: str, generation: int, error: TrackerError
    ) -> bool:
        if not self.is_current(query_string, generation):
            return False
        self.full_page_error = error
        self.updated_at = datetime.now().timestamp()
        self._notify()
        return True
