import asyncio
import inspect
import logging
import sys
from enum import Enum
from typing import Any, Callable

from .config import TrackerSettings
from .errors import ReceiptError, TrackerError, ValidationError
from .models import TransferStage
from .state import check_progress
from .store import TrackStore
from .tracker import BridgeTracker

logger = logging.getLogger(__name__)

FailureCallback = Callable[[], Any]


class SessionOutcome(Enum):
    FINALIZED = "FINALIZED"
    SUPERSEDED = "SUPERSEDED"
    ERROR_LIMIT = "ERROR_LIMIT"
    TERMINAL_ERROR = "TERMINAL_ERROR"


class TransferPoller:
    """Polls one transfer at a time into a ``TrackStore``.

    A session stops on its own once it is superseded (the store moved to a new
    generation), the transfer is finalized, the on-chain evidence is rejected,
    or too many consecutive service errors occurred.
    """

    def __init__(
        self,
        tracker: BridgeTracker,
        store: TrackStore,
        settings: TrackerSettings | None = None,
    ) -> None:
        self.tracker = tracker
        self.store = store
        self.settings = settings or tracker.settings
        self.visible = True

    def set_visibility(self, visible: bool) -> None:
        logger.debug(f"set_visibility({visible})")
        self.visible = visible

    def start_tracking(
        self,
        tx_hash: str,
        generation: int,
        on_unrecoverable: FailureCallback | None = None,
    ) -> asyncio.Task:
        logger.info(f"track called for query_string=[{tx_hash}] & generation=[{generation}]")
        return asyncio.create_task(
            self._poll_transfer(tx_hash, generation, on_unrecoverable),
            name=f"pollTransfer({tx_hash})",
        )

    def track(
        self, tx_hash: str, on_unrecoverable: FailureCallback | None = None
    ) -> asyncio.Task:
        generation = self.store.reset(tx_hash)
        return self.start_tracking(tx_hash, generation, on_unrecoverable)

    def stop_tracking(self) -> None:
        self.store.reset(None)

    async def _notify_failure(
        self, on_unrecoverable: FailureCallback | None, label: str
    ) -> None:
        if on_unrecoverable is None:
            return
        try:
            result = on_unrecoverable()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"{label}: failed to call error callback: {e!r}")

    async def _poll_transfer(
        self,
        tx_hash: str,
        generation: int,
        on_unrecoverable: FailureCallback | None,
    ) -> SessionOutcome:
        label = f"pollTransfer({tx_hash})"
        error_count = 0
        last_record = None

        while True:
            if not self.store.is_current(tx_hash, generation):
                logger.info(f"{label}: superseded, silently stop polling")
                return SessionOutcome.SUPERSEDED

            if error_count > self.settings.max_consecutive_errors:
                logger.error(f"{label}: exceeded error count ({error_count})")
                await self._notify_failure(on_unrecoverable, label)
                return SessionOutcome.ERROR_LIMIT

            if not self.visible:
                logger.debug(f"{label}: tracker not visible, empty poll")
                await asyncio.sleep(self.settings.hidden_poll_interval)
                continue

            try:
                record = await self.tracker.resolve(tx_hash)
                check_progress(last_record, record)
            except (ValidationError, ReceiptError) as e:
                if not self.store.set_full_page_error(tx_hash, generation, e):
                    logger.info(f"{label}: store no longer holds this query, error dropped")
                    return SessionOutcome.SUPERSEDED
                return SessionOutcome.TERMINAL_ERROR
            except TrackerError as e:
                error_count += 1
                logger.warning(f"{label}: recoverable error #{error_count}: {e.code.value}: {e}")
            except Exception:
                error_count += 1
                logger.exception(f"{label}: unexpected error #{error_count}")
            else:
                if not self.store.set_transfer(tx_hash, generation, record):
                    logger.info(f"{label}: store no longer holds this query, stop polling")
                    return SessionOutcome.SUPERSEDED
                last_record = record
                error_count = 0
                if record.stage == TransferStage.FINALIZED:
                    logger.info(f"{label}: transfer finalized")
                    return SessionOutcome.FINALIZED

            logger.debug(f"{label}: trying again in {self.settings.poll_interval}s")
            await asyncio.sleep(self.settings.poll_interval)


async def run(tx_hash: str) -> SessionOutcome:
    tracker = BridgeTracker.from_network()
    store = TrackStore()
    store.subscribe(
        lambda s: print(s.transfer or s.full_page_error or f"tracking {s.query_string}")
    )
    poller = TransferPoller(tracker, store)
    try:
        return await poller.track(
            tx_hash,
            on_unrecoverable=lambda: logger.error("relay service may be down"),
        )
    finally:
        await tracker.aclose()


if __name__ == "__main__":
    from .log import configure_logging

    configure_logging()
    try:
        outcome = asyncio.run(run(sys.argv[1]))
        logger.info(f"Polling stopped: {outcome.value}")
    except KeyboardInterrupt:
        pass
