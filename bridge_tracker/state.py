import logging
from typing import NamedTuple

from .config import TrackerSettings
from .errors import ServiceError, ServiceErrorCode
from .models import (
    BundleState,
    DestinationChainInfo,
    FinalityChain,
    FinalityCounter,
    SourceChainInfo,
    TransferRecord,
    TransferStage,
)

logger = logging.getLogger(__name__)

BUNDLE_STATE_TO_STAGE = {
    BundleState.NOT_FOUND: TransferStage.SOURCE_SUBMITTED,
    BundleState.STORED: TransferStage.RELAY_PROCESSING,
    BundleState.SUBMITTED: TransferStage.DESTINATION_SUBMITTED,
}


class StateInfo(NamedTuple):
    stage: TransferStage | None
    finality: FinalityCounter


def parse_bundle_state(value) -> BundleState | None:
    if isinstance(value, BundleState):
        return value
    try:
        return BundleState(value)
    except ValueError:
        return None


def resolve_state(
    bundle_state: BundleState | str | None,
    source_info: SourceChainInfo | None,
    destination_info: DestinationChainInfo | None,
    source_tip: int | None,
    destination_tip: int | None,
    settings: TrackerSettings,
) -> StateInfo:
    """Map the relay's bundle state and the chain tips to a stage and finality counter.

    Missing inputs leave the finality counter undefined; they never fail the
    stage resolution.
    """
    undefined = FinalityCounter.undefined()
    state = parse_bundle_state(bundle_state)
    if state is None:
        logger.warning(f"resolve_state: unrecognized bundle state {bundle_state!r}")
        return StateInfo(None, undefined)

    stage = BUNDLE_STATE_TO_STAGE[state]
    finality = undefined

    if stage == TransferStage.SOURCE_SUBMITTED:
        try:
            if source_tip is not None and source_info is not None:
                finality = FinalityCounter(
                    chain=FinalityChain.SOURCE_CHAIN,
                    count=source_tip - source_info.block_number,
                    target=settings.source_confirmations,
                )
            else:
                logger.debug("SOURCE_SUBMITTED: passed in null data")
        except Exception as e:
            logger.warning(f"could not determine source finality due to error: {e!r}")

    elif stage == TransferStage.DESTINATION_SUBMITTED:
        try:
            if destination_tip is not None and destination_info is not None:
                count = destination_tip - destination_info.block_number
                if count > settings.destination_confirmations:
                    stage = TransferStage.FINALIZED
                else:
                    finality = FinalityCounter(
                        chain=FinalityChain.DESTINATION_CHAIN,
                        count=count,
                        target=settings.destination_confirmations,
                    )
            else:
                logger.debug("DESTINATION_SUBMITTED: passed in null data")
        except Exception as e:
            logger.warning(
                f"could not determine destination finality due to error: {e!r}"
            )

    return StateInfo(stage, finality)


def check_progress(previous: TransferRecord | None, current: TransferRecord) -> None:
    """Reject a resolution whose stage precedes the last one seen for the same transfer."""
    if previous is None:
        return
    if current.stage.rank < previous.stage.rank:
        logger.warning(
            f"relay state regressed from {previous.stage.value} to {current.stage.value} "
            f"for {current.source.tx_hash}"
        )
        raise ServiceError(
            ServiceErrorCode.RELAY_STATE_REGRESSION,
            f"stage regressed from {previous.stage.value} to {current.stage.value}",
        )
