import logging

from .chain import FailoverChainClient, build_chain_client
from .config import NetworkConfig, TrackerSettings, get_network, load_settings
from .errors import ServiceError, ServiceErrorCode, ValidationError
from .models import BundleState, TransferRecord
from .relay import RelayClient
from .state import parse_bundle_state, resolve_state
from .transformers import (
    destination_info_from_relay,
    source_info_from_receipt,
    source_info_from_relay,
)
from .utils import hex_prefix, is_valid_bytes32

logger = logging.getLogger(__name__)


async def track_transfer(
    tx_hash: str,
    relay: RelayClient,
    chain: FailoverChainClient,
    settings: TrackerSettings,
) -> TransferRecord:
    """Resolve the current state of the transfer started by ``tx_hash``.

    Raises ``ValidationError``, ``ReceiptError`` or ``ServiceError``; holds no
    state between calls.
    """
    logger.info(f"Source transaction hash queried: {tx_hash}")

    if not is_valid_bytes32(tx_hash):
        raise ValidationError()
    tx_hash = hex_prefix(tx_hash)

    source_tip = None
    try:
        batch = await relay.get_batch(tx_hash)
    except Exception as e:
        logger.warning(f"relay api: batch call failure: {e!r}")
        raise ServiceError(ServiceErrorCode.RELAY_API_CALL_FAILURE, str(e)) from e

    destination_tip = batch.destination_tip
    relay_transfer = batch.transaction
    state = parse_bundle_state(relay_transfer.state)
    if state is None:
        logger.warning(f"relay api: unrecognized bundle state {relay_transfer.state!r}")
        raise ServiceError(
            ServiceErrorCode.RELAY_API_INCONSISTENT_DATA,
            f"unrecognized bundle state {relay_transfer.state!r}",
        )

    destination_info = None
    if state != BundleState.NOT_FOUND:
        source_info = source_info_from_relay(relay_transfer.source_info, settings)
        destination_info = destination_info_from_relay(relay_transfer.destination_info)
        logger.debug(f"source info: {source_info}, destination info: {destination_info}")
    else:
        logger.info("relay has no record yet; going to the source chain for info")
        response = await chain.get_receipt_and_chain_tip(tx_hash)
        source_tip = response.chain_tip
        source_info = source_info_from_receipt(response.receipt, settings)

    if source_info is None:
        logger.error(f"relay api: bundle in state {state.value} without source info")
        raise ServiceError(ServiceErrorCode.UNDEFINED, "source info could not be resolved")

    state_info = resolve_state(
        state, source_info, destination_info, source_tip, destination_tip, settings
    )
    if state_info.stage is None:
        logger.error("Error resolving state info")
        raise ServiceError(ServiceErrorCode.UNDEFINED, "stage could not be resolved")

    logger.info(f"Returning transfer with stage {state_info.stage.value}")
    return TransferRecord(
        stage=state_info.stage,
        source=source_info,
        destination=destination_info,
        finality=state_info.finality,
    )


class BridgeTracker:
    """Binds the relay client, the chain client and the settings for repeated lookups."""

    def __init__(
        self,
        relay: RelayClient,
        chain: FailoverChainClient,
        settings: TrackerSettings,
    ) -> None:
        self.relay = relay
        self.chain = chain
        self.settings = settings

    @classmethod
    def from_network(
        cls, network: NetworkConfig | None = None, settings: TrackerSettings | None = None
    ) -> "BridgeTracker":
        network = network or get_network()
        settings = settings or load_settings(network)
        relay = RelayClient(
            str(network.relay_base_url),
            timeout=network.relay_timeout,
            balance_timeout=network.balance_timeout,
            source_decimals=settings.source_token_decimals,
            destination_decimals=settings.destination_coin_decimals,
        )
        return cls(relay, build_chain_client(network), settings)

    async def resolve(self, tx_hash: str) -> TransferRecord:
        return await track_transfer(tx_hash, self.relay, self.chain, self.settings)

    async def aclose(self) -> None:
        await self.relay.aclose()
        await self.chain.aclose()
