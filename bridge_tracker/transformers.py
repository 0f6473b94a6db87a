"""Turn relay and chain responses into canonical transfer records.

Each transformer either returns a frozen model or raises the most specific
error it can determine: a ``ReceiptError`` when the evidence itself does not
qualify for bridging, a ``ServiceError`` when the upstream data is malformed.
"""

import logging
from typing import Any, Mapping

from .config import TrackerSettings
from .errors import ReceiptError, ReceiptErrorCode, ServiceError, ServiceErrorCode
from .models import DestinationChainInfo, InfoOrigin, SourceChainInfo
from .utils import (
    address_equals,
    bytes32_equals,
    canonicalize_address,
    canonicalize_bytes32,
    format_decimal,
    parse_hex_int,
    parse_unsigned,
    sanitize_hex,
    scale_units,
)

logger = logging.getLogger(__name__)

# the burn amount is the low 16 bytes of the first data word
BURN_AMOUNT_HEX_SLICE = slice(32, 64)
MIN_BURN_DATA_HEX_LENGTH = 64


def _relay_inconsistent(message: str) -> ServiceError:
    logger.warning(f"relay api: {message}")
    return ServiceError(ServiceErrorCode.RELAY_API_INCONSISTENT_DATA, message)


def _source_inconsistent(message: str) -> ServiceError:
    logger.warning(f"source chain api: {message}")
    return ServiceError(ServiceErrorCode.SOURCE_API_INCONSISTENT_DATA, message)


def source_info_from_relay(
    info: Mapping[str, Any] | None, settings: TrackerSettings
) -> SourceChainInfo | None:
    if info is None:
        return None

    required = ("ethTxHash", "ethBlockHash", "ethAddress", "aionAddress",
                "ethBlockNumber", "aionTransferAmount")
    missing = [key for key in required if info.get(key) is None]
    if missing:
        raise _relay_inconsistent(f"source info is missing {missing}")

    try:
        tx_hash = canonicalize_bytes32(info["ethTxHash"])
        block_hash = canonicalize_bytes32(info["ethBlockHash"])
        sender = canonicalize_address(info["ethAddress"])
        receiver = canonicalize_bytes32(info["aionAddress"])
    except TypeError as e:
        raise _relay_inconsistent(f"source info carries non-hex fields: {e}") from e

    try:
        block_number = parse_unsigned(info["ethBlockNumber"])
    except ValueError as e:
        raise _relay_inconsistent(
            f"invalid source block number {info['ethBlockNumber']!r}"
        ) from e

    # the relay reports the amount in destination-chain base units, as hex
    try:
        amount = scale_units(
            parse_hex_int(info["aionTransferAmount"]), settings.destination_coin_decimals
        )
    except (TypeError, ValueError) as e:
        raise _relay_inconsistent(
            f"invalid transfer amount {info['aionTransferAmount']!r}"
        ) from e

    if not amount > 0:
        logger.info(f"relay api: transfer amount {amount} is not positive")
        raise ReceiptError(ReceiptErrorCode.RECEIPT_ZERO_VALUE)

    return SourceChainInfo(
        sender=sender,
        receiver=receiver,
        amount=format_decimal(amount),
        tx_hash=tx_hash,
        block_number=block_number,
        block_hash=block_hash,
        origin=InfoOrigin.RELAY,
    )


def destination_info_from_relay(
    info: Mapping[str, Any] | None,
) -> DestinationChainInfo | None:
    if info is None:
        return None

    missing = [key for key in ("aionTxHash", "aionBlockHash", "aionBlockNumber")
               if info.get(key) is None]
    if missing:
        raise _relay_inconsistent(f"destination info is missing {missing}")

    try:
        tx_hash = canonicalize_bytes32(info["aionTxHash"])
        block_hash = canonicalize_bytes32(info["aionBlockHash"])
    except TypeError as e:
        raise _relay_inconsistent(f"destination info carries non-hex fields: {e}") from e

    try:
        block_number = parse_unsigned(info["aionBlockNumber"])
    except ValueError as e:
        raise _relay_inconsistent(
            f"failed to process destination block number {info['aionBlockNumber']!r}"
        ) from e

    return DestinationChainInfo(
        tx_hash=tx_hash, block_number=block_number, block_hash=block_hash
    )


def _is_success_status(status: Any) -> bool:
    try:
        return parse_unsigned(status) == 1
    except ValueError:
        return False


def _is_removed(log: Mapping[str, Any]) -> bool:
    removed = log.get("removed")
    return removed is True or removed == "true"


def source_info_from_receipt(
    receipt: Mapping[str, Any] | None, settings: TrackerSettings
) -> SourceChainInfo:
    """Re-derive a burn transfer from a raw source-chain receipt.

    ``receipt`` is either a web3 receipt or the explorer's json, optionally
    carrying the originating transaction's ``input``.
    """
    try:
        return _source_info_from_receipt(receipt, settings)
    except (TypeError, AttributeError) as e:
        raise _source_inconsistent(f"receipt carries malformed fields: {e}") from e


def _source_info_from_receipt(
    receipt: Mapping[str, Any] | None, settings: TrackerSettings
) -> SourceChainInfo:
    if receipt is None:
        raise ReceiptError(ReceiptErrorCode.RECEIPT_NOT_AVAILABLE)

    status = receipt.get("status")
    if status is not None and not _is_success_status(status):
        logger.info(f"source chain api: receipt with failed status: {status}")
        raise ReceiptError(ReceiptErrorCode.RECEIPT_WITH_FAILED_STATUS)

    to_address = receipt.get("to")
    if to_address is None:
        raise _source_inconsistent("receipt.to should not be null")
    if not address_equals(to_address, settings.bridge_contract):
        logger.info(
            f"source chain api: receipt.to {to_address} != {settings.bridge_contract}"
        )
        raise ReceiptError(ReceiptErrorCode.RECEIPT_INCORRECT_TO_ADDR)

    # input comes from the transaction, not the receipt, and may be absent
    tx_input = receipt.get("input")
    if tx_input is not None:
        selector = sanitize_hex(tx_input)[:8].lower()
        if selector != sanitize_hex(settings.burn_function_selector).lower():
            raise ReceiptError(ReceiptErrorCode.RECEIPT_NOT_BURN_FUNCTION)

    logs = receipt.get("logs")
    if not isinstance(logs, (list, tuple)):
        raise _source_inconsistent(f"receipt.logs should be a list: {logs!r}")
    if len(logs) > settings.max_burn_logs:
        logger.info(
            f"source chain api: {len(logs)} logs exceeds the ceiling of "
            f"{settings.max_burn_logs}"
        )
        raise ReceiptError(ReceiptErrorCode.RECEIPT_NO_BURN_LOG)

    if receipt.get("blockHash") is None or receipt.get("transactionHash") is None:
        raise _source_inconsistent("receipt.blockHash or receipt.transactionHash is null")
    tx_hash = canonicalize_bytes32(receipt["transactionHash"])
    block_hash = canonicalize_bytes32(receipt["blockHash"])

    for log in logs:
        topics = log.get("topics") if isinstance(log, Mapping) else None
        if not isinstance(topics, (list, tuple)) or len(topics) == 0 or topics[0] is None:
            logger.debug(f"log topics malformed: {log}")
            continue
        if not bytes32_equals(topics[0], settings.burn_event_hash):
            continue

        if _is_removed(log):
            logger.info("source chain api: burn log claims to be removed from mainchain")
            raise ReceiptError(ReceiptErrorCode.RECEIPT_NON_MAINCHAIN)

        if not address_equals(log.get("address"), settings.bridge_contract):
            logger.warning(
                f"source chain api: burn log emitted by {log.get('address')}, "
                f"not {settings.bridge_contract}"
            )
            continue

        if len(topics) < 3 or topics[1] is None or topics[2] is None:
            raise _source_inconsistent("burn log indexed fields are null")
        sender = canonicalize_address(topics[1])
        receiver = canonicalize_bytes32(topics[2])

        try:
            block_number = parse_unsigned(log.get("blockNumber"))
        except ValueError as e:
            raise _source_inconsistent(
                f"invalid log block number {log.get('blockNumber')!r}"
            ) from e

        if log.get("data") is None:
            raise _source_inconsistent("burn log data is null")
        data = sanitize_hex(log["data"])
        if len(data) < MIN_BURN_DATA_HEX_LENGTH:
            raise _source_inconsistent(f"burn log data too short: {data!r}")
        try:
            value = int(data[BURN_AMOUNT_HEX_SLICE], 16)
        except ValueError as e:
            raise _source_inconsistent(f"burn log data is not hex: {data!r}") from e

        amount = scale_units(value, settings.source_token_decimals)
        if not amount > 0:
            logger.info("source chain api: burn amount is not positive")
            raise ReceiptError(ReceiptErrorCode.RECEIPT_ZERO_VALUE)

        return SourceChainInfo(
            sender=sender,
            receiver=receiver,
            amount=format_decimal(amount),
            tx_hash=tx_hash,
            block_number=block_number,
            block_hash=block_hash,
            origin=InfoOrigin.CHAIN,
        )

    logger.info(f"No burn log found in log list: {logs}")
    raise ReceiptError(ReceiptErrorCode.RECEIPT_NO_BURN_LOG)
