"""Builders for receipts, relay payloads and fake collaborators used across the suite."""
from __future__ import annotations

from typing import Any

from bridge_tracker.chain import ChainBackend
from bridge_tracker.config import TrackerSettings
from bridge_tracker.models import (
    DestinationChainInfo,
    FinalityCounter,
    InfoOrigin,
    SourceChainInfo,
    TransferRecord,
    TransferStage,
)
from bridge_tracker.relay import RelayBatch

CONTRACT = "0x4CEdA7906a5Ed2179785Cd3A40A69ee8bc99C466"
OTHER_CONTRACT = "0x00000000000000000000000000000000000000ff"
BURN_EVENT = TrackerSettings().burn_event_hash
BURN_SELECTOR = "0x7a408454"

TX_HASH = "0x" + "ab" * 32
BLOCK_HASH = "0x" + "cd" * 32
SENDER = "42516209ad4797a78a5dee81fdafee1fb4ee6835"
RECEIVER = "a0" + "11" * 31
DEST_TX_HASH = "0x" + "3c" * 32
DEST_BLOCK_HASH = "0x" + "ff" * 32


def burn_data(amount: int) -> str:
    return "0x" + "0" * 32 + format(amount, "032x")


def burn_log(
    amount: int = 150_000_000,
    block_number: Any = "0x64",
    address: str = CONTRACT,
    event: str = BURN_EVENT,
    removed: Any = False,
) -> dict[str, Any]:
    return {
        "address": address,
        "topics": [event, "0x" + "0" * 24 + SENDER, "0x" + RECEIVER],
        "data": burn_data(amount),
        "blockNumber": block_number,
        "removed": removed,
    }


def other_log() -> dict[str, Any]:
    return {
        "address": CONTRACT,
        "topics": ["0x" + "01" * 32],
        "data": "0x",
        "blockNumber": "0x64",
    }


def receipt(logs: list | None = None, **overrides) -> dict[str, Any]:
    data = {
        "status": "0x1",
        "to": CONTRACT,
        "from": "0x" + SENDER,
        "input": BURN_SELECTOR + "00" * 64,
        "transactionHash": TX_HASH,
        "blockHash": BLOCK_HASH,
        "blockNumber": "0x64",
        "logs": [burn_log()] if logs is None else logs,
    }
    data.update(overrides)
    return data


def relay_source_info(**overrides) -> dict[str, Any]:
    data = {
        "ethTxHash": TX_HASH,
        "ethBlockHash": BLOCK_HASH,
        "ethAddress": "0x" + SENDER.upper(),
        "aionAddress": "0x" + RECEIVER,
        "ethBlockNumber": 100,
        # 1.5 coins at 18 decimals
        "aionTransferAmount": format(1_500_000_000_000_000_000, "x"),
    }
    data.update(overrides)
    return data


def relay_destination_info(**overrides) -> dict[str, Any]:
    data = {
        "aionTxHash": DEST_TX_HASH,
        "aionBlockHash": DEST_BLOCK_HASH,
        "aionBlockNumber": 1000,
    }
    data.update(overrides)
    return data


def relay_batch(
    state: str | None = "NOT_FOUND",
    source_info: dict | None = None,
    destination_info: dict | None = None,
    destination_tip: Any = None,
) -> RelayBatch:
    return RelayBatch.model_validate(
        {
            "transaction": {
                "state": state,
                "ethInfo": source_info,
                "aionInfo": destination_info,
            },
            "status": {"aion": {"latestBlockNumber": destination_tip}},
        }
    )


def make_record(
    stage: TransferStage = TransferStage.SOURCE_SUBMITTED, tx_hash: str = TX_HASH
) -> TransferRecord:
    source = SourceChainInfo(
        sender=SENDER,
        receiver=RECEIVER,
        amount="1.5",
        tx_hash=tx_hash[2:] if tx_hash.startswith("0x") else tx_hash,
        block_number=100,
        block_hash=BLOCK_HASH[2:],
        origin=InfoOrigin.RELAY,
    )
    destination = None
    if stage in (TransferStage.DESTINATION_SUBMITTED, TransferStage.FINALIZED):
        destination = DestinationChainInfo(
            tx_hash=DEST_TX_HASH[2:], block_number=1000, block_hash=DEST_BLOCK_HASH[2:]
        )
    return TransferRecord(
        stage=stage,
        source=source,
        destination=destination,
        finality=FinalityCounter.undefined(),
    )


class FakeBackend(ChainBackend):
    def __init__(self, name: str, receipt=None, chain_tip: int = 0, error=None):
        self.name = name
        self.receipt = receipt
        self.chain_tip = chain_tip
        self.error = error
        self.calls: list[str] = []
        self.queried: list[str] = []

    async def get_receipt(self, tx_hash):
        self.calls.append("get_receipt")
        self.queried.append(tx_hash)
        if self.error is not None:
            raise self.error
        return self.receipt

    async def get_chain_tip(self):
        self.calls.append("get_chain_tip")
        if self.error is not None:
            raise self.error
        return self.chain_tip


class FakeRelay:
    def __init__(self, batch: RelayBatch | None = None, error: Exception | None = None):
        self.batch = batch
        self.error = error
        self.calls = 0
        self.queried: list[str] = []

    async def get_batch(self, tx_hash):
        self.calls += 1
        self.queried.append(tx_hash)
        if self.error is not None:
            raise self.error
        return self.batch

    async def aclose(self):
        return None


class ScriptedTracker:
    """Stands in for ``BridgeTracker``; each resolve pops the next scripted outcome."""

    def __init__(self, settings: TrackerSettings, outcomes: list):
        self.settings = settings
        self.outcomes = list(outcomes)
        self.calls = 0

    async def resolve(self, tx_hash):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if callable(outcome):
            outcome = await outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
