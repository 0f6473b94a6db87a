from enum import Enum
from typing import Any, TypeAlias

from eth_typing import BlockNumber
from pydantic import BaseModel, ConfigDict, Field, model_validator


class BundleState(Enum):
    NOT_FOUND = "NOT_FOUND"  # source tx not picked up by the relay yet
    STORED = "STORED"  # bundle stored by the relay
    SUBMITTED = "SUBMITTED"  # bundle sealed in a destination block


class TransferStage(Enum):
    SOURCE_SUBMITTED = "SOURCE_SUBMITTED"
    RELAY_PROCESSING = "RELAY_PROCESSING"
    DESTINATION_SUBMITTED = "DESTINATION_SUBMITTED"
    FINALIZED = "FINALIZED"

    @property
    def rank(self) -> int:
        return list(TransferStage).index(self)


class FinalityChain(Enum):
    UNDEFINED = "UNDEFINED"
    SOURCE_CHAIN = "SOURCE_CHAIN"
    DESTINATION_CHAIN = "DESTINATION_CHAIN"


class InfoOrigin(Enum):
    RELAY = "RELAY"
    CHAIN = "CHAIN"


TxHash: TypeAlias = str
Amount: TypeAlias = str


class SourceChainInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: str
    receiver: str
    amount: Amount
    tx_hash: TxHash
    block_number: BlockNumber = Field(ge=0)
    block_hash: str
    origin: InfoOrigin


class DestinationChainInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: TxHash
    block_number: BlockNumber = Field(ge=0)
    block_hash: str


class FinalityCounter(BaseModel):
    """Blocks elapsed since inclusion on whichever chain is the bottleneck."""

    model_config = ConfigDict(frozen=True)

    chain: FinalityChain = FinalityChain.UNDEFINED
    count: int | None = None
    target: int | None = None

    @model_validator(mode="after")
    def _check_tag(self):
        if (self.chain == FinalityChain.UNDEFINED) != (self.count is None):
            raise ValueError("count must be set exactly when the chain is defined")
        return self

    @classmethod
    def undefined(cls) -> "FinalityCounter":
        return cls()

    @property
    def remaining(self) -> int | None:
        if self.count is None or self.target is None:
            return None
        return max(self.target - self.count, 0)


class TransferRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: TransferStage
    source: SourceChainInfo
    destination: DestinationChainInfo | None = None
    finality: FinalityCounter = Field(default_factory=FinalityCounter.undefined)


class ReceiptAndChainTip(BaseModel):
    model_config = ConfigDict(frozen=True)

    chain_tip: BlockNumber = Field(ge=0)
    receipt: dict[str, Any] | None = None
