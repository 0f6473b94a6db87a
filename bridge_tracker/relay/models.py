from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils import parse_nullable_unsigned


class _RelayModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SourceChainStatus(_RelayModel):
    finalized_block_number: int | None = Field(None, alias="finalizedBlockNumber")
    finalized_bundle_id: int | None = Field(None, alias="finalizedBundleId")

    @field_validator("finalized_block_number", "finalized_bundle_id", mode="before")
    @classmethod
    def _unsigned(cls, value):
        return parse_nullable_unsigned(value)


class DestinationChainStatus(_RelayModel):
    latest_block_number: int | None = Field(None, alias="latestBlockNumber")
    finalized_block_number: int | None = Field(None, alias="finalizedBlockNumber")
    finalized_bundle_id: int | None = Field(None, alias="finalizedBundleId")

    @field_validator(
        "latest_block_number",
        "finalized_block_number",
        "finalized_bundle_id",
        mode="before",
    )
    @classmethod
    def _unsigned(cls, value):
        return parse_nullable_unsigned(value)


class DestinationTip(_RelayModel):
    latest_block_number: int | None = Field(None, alias="latestBlockNumber")

    @field_validator("latest_block_number", mode="before")
    @classmethod
    def _unsigned(cls, value):
        return parse_nullable_unsigned(value)


class RelayStatus(_RelayModel):
    """``GET /status``: finalization progress on both chains."""

    source: SourceChainStatus = Field(alias="eth")
    destination: DestinationChainStatus = Field(alias="aion")


class RelayTipStatus(_RelayModel):
    """Status block carried by ``GET /batch``; only the destination tip is used."""

    destination: DestinationTip = Field(alias="aion")


class RelayTransaction(_RelayModel):
    state: str | None = None
    source_info: dict[str, Any] | None = Field(None, alias="ethInfo")
    destination_info: dict[str, Any] | None = Field(None, alias="aionInfo")


class RelayBatch(_RelayModel):
    transaction: RelayTransaction
    status: RelayTipStatus | None = None

    @property
    def destination_tip(self) -> int | None:
        if self.status is None:
            return None
        return self.status.destination.latest_block_number


class RelayBalance(_RelayModel):
    balance: str
