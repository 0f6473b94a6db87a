import logging
from typing import Any, TypeVar

import httpx
import pydantic

from ..errors import RelayApiError
from ..utils import parse_hex_int, scale_units
from .models import (
    RelayBalance,
    RelayBatch,
    RelayStatus,
    RelayTipStatus,
    RelayTransaction,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

STATUS_PATH = "/status"
TRANSACTION_PATH = "/transaction"
BATCH_PATH = "/batch"
BALANCE_PATH = "/balance"
TX_HASH_PARAM = "ethTxHash"


class RelayClient:
    """Client of the relay's REST API. Every response is validated before it is returned."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        balance_timeout: float = 5.0,
        source_decimals: int = 8,
        destination_decimals: int = 18,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url
        self.balance_timeout = balance_timeout
        self.source_decimals = source_decimals
        self.destination_decimals = destination_decimals
        self._client = client or httpx.AsyncClient(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )

    async def _request(
        self, path: str, params: dict[str, str] | None = None, timeout: float | None = None
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.get(path, params=params, **kwargs)
        except httpx.HTTPError as e:
            raise RelayApiError(f"{path}: transport failure: {e!r}") from e

        if response.status_code != 200:
            raise RelayApiError(f"{path}: non-200 response ({response.status_code})")
        try:
            data = response.json()
        except ValueError as e:
            raise RelayApiError(f"{path}: response body is not json") from e
        if not data or not isinstance(data, dict):
            raise RelayApiError(f"{path}: empty or malformed body")
        return data

    @staticmethod
    def _validate(model: type[M], data: Any, path: str) -> M:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning(f"Malformed api response from {path}: {data}")
            raise RelayApiError(f"malformed api response from {path}") from e

    async def get_status(self) -> RelayStatus:
        data = await self._request(STATUS_PATH)
        return self._validate(RelayStatus, data, STATUS_PATH)

    async def get_transaction(self, tx_hash: str) -> RelayTransaction:
        data = await self._request(TRANSACTION_PATH, {TX_HASH_PARAM: tx_hash})
        return self._validate(RelayTransaction, data, TRANSACTION_PATH)

    async def get_batch(self, tx_hash: str) -> RelayBatch:
        data = await self._request(BATCH_PATH, {TX_HASH_PARAM: tx_hash})
        if data.get("transaction") is None or data.get("status") is None:
            raise RelayApiError(
                "batch response failed to respond with correct datastructure"
            )

        transaction = self._validate(RelayTransaction, data["transaction"], BATCH_PATH)
        status = None
        try:
            status = self._validate(RelayTipStatus, data["status"], BATCH_PATH)
        except RelayApiError as e:
            logger.warning(f"Failed to process the status response: {e}")

        return RelayBatch(transaction=transaction, status=status)

    async def is_enough_balance(self, requested_base_units: int | str) -> bool:
        """True iff the relay holds strictly more than the requested amount.

        The relay balance is reported in destination-chain base units, the request
        in source-token base units; both are compared in exact human units.
        """
        data = await self._request(BALANCE_PATH, timeout=self.balance_timeout)
        if data.get("balance") is None:
            logger.warning(f"API call response [{BALANCE_PATH}]: {data}")
            raise RelayApiError(f"malformed api response from {BALANCE_PATH}")
        balance = self._validate(RelayBalance, data, BALANCE_PATH)

        try:
            available = scale_units(
                parse_hex_int(balance.balance), self.destination_decimals
            )
        except (TypeError, ValueError) as e:
            raise RelayApiError(f"failed to parse balance from {BALANCE_PATH}") from e

        try:
            requested = scale_units(
                parse_hex_int(requested_base_units), self.source_decimals
            )
        except (TypeError, ValueError) as e:
            raise ValueError("invalid input balance provided") from e

        is_enough = available > requested
        logger.info(
            f"Requested balance: {requested}, available balance: {available}, "
            f"enough: {is_enough}"
        )
        return is_enough

    async def aclose(self) -> None:
        await self._client.aclose()
