import asyncio
import logging
from typing import Any, Mapping

import httpx
from aiohttp import ClientTimeout
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import TransactionNotFound

from ..errors import ChainApiError
from ..models import ReceiptAndChainTip
from ..utils import hex_prefix, parse_unsigned

logger = logging.getLogger(__name__)


def merge_transaction(
    receipt: Mapping[str, Any] | None, transaction: Mapping[str, Any] | None
) -> dict[str, Any] | None:
    """Copy ``input`` (and a missing ``to``/``from``) from the transaction onto its receipt."""
    if receipt is None:
        return None
    merged = dict(receipt)
    if transaction is not None:
        merged["input"] = transaction.get("input")
        if merged.get("to") is None:
            merged["to"] = transaction.get("to")
        if merged.get("from") is None:
            merged["from"] = transaction.get("from")
    return merged


class ChainBackend:
    """One source-chain data provider. Subclasses implement receipt and tip lookups."""

    name = "backend"

    async def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        raise NotImplementedError()

    async def get_chain_tip(self) -> int:
        raise NotImplementedError()

    async def get_receipt_and_chain_tip(self, tx_hash: str) -> ReceiptAndChainTip:
        chain_tip, receipt = await asyncio.gather(
            self.get_chain_tip(), self.get_receipt(tx_hash)
        )
        return ReceiptAndChainTip(chain_tip=chain_tip, receipt=receipt)

    async def aclose(self) -> None:
        return None


class RpcBackend(ChainBackend):
    def __init__(self, url: str, timeout: float = 5.0, w3: AsyncWeb3 | None = None):
        self.name = url
        if w3 is None:
            provider = AsyncHTTPProvider(
                url,
                request_kwargs={"timeout": ClientTimeout(total=timeout)},
                exception_retry_configuration=None,
            )
            w3 = AsyncWeb3(provider)
        self._w3 = w3

    async def _get_raw_receipt(self, tx_hash: str):
        try:
            return await self._w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    async def _get_raw_transaction(self, tx_hash: str):
        try:
            return await self._w3.eth.get_transaction(tx_hash)
        except TransactionNotFound:
            return None

    async def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        tx_hash = hex_prefix(tx_hash)
        receipt, transaction = await asyncio.gather(
            self._get_raw_receipt(tx_hash), self._get_raw_transaction(tx_hash)
        )
        merged = merge_transaction(receipt, transaction)
        logger.debug(f"Receipt from [{self.name}]: {merged}")
        return merged

    async def get_chain_tip(self) -> int:
        return parse_unsigned(await self._w3.eth.get_block_number())

    async def aclose(self) -> None:
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()


class ExplorerBackend(ChainBackend):
    """Etherscan-style ``module=proxy`` HTTP API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.name = base_url
        self.base_url = base_url
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def _request(self, action: str, **params) -> Any:
        query = {"module": "proxy", "action": action, **params}
        if self.api_key:
            query["apikey"] = self.api_key
        try:
            response = await self._client.get(self.base_url, params=query)
        except httpx.HTTPError as e:
            raise ChainApiError(f"{self.name}: {action} transport failure: {e!r}") from e

        if response.status_code != 200:
            raise ChainApiError(
                f"{self.name}: {action} returned status {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ChainApiError(f"{self.name}: {action} returned a non-json body") from e

        if not isinstance(data, dict):
            raise ChainApiError(f"{self.name}: {action} returned a bad response")
        if data.get("error") is not None:
            raise ChainApiError(f"{self.name}: {action} responded with error {data['error']}")
        if "result" not in data:
            raise ChainApiError(f"{self.name}: {action} returned no result")
        return data["result"]

    async def _request_object(self, action: str, tx_hash: str) -> dict[str, Any] | None:
        result = await self._request(action, txhash=hex_prefix(tx_hash))
        # rate limiting and similar failures arrive as a string result
        if result is not None and not isinstance(result, dict):
            raise ChainApiError(f"{self.name}: {action} returned {result!r}")
        return result

    async def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        receipt, transaction = await asyncio.gather(
            self._request_object("eth_getTransactionReceipt", tx_hash),
            self._request_object("eth_getTransactionByHash", tx_hash),
        )
        merged = merge_transaction(receipt, transaction)
        logger.debug(f"Receipt from [{self.name}]: {merged}")
        return merged

    async def get_chain_tip(self) -> int:
        result = await self._request("eth_blockNumber")
        try:
            return parse_unsigned(result)
        except ValueError as e:
            raise ChainApiError(f"{self.name}: malformed block number {result!r}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
