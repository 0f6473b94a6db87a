import logging
from functools import partial
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from ..config import NetworkConfig
from ..errors import ServiceError, ServiceErrorCode
from ..models import ReceiptAndChainTip
from .backends import ChainBackend, ExplorerBackend, RpcBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailoverChainClient:
    """Issues every call against the backends in priority order until one answers."""

    def __init__(self, backends: Sequence[ChainBackend]) -> None:
        if len(backends) == 0:
            raise ValueError("at least one chain backend must be configured")
        self.backends = list(backends)

    async def request(
        self,
        calls: Sequence[Callable[[], Awaitable[T]]],
        labels: Sequence[str] | None = None,
    ) -> T:
        if len(calls) == 0:
            raise ValueError("invalid failover list provided")

        for index, call in enumerate(calls):
            label = labels[index] if labels else str(index)
            try:
                return await call()
            except Exception as e:
                logger.warning(
                    f"Chain backend [{label}] at index {index} failed to respond: {e!r}. "
                    f"Attempting index {index + 1}"
                )

        logger.error(f"Failover list of {len(calls)} chain backends exhausted")
        raise ServiceError(
            ServiceErrorCode.SOURCE_API_CALL_FAILURE, "no chain backend available"
        )

    def _fan_out(self, method: str, *args: Any) -> list[Callable[[], Awaitable[Any]]]:
        return [partial(getattr(backend, method), *args) for backend in self.backends]

    @property
    def _labels(self) -> list[str]:
        return [backend.name for backend in self.backends]

    async def get_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.request(self._fan_out("get_receipt", tx_hash), self._labels)

    async def get_chain_tip(self) -> int:
        return await self.request(self._fan_out("get_chain_tip"), self._labels)

    async def get_receipt_and_chain_tip(self, tx_hash: str) -> ReceiptAndChainTip:
        return await self.request(
            self._fan_out("get_receipt_and_chain_tip", tx_hash), self._labels
        )

    async def aclose(self) -> None:
        for backend in self.backends:
            await backend.aclose()


def build_chain_client(network: NetworkConfig) -> FailoverChainClient:
    backends: list[ChainBackend] = [
        RpcBackend(str(url), timeout=network.backend_timeout)
        for url in network.rpc_endpoints
    ]
    if network.explorer_url is not None:
        backends.append(
            ExplorerBackend(
                str(network.explorer_url),
                api_key=network.explorer_api_key,
                timeout=network.backend_timeout,
            )
        )
    return FailoverChainClient(backends)
