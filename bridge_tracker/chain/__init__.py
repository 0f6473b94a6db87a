from .backends import ChainBackend, ExplorerBackend, RpcBackend, merge_transaction
from .failover import FailoverChainClient, build_chain_client

__all__ = [
    "ChainBackend",
    "ExplorerBackend",
    "RpcBackend",
    "merge_transaction",
    "FailoverChainClient",
    "build_chain_client",
]
