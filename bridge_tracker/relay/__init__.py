from .client import RelayClient
from .models import (
    RelayBalance,
    RelayBatch,
    RelayStatus,
    RelayTipStatus,
    RelayTransaction,
)

__all__ = [
    "RelayClient",
    "RelayBalance",
    "RelayBatch",
    "RelayStatus",
    "RelayTipStatus",
    "RelayTransaction",
]
