from .errors import ReceiptError, ServiceError, TrackerError, ValidationError
from .models import (
    BundleState,
    DestinationChainInfo,
    FinalityChain,
    FinalityCounter,
    SourceChainInfo,
    TransferRecord,
    TransferStage,
)
from .poller import SessionOutcome, TransferPoller
from .store import TrackStore
from .tracker import BridgeTracker, track_transfer

__all__ = [
    "ReceiptError",
    "ServiceError",
    "TrackerError",
    "ValidationError",
    "BundleState",
    "DestinationChainInfo",
    "FinalityChain",
    "FinalityCounter",
    "SourceChainInfo",
    "TransferRecord",
    "TransferStage",
    "SessionOutcome",
    "TransferPoller",
    "TrackStore",
    "BridgeTracker",
    "track_transfer",
]
