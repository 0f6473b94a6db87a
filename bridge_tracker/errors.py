from enum import Enum


class ValidationErrorCode(Enum):
    INVALID_TX_HASH = "INVALID_TX_HASH"


class ReceiptErrorCode(Enum):
    RECEIPT_NOT_AVAILABLE = "RECEIPT_NOT_AVAILABLE"
    RECEIPT_WITH_FAILED_STATUS = "RECEIPT_WITH_FAILED_STATUS"
    RECEIPT_INCORRECT_TO_ADDR = "RECEIPT_INCORRECT_TO_ADDR"
    RECEIPT_NO_BURN_LOG = "RECEIPT_NO_BURN_LOG"
    RECEIPT_NON_MAINCHAIN = "RECEIPT_NON_MAINCHAIN"
    RECEIPT_ZERO_VALUE = "RECEIPT_ZERO_VALUE"
    RECEIPT_NOT_BURN_FUNCTION = "RECEIPT_NOT_BURN_FUNCTION"


class ServiceErrorCode(Enum):
    UNDEFINED = "SERVICE_ERROR_UNDEFINED"
    SOURCE_API_CALL_FAILURE = "SOURCE_API_CALL_FAILURE"
    SOURCE_API_INCONSISTENT_DATA = "SOURCE_API_INCONSISTENT_DATA"
    RELAY_API_CALL_FAILURE = "RELAY_API_CALL_FAILURE"
    RELAY_API_INCONSISTENT_DATA = "RELAY_API_INCONSISTENT_DATA"
    RELAY_STATE_REGRESSION = "RELAY_STATE_REGRESSION"


class TrackerError(Exception):
    """Base class of every error the tracker reports to its callers."""

    def __init__(self, code: Enum, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or code.value)


class ValidationError(TrackerError):
    """The queried identifier is not a well-formed transaction hash."""

    def __init__(self, code=ValidationErrorCode.INVALID_TX_HASH, message=None):
        super().__init__(code, message)


class ReceiptError(TrackerError):
    """The on-chain evidence for the transfer is absent or does not qualify."""


class ServiceError(TrackerError):
    """An upstream service failed or returned inconsistent data."""


class RelayApiError(Exception):
    """Raised by the relay client on transport or response validation failure."""


class ChainApiError(Exception):
    """Raised by a chain backend when a call fails or returns garbage."""
