"""Error handling for claudemonitor."""

from claudemonitor.errors.network import classify_network_error
from claudemonitor.errors.types import (
    CredentialNotFound,
    CredentialParseError,
    CredentialStoreError,
    DecodingError,
    REMEDIATION,
    ErrorKind,
    HttpError,
    NetworkError,
    TokenExpired,
    UsageMonitorError,
    classify_http_status,
)

__all__ = [
    # Core types
    "ErrorKind",
    "REMEDIATION",
    "UsageMonitorError",
    "CredentialNotFound",
    "CredentialStoreError",
    "CredentialParseError",
    "TokenExpired",
    "NetworkError",
    "HttpError",
    "DecodingError",
    # Classification functions
    "classify_http_status",
    "classify_network_error",
]
