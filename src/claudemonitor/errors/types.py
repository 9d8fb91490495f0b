"""Error types and classifications."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Error kinds surfaced by the credential and API layers."""

    CREDENTIAL_NOT_FOUND = "credential_not_found"
    CREDENTIAL_STORE = "credential_store"
    CREDENTIAL_PARSE = "credential_parse"
    TOKEN_EXPIRED = "token_expired"
    NETWORK = "network"
    HTTP = "http"
    DECODING = "decoding"


REMEDIATION: dict[ErrorKind, str] = {
    ErrorKind.CREDENTIAL_NOT_FOUND: (
        "Log in with Claude Code ('claude'), then run 'claudemonitor usage --refresh'."
    ),
    ErrorKind.CREDENTIAL_STORE: (
        "Unlock the keychain and allow access, then run 'claudemonitor usage --refresh'."
    ),
    ErrorKind.CREDENTIAL_PARSE: (
        "Log in again with Claude Code to rewrite the stored credentials."
    ),
    ErrorKind.TOKEN_EXPIRED: (
        "Log in again with Claude Code, then run 'claudemonitor usage --refresh'."
    ),
    ErrorKind.NETWORK: "Check your internet connection and try again.",
    ErrorKind.HTTP: "The usage service may be unavailable. Try again later.",
    ErrorKind.DECODING: "The usage API may have changed. Check for a claudemonitor update.",
}


class UsageMonitorError(Exception):
    """Base class for recoverable claudemonitor errors."""

    kind: ErrorKind
    default_message = "Usage monitor error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def remediation(self) -> str | None:
        return REMEDIATION.get(self.kind)


class CredentialNotFound(UsageMonitorError):
    kind = ErrorKind.CREDENTIAL_NOT_FOUND
    default_message = (
        "Claude Code credentials not found. "
        "Please ensure Claude Code is installed and logged in."
    )


class CredentialStoreError(UsageMonitorError):
    kind = ErrorKind.CREDENTIAL_STORE

    def __init__(self, code: int | None = None, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or f"Credential store lookup failed with code {code}.")


class CredentialParseError(UsageMonitorError):
    kind = ErrorKind.CREDENTIAL_PARSE
    default_message = "OAuth token not found in stored credentials."


class TokenExpired(UsageMonitorError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Token expired. Please restart Claude Code."


class NetworkError(UsageMonitorError):
    kind = ErrorKind.NETWORK
    default_message = "Network error."


class HttpError(UsageMonitorError):
    kind = ErrorKind.HTTP

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"HTTP error: {status}")


class DecodingError(UsageMonitorError):
    kind = ErrorKind.DECODING
    default_message = "Failed to decode response."


def classify_http_status(status_code: int) -> UsageMonitorError:
    """Map a non-200 status code to the error it represents."""
    if status_code == 401:
        return TokenExpired()
    if status_code == 403:
        return HttpError(
            status_code, "HTTP error: 403 (account may lack usage access)"
        )
    if status_code == 429:
        return HttpError(status_code, "HTTP error: 429 (rate limited)")
    return HttpError(status_code)
