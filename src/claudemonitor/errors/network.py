"""Network error classification utilities.

Turns httpx transport exceptions into NetworkError with a specific message.
"""

from __future__ import annotations

import httpx

from claudemonitor.errors.types import NetworkError


def classify_network_error(error: Exception) -> NetworkError:
    """Classify a transport exception into a NetworkError.

    Args:
        error: Exception raised by httpx while sending the request

    Returns:
        NetworkError describing what went wrong
    """
    if isinstance(error, httpx.ConnectTimeout):
        return NetworkError("Network error: connection timed out")

    if isinstance(error, httpx.ReadTimeout):
        return NetworkError("Network error: request timed out waiting for response")

    if isinstance(error, httpx.TimeoutException):
        return NetworkError("Network error: request timed out")

    if isinstance(error, httpx.ConnectError):
        message = str(error).lower()
        if "connection refused" in message:
            return NetworkError("Network error: connection refused by server")
        if "dns" in message or "hostname" in message or "name or service" in message:
            return NetworkError("Network error: could not resolve server address")
        return NetworkError("Network error: failed to connect to server")

    return NetworkError(f"Network error: {error}")

