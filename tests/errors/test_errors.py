"""Tests for errors/ (error kinds, HTTP and network classification)."""

from __future__ import annotations

import httpx
import pytest

from claudemonitor.errors import REMEDIATION
from claudemonitor.errors import classify_http_status
from claudemonitor.errors import classify_network_error
from claudemonitor.errors.types import (
    CredentialNotFound,
    CredentialParseError,
    CredentialStoreError,
    DecodingError,
    ErrorKind,
    HttpError,
    NetworkError,
    TokenExpired,
    UsageMonitorError,
)


class TestErrorTypes:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (CredentialNotFound(), ErrorKind.CREDENTIAL_NOT_FOUND),
            (CredentialStoreError(-25293), ErrorKind.CREDENTIAL_STORE),
            (CredentialParseError(), ErrorKind.CREDENTIAL_PARSE),
            (TokenExpired(), ErrorKind.TOKEN_EXPIRED),
            (NetworkError(), ErrorKind.NETWORK),
            (HttpError(500), ErrorKind.HTTP),
            (DecodingError(), ErrorKind.DECODING),
        ],
    )
    def test_kinds(self, error: UsageMonitorError, kind: ErrorKind):
        """Each error carries its kind and a remediation hint."""
        assert isinstance(error, UsageMonitorError)
        assert error.kind == kind
        assert error.remediation == REMEDIATION[kind]

    def test_every_kind_has_remediation(self):
        assert set(REMEDIATION) == set(ErrorKind)

    def test_default_messages(self):
        assert "credentials not found" in str(CredentialNotFound())
        assert str(TokenExpired()) == "Token expired. Please restart Claude Code."

    def test_custom_message(self):
        error = CredentialNotFound("nothing stored")

        assert error.message == "nothing stored"

    def test_store_error_keeps_code(self):
        error = CredentialStoreError(-25293)

        assert error.code == -25293
        assert "-25293" in str(error)

    def test_http_error_keeps_status(self):
        error = HttpError(502)

        assert error.status == 502
        assert str(error) == "HTTP error: 502"


class TestClassifyHttpStatus:
    """Tests for classify_http_status."""

    def test_401_is_token_expired(self):
        assert isinstance(classify_http_status(401), TokenExpired)

    @pytest.mark.parametrize("status", [403, 404, 429, 500, 503])
    def test_other_statuses_are_http_errors(self, status: int):
        error = classify_http_status(status)

        assert isinstance(error, HttpError)
        assert error.status == status

    def test_rate_limit_message(self):
        assert "rate limited" in str(classify_http_status(429))


class TestClassifyNetworkError:
    """Tests for classify_network_error."""

    def test_connect_timeout(self):
        error = classify_network_error(httpx.ConnectTimeout("timed out"))

        assert isinstance(error, NetworkError)
        assert "connection timed out" in str(error)

    def test_read_timeout(self):
        error = classify_network_error(httpx.ReadTimeout("timed out"))

        assert "waiting for response" in str(error)

    def test_connection_refused(self):
        error = classify_network_error(httpx.ConnectError("[Errno 111] Connection refused"))

        assert "refused" in str(error)

    def test_dns_failure(self):
        error = classify_network_error(
            httpx.ConnectError("[Errno -2] Name or service not known")
        )

        assert "resolve" in str(error)

    def test_other_transport_error(self):
        error = classify_network_error(httpx.RemoteProtocolError("peer closed"))

        assert isinstance(error, NetworkError)
        assert "peer closed" in str(error)
