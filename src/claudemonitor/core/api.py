"""Client for the Claude OAuth usage endpoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx

from claudemonitor.auth.secret_store import SecretStore
from claudemonitor.core.http import get_http_client
from claudemonitor.core.logging_config import get_logger
from claudemonitor.errors.network import classify_network_error
from claudemonitor.errors.types import TokenExpired
from claudemonitor.errors.types import classify_http_status
from claudemonitor.models import UsageSnapshot
from claudemonitor.models import decode_snapshot

logger = get_logger(__name__)

USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
USER_AGENT = "claude-code/2.0.31"
ANTHROPIC_BETA = "oauth-2025-04-20"


class UsageAPIClient:
    """Fetch usage snapshots, retrying once with a fresh token on 401.

    After the retry is also rejected, the client latches: further calls
    fail with TokenExpired without touching the network or the credential
    store until reset_token_state() is called.
    """

    def __init__(
        self,
        secret_store: SecretStore,
        http_client: httpx.AsyncClient | None = None,
        url: str = USAGE_URL,
    ) -> None:
        self.secret_store = secret_store
        self.url = url
        self._http_client = http_client
        self._token_expired = False

    @property
    def token_expired(self) -> bool:
        return self._token_expired

    def reset_token_state(self) -> None:
        """Clear the expiry latch (user-initiated refresh only)."""
        self._token_expired = False

    async def fetch_usage(self) -> UsageSnapshot:
        """Fetch the current usage snapshot.

        Raises:
            TokenExpired: The token was rejected twice, or the latch is set.
            NetworkError: The request could not be sent.
            HttpError: Any other non-200 status.
            DecodingError: The response body could not be decoded.
            CredentialNotFound, CredentialStoreError, CredentialParseError:
                The token could not be obtained.
        """
        if self._token_expired:
            raise TokenExpired()

        try:
            snapshot = await self._fetch(force_refresh=False)
        except TokenExpired:
            logger.info("usage_token_rejected", action="retry_with_fresh_token")
            try:
                snapshot = await self._fetch(force_refresh=True)
            except TokenExpired:
                self._token_expired = True
                logger.warning("usage_token_expired", latched=True)
                raise

        self._token_expired = False
        return snapshot

    def build_headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
            "anthropic-beta": ANTHROPIC_BETA,
            "Accept": "application/json",
        }

    async def _fetch(self, force_refresh: bool) -> UsageSnapshot:
        token = await self.secret_store.get_token(force_refresh=force_refresh)

        try:
            async with self._client() as client:
                response = await client.get(self.url, headers=self.build_headers(token))
        except httpx.TransportError as e:
            raise classify_network_error(e) from e

        if response.status_code == 200:
            return decode_snapshot(response.content)

        logger.debug("usage_request_failed", status_code=response.status_code)
        raise classify_http_status(response.status_code)

    @asynccontextmanager
    async def _client(self):
        if self._http_client is not None:
            yield self._http_client
        else:
            async with get_http_client() as client:
                yield client
