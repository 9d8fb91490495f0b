"""Access token retrieval from the system keyring.

Claude Code keeps its OAuth credentials as a generic password named
"Claude Code-credentials" scoped to the current user. The stored value is
a JSON document: {"claudeAiOauth": {"accessToken": "...", ...}}.

Reading the keychain can trigger an interactive authorization prompt, so
lookups are cached for the life of the process and throttled: after an
attempt, another one is refused for CREDENTIAL_COOLDOWN.
"""

from __future__ import annotations

import asyncio
import getpass
import json
import re
from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
from pathlib import Path

import keyring
from keyring.errors import NoKeyringError

from claudemonitor.config.credentials import read_credential
from claudemonitor.config.settings import CredentialsConfig
from claudemonitor.config.settings import DEFAULT_KEYCHAIN_SERVICE
from claudemonitor.core.gate import CREDENTIAL_COOLDOWN
from claudemonitor.core.gate import Throttle
from claudemonitor.core.gate import utc_now
from claudemonitor.core.logging_config import get_logger
from claudemonitor.errors.types import CredentialNotFound
from claudemonitor.errors.types import CredentialParseError
from claudemonitor.errors.types import CredentialStoreError

logger = get_logger(__name__)

# Matches the token even when the surrounding JSON was cut off by the writer
ACCESS_TOKEN_PATTERN = re.compile(r'"accessToken"\s*:\s*"((?:[^"\\]|\\.)*)"')
_ESCAPE_PATTERN = re.compile(r'\\(["\\])')


def extract_access_token(payload: str) -> str:
    """Pull the OAuth access token out of a stored credential payload.

    Tries a structured JSON parse first; if that fails or finds no token,
    falls back to a pattern match against the raw text.

    Raises:
        CredentialParseError: If neither path yields a token.
    """
    text = payload.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict):
        oauth = data.get("claudeAiOauth")
        if isinstance(oauth, dict):
            token = oauth.get("accessToken")
            if isinstance(token, str) and token:
                return token

    match = ACCESS_TOKEN_PATTERN.search(text)
    if match and match.group(1):
        logger.debug("credential_payload_fallback_parse")
        return _ESCAPE_PATTERN.sub(r"\1", match.group(1))

    raise CredentialParseError()


def _error_code(error: Exception) -> int | None:
    """Best-effort numeric status carried by a keyring backend error."""
    for arg in error.args:
        if isinstance(arg, int):
            return arg
    return getattr(error, "errno", None)


class SecretStore:
    """Cached, throttled access to the Claude Code OAuth token."""

    def __init__(
        self,
        service: str = DEFAULT_KEYCHAIN_SERVICE,
        account: str | None = None,
        credentials_file: Path | None = None,
        cooldown: timedelta = CREDENTIAL_COOLDOWN,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.service = service
        self.account = account or getpass.getuser()
        self.credentials_file = credentials_file
        self._cached_token: str | None = None
        self._throttle = Throttle(interval=cooldown, clock=clock)
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: CredentialsConfig) -> SecretStore:
        """Build a store from the credentials section of the config."""
        return cls(
            service=config.service,
            account=config.account,
            credentials_file=Path(config.credentials_file).expanduser(),
        )

    @property
    def has_cached_token(self) -> bool:
        return self._cached_token is not None

    @property
    def last_fetch_attempt(self) -> datetime | None:
        return self._throttle.last_attempt

    async def get_token(self, force_refresh: bool = False) -> str:
        """Return the access token, reading the store only when needed.

        Args:
            force_refresh: Ignore the cached token and read the store again.

        Raises:
            CredentialNotFound: No credential stored, or the last store
                access was less than the cooldown ago.
            CredentialStoreError: The store itself failed.
            CredentialParseError: The stored payload holds no token.
        """
        async with self._lock:
            if not force_refresh and self._cached_token is not None:
                return self._cached_token

            if self._throttle.is_throttled():
                remaining = self._throttle.remaining()
                logger.debug(
                    "credential_lookup_throttled",
                    remaining_s=remaining.total_seconds() if remaining else 0,
                )
                raise CredentialNotFound(
                    "Credential lookup skipped: the store was accessed moments ago."
                )

            self._throttle.record()
            logger.debug("credential_lookup", service=self.service)
            payload = await asyncio.to_thread(self._read_payload)

            token = extract_access_token(payload)
            self._cached_token = token
            return token

    def clear_cache(self) -> None:
        """Drop the cached token so the next call reads the store."""
        self._cached_token = None

    def reset_throttle(self) -> None:
        """Allow the next store access immediately."""
        self._throttle.reset()

    def _read_payload(self) -> str:
        """Read the raw credential payload. Blocking."""
        store_error: Exception | None = None

        try:
            value = keyring.get_password(self.service, self.account)
        except Exception as e:
            # Backends raise their own error types; locked or missing
            # keychains still leave the credentials file to try
            store_error = e
            value = None

        if value:
            return value

        if self.credentials_file is not None:
            try:
                content = read_credential(self.credentials_file)
            except OSError as e:
                raise CredentialStoreError(
                    _error_code(e), f"Failed to read {self.credentials_file}: {e}"
                ) from e
            if content:
                return content.decode("utf-8", errors="replace")

        if store_error is not None and not isinstance(store_error, NoKeyringError):
            raise CredentialStoreError(
                _error_code(store_error),
                f"Credential store lookup failed: {store_error}",
            ) from store_error

        raise CredentialNotFound()
