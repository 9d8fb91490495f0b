"""Credential acquisition for claudemonitor."""

from claudemonitor.auth.secret_store import SecretStore, extract_access_token

__all__ = [
    "SecretStore",
    "extract_access_token",
]
