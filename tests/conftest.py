"""Pytest configuration and shared fixtures for claudemonitor tests."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
import structlog

from claudemonitor.config import settings as settings_module
from claudemonitor.models import UsageBucket, UsageSnapshot


class FakeClock:
    """Manually advanced clock for throttle and cutoff tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def utc_now() -> datetime:
    """Fixed UTC datetime for consistent testing."""
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(utc_now: datetime) -> FakeClock:
    """Clock starting at utc_now."""
    return FakeClock(utc_now)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at an empty directory and reset the config singleton."""
    monkeypatch.setenv("CLAUDEMONITOR_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("CLAUDEMONITOR_SCRIPT_PATH", raising=False)
    monkeypatch.delenv("CLAUDEMONITOR_WINDOW_HOURS", raising=False)
    monkeypatch.setattr(settings_module, "_config", None)
    yield


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging setup done by CLI invocations."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def usage_payload() -> dict:
    """Usage endpoint response with every bucket present."""
    return {
        "five_hour": {
            "utilization": 42.0,
            "resets_at": "2025-01-15T15:00:00.123456+00:00",
        },
        "seven_day": {
            "utilization": 17.5,
            "resets_at": "2025-01-20T00:00:00+00:00",
        },
        "seven_day_opus": {"utilization": 3.0, "resets_at": None},
        "seven_day_sonnet": {
            "utilization": 9.0,
            "resets_at": "2025-01-20T00:00:00.000000+00:00",
        },
        "extra_usage": {
            "is_enabled": True,
            "monthly_limit": 50.0,
            "used_credits": 12.5,
            "utilization": 25.0,
        },
    }


@pytest.fixture
def usage_body(usage_payload: dict) -> bytes:
    return json.dumps(usage_payload).encode()


@pytest.fixture
def sample_snapshot(utc_now: datetime) -> UsageSnapshot:
    """Snapshot with just the required buckets."""
    return UsageSnapshot(
        five_hour=UsageBucket(utilization=42.0, resets_at=utc_now + timedelta(hours=3)),
        seven_day=UsageBucket(utilization=17.5, resets_at=utc_now + timedelta(days=5)),
    )
