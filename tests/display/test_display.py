"""Tests for display/ (rich rendering and JSON conversion)."""

from __future__ import annotations

from datetime import timedelta

from rich.console import Console

from claudemonitor.config.settings import Config
from claudemonitor.display.json import history_to_list
from claudemonitor.display.json import state_to_dict
from claudemonitor.display.rich import format_extra_usage
from claudemonitor.display.rich import render_history
from claudemonitor.display.rich import render_state
from claudemonitor.display.rich import render_usage_bar
from claudemonitor.errors.types import ErrorKind
from claudemonitor.models import ExtraUsage
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import Loading
from claudemonitor.models import TokenDataPoint
from claudemonitor.models import UsageBucket
from claudemonitor.models import UsageSnapshot


def render_text(renderable) -> str:
    console = Console(width=100, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestRenderUsageBar:
    """Tests for render_usage_bar."""

    def test_half_full(self):
        assert render_usage_bar(50, width=10).plain == "█████░░░░░"

    def test_over_quota_clamped(self):
        assert render_usage_bar(140, width=10).plain == "█" * 10

    def test_negative_clamped(self):
        assert render_usage_bar(-5, width=10).plain == "░" * 10


class TestRenderState:
    """Tests for render_state."""

    def test_loading(self):
        assert "Loading" in render_text(render_state(Loading(), Config()))

    def test_failed_shows_remediation(self):
        state = Failed(kind=ErrorKind.TOKEN_EXPIRED, message="Token expired.")

        text = render_text(render_state(state, Config()))

        assert "Token expired." in text
        assert "Log in again" in text

    def test_loaded(self, utc_now):
        snapshot = UsageSnapshot(
            five_hour=UsageBucket(utilization=81.0, resets_at=utc_now + timedelta(hours=2)),
            seven_day=UsageBucket(utilization=12.0),
            seven_day_opus=UsageBucket(utilization=4.0),
            extra_usage=ExtraUsage(is_enabled=False),
        )

        text = render_text(
            render_state(Loaded(snapshot=snapshot), Config(), last_updated=utc_now, now=utc_now)
        )

        assert "81.0%" in text
        assert "resets in 2h 0m" in text
        assert "Opus (7d)" in text
        assert "Sonnet (7d)" not in text
        assert "Extra usage" not in text
        assert "updated" in text


class TestFormatExtraUsage:
    """Tests for format_extra_usage."""

    def test_disabled(self):
        assert format_extra_usage(ExtraUsage(is_enabled=False)) is None

    def test_credits(self):
        text = format_extra_usage(
            ExtraUsage(is_enabled=True, monthly_limit=50.0, used_credits=12.5)
        )

        assert "$12.50" in text.plain
        assert "$37.50 remaining" in text.plain


class TestJsonConversion:
    """Tests for display/json.py."""

    def test_loaded(self, sample_snapshot, utc_now):
        data = state_to_dict(Loaded(snapshot=sample_snapshot), utc_now)

        assert data["five_hour"]["utilization"] == 42.0
        assert data["seven_day_opus"] is None
        assert data["last_updated"] == utc_now.isoformat()

    def test_failed(self):
        data = state_to_dict(Failed(kind=ErrorKind.HTTP, message="HTTP error: 500"))

        assert data["error"]["kind"] == "http"
        assert data["error"]["message"] == "HTTP error: 500"
        assert data["error"]["remediation"]

    def test_loading(self):
        assert state_to_dict(Loading()) == {"state": "loading"}

    def test_history(self, utc_now):
        points = [TokenDataPoint(timestamp=utc_now, input_tokens=3, output_tokens=4)]

        assert history_to_list(points) == [
            {
                "timestamp": utc_now.isoformat(),
                "input_tokens": 3,
                "output_tokens": 4,
                "total_tokens": 7,
            }
        ]

    def test_history_table(self, utc_now):
        points = [TokenDataPoint(timestamp=utc_now, input_tokens=3000, output_tokens=4)]

        assert "3,004" in render_text(render_history(points))
