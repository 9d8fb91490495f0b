"""Data models for claudemonitor.

Defines the usage snapshot returned by the usage endpoint, the token
time series derived from local logs, and the published refresh state.
"""

from __future__ import annotations

from datetime import UTC
from datetime import datetime
from datetime import timedelta
from enum import StrEnum

import msgspec

from claudemonitor.errors.types import DecodingError
from claudemonitor.errors.types import ErrorKind

# Strict form carries fractional seconds ("2026-01-17T06:59:59.846865+00:00")
STRICT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, with or without fractional seconds.

    The strict fractional-seconds format is tried first, falling back to
    the lenient ISO parser. Naive results are assumed to be UTC.

    Raises:
        ValueError: If neither parser accepts the value.
    """
    try:
        parsed = datetime.strptime(value, STRICT_TIMESTAMP_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class UsageBucket(msgspec.Struct, frozen=True):
    """A quota window with its utilization percentage and reset time."""

    utilization: float  # 0-100, may exceed 100 when over quota
    resets_at: datetime | None = None

    def time_until_reset(self, now: datetime | None = None) -> timedelta | None:
        """Return time remaining until reset."""
        if self.resets_at is None:
            return None
        now = now or datetime.now(self.resets_at.tzinfo)
        return max(timedelta(0), self.resets_at - now)


class ExtraUsage(msgspec.Struct, frozen=True):
    """Pay-as-you-go usage beyond the plan quota."""

    is_enabled: bool
    monthly_limit: float | None = None
    used_credits: float | None = None
    utilization: float | None = None


class UsageSnapshot(msgspec.Struct, frozen=True):
    """One immutable usage reading."""

    five_hour: UsageBucket
    seven_day: UsageBucket
    seven_day_opus: UsageBucket | None = None
    seven_day_sonnet: UsageBucket | None = None
    extra_usage: ExtraUsage | None = None


# Wire shapes: timestamps stay as strings so parsing follows parse_timestamp
class _BucketPayload(msgspec.Struct):
    utilization: float
    resets_at: str | None = None


class _SnapshotPayload(msgspec.Struct):
    five_hour: _BucketPayload
    seven_day: _BucketPayload
    seven_day_opus: _BucketPayload | None = None
    seven_day_sonnet: _BucketPayload | None = None
    extra_usage: ExtraUsage | None = None


def _convert_bucket(payload: _BucketPayload | None) -> UsageBucket | None:
    if payload is None:
        return None
    resets_at = None
    if payload.resets_at:
        resets_at = parse_timestamp(payload.resets_at)
    return UsageBucket(utilization=payload.utilization, resets_at=resets_at)


def decode_snapshot(data: bytes | str) -> UsageSnapshot:
    """Decode a usage response body into a UsageSnapshot.

    Raises:
        DecodingError: If the body is not valid JSON, is missing a required
            bucket, or carries an unparseable timestamp.
    """
    try:
        payload = msgspec.json.decode(data, type=_SnapshotPayload)
        return UsageSnapshot(
            five_hour=_convert_bucket(payload.five_hour),
            seven_day=_convert_bucket(payload.seven_day),
            seven_day_opus=_convert_bucket(payload.seven_day_opus),
            seven_day_sonnet=_convert_bucket(payload.seven_day_sonnet),
            extra_usage=payload.extra_usage,
        )
    except (msgspec.DecodeError, ValueError) as e:
        raise DecodingError(f"Failed to decode usage response: {e}") from e


def encode_snapshot(snapshot: UsageSnapshot) -> bytes:
    """Encode a snapshot back into the usage response JSON shape."""
    return msgspec.json.encode(snapshot)


class TokenDataPoint(msgspec.Struct, frozen=True):
    """Token usage at a point (or bucket start) in time."""

    timestamp: datetime
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class TokenSplitPolicy(msgspec.Struct, frozen=True):
    """Estimated input/output split for sources that only report totals."""

    input_share: float

    def split(self, total_tokens: int) -> tuple[int, int]:
        """Return (input, output) estimates that sum to total_tokens."""
        estimated_input = int(total_tokens * self.input_share)
        return estimated_input, total_tokens - estimated_input


# The daily aggregate cache has no per-direction counts; 40/60 is an estimate
DAILY_SPLIT_ESTIMATE = TokenSplitPolicy(input_share=0.4)


# Refresh state: exactly one variant is published at a time
class Loading(msgspec.Struct, frozen=True, tag="loading"):
    """A refresh cycle is in progress and nothing has been published yet."""


class Loaded(msgspec.Struct, frozen=True, tag="loaded"):
    """The last cycle produced a snapshot."""

    snapshot: UsageSnapshot


class Failed(msgspec.Struct, frozen=True, tag="failed"):
    """The last cycle failed to produce a snapshot."""

    kind: ErrorKind
    message: str


RefreshState = Loading | Loaded | Failed


class UtilizationLevel(StrEnum):
    """Severity band for a utilization value."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


def format_reset_countdown(delta: timedelta | None) -> str:
    """Format reset time as countdown string."""
    if delta is None:
        return ""

    total_seconds = int(delta.total_seconds())
    if total_seconds <= 0:
        return "now"

    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    if days > 0:
        return f"{days}d {hours}h"
    elif hours > 0:
        return f"{hours}h {minutes}m"
    else:
        return f"{minutes}m"


def status_text(state: RefreshState) -> str:
    """Compact one-line summary of a refresh state."""
    match state:
        case Loading():
            return "..."
        case Loaded(snapshot=snapshot):
            five_hour = int(snapshot.five_hour.utilization)
            seven_day = int(snapshot.seven_day.utilization)
            return f"5h: {five_hour}% | 7d: {seven_day}%"
        case Failed():
            return "!"
