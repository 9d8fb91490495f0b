"""Token usage history derived from Claude Code's local logs.

Two sources, chosen by window size:

- windows up to 24 hours read the per-session JSONL event logs under
  ~/.claude/projects and aggregate assistant messages into 5-minute buckets;
- longer windows read the daily totals in ~/.claude/stats-cache.json,
  which only reports totals per model, so the input/output split is an
  estimate (DAILY_SPLIT_ESTIMATE).

History is best effort: unreadable files and malformed lines are skipped,
and any failure yields an empty series rather than an exception.
"""

from __future__ import annotations

import asyncio
import math
from collections import defaultdict
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path

import msgspec

from claudemonitor.config.paths import projects_dir
from claudemonitor.config.paths import stats_cache_file
from claudemonitor.core.gate import utc_now
from claudemonitor.core.logging_config import get_logger
from claudemonitor.models import DAILY_SPLIT_ESTIMATE
from claudemonitor.models import TokenDataPoint
from claudemonitor.models import TokenSplitPolicy
from claudemonitor.models import parse_timestamp

logger = get_logger(__name__)

# Windows longer than this use the daily aggregate cache
FINE_GRAINED_MAX_HOURS = 24.0
BUCKET_INTERVAL = timedelta(minutes=5)


# JSONL session records; unknown fields are ignored
class TokenUsage(msgspec.Struct):
    input_tokens: int | None = None
    output_tokens: int | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None


class MessageContent(msgspec.Struct):
    role: str | None = None
    usage: TokenUsage | None = None


class SessionRecord(msgspec.Struct):
    type: str | None = None
    timestamp: str | None = None
    message: MessageContent | None = None


# stats-cache.json
class DailyModelTokens(msgspec.Struct):
    date: str
    tokensByModel: dict[str, int] = {}


class StatsCacheFile(msgspec.Struct):
    version: int | None = None
    lastComputedDate: str | None = None
    dailyModelTokens: list[DailyModelTokens] | None = None


_record_decoder = msgspec.json.Decoder(SessionRecord)
_stats_decoder = msgspec.json.Decoder(StatsCacheFile)


def bucket_start(timestamp: datetime, interval: timedelta = BUCKET_INTERVAL) -> datetime:
    """Start of the fixed-width bucket containing timestamp (UTC)."""
    seconds = interval.total_seconds()
    start = math.floor(timestamp.timestamp() / seconds) * seconds
    return datetime.fromtimestamp(start, UTC)


def aggregate_into_buckets(
    points: Iterable[TokenDataPoint],
    interval: timedelta = BUCKET_INTERVAL,
) -> list[TokenDataPoint]:
    """Sum points into fixed-width time buckets, sorted by bucket start."""
    buckets: dict[datetime, list[int]] = defaultdict(lambda: [0, 0])

    for point in points:
        totals = buckets[bucket_start(point.timestamp, interval)]
        totals[0] += point.input_tokens
        totals[1] += point.output_tokens

    return [
        TokenDataPoint(timestamp=start, input_tokens=totals[0], output_tokens=totals[1])
        for start, totals in sorted(buckets.items())
    ]


def parse_session_line(line: str | bytes, cutoff: datetime) -> TokenDataPoint | None:
    """Turn one JSONL line into a data point, or None if it doesn't qualify."""
    try:
        record = _record_decoder.decode(line)
    except msgspec.DecodeError:
        return None

    if record.type != "assistant" or record.timestamp is None:
        return None
    if record.message is None or record.message.usage is None:
        return None

    try:
        timestamp = parse_timestamp(record.timestamp)
    except ValueError:
        return None
    if timestamp < cutoff:
        return None

    usage = record.message.usage
    input_tokens = max(usage.input_tokens or 0, 0)
    output_tokens = max(usage.output_tokens or 0, 0)
    if input_tokens + output_tokens == 0:
        return None

    return TokenDataPoint(
        timestamp=timestamp, input_tokens=input_tokens, output_tokens=output_tokens
    )


class LogAggregator:
    """Build token usage time series from Claude Code's local logs."""

    def __init__(
        self,
        claude_dir: Path | None = None,
        clock: Callable[[], datetime] = utc_now,
        split_policy: TokenSplitPolicy = DAILY_SPLIT_ESTIMATE,
    ) -> None:
        claude_dir = claude_dir or Path.home() / ".claude"
        self.projects_dir = projects_dir(claude_dir)
        self.stats_cache_path = stats_cache_file(claude_dir)
        self.clock = clock
        self.split_policy = split_policy

    async def fetch_history(self, window_hours: float) -> list[TokenDataPoint]:
        """Token usage over the last window_hours, oldest first. Never raises."""
        return await asyncio.to_thread(self.collect, window_hours)

    def collect(self, window_hours: float) -> list[TokenDataPoint]:
        """Blocking implementation of fetch_history."""
        try:
            cutoff = self.clock() - timedelta(hours=window_hours)
        except OverflowError:
            # Window reaches past the earliest representable time
            cutoff = datetime.min.replace(tzinfo=UTC)
        except ValueError:
            logger.debug("token_history_invalid_window", window_hours=window_hours)
            return []

        try:
            if window_hours <= FINE_GRAINED_MAX_HOURS:
                return self._from_session_logs(cutoff)
            return self._from_stats_cache(cutoff)
        except OSError as e:
            logger.debug("token_history_unavailable", error=str(e))
            return []

    def _from_session_logs(self, cutoff: datetime) -> list[TokenDataPoint]:
        points: list[TokenDataPoint] = []
        skipped_files = 0

        for path in self._session_files():
            try:
                points.extend(self._parse_session_file(path, cutoff))
            except (OSError, UnicodeDecodeError):
                skipped_files += 1

        if skipped_files:
            logger.debug("session_files_skipped", count=skipped_files)

        return aggregate_into_buckets(points)

    def _session_files(self) -> Iterator[Path]:
        if not self.projects_dir.is_dir():
            return
        for path in sorted(self.projects_dir.rglob("*.jsonl")):
            relative = path.relative_to(self.projects_dir)
            if any(part.startswith(".") for part in relative.parts):
                continue
            yield path

    def _parse_session_file(self, path: Path, cutoff: datetime) -> list[TokenDataPoint]:
        points = []
        with path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                point = parse_session_line(line, cutoff)
                if point is not None:
                    points.append(point)
        return points

    def _from_stats_cache(self, cutoff: datetime) -> list[TokenDataPoint]:
        if not self.stats_cache_path.exists():
            return []

        try:
            stats = _stats_decoder.decode(self.stats_cache_path.read_bytes())
        except msgspec.DecodeError as e:
            logger.debug("stats_cache_invalid", error=str(e))
            return []

        points = []
        for entry in stats.dailyModelTokens or []:
            try:
                # Day keys are local calendar dates
                day = datetime.strptime(entry.date, "%Y-%m-%d").astimezone()
            except ValueError:
                continue
            if day < cutoff:
                continue

            total = sum(max(tokens, 0) for tokens in entry.tokensByModel.values())
            input_tokens, output_tokens = self.split_policy.split(total)
            points.append(
                TokenDataPoint(
                    timestamp=day, input_tokens=input_tokens, output_tokens=output_tokens
                )
            )

        return sorted(points, key=lambda p: p.timestamp)
