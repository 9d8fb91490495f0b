"""Rich-based rendering for claudemonitor."""

from __future__ import annotations

from datetime import datetime

from rich.console import Group
from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from claudemonitor.config.settings import Config
from claudemonitor.errors.types import REMEDIATION
from claudemonitor.models import ExtraUsage
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import Loading
from claudemonitor.models import RefreshState
from claudemonitor.models import TokenDataPoint
from claudemonitor.models import UsageBucket
from claudemonitor.models import UtilizationLevel
from claudemonitor.models import format_reset_countdown


def render_usage_bar(
    utilization: float,
    width: int = 20,
    color: str | None = None,
) -> Text:
    """Render a usage progress bar.

    Args:
        utilization: Usage percentage; values past 100 fill the bar
        width: Bar width in characters
        color: Optional color override
    """
    filled = min(width, max(0, int(utilization * width // 100)))
    bar = "█" * filled + "░" * (width - filled)
    return Text(bar, style=color or "default")


def format_bucket_line(
    name: str,
    bucket: UsageBucket,
    level: UtilizationLevel,
    now: datetime | None = None,
) -> Text:
    """Format one quota window as name, bar, percentage and reset countdown."""
    text = Text()
    text.append(f"{name:<16} ", style="dim")
    text.append_text(render_usage_bar(bucket.utilization, color=level.value))
    text.append(f" {bucket.utilization:>5.1f}%", style="bold")

    countdown = format_reset_countdown(bucket.time_until_reset(now))
    if countdown:
        text.append(f"   resets in {countdown}", style="dim")

    return text


def format_extra_usage(extra: ExtraUsage) -> Text | None:
    """Format extra usage credits, or None when disabled."""
    if not extra.is_enabled:
        return None

    text = Text()
    text.append(f"{'Extra usage':<16} ", style="dim")
    if extra.used_credits is not None and extra.monthly_limit is not None:
        remaining = extra.monthly_limit - extra.used_credits
        text.append(f"${extra.used_credits:.2f}", style="yellow")
        text.append(f" / ${extra.monthly_limit:.2f}", style="dim")
        text.append(f" (${remaining:.2f} remaining)", style="bold yellow")
    elif extra.utilization is not None:
        text.append(f"{extra.utilization:.1f}%", style="yellow")
    else:
        text.append("enabled", style="yellow")
    return text


def render_state(
    state: RefreshState,
    config: Config,
    last_updated: datetime | None = None,
    now: datetime | None = None,
) -> RenderableType:
    """Render the current refresh state as a panel."""
    match state:
        case Loading():
            return Panel(Text("Loading usage...", style="dim"), title="Claude usage")

        case Failed(kind=kind, message=message):
            body = Text(message, style="red")
            if remediation := REMEDIATION.get(kind):
                body.append(f"\n{remediation}", style="dim")
            return Panel(body, title="Claude usage", border_style="red")

        case Loaded(snapshot=snapshot):
            lines = [
                format_bucket_line(
                    "Session (5h)",
                    snapshot.five_hour,
                    config.level_for(snapshot.five_hour.utilization, "five_hour"),
                    now,
                ),
                format_bucket_line(
                    "All models (7d)",
                    snapshot.seven_day,
                    config.level_for(snapshot.seven_day.utilization, "seven_day"),
                    now,
                ),
            ]
            for name, bucket in (
                ("Opus (7d)", snapshot.seven_day_opus),
                ("Sonnet (7d)", snapshot.seven_day_sonnet),
            ):
                if bucket is not None:
                    level = config.level_for(bucket.utilization, "seven_day")
                    lines.append(format_bucket_line(name, bucket, level, now))

            if snapshot.extra_usage is not None:
                if extra := format_extra_usage(snapshot.extra_usage):
                    lines.append(extra)

            subtitle = None
            if last_updated is not None:
                subtitle = f"updated {last_updated.astimezone():%H:%M:%S}"
            return Panel(Group(*lines), title="Claude usage", subtitle=subtitle)


def render_history(points: tuple[TokenDataPoint, ...] | list[TokenDataPoint]) -> Table:
    """Render a token time series as a table."""
    table = Table(title="Token history", show_edge=False)
    table.add_column("Time", style="dim")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Total", justify="right", style="bold")

    for point in points:
        table.add_row(
            f"{point.timestamp.astimezone():%Y-%m-%d %H:%M}",
            f"{point.input_tokens:,}",
            f"{point.output_tokens:,}",
            f"{point.total_tokens:,}",
        )

    return table
