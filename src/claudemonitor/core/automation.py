"""Launch a user script when usage crosses configured thresholds."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
from pathlib import Path

from claudemonitor.config.settings import AutomationConfig
from claudemonitor.core.gate import AUTOMATION_INTERVAL
from claudemonitor.core.gate import Throttle
from claudemonitor.core.gate import utc_now
from claudemonitor.core.logging_config import get_logger

logger = get_logger(__name__)

TRIGGER_ENV_VAR = "CLAUDE_USAGE_MONITOR_TRIGGER"
SCRIPT_TIMEOUT = 300.0  # seconds

# Interpreter argv prefix by lowercase file extension
INTERPRETERS: dict[str, tuple[str, ...]] = {
    "sh": ("/bin/bash",),
    "bash": ("/bin/bash",),
    "zsh": ("/bin/zsh",),
    "py": ("/usr/bin/env", "python3"),
}


def build_command(script_path: str) -> list[str]:
    """Command line that runs script_path, chosen by its extension."""
    extension = Path(script_path).suffix.lstrip(".").lower()
    interpreter = INTERPRETERS.get(extension)
    if interpreter is None:
        return [script_path]
    return [*interpreter, script_path]


def should_trigger(
    five_hour_usage: float, seven_day_usage: float, config: AutomationConfig
) -> bool:
    """Short-window usage is high while long-window usage is still low."""
    return (
        five_hour_usage > config.five_hour_threshold
        and seven_day_usage < config.seven_day_threshold
    )


class AutomationTrigger:
    """Runs the automation script at most once per AUTOMATION_INTERVAL."""

    def __init__(
        self,
        interval: timedelta = AUTOMATION_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
        timeout: float = SCRIPT_TIMEOUT,
    ) -> None:
        self._throttle = Throttle(interval=interval, clock=clock)
        self.timeout = timeout

    @property
    def last_execution(self) -> datetime | None:
        return self._throttle.last_attempt

    async def evaluate(
        self,
        five_hour_usage: float,
        seven_day_usage: float,
        config: AutomationConfig,
    ) -> bool:
        """Launch the script if enabled, conditions hold and not throttled.

        Returns:
            True if the script was launched, regardless of its exit status.
        """
        if not config.enabled:
            return False
        if not config.script_path:
            return False
        if not should_trigger(five_hour_usage, seven_day_usage, config):
            return False
        if self._throttle.is_throttled():
            logger.debug("automation_throttled", script=config.script_path)
            return False

        self._throttle.record()
        return await self._execute(config.script_path)

    def reset_throttle(self) -> None:
        """Forget the last execution."""
        self._throttle.reset()

    async def _execute(self, script_path: str) -> bool:
        command = build_command(script_path)
        env = {**os.environ, TRIGGER_ENV_VAR: "1"}

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=env,
            )
        except OSError as e:
            logger.warning("automation_launch_failed", script=script_path, error=str(e))
            return False

        logger.info("automation_launched", script=script_path, pid=process.pid)

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), self.timeout)
        except TimeoutError:
            logger.warning(
                "automation_timed_out", script=script_path, timeout_s=self.timeout
            )
            return True
        finally:
            # Timed out or cancelled: never leave the script running
            if process.returncode is None:
                await self._kill(process)

        output = stdout.decode(errors="replace").strip() if stdout else ""
        if process.returncode != 0:
            logger.warning(
                "automation_script_failed",
                script=script_path,
                exit_code=process.returncode,
                output=output,
            )
        else:
            logger.info("automation_script_completed", script=script_path)

        return True

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            # Exited before the kill landed
            pass
        await process.wait()
        logger.debug("automation_script_killed", pid=process.pid)
