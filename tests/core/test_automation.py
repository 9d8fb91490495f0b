"""Tests for core/automation.py (threshold-triggered script launch)."""

from __future__ import annotations

import asyncio
import os
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from claudemonitor.config.settings import AutomationConfig
from claudemonitor.core.automation import TRIGGER_ENV_VAR
from claudemonitor.core.automation import AutomationTrigger
from claudemonitor.core.automation import build_command
from claudemonitor.core.automation import should_trigger

CREATE_SUBPROCESS = "claudemonitor.core.automation.asyncio.create_subprocess_exec"


def make_process(returncode: int = 0, output: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.pid = 4242
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(output, None))
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.fixture
def config() -> AutomationConfig:
    return AutomationConfig(
        enabled=True,
        five_hour_threshold=80.0,
        seven_day_threshold=50.0,
        script_path="/home/dev/bin/pause-jobs.sh",
    )


class TestBuildCommand:
    """Tests for build_command."""

    @pytest.mark.parametrize(
        ("script", "expected"),
        [
            ("/x/hook.sh", ["/bin/bash", "/x/hook.sh"]),
            ("/x/hook.bash", ["/bin/bash", "/x/hook.bash"]),
            ("/x/hook.zsh", ["/bin/zsh", "/x/hook.zsh"]),
            ("/x/hook.py", ["/usr/bin/env", "python3", "/x/hook.py"]),
            ("/x/hook.PY", ["/usr/bin/env", "python3", "/x/hook.PY"]),
            ("/x/hook", ["/x/hook"]),
            ("/x/hook.rb", ["/x/hook.rb"]),
        ],
    )
    def test_dispatch_by_extension(self, script, expected):
        assert build_command(script) == expected


class TestShouldTrigger:
    """Tests for should_trigger."""

    def test_high_session_low_week(self, config):
        assert should_trigger(85.0, 40.0, config)

    def test_thresholds_are_strict(self, config):
        assert not should_trigger(80.0, 40.0, config)
        assert not should_trigger(85.0, 50.0, config)

    def test_high_week_blocks(self, config):
        assert not should_trigger(95.0, 70.0, config)


class TestAutomationTrigger:
    """Tests for AutomationTrigger."""

    @pytest.mark.asyncio
    async def test_throttled_between_runs(self, config, clock):
        """Fires once, not again 10s later, again after the interval."""
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=make_process())) as create:
            assert await trigger.evaluate(85.0, 40.0, config) is True
            clock.advance(10)
            assert await trigger.evaluate(85.0, 40.0, config) is False
            clock.advance(51)
            assert await trigger.evaluate(85.0, 40.0, config) is True

        assert create.await_count == 2

    @pytest.mark.asyncio
    async def test_command_and_environment(self, config, clock):
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=make_process())) as create:
            await trigger.evaluate(85.0, 40.0, config)

        args = create.await_args.args
        assert args == ("/bin/bash", "/home/dev/bin/pause-jobs.sh")
        assert create.await_args.kwargs["env"][TRIGGER_ENV_VAR] == "1"
        assert trigger.last_execution == clock()

    @pytest.mark.asyncio
    async def test_disabled(self, config, clock):
        config = AutomationConfig(enabled=False, script_path=config.script_path)
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock()) as create:
            assert await trigger.evaluate(99.0, 0.0, config) is False

        create.assert_not_awaited()
        assert trigger.last_execution is None

    @pytest.mark.asyncio
    async def test_no_script(self, clock):
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock()) as create:
            assert await trigger.evaluate(99.0, 0.0, AutomationConfig(enabled=True)) is False

        create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_conditions_not_met_does_not_start_throttle(self, config, clock):
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=make_process())):
            assert await trigger.evaluate(50.0, 40.0, config) is False
            assert await trigger.evaluate(85.0, 40.0, config) is True

    @pytest.mark.asyncio
    async def test_non_zero_exit_still_counts_as_launched(self, config, clock):
        trigger = AutomationTrigger(clock=clock)
        process = make_process(returncode=3, output=b"boom")

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=process)):
            assert await trigger.evaluate(85.0, 40.0, config) is True

    @pytest.mark.asyncio
    async def test_launch_failure(self, config, clock):
        """A script that cannot be started reports False but is still throttled."""
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(side_effect=FileNotFoundError())):
            assert await trigger.evaluate(85.0, 40.0, config) is False

        assert trigger.last_execution is not None

    @pytest.mark.asyncio
    async def test_timeout_kills_script(self, config, clock):
        trigger = AutomationTrigger(clock=clock, timeout=0.01)
        process = make_process()
        process.returncode = None

        async def hang():
            await asyncio.sleep(10)

        process.communicate = AsyncMock(side_effect=hang)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=process)):
            assert await trigger.evaluate(85.0, 40.0, config) is True

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancellation_kills_script(self, config, clock):
        """Cancelling evaluate() mid-script kills and reaps the child."""
        trigger = AutomationTrigger(clock=clock)
        process = make_process()
        process.returncode = None
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.sleep(10)

        process.communicate = AsyncMock(side_effect=hang)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=process)):
            task = asyncio.create_task(trigger.evaluate(85.0, 40.0, config))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.skipif(not os.path.exists("/bin/bash"), reason="needs /bin/bash")
    async def test_cancellation_stops_real_script(self, clock, tmp_path):
        script = tmp_path / "hook.sh"
        script.write_text("exec sleep 30\n")
        config = AutomationConfig(enabled=True, script_path=str(script))
        trigger = AutomationTrigger(clock=clock)
        launched = []
        real_exec = asyncio.create_subprocess_exec

        async def spawn(*args, **kwargs):
            process = await real_exec(*args, **kwargs)
            launched.append(process)
            return process

        with patch(CREATE_SUBPROCESS, new=spawn):
            task = asyncio.create_task(trigger.evaluate(85.0, 40.0, config))
            while not launched:
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        process = launched[0]
        assert process.returncode is not None
        with pytest.raises(ProcessLookupError):
            os.kill(process.pid, 0)

    @pytest.mark.asyncio
    async def test_reset_throttle(self, config, clock):
        trigger = AutomationTrigger(clock=clock)

        with patch(CREATE_SUBPROCESS, new=AsyncMock(return_value=make_process())) as create:
            await trigger.evaluate(85.0, 40.0, config)
            trigger.reset_throttle()
            await trigger.evaluate(85.0, 40.0, config)

        assert create.await_count == 2
