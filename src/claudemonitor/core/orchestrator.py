"""Periodic refresh of usage, token history and automation."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

from claudemonitor.auth.secret_store import SecretStore
from claudemonitor.config.settings import Config
from claudemonitor.config.settings import get_config
from claudemonitor.core.api import UsageAPIClient
from claudemonitor.core.automation import AutomationTrigger
from claudemonitor.core.gate import utc_now
from claudemonitor.core.history import LogAggregator
from claudemonitor.core.logging_config import Timer
from claudemonitor.core.logging_config import get_logger
from claudemonitor.errors.types import UsageMonitorError
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import Loading
from claudemonitor.models import RefreshState
from claudemonitor.models import TokenDataPoint
from claudemonitor.models import UsageBucket
from claudemonitor.models import status_text

logger = get_logger(__name__)

StateListener = Callable[[RefreshState], None]


class RefreshOrchestrator:
    """Runs refresh cycles one at a time and publishes their results.

    A cycle fetches a usage snapshot, then refreshes token history and
    evaluates the automation trigger against that snapshot. Published
    values are replaced wholesale, never mutated.
    """

    def __init__(
        self,
        api_client: UsageAPIClient,
        log_aggregator: LogAggregator,
        automation: AutomationTrigger,
        settings: Callable[[], Config] = get_config,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.api_client = api_client
        self.log_aggregator = log_aggregator
        self.automation = automation
        self.settings = settings
        self.clock = clock

        self._state: RefreshState = Loading()
        self._last_updated: datetime | None = None
        self._token_history: tuple[TokenDataPoint, ...] = ()
        self._refreshing = False
        self._listeners: list[StateListener] = []
        self._task: asyncio.Task | None = None

    @classmethod
    def from_config(cls, config: Config | None = None) -> RefreshOrchestrator:
        """Wire up the components from configuration."""
        settings = get_config if config is None else (lambda: config)
        config = settings()
        secret_store = SecretStore.from_config(config.credentials)
        return cls(
            api_client=UsageAPIClient(secret_store),
            log_aggregator=LogAggregator(config.paths.claude_path()),
            automation=AutomationTrigger(),
            settings=settings,
        )

    @property
    def secret_store(self) -> SecretStore:
        return self.api_client.secret_store

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def last_updated(self) -> datetime | None:
        return self._last_updated

    @property
    def token_history(self) -> tuple[TokenDataPoint, ...]:
        return self._token_history

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def status_text(self) -> str:
        return status_text(self._state)

    def _bucket(self, name: str) -> UsageBucket | None:
        if isinstance(self._state, Loaded):
            return getattr(self._state.snapshot, name)
        return None

    @property
    def five_hour_utilization(self) -> float | None:
        bucket = self._bucket("five_hour")
        return bucket.utilization if bucket else None

    @property
    def seven_day_utilization(self) -> float | None:
        bucket = self._bucket("seven_day")
        return bucket.utilization if bucket else None

    @property
    def opus_utilization(self) -> float | None:
        bucket = self._bucket("seven_day_opus")
        return bucket.utilization if bucket else None

    @property
    def sonnet_utilization(self) -> float | None:
        bucket = self._bucket("seven_day_sonnet")
        return bucket.utilization if bucket else None

    @property
    def five_hour_resets_at(self) -> datetime | None:
        bucket = self._bucket("five_hour")
        return bucket.resets_at if bucket else None

    @property
    def seven_day_resets_at(self) -> datetime | None:
        bucket = self._bucket("seven_day")
        return bucket.resets_at if bucket else None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call listener with every newly published state.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            # Safe to call more than once
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: RefreshState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                # A broken display must not stop the refresh cycle
                logger.exception("state_listener_failed", listener=repr(listener))

    async def refresh(self) -> bool:
        """Run one refresh cycle unless one is already in flight.

        Returns:
            True if this call ran a cycle, False if it was dropped.
        """
        # Check-and-set with no await in between
        if self._refreshing:
            logger.debug("refresh_skipped", reason="in_flight")
            return False
        self._refreshing = True

        try:
            with Timer(logger, "refresh_cycle") as timer:
                await self._run_cycle()
                timer.complete(state=type(self._state).__name__.lower())
        finally:
            self._refreshing = False

        return True

    async def manual_refresh(self) -> bool:
        """Force a full re-authentication attempt, then refresh."""
        if self._refreshing:
            logger.debug("refresh_skipped", reason="in_flight")
            return False

        self.api_client.reset_token_state()
        self.secret_store.clear_cache()
        self.secret_store.reset_throttle()
        return await self.refresh()

    async def _run_cycle(self) -> None:
        try:
            snapshot = await self.api_client.fetch_usage()
        except UsageMonitorError as e:
            logger.warning("usage_fetch_failed", kind=str(e.kind), error=str(e))
            self._publish(Failed(kind=e.kind, message=str(e)))
            return

        self._last_updated = self.clock()
        self._publish(Loaded(snapshot=snapshot))

        config = self.settings()
        history = await self.log_aggregator.fetch_history(
            config.graph.time_window_hours
        )
        self._token_history = tuple(history)

        await self.automation.evaluate(
            snapshot.five_hour.utilization,
            snapshot.seven_day.utilization,
            config.automation,
        )

    async def run(self, interval: float | None = None) -> None:
        """Refresh now and then every interval seconds until cancelled."""
        while True:
            try:
                await self.refresh()
            except Exception:
                # Unexpected bugs shouldn't stop the schedule
                logger.exception("refresh_cycle_crashed")
            await asyncio.sleep(interval or self.settings().fetch.refresh_interval)

    def start(self, interval: float | None = None) -> asyncio.Task:
        """Start the periodic schedule as a background task."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(interval))
        return self._task

    async def stop(self) -> None:
        """Cancel the periodic schedule."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
