"""Stopwatch sessions that merge tracked time into a task's actual hours.

The transitions are plain functions over an immutable :class:`TimeSession`.
:class:`TimeTracker` owns the current session for one task, drives the
display tick on the running event loop and persists totals through an
async callback.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.log import get_logger
from core.settings import TIME_TRACKING
from datetime_utils import Clock, ensure_utc, utc_now


logger = get_logger("time_tracking")

PersistCallback = Callable[[str, float], Awaitable[bool]]
TickCallback = Callable[[float], None]


class TimerState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


class InvalidTransitionError(RuntimeError):
    def __init__(self, action: str, state: TimerState):
        super().__init__(f"Cannot {action} while {state.value.lower()}")
        self.action = action
        self.state = state


@dataclass(frozen=True)
class TimeSession:
    started_at: datetime
    state: TimerState = TimerState.RUNNING
    # Seconds banked by earlier running stretches.
    accumulated_seconds: float = 0.0
    resumed_at: Optional[datetime] = None


def start_session(now: datetime) -> TimeSession:
    now = ensure_utc(now)
    return TimeSession(started_at=now, state=TimerState.RUNNING, resumed_at=now)


def pause_session(session: TimeSession, now: datetime) -> TimeSession:
    if session.state != TimerState.RUNNING:
        raise InvalidTransitionError("pause", session.state)
    return replace(
        session,
        state=TimerState.PAUSED,
        accumulated_seconds=elapsed_seconds(session, now),
        resumed_at=None,
    )


def resume_session(session: TimeSession, now: datetime) -> TimeSession:
    if session.state != TimerState.PAUSED:
        raise InvalidTransitionError("resume", session.state)
    return replace(session, state=TimerState.RUNNING, resumed_at=ensure_utc(now))


def elapsed_seconds(session: TimeSession, now: datetime) -> float:
    """Total tracked seconds; frozen while the session is paused."""
    if session.state != TimerState.RUNNING or session.resumed_at is None:
        return session.accumulated_seconds
    running = (ensure_utc(now) - session.resumed_at).total_seconds()
    return session.accumulated_seconds + max(0.0, running)


def format_elapsed(seconds: float) -> str:
    """``M:SS`` below an hour, ``H:MM:SS`` from there on."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class StopStatus(str, Enum):
    SAVED = "SAVED"
    FAILED = "FAILED"
    NO_SESSION = "NO_SESSION"


@dataclass(frozen=True)
class StopResult:
    status: StopStatus
    elapsed_seconds: float = 0.0
    session_hours: float = 0.0
    total_hours: float = 0.0
    error: Optional[str] = None

    @property
    def saved(self) -> bool:
        return self.status == StopStatus.SAVED


@dataclass(frozen=True)
class BudgetStatus:
    total_hours: float
    estimated_hours: Optional[float]
    progress: Optional[float]
    over_budget: bool
    over_by: float


class TimeTracker:
    def __init__(
        self,
        task_id: str,
        persist: PersistCallback,
        *,
        actual_hours: float = 0.0,
        estimated_hours: Optional[float] = None,
        clock: Clock = utc_now,
        on_tick: Optional[TickCallback] = None,
        tick_interval_sec: float = TIME_TRACKING.tick_interval_sec,
    ) -> None:
        self.task_id = task_id
        self.actual_hours = float(actual_hours or 0.0)
        self.estimated_hours = estimated_hours
        self._persist = persist
        self._clock = clock
        self._on_tick = on_tick
        self._tick_interval = tick_interval_sec
        self._session: Optional[TimeSession] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._saving = False

    # ------------------------------------------------------------------
    # State
    @property
    def state(self) -> TimerState:
        return self._session.state if self._session else TimerState.IDLE

    @property
    def session(self) -> Optional[TimeSession]:
        return self._session

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def is_ticking(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def elapsed_seconds(self) -> float:
        if self._session is None:
            return 0.0
        return elapsed_seconds(self._session, self._clock())

    # ------------------------------------------------------------------
    # Transitions
    def start(self) -> None:
        if self._saving or self._session is not None:
            raise InvalidTransitionError("start", self.state)
        self._session = start_session(self._clock())
        self._start_ticking()
        logger.info("Timer started for task %s", self.task_id)

    def pause(self) -> None:
        if self._saving or self._session is None:
            raise InvalidTransitionError("pause", self.state)
        self._session = pause_session(self._session, self._clock())
        self._cancel_tick()
        logger.info("Timer paused for task %s at %.0fs", self.task_id, self._session.accumulated_seconds)

    def resume(self) -> None:
        if self._saving or self._session is None:
            raise InvalidTransitionError("resume", self.state)
        self._session = resume_session(self._session, self._clock())
        self._start_ticking()
        logger.info("Timer resumed for task %s", self.task_id)

    async def stop(self) -> StopResult:
        """Merge the session into actual hours and return to idle.

        The session survives a failed save so the caller can retry.
        """

        if self._session is None or self._saving:
            return StopResult(StopStatus.NO_SESSION, total_hours=self.actual_hours)

        self._cancel_tick()
        self._saving = True
        seconds = elapsed_seconds(self._session, self._clock())
        session_hours = seconds / 3600
        new_total = self.actual_hours + session_hours
        error: Optional[str] = None
        try:
            ok = bool(await self._persist(self.task_id, new_total))
        except Exception as exc:
            logger.error("Saving tracked time for task %s failed: %s", self.task_id, exc)
            ok = False
            error = str(exc)
        finally:
            self._saving = False

        if not ok:
            if self._session.state == TimerState.RUNNING:
                self._start_ticking()
            return StopResult(
                StopStatus.FAILED,
                elapsed_seconds=seconds,
                session_hours=session_hours,
                total_hours=self.actual_hours,
                error=error or "Persistence rejected the update",
            )

        self.actual_hours = new_total
        self._session = None
        logger.info("Timer stopped for task %s: +%.4fh (total %.4fh)", self.task_id, session_hours, new_total)
        return StopResult(
            StopStatus.SAVED,
            elapsed_seconds=seconds,
            session_hours=session_hours,
            total_hours=new_total,
        )

    async def set_manual_hours(self, value: float) -> bool:
        """Persist an absolute actual-hours value; the stopwatch is untouched."""

        if value < 0:
            raise ValueError("Actual hours cannot be negative")
        try:
            ok = bool(await self._persist(self.task_id, float(value)))
        except Exception as exc:
            logger.error("Saving manual hours for task %s failed: %s", self.task_id, exc)
            return False
        if ok:
            self.actual_hours = float(value)
        return ok

    # ------------------------------------------------------------------
    # Budget
    def budget_status(self) -> BudgetStatus:
        total = self.actual_hours + self.elapsed_seconds() / 3600
        estimated = self.estimated_hours
        if not estimated:
            return BudgetStatus(total, estimated, None, False, 0.0)
        over_by = max(0.0, total - estimated)
        return BudgetStatus(
            total_hours=total,
            estimated_hours=estimated,
            progress=total / estimated * 100,
            over_budget=total > estimated,
            over_by=over_by,
        )

    # ------------------------------------------------------------------
    # Ticking
    def _start_ticking(self) -> None:
        if self._on_tick is None or self.is_ticking:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; display tick disabled for task %s", self.task_id)
            return
        self._tick_task = loop.create_task(self._tick_worker())

    def _cancel_tick(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    async def _tick_worker(self) -> None:
        while self.state == TimerState.RUNNING:
            await asyncio.sleep(self._tick_interval)
            if self.state != TimerState.RUNNING:
                return
            try:
                self._on_tick(self.elapsed_seconds())
            except Exception as exc:
                logger.error("Tick callback failed for task %s: %s", self.task_id, exc)


def repository_persistence(repository) -> PersistCallback:
    """Wrap a synchronous ``set_actual_hours`` repository as an async callback."""

    async def persist(task_id: str, hours: float) -> bool:
        return await asyncio.to_thread(repository.set_actual_hours, task_id, hours)

    return persist


__all__ = [
    "BudgetStatus",
    "InvalidTransitionError",
    "PersistCallback",
    "StopResult",
    "StopStatus",
    "TimeSession",
    "TimeTracker",
    "TimerState",
    "elapsed_seconds",
    "format_elapsed",
    "pause_session",
    "repository_persistence",
    "resume_session",
    "start_session",
]
