from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import random
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import redis

from glucose_wars.core.engine import transition
from glucose_wars.core.events import (
    ClearAnnouncement,
    CountdownTick,
    EndSession,
    MovementTick,
    Pause,
    PlotTwistCheck,
    Resume,
    SessionEvent,
    SpawnTick,
)
from glucose_wars.core.models import SessionState
from glucose_wars.core.outcomes import AppliedEvent, PlotTwistStarted, SessionEnded
from glucose_wars.core.spawner import DEFAULT_PLAYFIELD, Playfield, spawn_interval_ms
from glucose_wars.difficulty import DifficultyProfile
from glucose_wars.randomness import RandomnessProvider, draw_or_fallback
from glucose_wars.streams import publish_messages, to_stream_messages

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionState], Awaitable[None]]

_LOOPS = ("countdown", "movement", "spawn")


@dataclass(frozen=True, slots=True)
class ClockConfig:
    countdown_s: float = 1.0
    movement_s: float = 0.032
    initial_burst_ms: tuple[int, ...] = (0, 400, 800)
    plot_twist_delay_s: tuple[float, float] = (15.0, 35.0)
    # None reads GLUCOSE_WARS_RANDOMNESS_TIMEOUT_S.
    randomness_timeout_s: float | None = None
    # Multiplies every wait; tests run sessions at a fraction of real time.
    time_scale: float = 1.0


class SessionClock:
    """Drives one session: fixed-rate loops, spawn cadence, twist delay, announcement expiry.

    Every timer and every external call goes through `dispatch`, which holds one
    lock around `transition`, so updates never interleave. Readers only ever see
    `state`, which is replaced (never mutated) after each update. Subscribers are
    fed from a separate task, so a slow watcher never holds up the timers.
    """

    def __init__(
        self,
        state: SessionState,
        *,
        profile: DifficultyProfile,
        rng: random.Random | None = None,
        config: ClockConfig | None = None,
        provider: RandomnessProvider | None = None,
        outbox: redis.Redis | None = None,
        playfield: Playfield = DEFAULT_PLAYFIELD,
    ):
        self.state = state
        self.profile = profile
        self.rng = rng or random.Random(state.seed)
        self.config = config or ClockConfig()
        self.provider = provider
        self.outbox = outbox
        self.playfield = playfield

        self._lock = asyncio.Lock()
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._subscribers: list[Subscriber] = []
        # Newest snapshot not yet handed to subscribers; one task drains it.
        self._outgoing: SessionState | None = None
        self._fanout: asyncio.Task[None] | None = None
        self._started = False
        self._announcement_id: int | None = None
        self._twist_nonce = 0
        # Loop-time deadline of each timer's current wait, and what was left of it at pause.
        self._due: dict[str, float] = {}
        self._carry: dict[str, float] = {}
        # Timer jitter has its own stream so reducer draws stay reproducible from the seed.
        self._jitter = random.Random(state.seed + 1)

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def started(self) -> bool:
        return self._started

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def running_timers(self) -> set[str]:
        return {name for name, task in self._tasks.items() if not task.done()}

    async def start(self) -> None:
        async with self._lock:
            if self._started or self.state.is_terminal():
                return
            self._started = True
            logger.info("Session %s started (%s/%s)", self.session_id, self.state.mode.value, self.profile.tier)
            self._reconcile(burst=True)

    async def dispatch(self, event: SessionEvent) -> AppliedEvent:
        async with self._lock:
            applied = transition(self.state, event, profile=self.profile, rng=self.rng, playfield=self.playfield)
            if not applied.state_changed:
                return applied

            self.state = applied.state
            self._publish(applied)
            # May cancel the calling timer, so nothing awaits under the lock after this.
            self._reconcile()
            self._notify(applied.state)
            return applied

    async def pause(self) -> AppliedEvent:
        applied = await self.dispatch(Pause())
        if applied.state_changed:
            logger.info("Session %s paused", self.session_id)
        return applied

    async def resume(self) -> AppliedEvent:
        applied = await self.dispatch(Resume())
        if applied.state_changed:
            logger.info("Session %s resumed", self.session_id)
        return applied

    async def end(self) -> AppliedEvent:
        return await self.dispatch(EndSession())

    async def stop(self) -> None:
        """Cancel every pending timer and wait for them to unwind."""

        tasks = [t for t in self._tasks.values() if t is not asyncio.current_task()]
        if self._fanout is not None:
            tasks.append(self._fanout)
            self._fanout = None
        self._tasks.clear()
        self._due.clear()
        self._carry.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _publish(self, applied: AppliedEvent) -> None:
        for n in applied.notifications:
            if isinstance(n, PlotTwistStarted):
                logger.info(
                    "Session %s plot twist %s (verifiable=%s proof=%s)", self.session_id, n.twist_id, n.verifiable, n.proof
                )
            elif isinstance(n, SessionEnded):
                logger.info("Session %s ended: %s score=%d", self.session_id, n.result.value, n.score)

        if self.outbox is None or not applied.notifications:
            return
        messages = to_stream_messages(session_id=self.session_id, notifications=applied.notifications)
        try:
            publish_messages(r=self.outbox, messages=messages)
        except redis.RedisError:
            logger.exception("Failed to publish %d outbox entries for session %s", len(messages), self.session_id)

    def _notify(self, state: SessionState) -> None:
        if not self._subscribers:
            return
        self._outgoing = state
        if self._fanout is None or self._fanout.done():
            self._fanout = asyncio.create_task(self._fan_out(), name=f"{self.session_id}:fan_out")

    async def _fan_out(self) -> None:
        """Deliver snapshots in order, outside the lock.

        A subscriber that falls behind skips straight to the newest snapshot.
        """

        while self._outgoing is not None:
            state, self._outgoing = self._outgoing, None
            for callback in self._subscribers:
                try:
                    await callback(state)
                except Exception:
                    logger.exception("Subscriber failed for session %s", self.session_id)

    def _schedule(self, name: str, coro: Coroutine[Any, Any, None]) -> None:
        self._cancel(name)
        self._tasks[name] = asyncio.create_task(coro, name=f"{self.session_id}:{name}")

    def _cancel(self, *names: str) -> None:
        for name in names:
            task = self._tasks.pop(name, None)
            if task is not None and not task.done():
                task.cancel()

    def _freeze(self, *names: str) -> None:
        """Cancel timers, keeping what was left of each one's current wait for the resume."""

        now = asyncio.get_running_loop().time()
        running = self.running_timers()
        for name in names:
            due = self._due.pop(name, None)
            if name in running and due is not None:
                self._carry[name] = max(0.0, due - now) / self.config.time_scale
        self._cancel(*names)

    def _reconcile(self, *, burst: bool = False) -> None:
        """Bring the timer set in line with the current snapshot."""

        state = self.state
        if state.is_terminal():
            self._cancel(*list(self._tasks))
            self._due.clear()
            self._carry.clear()
            return

        ann = state.announcement
        if ann is None:
            self._cancel("announcement")
            self._announcement_id = None
        elif ann.id != self._announcement_id:
            self._announcement_id = ann.id
            self._schedule("announcement", self._expire_announcement(ann.id, ann.duration_ms))

        if not self._started:
            return
        running = self.running_timers()

        if state.paused:
            self._freeze(*_LOOPS, "plot_twist")
            return

        if "countdown" not in running:
            self._schedule("countdown", self._every("countdown", self.config.countdown_s, CountdownTick))
        if "movement" not in running:
            elapsed_ms = round(self.config.movement_s * 1000)
            tick = functools.partial(MovementTick, elapsed_ms=elapsed_ms)
            self._schedule("movement", self._every("movement", self.config.movement_s, tick))
        if "spawn" not in running:
            self._schedule("spawn", self._spawn_loop(burst=burst))
        if state.plot_twist.check_pending and "plot_twist" not in running:
            self._schedule("plot_twist", self._plot_twist_timer())

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds) * self.config.time_scale)

    async def _wait(self, name: str, seconds: float) -> None:
        """Like `_sleep`, but resumes a wait that a pause interrupted instead of starting over."""

        delay = max(0.0, self._carry.pop(name, seconds)) * self.config.time_scale
        self._due[name] = asyncio.get_running_loop().time() + delay
        await asyncio.sleep(delay)

    async def _every(self, name: str, seconds: float, make_event: Callable[[], SessionEvent]) -> None:
        while True:
            await self._wait(name, seconds)
            await self.dispatch(make_event())

    async def _spawn_loop(self, *, burst: bool) -> None:
        if burst:
            previous = 0
            for offset in self.config.initial_burst_ms:
                await self._wait("spawn", (offset - previous) / 1000)
                previous = offset
                await self.dispatch(SpawnTick())
        while True:
            elapsed = self.state.duration - self.state.time_remaining
            await self._wait("spawn", spawn_interval_ms(self.profile, elapsed) / 1000)
            await self.dispatch(SpawnTick())

    async def _plot_twist_timer(self) -> None:
        low, high = self.config.plot_twist_delay_s
        # The delay is drawn once per check; a pause only suspends it.
        await self._wait("plot_twist", self._jitter.uniform(low, high))
        self._twist_nonce += 1
        draw = await draw_or_fallback(
            self.provider,
            session_id=self.session_id,
            nonce=self._twist_nonce,
            timeout=self.config.randomness_timeout_s,
        )
        await self.dispatch(PlotTwistCheck(draw=draw))

    async def _expire_announcement(self, announcement_id: int, duration_ms: int) -> None:
        await self._sleep(duration_ms / 1000)
        await self.dispatch(ClearAnnouncement(announcement_id=announcement_id))
