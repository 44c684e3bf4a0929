from __future__ import annotations

import asyncio

import fakeredis
import pytest

from glucose_wars.core.events import RandomDraw, SpawnTick
from glucose_wars.core.models import GameMode, SessionResult, SessionState
from glucose_wars.randomness import HmacRandomnessProvider, RandomnessUnavailable
from glucose_wars.session_clock import ClockConfig
from glucose_wars.session_store import SessionRegistry
from glucose_wars.streams import read_session_stream

# 1 simulated second == 10 ms of wall time.
FAST = ClockConfig(movement_s=0.25, time_scale=0.01)


async def _wait_for(predicate, timeout: float = 5.0) -> None:  # type: ignore[no-untyped-def]
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


class _OfflineProvider:
    name = "offline"

    async def draw(self, *, session_id: str, nonce: int) -> RandomDraw:
        raise RandomnessUnavailable("no network")


class _GarbledProvider:
    name = "garbled"

    async def draw(self, *, session_id: str, nonce: int) -> RandomDraw:
        raise ValueError("bad response from coordinator")


@pytest.mark.asyncio
async def test_session_runs_to_the_end_and_stops_its_timers() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    registry = SessionRegistry(config=FAST)
    snapshots: list[SessionState] = []

    async def _collect(state: SessionState) -> None:
        snapshots.append(state)

    clock = await registry.create(tier="tier1", seed=21, outbox=r, subscribers=(_collect,))
    try:
        await _wait_for(lambda: clock.state.is_terminal())

        # tier1 needs 100 points and nobody is playing
        assert clock.state.result == SessionResult.defeat
        assert clock.state.spawn_seq >= 3
        assert clock.running_timers() == set()
        # watchers get the final snapshot from the fan-out task
        await _wait_for(lambda: bool(snapshots) and snapshots[-1] is clock.state)

        types = [e["fields"]["type"] for e in read_session_stream(r=r, session_id=clock.session_id, count=200)]  # type: ignore[index]
        assert "session_ended" in types
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_pause_stops_the_clock_and_resume_restarts_it() -> None:
    registry = SessionRegistry(config=ClockConfig(movement_s=0.25, time_scale=0.05))
    clock = await registry.create(tier="tier1", seed=3)
    try:
        await clock.pause()
        assert clock.state.paused
        assert not clock.running_timers() & {"countdown", "movement", "spawn"}

        frozen = clock.state.time_remaining
        await asyncio.sleep(0.15)
        assert clock.state.time_remaining == frozen

        await clock.resume()
        assert {"countdown", "movement", "spawn"} <= clock.running_timers()
        await _wait_for(lambda: clock.state.time_remaining < frozen)
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_announcements_expire() -> None:
    registry = SessionRegistry(config=FAST)
    clock = await registry.create(tier="tier1", seed=5, autostart=False)
    try:
        assert clock.state.announcement is not None
        # any update arms the expiry timer, even before start
        await clock.dispatch(SpawnTick())
        await _wait_for(lambda: clock.state.announcement is None)
        assert not clock.started
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_plot_twist_uses_the_provider() -> None:
    config = ClockConfig(movement_s=0.25, time_scale=0.01, plot_twist_delay_s=(0.0, 0.0))
    registry = SessionRegistry(config=config, provider=HmacRandomnessProvider(key=b"test"))
    clock = await registry.create(tier="tier3", seed=11)
    try:
        assert clock.state.mode == GameMode.life
        await _wait_for(lambda: clock.state.plot_twist.triggered >= 1 or clock.state.is_terminal())

        pt = clock.state.plot_twist
        assert pt.triggered >= 1
        assert pt.triggered <= 2
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_plot_twist_falls_back_to_local_rng() -> None:
    config = ClockConfig(movement_s=0.25, time_scale=0.01, plot_twist_delay_s=(0.0, 0.0))
    registry = SessionRegistry(config=config, provider=_OfflineProvider())
    clock = await registry.create(tier="tier3", seed=11, autostart=False)
    try:
        await clock.start()
        await _wait_for(lambda: clock.state.plot_twist.triggered >= 1 or clock.state.is_terminal())

        assert clock.state.plot_twist.triggered >= 1
        assert not clock.state.plot_twist.verifiable
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_end_cancels_everything() -> None:
    registry = SessionRegistry(config=FAST)
    clock = await registry.create(tier="tier2", seed=8)
    try:
        await clock.end()
        assert not clock.state.active
        assert clock.running_timers() == set()
        # start after the end does nothing
        await clock.start()
        assert clock.running_timers() == set()
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_registry_lookup() -> None:
    registry = SessionRegistry(config=FAST)
    clock = await registry.create(tier="tier1", seed=1, autostart=False)
    try:
        assert registry.get(clock.session_id) is clock
        assert registry.get("nope") is None
        assert [s.session_id for s in registry.list_states()] == [clock.session_id]
    finally:
        await registry.shutdown()
    assert registry.list_states() == []


@pytest.mark.asyncio
async def test_plot_twist_survives_a_provider_error() -> None:
    config = ClockConfig(movement_s=0.25, time_scale=0.01, plot_twist_delay_s=(0.0, 0.0))
    registry = SessionRegistry(config=config, provider=_GarbledProvider())
    clock = await registry.create(tier="tier3", seed=11)
    try:
        await _wait_for(lambda: clock.state.plot_twist.triggered >= 1 or clock.state.is_terminal())

        assert clock.state.plot_twist.triggered >= 1
        assert not clock.state.plot_twist.verifiable
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_pausing_mid_second_keeps_the_partial_second() -> None:
    # 1 simulated second == 50 ms of wall time.
    registry = SessionRegistry(config=ClockConfig(movement_s=0.25, time_scale=0.05))
    clock = await registry.create(tier="tier2", seed=4)
    try:
        start = clock.state.time_remaining
        for _ in range(10):
            await asyncio.sleep(0.035)
            await clock.pause()
            await clock.resume()

        # about 7 s ran in 0.7 s slices; restarting each second on resume would give 0
        assert start - clock.state.time_remaining >= 4
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_pausing_does_not_push_back_the_plot_twist() -> None:
    config = ClockConfig(movement_s=0.25, time_scale=0.01, plot_twist_delay_s=(10.0, 10.0))
    registry = SessionRegistry(config=config, provider=HmacRandomnessProvider(key=b"test"))
    clock = await registry.create(tier="tier3", seed=11)
    try:
        # 6 s slices: a delay re-drawn on every resume would never run out
        for _ in range(4):
            await asyncio.sleep(0.06)
            await clock.pause()
            await clock.resume()

        assert clock.state.plot_twist.triggered >= 1
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_break_the_session() -> None:
    registry = SessionRegistry(config=FAST)

    async def _explode(state: SessionState) -> None:
        raise RuntimeError("socket went bad")

    clock = await registry.create(tier="tier2", seed=8, subscribers=(_explode,))
    try:
        start = clock.state.time_remaining
        await _wait_for(lambda: clock.state.time_remaining <= start - 2)

        await clock.end()
        assert not clock.state.active
        assert clock.running_timers() == set()
    finally:
        await registry.shutdown()


@pytest.mark.asyncio
async def test_slow_subscriber_does_not_hold_up_the_timers() -> None:
    registry = SessionRegistry(config=FAST)
    gate = asyncio.Event()
    seen: list[SessionState] = []

    async def _stuck(state: SessionState) -> None:
        seen.append(state)
        await gate.wait()

    clock = await registry.create(tier="tier2", seed=8, subscribers=(_stuck,))
    try:
        start = clock.state.time_remaining
        await _wait_for(lambda: clock.state.time_remaining <= start - 3)
        assert len(seen) == 1

        # once unblocked, the watcher skips ahead to the newest snapshot
        gate.set()
        await _wait_for(lambda: len(seen) >= 2)
        assert seen[1].time_remaining <= start - 3
    finally:
        gate.set()
        await registry.shutdown()
