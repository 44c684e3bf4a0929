from __future__ import annotations

import logging
import random
from uuid import uuid4

import redis

from glucose_wars.core.engine import create_session_state
from glucose_wars.core.models import Audience, GameMode, SessionState
from glucose_wars.difficulty import load_profile
from glucose_wars.randomness import HmacRandomnessProvider, RandomnessProvider
from glucose_wars.session_clock import ClockConfig, SessionClock, Subscriber

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-process registry of live sessions keyed by session_id.

    Sessions do not survive a restart. With more than one API replica this
    would need sticky routing, since each clock lives in one event loop.
    """

    def __init__(self, *, config: ClockConfig | None = None, provider: RandomnessProvider | None = None) -> None:
        self.config = config or ClockConfig()
        self.provider: RandomnessProvider | None = provider if provider is not None else HmacRandomnessProvider()
        self._clocks: dict[str, SessionClock] = {}

    async def create(
        self,
        *,
        mode: GameMode | None = None,
        tier: str | None = None,
        audience: Audience = Audience.personal,
        seed: int | None = None,
        outbox: redis.Redis | None = None,
        subscribers: tuple[Subscriber, ...] = (),
        autostart: bool = True,
    ) -> SessionClock:
        if seed is None:
            seed = random.SystemRandom().randint(1, 2**31 - 1)
        profile = load_profile(tier)
        rng = random.Random(seed)
        session_id = str(uuid4())

        state = create_session_state(
            session_id=session_id,
            seed=seed,
            profile=profile,
            rng=rng,
            mode=mode,
            audience=audience,
        )
        clock = SessionClock(
            state,
            profile=profile,
            rng=rng,
            config=self.config,
            provider=self.provider,
            outbox=outbox,
        )
        for callback in subscribers:
            clock.subscribe(callback)
        self._clocks[session_id] = clock
        logger.info("Created session %s mode=%s tier=%s seed=%d", session_id, state.mode.value, profile.tier, seed)

        if autostart:
            await clock.start()
        return clock

    def get(self, session_id: str) -> SessionClock | None:
        return self._clocks.get(session_id)

    def list_states(self) -> list[SessionState]:
        return [c.state for c in self._clocks.values()]

    async def shutdown(self) -> None:
        for clock in list(self._clocks.values()):
            await clock.stop()
        self._clocks.clear()


sessions = SessionRegistry()
