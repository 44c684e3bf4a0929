from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
from typing import Protocol

from glucose_wars.config import get_randomness_timeout, get_vrf_key
from glucose_wars.core.events import RandomDraw

logger = logging.getLogger(__name__)


class RandomnessUnavailable(RuntimeError):
    pass


class RandomnessProvider(Protocol):
    """Optional capability for verifiable plot twist selection."""

    name: str

    async def draw(self, *, session_id: str, nonce: int) -> RandomDraw: ...


class HmacRandomnessProvider:
    """Local verifiable provider: the proof is an HMAC over (session_id, nonce).

    Anyone holding the key can recompute the proof and the value derived from it.
    """

    name = "hmac"

    def __init__(self, key: bytes | None = None):
        self._key = key if key is not None else get_vrf_key()

    def _proof(self, session_id: str, nonce: int) -> str:
        return hmac.new(self._key, f"{session_id}:{nonce}".encode(), hashlib.sha256).hexdigest()

    async def draw(self, *, session_id: str, nonce: int) -> RandomDraw:
        proof = self._proof(session_id, nonce)
        return RandomDraw(value=int(proof[:16], 16), proof=proof, provider=self.name)

    def verify(self, draw: RandomDraw, *, session_id: str, nonce: int) -> bool:
        expected = self._proof(session_id, nonce)
        return hmac.compare_digest(expected, draw.proof) and draw.value == int(expected[:16], 16)


async def draw_or_fallback(
    provider: RandomnessProvider | None,
    *,
    session_id: str,
    nonce: int,
    timeout: float | None = None,
) -> RandomDraw | None:
    """Ask the provider for a draw; None tells the core to use its local RNG.

    Never raises for provider trouble and never waits longer than `timeout`.
    """

    if provider is None:
        return None
    try:
        return await asyncio.wait_for(
            provider.draw(session_id=session_id, nonce=nonce),
            timeout=get_randomness_timeout() if timeout is None else timeout,
        )
    except Exception as e:
        # Bad payloads and client errors count as provider trouble too.
        logger.warning(
            "Randomness provider %s failed for session %s (%s); falling back to local RNG",
            provider.name,
            session_id,
            type(e).__name__,
        )
        return None
