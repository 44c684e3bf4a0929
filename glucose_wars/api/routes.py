from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from glucose_wars.api.deps import get_redis, get_sessions
from glucose_wars.api.models import (
    ActionRequest,
    CommandResponse,
    HoldRequest,
    OutcomeModel,
    SessionCreateRequest,
    SessionListResponse,
    TierListResponse,
)
from glucose_wars.core.events import ConsumeSaved, HoldEntity, PowerUpKind, ResolveAction, UsePowerUp
from glucose_wars.core.models import SessionState
from glucose_wars.core.outcomes import AppliedEvent
from glucose_wars.core.summary import SessionSummary, summarize
from glucose_wars.difficulty import TIERS
from glucose_wars.session_clock import SessionClock
from glucose_wars.session_store import SessionRegistry
from glucose_wars.streams import read_session_stream, session_stream_key
from glucose_wars.websocket_hub import broadcast_snapshot, hub, snapshot_payload

logger = logging.getLogger(__name__)

router = APIRouter()


def _clock_or_404(registry: SessionRegistry, session_id: str) -> SessionClock:
    clock = registry.get(session_id)
    if clock is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return clock


def _command_response(applied: AppliedEvent) -> CommandResponse:
    outcome = OutcomeModel.from_outcome(applied.outcome) if applied.outcome is not None else None
    return CommandResponse(outcome=outcome, session=applied.state)


@router.websocket("/ws/sessions/{session_id}")
async def session_updates_ws(
    websocket: WebSocket,
    session_id: str,
    registry: SessionRegistry = Depends(get_sessions),
) -> None:
    clock = registry.get(session_id)
    if clock is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await hub.connect(session_id, websocket)
    try:
        # Late joiners get the current snapshot straight away.
        await websocket.send_json(snapshot_payload(clock.state))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect as e:
        logger.debug("Watcher left session %s (code=%s)", session_id, e.code)
    finally:
        await hub.disconnect(session_id, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/tiers", response_model=TierListResponse)
async def list_tiers_route() -> TierListResponse:
    return TierListResponse(tiers=list(TIERS.values()))


@router.post("/sessions", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionState:
    try:
        clock = await registry.create(
            mode=payload.mode,
            tier=payload.tier,
            audience=payload.audience,
            seed=payload.seed,
            outbox=r,
            subscribers=(broadcast_snapshot,),
            autostart=payload.autostart,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await broadcast_snapshot(clock.state)
    return clock.state


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(registry: SessionRegistry = Depends(get_sessions)) -> SessionListResponse:
    return SessionListResponse(sessions=registry.list_states())


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionState:
    return _clock_or_404(registry, session_id).state


@router.get("/sessions/{session_id}/summary", response_model=SessionSummary)
async def get_summary_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionSummary:
    return summarize(_clock_or_404(registry, session_id).state)


@router.post("/sessions/{session_id}/start", response_model=SessionState)
async def start_session_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionState:
    clock = _clock_or_404(registry, session_id)
    await clock.start()
    return clock.state


@router.post("/sessions/{session_id}/actions", response_model=CommandResponse)
async def action_route(
    session_id: str,
    payload: ActionRequest,
    registry: SessionRegistry = Depends(get_sessions),
) -> CommandResponse:
    clock = _clock_or_404(registry, session_id)
    applied = await clock.dispatch(ResolveAction(entity_id=payload.entity_id, action=payload.action))
    return _command_response(applied)


@router.post("/sessions/{session_id}/hold", response_model=CommandResponse)
async def hold_route(
    session_id: str,
    payload: HoldRequest,
    registry: SessionRegistry = Depends(get_sessions),
) -> CommandResponse:
    clock = _clock_or_404(registry, session_id)
    applied = await clock.dispatch(HoldEntity(entity_id=payload.entity_id, held=payload.held))
    return _command_response(applied)


@router.post("/sessions/{session_id}/powerups/{kind}", response_model=CommandResponse)
async def power_up_route(
    session_id: str,
    kind: str,
    registry: SessionRegistry = Depends(get_sessions),
) -> CommandResponse:
    clock = _clock_or_404(registry, session_id)
    try:
        if kind not in {"exercise", "rations"}:
            raise ValueError(f"Unknown power-up: {kind}")
        power_up: PowerUpKind = kind  # type: ignore[assignment]
        applied = await clock.dispatch(UsePowerUp(kind=power_up))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _command_response(applied)


@router.post("/sessions/{session_id}/saved/{slot}/consume", response_model=CommandResponse)
async def consume_saved_route(
    session_id: str,
    slot: int,
    registry: SessionRegistry = Depends(get_sessions),
) -> CommandResponse:
    clock = _clock_or_404(registry, session_id)
    applied = await clock.dispatch(ConsumeSaved(slot=slot))
    return _command_response(applied)


@router.post("/sessions/{session_id}/pause", response_model=SessionState)
async def pause_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionState:
    applied = await _clock_or_404(registry, session_id).pause()
    return applied.state


@router.post("/sessions/{session_id}/resume", response_model=SessionState)
async def resume_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionState:
    applied = await _clock_or_404(registry, session_id).resume()
    return applied.state


@router.post("/sessions/{session_id}/end", response_model=SessionState)
async def end_route(session_id: str, registry: SessionRegistry = Depends(get_sessions)) -> SessionState:
    applied = await _clock_or_404(registry, session_id).end()
    return applied.state


@router.get("/sessions/{session_id}/events")
async def get_session_events_route(
    session_id: str,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a session's outbox Redis Stream.

    Works for sessions that are no longer in memory, as long as the stream is.
    """

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    try:
        messages = read_session_stream(r=r, session_id=session_id, count=count, start=start, end=end)
    except redis.ResponseError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return {"session_id": session_id, "stream": session_stream_key(session_id), "messages": messages}
