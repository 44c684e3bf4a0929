from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from glucose_wars.core.fsm import Lifecycle, SessionFSM, lifecycle_of
from glucose_wars.core.models import SessionResult


def test_pause_resume_round_trip(make_state) -> None:
    state = make_state()
    fsm = SessionFSM(state)
    assert fsm.current_state.id == "running"

    fsm.pause()
    fsm.sync_to_model()
    assert state.paused
    assert lifecycle_of(state) == Lifecycle.paused

    fsm.resume()
    fsm.sync_to_model()
    assert not state.paused
    assert state.active


def test_fsm_starts_from_the_model(make_state) -> None:
    state = make_state(paused=True)
    assert SessionFSM(state).current_state.id == "paused"


def test_cannot_win_while_paused(make_state) -> None:
    fsm = SessionFSM(make_state(paused=True))
    with pytest.raises(TransitionNotAllowed):
        fsm.win()


def test_win_and_lose_are_final(make_state) -> None:
    state = make_state()
    fsm = SessionFSM(state)
    fsm.lose()
    fsm.sync_to_model()

    assert state.result == SessionResult.defeat
    assert not state.active
    with pytest.raises(TransitionNotAllowed):
        fsm.win()


def test_abandon_keeps_result_in_progress(make_state) -> None:
    state = make_state(paused=True)
    fsm = SessionFSM(state)
    fsm.abandon()
    fsm.sync_to_model()

    assert state.result == SessionResult.in_progress
    assert not state.active
    assert not state.paused
    assert lifecycle_of(state) == Lifecycle.abandoned
