from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine

from glucose_wars.core.models import SessionResult, SessionState


class Lifecycle(StrEnum):
    running = "running"
    paused = "paused"
    victory = "victory"
    defeat = "defeat"
    abandoned = "abandoned"


def lifecycle_of(session: SessionState) -> Lifecycle:
    if session.result == SessionResult.victory:
        return Lifecycle.victory
    if session.result == SessionResult.defeat:
        return Lifecycle.defeat
    if not session.active:
        return Lifecycle.abandoned
    if session.paused:
        return Lifecycle.paused
    return Lifecycle.running


class SessionFSM(StateMachine):
    """Lifecycle guard around a SessionState working copy.

    - running <-> paused via pause/resume.
    - win/lose are only reachable while running (ticks never arrive while paused).
    - abandon is the explicit restart/exit, from running or paused.
    Terminal states are final, so a second win/lose raises TransitionNotAllowed.
    """

    running = State(Lifecycle.running.value, value=Lifecycle.running.value, initial=True)
    paused = State(Lifecycle.paused.value, value=Lifecycle.paused.value)
    victory = State(Lifecycle.victory.value, value=Lifecycle.victory.value, final=True)
    defeat = State(Lifecycle.defeat.value, value=Lifecycle.defeat.value, final=True)
    abandoned = State(Lifecycle.abandoned.value, value=Lifecycle.abandoned.value, final=True)

    pause = running.to(paused)
    resume = paused.to(running)
    win = running.to(victory)
    lose = running.to(defeat)
    abandon = running.to(abandoned) | paused.to(abandoned)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=lifecycle_of(session).value)

    def sync_to_model(self) -> None:
        current = Lifecycle(str(self.current_state.value))
        self.session.paused = current == Lifecycle.paused
        if current == Lifecycle.victory:
            self.session.result = SessionResult.victory
        elif current == Lifecycle.defeat:
            self.session.result = SessionResult.defeat
        self.session.active = current in (Lifecycle.running, Lifecycle.paused)
