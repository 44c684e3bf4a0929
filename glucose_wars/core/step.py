from __future__ import annotations

import random
from dataclasses import dataclass, field

from glucose_wars.catalog import announcements
from glucose_wars.core.models import Announcement, AnnouncementKind, SessionState
from glucose_wars.core.outcomes import AnnouncementPosted, Notification
from glucose_wars.core.spawner import DEFAULT_PLAYFIELD, Playfield
from glucose_wars.difficulty import DifficultyProfile

ANNOUNCEMENT_MS = 1500
# Plot twists and anything carrying a science fact stay up longer.
LONG_ANNOUNCEMENT_MS = 2500


@dataclass(slots=True)
class Step:
    """Scratch space for one transition: the working copy plus what it emits.

    Only the last announcement made during a step is shown, matching a single
    on-screen banner that each new message replaces.
    """

    state: SessionState
    profile: DifficultyProfile
    rng: random.Random
    playfield: Playfield = DEFAULT_PLAYFIELD
    notifications: list[Notification] = field(default_factory=list)
    _pending: tuple[str, AnnouncementKind, str | None] | None = None

    def emit(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def announce(self, text: str, kind: AnnouncementKind = AnnouncementKind.info, science: str | None = None) -> None:
        self._pending = (text, kind, science)

    def announce_random(self, category: announcements.Category, kind: AnnouncementKind = AnnouncementKind.info) -> None:
        self.announce(announcements.pick(category, self.rng), kind)

    def flush_announcement(self) -> None:
        if self._pending is None:
            return
        text, kind, science = self._pending
        self._pending = None

        duration = LONG_ANNOUNCEMENT_MS if science or kind == AnnouncementKind.plot_twist else ANNOUNCEMENT_MS
        self.state.announcement_seq += 1
        self.state.announcement = Announcement(
            id=self.state.announcement_seq,
            text=text,
            kind=kind,
            science=science,
            duration_ms=duration,
        )
        self.emit(AnnouncementPosted(announcement_id=self.state.announcement_seq, text=text, duration_ms=duration))
