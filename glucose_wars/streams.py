from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, cast

import redis

from glucose_wars.core.outcomes import Notification


@dataclass(frozen=True, slots=True)
class StreamMessage:
    stream_key: str
    fields: dict[str, str]


def session_stream_key(session_id: str) -> str:
    return f"glucose_wars:session:{session_id}:events"


def to_stream_messages(*, session_id: str, notifications: Sequence[Notification]) -> list[StreamMessage]:
    key = session_stream_key(session_id)
    return [StreamMessage(stream_key=key, fields={"session_id": session_id, **n.to_fields()}) for n in notifications]


def publish_many(*, r: redis.Redis, entries: Sequence[tuple[str, Mapping[str, str]]]) -> list[str]:
    ids: list[str] = []
    for key, fields in entries:
        # redis-py stubs expect field/value unions; we only use string fields/values.
        stream_id = r.xadd(key, {str(k): str(v) for k, v in fields.items()})
        ids.append(cast(str, stream_id))
    return ids


def publish_messages(*, r: redis.Redis, messages: Sequence[StreamMessage]) -> list[str]:
    return publish_many(r=r, entries=[(m.stream_key, m.fields) for m in messages])


def read_session_stream(
    *, r: redis.Redis, session_id: str, count: int = 20, start: str = "-", end: str = "+"
) -> list[dict[str, object]]:
    entries = r.xrange(session_stream_key(session_id), min=start, max=end, count=count)
    return [{"id": mid, "fields": fields} for mid, fields in entries]
