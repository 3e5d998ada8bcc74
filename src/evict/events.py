from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import singledispatch
from typing import Any, ClassVar, Dict, List, Optional, Text, Union

from .timestamps import format_time, generate_id, now, parse_time

BODY_KEY = 'bodyText'
TIME_KEY = 'time'
AUTHOR_KEY = 'author'
BRANCH_KEY = 'branch'
ID_KEY = 'id'
NAME_KEY = 'name'
ENABLED_KEY = 'enabled'

Payload = Dict[Text, Any]


@dataclass(frozen=True)
class Comment:
    kind: ClassVar[Text] = 'comment'

    time: datetime
    author: Text
    body: Text
    branch: Text
    id: Text

    @classmethod
    def new(cls, author: Text, body: Text, branch: Text) -> Comment:
        return cls(now(), author, body, branch, generate_id())


@dataclass(frozen=True)
class Tag:
    kind: ClassVar[Text] = 'tag'

    time: datetime
    name: Text
    enabled: bool
    author: Text
    id: Text

    @classmethod
    def new(cls, name: Text, author: Text, enabled: bool) -> Tag:
        return cls(now(), name, enabled, author, generate_id())


TimelineEvent = Union[Comment, Tag]


def event_kind(event: TimelineEvent) -> Text:
    return event.kind


def event_time(event: TimelineEvent) -> datetime:
    return event.time


def event_id(event: TimelineEvent) -> Text:
    return event.id


def string_field(payload: Payload, key: Text) -> Optional[Text]:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def time_field(payload: Payload, key: Text) -> Optional[datetime]:
    text = string_field(payload, key)
    return parse_time(text) if text is not None else None


@singledispatch
def encode_payload(event: Any) -> Payload:
    raise TypeError(f'Not a timeline event: {event!r}')


@encode_payload.register(Comment)
def _encode_comment(event: Comment) -> Payload:
    return {
        BODY_KEY: event.body,
        TIME_KEY: format_time(event.time),
        AUTHOR_KEY: event.author,
        BRANCH_KEY: event.branch,
        ID_KEY: event.id,
    }


@encode_payload.register(Tag)
def _encode_tag(event: Tag) -> Payload:
    return {
        TIME_KEY: format_time(event.time),
        AUTHOR_KEY: event.author,
        NAME_KEY: event.name,
        ENABLED_KEY: event.enabled,
        ID_KEY: event.id,
    }


def encode_event(event: TimelineEvent) -> List[Any]:
    return [event_kind(event), encode_payload(event)]


def decode_comment(payload: Any) -> Optional[Comment]:
    if not isinstance(payload, dict):
        return None
    body = string_field(payload, BODY_KEY)
    author = string_field(payload, AUTHOR_KEY)
    branch = string_field(payload, BRANCH_KEY)
    created = time_field(payload, TIME_KEY)
    if body is None or author is None or branch is None or created is None:
        return None
    comment_id = string_field(payload, ID_KEY)
    if comment_id is None:
        comment_id = generate_id()
    return Comment(created, author, body, branch, comment_id)


def decode_tag(payload: Any) -> Optional[Tag]:
    if not isinstance(payload, dict):
        return None
    name = string_field(payload, NAME_KEY)
    author = string_field(payload, AUTHOR_KEY)
    enabled = payload.get(ENABLED_KEY)
    tag_id = string_field(payload, ID_KEY)
    changed = time_field(payload, TIME_KEY)
    if (
        name is None
        or author is None
        or not isinstance(enabled, bool)
        or tag_id is None
        or changed is None
    ):
        return None
    return Tag(changed, name, enabled, author, tag_id)


def decode_event(node: Any) -> Optional[TimelineEvent]:
    if not isinstance(node, list):
        # Comments written before the timeline existed carry no kind.
        return decode_comment(node)
    if len(node) != 2:
        return None
    kind, payload = node
    if kind == Comment.kind:
        return decode_comment(payload)
    elif kind == Tag.kind:
        return decode_tag(payload)
    return None


def decode_events(node: Any) -> List[TimelineEvent]:
    if not isinstance(node, list):
        return []
    decoded = (decode_event(entry) for entry in node)
    return [event for event in decoded if event is not None]
