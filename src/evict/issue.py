from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Set, Text

from .events import Comment, Tag, TimelineEvent, event_time
from .timestamps import EPOCH, generate_id, now

DEFAULT_STATUS_NAME = 'open'
UNKNOWN_BRANCH = '<unknown>'


@dataclass(frozen=True)
class IssueStatus:
    name: Text
    last_change_time: datetime

    @classmethod
    def new(cls, name: Text) -> IssueStatus:
        return cls(name, now())

    @classmethod
    def default(cls) -> IssueStatus:
        return cls(DEFAULT_STATUS_NAME, EPOCH)


def sort_by_time(events: Iterable[TimelineEvent]) -> List[TimelineEvent]:
    return sorted(events, key=event_time)


@dataclass(eq=False)
class Issue:
    """An issue and its timeline.

    Issues are identified by ``id`` alone: two values with the same id are
    equal whatever their content. The timeline is sorted by time when the
    issue is built; ``add_comment`` and ``add_tag`` append without
    reordering, so callers add events in chronological order.
    """

    title: Text
    time: datetime
    author: Text
    body: Text
    id: Text
    branch: Text
    status: IssueStatus = field(default_factory=IssueStatus.default)
    events: List[TimelineEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.events = sort_by_time(self.events)

    @classmethod
    def new(
            cls,
            title: Text,
            body: Text,
            author: Text,
            branch: Optional[Text] = None,
    ) -> Issue:
        return cls(
            title=title,
            time=now(),
            author=author,
            body=body,
            id=generate_id(),
            branch=branch if branch is not None else UNKNOWN_BRANCH,
        )

    def add_comment(self, comment: Comment) -> None:
        self.events.append(comment)

    def add_tag(self, tag: Tag) -> None:
        self.events.append(tag)

    def change_status(self, name: Text) -> None:
        self.status = IssueStatus.new(name)

    def comments(self) -> List[Comment]:
        return [event for event in self.events if isinstance(event, Comment)]

    def most_recent_tag_for_name(self, name: Text) -> Optional[Tag]:
        recent: Optional[Tag] = None
        for event in self.events:
            if not isinstance(event, Tag) or event.name != name:
                continue
            # strictly later only: on a tie the first one seen stays
            if recent is None or recent.time < event.time:
                recent = event
        return recent

    def all_tags(self) -> List[Text]:
        """Names of the tags currently enabled, most recently toggled first."""
        decided: Set[Text] = set()
        enabled: List[Text] = []
        for event in reversed(self.events):
            if not isinstance(event, Tag) or event.name in decided:
                continue
            decided.add(event.name)
            if event.enabled:
                enabled.append(event.name)
        return enabled

    def __setattr__(self, name: Text, value: Any) -> None:
        if name == 'id' and 'id' in self.__dict__:
            raise AttributeError('Issue id cannot be reassigned')
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Issue):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> Text:
        return (
            f'<{self.__class__.__name__} '
            f'id={self.id!s} '
            f'status={self.status.name} '
            f'events={len(self.events)}'
            f'>'
        )
