import logging
from typing import Any, Dict, Optional, Text

from .events import (
    AUTHOR_KEY,
    BODY_KEY,
    BRANCH_KEY,
    ID_KEY,
    NAME_KEY,
    TIME_KEY,
    Payload,
    decode_events,
    encode_event,
    string_field,
    time_field,
)
from .issue import Issue, IssueStatus, sort_by_time
from .timestamps import format_time

logger = logging.getLogger(__name__)

FORMAT_VERSION = '1'

VERSION_KEY = 'evict-version'
TITLE_KEY = 'title'
STATUS_KEY = 'status'
EVENTS_KEY = 'events'


class DecodeError(Exception):
    pass


class UnsupportedFormat(DecodeError):
    pass


def encode_status(status: IssueStatus) -> Payload:
    return {
        NAME_KEY: status.name,
        TIME_KEY: format_time(status.last_change_time),
    }


def decode_status(node: Any) -> IssueStatus:
    if not isinstance(node, dict):
        return IssueStatus.default()
    name = string_field(node, NAME_KEY)
    changed = time_field(node, TIME_KEY)
    if name is None or changed is None:
        return IssueStatus.default()
    return IssueStatus(name, changed)


def encode_issue(issue: Issue) -> Payload:
    """Issue metadata without the body or the timeline."""
    return {
        VERSION_KEY: FORMAT_VERSION,
        TITLE_KEY: issue.title,
        TIME_KEY: format_time(issue.time),
        AUTHOR_KEY: issue.author,
        ID_KEY: issue.id,
        BRANCH_KEY: issue.branch,
        STATUS_KEY: encode_status(issue.status),
    }


def encode_record(issue: Issue) -> Payload:
    record = encode_issue(issue)
    record[BODY_KEY] = issue.body
    record[EVENTS_KEY] = [
        encode_event(event) for event in sort_by_time(issue.events)
    ]
    return record


def read_issue(tree: Any) -> Issue:
    if not isinstance(tree, dict):
        raise DecodeError(f'Issue record is not an object: {tree!r}')
    _check_version(tree)
    title = _required_string(tree, TITLE_KEY)
    author = _required_string(tree, AUTHOR_KEY)
    branch = _required_string(tree, BRANCH_KEY)
    issue_id = _required_string(tree, ID_KEY)
    status = decode_status(tree.get(STATUS_KEY))
    created = time_field(tree, TIME_KEY)
    if created is None:
        raise DecodeError(f'Issue {issue_id} has no readable {TIME_KEY!r}')
    return Issue(
        title=title,
        time=created,
        author=author,
        body=string_field(tree, BODY_KEY) or '',
        id=issue_id,
        branch=branch,
        status=status,
        events=decode_events(tree.get(EVENTS_KEY)),
    )


def decode_issue(tree: Any) -> Optional[Issue]:
    try:
        return read_issue(tree)
    except DecodeError as error:
        logger.warning('Could not decode issue: %s', error)
        return None


def _check_version(tree: Dict[Text, Any]) -> None:
    if VERSION_KEY not in tree:
        raise UnsupportedFormat(f'Issue record has no {VERSION_KEY!r}')
    version = tree[VERSION_KEY]
    if not isinstance(version, str):
        raise UnsupportedFormat(f'Unreadable format version {version!r}')
    try:
        number = int(version, 10)
    except ValueError:
        raise UnsupportedFormat(f'Unreadable format version {version!r}')
    if number != int(FORMAT_VERSION):
        raise UnsupportedFormat(f'Unsupported format version {version!r}')


def _required_string(tree: Dict[Text, Any], key: Text) -> Text:
    value = string_field(tree, key)
    if value is None:
        raise DecodeError(f'Issue record has no string {key!r}')
    return value
