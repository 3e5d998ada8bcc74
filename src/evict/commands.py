from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import singledispatchmethod
from typing import Callable, Dict, Iterable, Optional, Text, Tuple, Union

import click

from .config import ConfigError
from .events import Comment, Tag
from .fsm import Continue, Halt, NextState, Step, parse_arguments
from .issue import DEFAULT_STATUS_NAME, UNKNOWN_BRANCH, Issue, IssueStatus
from .selection import SelectionError, select_issue, update_issue
from .store import IssueRepository, StoreError
from .timestamps import format_time

logger = logging.getLogger(__name__)

MISSING_ID = 'The id for the issue, or the start of it, must be provided.'


@dataclass(frozen=True)
class NewIssue:
    title: Optional[Text] = None
    with_body: bool = True
    pending: Optional[Text] = None
    error: Optional[Text] = None


@dataclass(frozen=True)
class ListIssues:
    tag: Optional[Text] = None
    status: Optional[Text] = None
    pending: Optional[Text] = None
    error: Optional[Text] = None


@dataclass(frozen=True)
class ShowIssue:
    id_fragment: Optional[Text] = None


@dataclass(frozen=True)
class CommentOnIssue:
    id_fragment: Optional[Text] = None


@dataclass(frozen=True)
class TagIssue:
    id_fragment: Optional[Text] = None
    names: Tuple[Text, ...] = ()
    enabled: bool = True
    error: Optional[Text] = None


@dataclass(frozen=True)
class SetStatus:
    id_fragment: Optional[Text] = None
    status: Optional[Text] = None
    error: Optional[Text] = None


Command = Union[
    NewIssue,
    ListIssues,
    ShowIssue,
    CommentOnIssue,
    TagIssue,
    SetStatus,
]


def _is_option(token: Text) -> bool:
    return token.startswith('-') and token != '-'


def _unknown(token: Text) -> Text:
    return f'Unknown argument: {token}'


def _missing_value(option: Text) -> Text:
    return f'Missing value for {option}'


def new_issue_step(flags: NewIssue, token: Text) -> NextState[NewIssue]:
    if flags.pending is not None:
        if _is_option(token):
            return Halt(replace(flags, error=_missing_value(flags.pending)))
        return Continue(replace(flags, title=token, pending=None))
    if token in ('-t', '--title'):
        return Continue(replace(flags, pending=token))
    if token == '--no-body':
        return Continue(replace(flags, with_body=False))
    if _is_option(token):
        return Halt(replace(flags, error=_unknown(token)))
    return Continue(replace(flags, title=token))


def list_issues_step(flags: ListIssues, token: Text) -> NextState[ListIssues]:
    if flags.pending is not None and _is_option(token):
        return Halt(replace(flags, error=_missing_value(flags.pending)))
    if flags.pending in ('-t', '--tag'):
        return Continue(replace(flags, tag=token, pending=None))
    if flags.pending in ('-s', '--status'):
        return Continue(replace(flags, status=token, pending=None))
    if token in ('-t', '--tag', '-s', '--status'):
        return Continue(replace(flags, pending=token))
    return Halt(replace(flags, error=_unknown(token)))


def show_issue_step(flags: ShowIssue, token: Text) -> NextState[ShowIssue]:
    return Continue(replace(flags, id_fragment=token))


def comment_step(
        flags: CommentOnIssue, token: Text,
) -> NextState[CommentOnIssue]:
    return Continue(replace(flags, id_fragment=token))


def tag_step(flags: TagIssue, token: Text) -> NextState[TagIssue]:
    if _is_option(token):
        return Halt(replace(flags, error=_unknown(token)))
    if flags.id_fragment is None:
        return Continue(replace(flags, id_fragment=token))
    return Continue(replace(flags, names=flags.names + (token,)))


def set_status_step(flags: SetStatus, token: Text) -> NextState[SetStatus]:
    if _is_option(token):
        return Halt(replace(flags, error=_unknown(token)))
    if flags.id_fragment is None:
        return Continue(replace(flags, id_fragment=token))
    if flags.status is None:
        return Continue(replace(flags, status=token))
    return Halt(replace(flags, error=_unknown(token)))


STEPS: Dict[type, Step] = {
    NewIssue: new_issue_step,
    ListIssues: list_issues_step,
    ShowIssue: show_issue_step,
    CommentOnIssue: comment_step,
    TagIssue: tag_step,
    SetStatus: set_status_step,
}


def parse_command(initial: Command, tokens: Iterable[Text]) -> Command:
    return parse_arguments(STEPS[type(initial)], initial, tokens)


def argument_error(command: Command) -> Optional[Text]:
    error = getattr(command, 'error', None)
    if error is not None:
        return error
    pending = getattr(command, 'pending', None)
    if pending is not None:
        return _missing_value(pending)
    return None


class Handler:
    def __init__(self, repository: IssueRepository) -> None:
        self._repository = repository

    def __call__(self, cmd: Command) -> int:
        ...


class CommandHandler(Handler):
    def __init__(
            self,
            repository: IssueRepository,
            author: Callable[[], Text],
            branch: Callable[[], Optional[Text]],
            editor: Callable[[Text], Optional[Text]],
    ) -> None:
        super().__init__(repository)
        self._author = author
        self._branch = branch
        self._editor = editor

    def run(self, cmd: Command) -> int:
        try:
            return self(cmd)
        except (StoreError, ConfigError) as error:
            return self._fail(str(error))

    @singledispatchmethod
    def __call__(self, cmd: Command) -> int:
        raise NotImplementedError

    @__call__.register
    def new(self, cmd: NewIssue) -> int:
        error = argument_error(cmd)
        if error is not None:
            return self._fail(error)
        if not cmd.title:
            return self._fail('A title for the issue must be provided.')
        body = ''
        if cmd.with_body:
            body = self._editor('')
            if body is None:
                return self._fail('No issue body provided')
        issue = Issue.new(cmd.title, body, self._author(), self._branch())
        issues = self._repository.load()
        issues.append(issue)
        self._repository.save(issues)
        click.echo(f'Created issue {issue.id}')
        return 0

    @__call__.register
    def list_issues(self, cmd: ListIssues) -> int:
        error = argument_error(cmd)
        if error is not None:
            return self._fail(error)
        for issue in self._repository.load():
            tags = issue.all_tags()
            if cmd.tag is not None and cmd.tag not in tags:
                continue
            if cmd.status is not None and issue.status.name != cmd.status:
                continue
            click.echo(_summary(issue, tags))
        return 0

    @__call__.register
    def show(self, cmd: ShowIssue) -> int:
        if cmd.id_fragment is None:
            return self._fail(MISSING_ID)
        try:
            issue = select_issue(cmd.id_fragment, self._repository.load())
        except SelectionError as error:
            return self._fail(str(error))
        click.echo(_details(issue))
        return 0

    @__call__.register
    def comment(self, cmd: CommentOnIssue) -> int:
        if cmd.id_fragment is None:
            return self._fail(MISSING_ID)

        def comment_on(issue: Issue) -> Issue:
            body = self._editor('')
            if body is None:
                click.echo('No comment body provided')
                return issue
            comment = Comment.new(self._author(), body, self._branch_name())
            return replace(issue, events=issue.events + [comment])

        return self._update(cmd.id_fragment, comment_on)

    @__call__.register
    def tag(self, cmd: TagIssue) -> int:
        if cmd.error is not None:
            return self._fail(cmd.error)
        if cmd.id_fragment is None:
            return self._fail(MISSING_ID)
        if not cmd.names:
            return self._fail('At least one tag name must be provided.')

        def toggle(issue: Issue) -> Issue:
            author = self._author()
            tags = [Tag.new(name, author, cmd.enabled) for name in cmd.names]
            return replace(issue, events=issue.events + tags)

        return self._update(cmd.id_fragment, toggle)

    @__call__.register
    def status(self, cmd: SetStatus) -> int:
        if cmd.error is not None:
            return self._fail(cmd.error)
        if cmd.id_fragment is None:
            return self._fail(MISSING_ID)
        if cmd.status is None:
            return self._fail('A status name must be provided.')

        def change(issue: Issue) -> Issue:
            return replace(issue, status=IssueStatus.new(cmd.status))

        return self._update(cmd.id_fragment, change)

    def _update(self, fragment: Text, transform: Callable[[Issue], Issue]) -> int:
        issues = self._repository.load()
        try:
            updated = update_issue(fragment, issues, transform)
        except SelectionError as error:
            return self._fail(str(error))
        self._repository.save(updated)
        return 0

    def _branch_name(self) -> Text:
        branch = self._branch()
        return branch if branch is not None else UNKNOWN_BRANCH

    @staticmethod
    def _fail(message: Text) -> int:
        logger.debug('Command failed: %s', message)
        click.echo(message, err=True)
        return 1


def _summary(issue: Issue, tags: Iterable[Text]) -> Text:
    line = f'{issue.id}  {issue.status.name:<12} {issue.title}'
    tag_list = ', '.join(tags)
    return f'{line}  [{tag_list}]' if tag_list else line


def _details(issue: Issue) -> Text:
    lines = [
        f'Issue {issue.id}',
        f'Title:   {issue.title}',
        f'Author:  {issue.author}',
        f'Created: {format_time(issue.time)}',
        f'Branch:  {issue.branch}',
    ]
    if issue.status.name == DEFAULT_STATUS_NAME:
        lines.append(f'Status:  {issue.status.name}')
    else:
        changed = format_time(issue.status.last_change_time)
        lines.append(f'Status:  {issue.status.name} (since {changed})')
    lines.append(f'Tags:    {", ".join(issue.all_tags())}')
    if issue.body:
        lines.extend(['', issue.body.rstrip()])
    for comment in issue.comments():
        lines.extend([
            '',
            f'{comment.author} on {comment.branch}, {format_time(comment.time)}:',
        ])
        lines.extend(f'  {line}' for line in comment.body.rstrip().splitlines())
    return '\n'.join(lines)
