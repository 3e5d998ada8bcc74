from typing import Callable, Iterable, List, Text

from .issue import Issue


class SelectionError(Exception):
    pass


class NoMatchingIssue(SelectionError):
    pass


class AmbiguousIssueId(SelectionError):
    pass


def matching_issues(fragment: Text, issues: Iterable[Issue]) -> List[Issue]:
    return [issue for issue in issues if issue.id.startswith(fragment)]


def select_issue(fragment: Text, issues: Iterable[Issue]) -> Issue:
    matches = matching_issues(fragment, issues)
    if not matches:
        raise NoMatchingIssue(f'No issue id starts with {fragment!r}')
    for issue in matches:
        if issue.id == fragment:
            return issue
    if len(matches) > 1:
        ids = ', '.join(issue.id for issue in matches)
        raise AmbiguousIssueId(f'{fragment!r} matches several issues: {ids}')
    return matches[0]


def update_issue(
        fragment: Text,
        issues: List[Issue],
        transform: Callable[[Issue], Issue],
) -> List[Issue]:
    target = select_issue(fragment, issues)
    return [transform(issue) if issue is target else issue for issue in issues]
