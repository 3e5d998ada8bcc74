import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Optional, Protocol

from .codec import decode_issue, encode_record
from .issue import Issue

logger = logging.getLogger(__name__)

ISSUES_FILE_NAME = 'issues.json'

Records = List[Any]


class StoreError(Exception):
    pass


class IssueStore(Protocol):
    def read_all(self) -> Records:
        ...

    def write_all(self, records: Records) -> None:
        ...


class FileStore:
    """The whole collection as one JSON array, replaced on every write."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_all(self) -> Records:
        if not self.path.exists():
            return []
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                records = json.load(handle)
        except (OSError, ValueError) as error:
            raise StoreError(f'Could not read {self.path}: {error}') from error
        if not isinstance(records, list):
            raise StoreError(f'{self.path} does not hold a list of issues')
        return records

    def write_all(self, records: Records) -> None:
        try:
            self._replace(records)
        except OSError as error:
            raise StoreError(f'Could not write {self.path}: {error}') from error
        logger.debug('Wrote %d issues to %s', len(records), self.path)

    def _replace(self, records: Records) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        descriptor, temporary = tempfile.mkstemp(
            dir=self.path.parent, prefix=f'.{self.path.name}.', suffix='.tmp',
        )
        try:
            with os.fdopen(descriptor, 'w', encoding='utf-8') as handle:
                json.dump(records, handle, indent=2, sort_keys=True)
                handle.write('\n')
            os.replace(temporary, self.path)
        except BaseException:
            os.unlink(temporary)
            raise


class MemoryStore:
    def __init__(self, records: Optional[Iterable[Any]] = None) -> None:
        self.records: Records = list(records or [])

    def read_all(self) -> Records:
        return copy.deepcopy(self.records)

    def write_all(self, records: Records) -> None:
        self.records = copy.deepcopy(list(records))


class IssueRepository:
    """Decoded issues over an ``IssueStore``.

    Records that do not decode are skipped on load and written back
    untouched on save, so a collection never loses data it cannot read.
    """

    def __init__(self, store: IssueStore) -> None:
        self._store = store
        self._undecoded: Optional[Records] = None

    def load(self) -> List[Issue]:
        issues = []
        undecoded = []
        for record in self._store.read_all():
            issue = decode_issue(record)
            if issue is None:
                undecoded.append(record)
                continue
            issues.append(issue)
        if undecoded:
            logger.warning('Skipped %d unreadable issues', len(undecoded))
        self._undecoded = undecoded
        return sorted(issues, key=lambda issue: issue.time)

    def save(self, issues: Iterable[Issue]) -> None:
        if self._undecoded is None:
            self.load()
        records = [encode_record(issue) for issue in issues]
        self._store.write_all(records + (self._undecoded or []))
