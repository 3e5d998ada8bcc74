import subprocess
from dataclasses import dataclass, replace
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import (
    Any,
    Callable,
    ContextManager,
    List,
    Optional,
    Protocol,
    Text,
    Tuple,
)
from unittest import TestCase
from unittest.mock import patch

from click.testing import CliRunner

import app
from evict import (
    CommandHandler,
    Comment,
    Continue,
    FileStore,
    Halt,
    Issue,
    IssueRepository,
    IssueStatus,
    MemoryStore,
    StateMachine,
    StoreError,
    Tag,
    UnsupportedFormat,
    decode_issue,
    encode_issue,
    parse_command,
)
from evict.codec import VERSION_KEY, encode_record, read_issue
from evict.commands import (
    MISSING_ID,
    CommentOnIssue,
    ListIssues,
    NewIssue,
    SetStatus,
    ShowIssue,
    TagIssue,
    argument_error,
)
from evict.config import Config, ConfigError, resolve_author
from evict.editor import compose
from evict.events import decode_event, decode_events, encode_event, encode_payload
from evict.fsm import parse_arguments
from evict.selection import (
    AmbiguousIssueId,
    NoMatchingIssue,
    select_issue,
    update_issue,
)
from evict.store import IssueStore
from evict.timestamps import format_time, generate_id, parse_time
from evict.vcs import current_branch


def at(second: int) -> datetime:
    return datetime(2014, 3, 1, 12, 0, second)


def tag(name: Text, enabled: bool, second: int, tag_id: Text = '') -> Tag:
    return Tag(at(second), name, enabled, 'author', tag_id or f'{name}{second}')


def comment(second: int, body: Text = 'Body') -> Comment:
    return Comment(at(second), 'author', body, 'main', f'c{second}')


def issue_with(*events: Any, issue_id: Text = '1001') -> Issue:
    return Issue(
        title='Title',
        time=at(0),
        author='author',
        body='',
        id=issue_id,
        branch='main',
        events=list(events),
    )


class IssueEqualityTest(TestCase):
    def test_same_id_is_equal(self):
        first = Issue.new('A', 'B', 'C')
        second = Issue(
            title='X', time=at(1), author='Z', body='Y', id=first.id,
            branch='other',
        )
        self.assertEqual(first, second)
        self.assertEqual(1, len({first, second}))

    def test_different_ids_differ(self):
        self.assertNotEqual(Issue.new('A', 'B', 'C'), Issue.new('A', 'B', 'C'))

    def test_id_is_assigned_once(self):
        issue = Issue.new('A', 'B', 'C')
        with self.assertRaises(AttributeError):
            issue.id = 'other'

    def test_new_issue_defaults(self):
        issue = Issue.new('A', 'B', 'C')
        self.assertEqual([], issue.events)
        self.assertEqual(IssueStatus.default(), issue.status)
        self.assertEqual('<unknown>', issue.branch)


class TimestampTest(TestCase):
    def test_format(self):
        moment = datetime(2013, 5, 4, 9, 8, 7)
        self.assertEqual('2013-05-04 2013 at 09:08:07', format_time(moment))

    def test_parse_formatted(self):
        moment = datetime(2013, 5, 4, 9, 8, 7)
        self.assertEqual(moment, parse_time(format_time(moment)))

    def test_parse_rejects_disagreeing_years(self):
        self.assertIsNone(parse_time('2013-05-04 2014 at 09:08:07'))

    def test_parse_rejects_other_text(self):
        self.assertIsNone(parse_time('2013-05-04T09:08:07'))
        self.assertIsNone(parse_time('2013-02-30 2013 at 00:00:00'))

    def test_generated_ids_are_unique_digits(self):
        ids = [generate_id() for _ in range(1000)]
        self.assertEqual(1000, len(set(ids)))
        self.assertTrue(all(issue_id.isdigit() for issue_id in ids))


class EventCodecTest(TestCase):
    def test_comment_keys(self):
        self.assertEqual(
            {'bodyText', 'time', 'author', 'branch', 'id'},
            set(encode_payload(comment(1))),
        )

    def test_tag_keys(self):
        self.assertEqual(
            {'time', 'author', 'name', 'enabled', 'id'},
            set(encode_payload(tag('x', True, 1))),
        )

    def test_timeline_entry_is_kind_and_payload(self):
        event = tag('x', True, 1)
        self.assertEqual(['tag', encode_payload(event)], encode_event(event))

    def test_decode_wrapped_events(self):
        for event in (comment(1), tag('x', False, 2)):
            self.assertEqual(event, decode_event(encode_event(event)))

    def test_legacy_comment(self):
        payload = encode_payload(comment(5))
        legacy = decode_event(payload)
        self.assertEqual(decode_event(['comment', payload]), legacy)
        self.assertEqual(comment(5), legacy)

    def test_malformed_event_is_dropped(self):
        broken = encode_payload(tag('y', True, 2))
        del broken['name']
        events = decode_events([encode_event(tag('x', True, 1)), ['tag', broken]])
        self.assertEqual([tag('x', True, 1)], events)

    def test_wrong_arity_is_a_miss(self):
        payload = encode_payload(tag('x', True, 1))
        self.assertIsNone(decode_event(['tag']))
        self.assertIsNone(decode_event(['tag', payload, payload]))

    def test_unknown_kind_is_a_miss(self):
        self.assertIsNone(decode_event(['status', encode_payload(comment(1))]))

    def test_enabled_must_be_boolean(self):
        payload = encode_payload(tag('x', True, 1))
        payload['enabled'] = 1
        self.assertIsNone(decode_event(['tag', payload]))

    def test_comment_without_id_gets_one(self):
        payload = encode_payload(comment(1))
        del payload['id']
        decoded = decode_event(['comment', payload])
        self.assertTrue(decoded.id.isdigit())

    def test_events_must_be_a_list(self):
        self.assertEqual([], decode_events({'tag': 'x'}))
        self.assertEqual([], decode_events(None))


class TagResolutionTest(TestCase):
    def test_last_toggle_wins(self):
        issue = issue_with(
            tag('x', True, 1), tag('x', False, 2), tag('x', True, 3),
        )
        self.assertEqual(['x'], issue.all_tags())

    def test_disabled_suppresses_history(self):
        issue = issue_with(tag('y', True, 1), tag('y', False, 2))
        self.assertNotIn('y', issue.all_tags())

    def test_most_recently_toggled_first(self):
        issue = issue_with(comment(1), tag('a', True, 2), tag('b', True, 3))
        self.assertEqual(['b', 'a'], issue.all_tags())

    def test_events_sorted_when_built(self):
        issue = issue_with(tag('x', False, 5), tag('x', True, 1))
        self.assertEqual([], issue.all_tags())

    def test_added_tag_is_appended(self):
        issue = issue_with(tag('x', True, 5))
        late = tag('x', False, 1)
        issue.add_tag(late)
        self.assertIs(late, issue.events[-1])
        self.assertEqual([], issue.all_tags())

    def test_most_recent_tag(self):
        newer = tag('z', False, 2)
        issue = issue_with(tag('z', True, 1), newer, tag('other', True, 3))
        self.assertIs(newer, issue.most_recent_tag_for_name('z'))

    def test_most_recent_tag_tie_keeps_first(self):
        first = tag('z', True, 4, 'A')
        second = tag('z', False, 4, 'B')
        issue = issue_with(first, second)
        self.assertIs(first, issue.most_recent_tag_for_name('z'))

    def test_most_recent_tag_absent(self):
        self.assertIsNone(issue_with(comment(1)).most_recent_tag_for_name('z'))


class IssueCodecTest(TestCase):
    def test_round_trip(self):
        issue = Issue.new('Foo', 'Body', 'Author')
        decoded = decode_issue(encode_issue(issue))
        self.assertEqual(issue, decoded)
        self.assertEqual('Foo', decoded.title)
        self.assertEqual('Author', decoded.author)
        self.assertEqual(issue.id, decoded.id)
        self.assertEqual(format_time(issue.time), format_time(decoded.time))

    def test_envelope_keys(self):
        tree = encode_issue(issue_with(comment(1)))
        self.assertEqual(
            {'evict-version', 'title', 'time', 'author', 'id', 'branch',
             'status'},
            set(tree),
        )
        self.assertEqual('1', tree['evict-version'])
        self.assertEqual({'name', 'time'}, set(tree['status']))

    def test_record_keeps_body_and_timeline(self):
        issue = issue_with(comment(1), tag('x', True, 2))
        issue.body = 'Details'
        decoded = decode_issue(encode_record(issue))
        self.assertEqual('Details', decoded.body)
        self.assertEqual(issue.events, decoded.events)

    def test_decoded_events_are_sorted(self):
        record = encode_record(issue_with(comment(1), tag('x', True, 2)))
        record['events'].reverse()
        decoded = decode_issue(record)
        self.assertEqual([comment(1), tag('x', True, 2)], decoded.events)

    def test_legacy_comments_in_record(self):
        record = encode_record(issue_with())
        record['events'] = [encode_payload(comment(1))]
        self.assertEqual([comment(1)], decode_issue(record).events)

    def test_missing_version(self):
        tree = encode_issue(issue_with())
        del tree[VERSION_KEY]
        with self.assertRaises(UnsupportedFormat):
            read_issue(tree)
        with self.assertLogs('evict.codec', 'WARNING'):
            self.assertIsNone(decode_issue(tree))

    def test_unknown_version(self):
        for version in ('2', 'one', 1):
            tree = encode_issue(issue_with())
            tree[VERSION_KEY] = version
            self.assertIsNone(decode_issue(tree))

    def test_required_strings(self):
        for key in ('title', 'author', 'branch', 'id'):
            tree = encode_issue(issue_with())
            tree[key] = 7
            self.assertIsNone(decode_issue(tree), key)
            del tree[key]
            self.assertIsNone(decode_issue(tree), key)

    def test_unreadable_time(self):
        tree = encode_issue(issue_with())
        tree['time'] = '2014-03-01 12:00:00'
        self.assertIsNone(decode_issue(tree))

    def test_status_falls_back_to_default(self):
        for status in ({'name': 'closed'}, 'closed', None):
            tree = encode_issue(issue_with())
            tree['status'] = status
            self.assertEqual(IssueStatus.default(), decode_issue(tree).status)

    def test_status_round_trip(self):
        issue = issue_with()
        issue.status = IssueStatus('closed', at(9))
        self.assertEqual(issue.status, decode_issue(encode_issue(issue)).status)


@dataclass(frozen=True)
class LastSeen:
    token: Optional[Text] = None


class StateMachineTest(TestCase):
    def test_fold_matches_direct_construction(self):
        def step(state: LastSeen, token: Text) -> Continue:
            return Continue(replace(state, token=token))

        self.assertEqual(
            LastSeen(token='abc'), parse_arguments(step, LastSeen(), ['abc']),
        )

    def test_halt_stops_processing(self):
        def step(seen: Tuple[Text, ...], token: Text) -> Any:
            outcome = Halt if token == 'stop' else Continue
            return outcome(seen + (token,))

        machine = StateMachine(step, ())
        machine.process_all(['a', 'stop', 'b'])
        self.assertTrue(machine.halted)
        self.assertEqual(('a', 'stop'), machine.extract_state())

    def test_no_tokens_keeps_initial(self):
        machine = StateMachine(lambda state, token: Continue(token), 'start')
        self.assertFalse(machine.halted)
        self.assertEqual('start', machine.extract_state())

    def test_step_must_return_outcome(self):
        machine = StateMachine(lambda state, token: token, 'start')
        with self.assertRaises(TypeError):
            machine.process('x')


class ArgumentParsingTest(TestCase):
    def test_comment_takes_last_token(self):
        self.assertEqual(
            CommentOnIssue('abc'), parse_command(CommentOnIssue(), ['abc']),
        )
        self.assertEqual(
            CommentOnIssue('b'), parse_command(CommentOnIssue(), ['a', 'b']),
        )

    def test_no_tokens(self):
        self.assertEqual(ShowIssue(), parse_command(ShowIssue(), []))

    def test_new_issue_flags(self):
        flags = parse_command(NewIssue(), ['-t', 'Broken build', '--no-body'])
        self.assertEqual(NewIssue(title='Broken build', with_body=False), flags)
        self.assertIsNone(argument_error(flags))

    def test_new_issue_positional_title(self):
        self.assertEqual('Crash', parse_command(NewIssue(), ['Crash']).title)

    def test_option_without_value(self):
        flags = parse_command(NewIssue(), ['-t'])
        self.assertEqual('Missing value for -t', argument_error(flags))

    def test_option_in_place_of_value(self):
        flags = parse_command(NewIssue(), ['-t', '--no-body'])
        self.assertEqual('Missing value for -t', argument_error(flags))
        self.assertIsNone(flags.title)
        flags = parse_command(ListIssues(), ['--tag', '-s', 'open'])
        self.assertEqual('Missing value for --tag', argument_error(flags))

    def test_unknown_option_halts(self):
        flags = parse_command(NewIssue(), ['--bogus', 'Title'])
        self.assertEqual('Unknown argument: --bogus', argument_error(flags))
        self.assertIsNone(flags.title)

    def test_tag_names(self):
        self.assertEqual(
            TagIssue('12', ('a', 'b')),
            parse_command(TagIssue(), ['12', 'a', 'b']),
        )
        self.assertFalse(parse_command(TagIssue(enabled=False), ['1']).enabled)

    def test_status_takes_two_tokens(self):
        self.assertEqual(
            SetStatus('12', 'closed'),
            parse_command(SetStatus(), ['12', 'closed']),
        )
        flags = parse_command(SetStatus(), ['12', 'closed', 'extra'])
        self.assertEqual('Unknown argument: extra', argument_error(flags))

    def test_list_filters(self):
        self.assertEqual(
            ListIssues(tag='bug', status='open'),
            parse_command(ListIssues(), ['-t', 'bug', '--status', 'open']),
        )


class SelectionTest(TestCase):
    def setUp(self) -> None:
        self.issues = [
            issue_with(issue_id='1234'),
            issue_with(issue_id='1299'),
            issue_with(issue_id='5678'),
        ]

    def test_select_by_prefix(self):
        self.assertEqual('5678', select_issue('56', self.issues).id)
        self.assertEqual('1234', select_issue('123', self.issues).id)

    def test_ambiguous_prefix(self):
        with self.assertRaises(AmbiguousIssueId):
            select_issue('12', self.issues)

    def test_no_match(self):
        with self.assertRaises(NoMatchingIssue):
            select_issue('9', self.issues)

    def test_full_id_wins_over_longer_ids(self):
        short = issue_with(issue_id='17000000005')
        issues = [short, issue_with(issue_id='170000000050000000')]
        self.assertIs(short, select_issue('17000000005', issues))
        with self.assertRaises(AmbiguousIssueId):
            select_issue('1700', issues)

    def test_update_transforms_only_the_match(self):
        def retitle(issue: Issue) -> Issue:
            return replace(issue, title='Changed')

        updated = update_issue('5', self.issues, retitle)
        self.assertEqual(
            ['Title', 'Title', 'Changed'], [issue.title for issue in updated],
        )


class FailingStore:
    def read_all(self) -> List[Any]:
        raise StoreError('Could not read issues.json: disk on fire')

    def write_all(self, records: List[Any]) -> None:
        raise StoreError('Could not write issues.json: disk on fire')


class HandlerScenarios(Protocol):
    body: Optional[Text] = 'A body'
    assertEqual: Callable[[Any, Any], None] = NotImplemented
    assertRaises: Callable[..., ContextManager] = NotImplemented

    def make_store(self) -> IssueStore:
        ...

    @property
    @lru_cache
    def store(self) -> IssueStore:
        return self.make_store()

    @property
    def handler(self) -> CommandHandler:
        return CommandHandler(
            IssueRepository(self.store),
            author=lambda: 'alice',
            branch=lambda: 'feature',
            editor=lambda template: self.body,
        )

    def test_new_issue(self):
        self.assertEqual(0, self.act(NewIssue(title='Crash')))
        issue = self.only_issue()
        self.assertEqual('Crash', issue.title)
        self.assertEqual('A body', issue.body)
        self.assertEqual('alice', issue.author)
        self.assertEqual('feature', issue.branch)

    def test_new_issue_without_body(self):
        self.assertEqual(0, self.act(NewIssue(title='Crash', with_body=False)))
        self.assertEqual('', self.only_issue().body)

    def test_new_issue_needs_title(self):
        self.assertEqual(1, self.act(NewIssue()))
        self.assertEqual([], self.issues())

    def test_new_issue_aborts_on_empty_editor(self):
        self.body = None
        self.assertEqual(1, self.act(NewIssue(title='Crash')))
        self.assertEqual([], self.issues())

    def test_comment_needs_id(self):
        self.arrange_issue()
        self.assertEqual(1, self.act(CommentOnIssue()))
        self.assertEqual([], self.only_issue().events)

    def test_comment(self):
        issue = self.arrange_issue()
        self.body = 'Seen it too'
        self.assertEqual(0, self.act(CommentOnIssue(issue.id[:-3])))
        [added] = self.only_issue().comments()
        self.assertEqual('Seen it too', added.body)
        self.assertEqual('alice', added.author)
        self.assertEqual('feature', added.branch)

    def test_comment_without_body_changes_nothing(self):
        issue = self.arrange_issue()
        self.body = None
        self.assertEqual(0, self.act(CommentOnIssue(issue.id)))
        self.assertEqual([], self.only_issue().events)

    def test_comment_on_unknown_issue(self):
        self.arrange_issue()
        self.assertEqual(1, self.act(CommentOnIssue('x')))

    def test_tag_and_untag(self):
        issue = self.arrange_issue()
        self.assertEqual(0, self.act(TagIssue(issue.id, ('bug', 'ui'))))
        self.assertEqual(
            0, self.act(TagIssue(issue.id, ('bug',), enabled=False)),
        )
        self.assertEqual(['ui'], self.only_issue().all_tags())

    def test_tag_needs_names(self):
        issue = self.arrange_issue()
        self.assertEqual(1, self.act(TagIssue(issue.id)))

    def test_status(self):
        issue = self.arrange_issue()
        self.assertEqual(0, self.act(SetStatus(issue.id, 'closed')))
        self.assertEqual('closed', self.only_issue().status.name)

    def test_status_needs_name(self):
        issue = self.arrange_issue()
        self.assertEqual(1, self.act(SetStatus(issue.id)))

    def test_list_and_show(self):
        issue = self.arrange_issue()
        self.assertEqual(0, self.act(ListIssues(tag='bug')))
        self.assertEqual(0, self.act(ShowIssue(issue.id)))
        self.assertEqual(1, self.act(ShowIssue('x')))

    def act(self, command: Any) -> int:
        return self.handler.run(command)

    def arrange_issue(self) -> Issue:
        issue = Issue.new('Title', 'Body', 'bob', 'main')
        IssueRepository(self.store).save(self.issues() + [issue])
        return issue

    def issues(self) -> List[Issue]:
        return IssueRepository(self.store).load()

    def only_issue(self) -> Issue:
        issues = self.issues()
        self.assertEqual(1, len(issues))
        return issues[0]


class MemoryStoreHandlerTest(TestCase, HandlerScenarios):
    def make_store(self) -> IssueStore:
        return MemoryStore()


class FileStoreHandlerTest(TestCase, HandlerScenarios):
    def make_store(self) -> IssueStore:
        directory = TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        return FileStore(Path(directory.name) / 'issues.json')


class StoreFailureTest(TestCase):
    def test_store_errors_are_reported(self):
        handler = CommandHandler(
            IssueRepository(FailingStore()),
            author=lambda: 'alice',
            branch=lambda: None,
            editor=lambda template: 'Body',
        )
        self.assertEqual(1, handler.run(NewIssue(title='Crash')))
        self.assertEqual(1, handler.run(CommentOnIssue('1')))


class RecordingRepository(IssueRepository):
    def __init__(self, store: IssueStore) -> None:
        super().__init__(store)
        self.loaded: List[Issue] = []

    def load(self) -> List[Issue]:
        issues = super().load()
        self.loaded.extend(issues)
        return issues


class IssueUpdateTest(TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        self.issue = Issue.new('Title', 'Body', 'bob', 'main')
        IssueRepository(self.store).save([self.issue])
        self.repository = RecordingRepository(self.store)
        self.handler = CommandHandler(
            self.repository,
            author=lambda: 'alice',
            branch=lambda: 'main',
            editor=lambda template: 'Body',
        )

    def test_loaded_issues_are_left_untouched(self):
        self.assertEqual(0, self.handler.run(CommentOnIssue(self.issue.id)))
        self.assertEqual(0, self.handler.run(TagIssue(self.issue.id, ('bug',))))
        self.assertEqual(
            0, self.handler.run(SetStatus(self.issue.id, 'closed')),
        )
        self.assertEqual(3, len(self.repository.loaded))
        for loaded in self.repository.loaded:
            self.assertEqual('open', loaded.status.name)
        self.assertEqual([], self.repository.loaded[0].events)
        self.assertEqual(1, len(self.repository.loaded[1].events))

        [saved] = IssueRepository(self.store).load()
        self.assertEqual(2, len(saved.events))
        self.assertEqual('closed', saved.status.name)


class FileStoreTest(TestCase):
    def setUp(self) -> None:
        directory = TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.path = Path(directory.name) / 'nested' / 'issues.json'
        self.store = FileStore(self.path)

    def test_missing_file_is_empty(self):
        self.assertEqual([], self.store.read_all())

    def test_write_replaces_collection(self):
        self.store.write_all([{'title': 'first'}])
        self.store.write_all([{'title': 'second'}])
        self.assertEqual([{'title': 'second'}], self.store.read_all())
        self.assertEqual([self.path], list(self.path.parent.iterdir()))

    def test_invalid_json(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('[{', encoding='utf-8')
        with self.assertRaises(StoreError):
            self.store.read_all()

    def test_not_a_list(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('{}', encoding='utf-8')
        with self.assertRaises(StoreError):
            self.store.read_all()


class IssueRepositoryTest(TestCase):
    def test_unreadable_records_survive_save(self):
        store = MemoryStore([{'title': 'no version'}])
        repository = IssueRepository(store)
        self.assertEqual([], repository.load())
        issue = issue_with()
        repository.save([issue])
        self.assertEqual(2, len(store.records))
        self.assertEqual({'title': 'no version'}, store.records[1])

    def test_save_without_load_keeps_unreadable_records(self):
        store = MemoryStore([{'title': 'no version'}])
        IssueRepository(store).save([issue_with()])
        self.assertEqual(2, len(store.records))
        self.assertEqual({'title': 'no version'}, store.records[1])

    def test_issues_ordered_by_creation(self):
        later = issue_with(issue_id='2')
        later.time = at(30)
        store = MemoryStore(
            [encode_record(later), encode_record(issue_with(issue_id='1'))],
        )
        ids = [issue.id for issue in IssueRepository(store).load()]
        self.assertEqual(['1', '2'], ids)


class ConfigTest(TestCase):
    def setUp(self) -> None:
        directory = TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.path = Path(directory.name) / '.evict' / 'config'

    def test_missing_config(self):
        self.assertEqual(Config(), Config.load(self.path))

    def test_save_and_load(self):
        Config(author='alice').save(self.path)
        self.assertEqual(Config(author='alice'), Config.load(self.path))

    def test_unreadable_config(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('author = alice', encoding='utf-8')
        self.assertEqual(Config(), Config.load(self.path))

    def test_unwritable_config(self):
        self.path.mkdir(parents=True)
        with self.assertRaises(ConfigError):
            resolve_author(self.path, lambda: 'bob')

    def test_author_prompted_once(self):
        prompts = []

        def prompt() -> Text:
            prompts.append(True)
            return 'bob'

        self.assertEqual('bob', resolve_author(self.path, prompt))
        self.assertEqual('bob', resolve_author(self.path, prompt))
        self.assertEqual(1, len(prompts))


class CliTest(TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.store = MemoryStore()
        self.handler = CommandHandler(
            IssueRepository(self.store),
            author=lambda: 'alice',
            branch=lambda: 'main',
            editor=lambda template: 'Body',
        )

    def invoke(self, *args: Text) -> Any:
        return self.runner.invoke(app.cli, list(args), obj=self.handler)

    def test_new_and_list(self):
        result = self.invoke('new', '-t', 'Broken build', '--no-body')
        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn('Created issue', result.output)
        result = self.invoke('list')
        self.assertEqual(0, result.exit_code)
        self.assertIn('Broken build', result.output)

    def test_tag_then_show(self):
        self.invoke('new', 'Crash')
        [issue] = IssueRepository(self.store).load()
        self.assertEqual(0, self.invoke('tag', issue.id, 'bug').exit_code)
        result = self.invoke('show', issue.id)
        self.assertEqual(0, result.exit_code)
        self.assertIn('Title:   Crash', result.output)
        self.assertIn('Tags:    bug', result.output)

    def test_comment_without_id(self):
        result = self.invoke('comment')
        self.assertEqual(1, result.exit_code)
        self.assertIn(MISSING_ID, result.output)

    def test_unknown_option(self):
        result = self.invoke('list', '--bogus')
        self.assertEqual(1, result.exit_code)
        self.assertIn('Unknown argument: --bogus', result.output)

    def test_file_backed_run(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(
                app.cli, ['new', '--no-body', 'Slow start'], input='carol\n',
            )
            self.assertEqual(0, result.exit_code, result.output)
            result = self.runner.invoke(app.cli, ['list'])
            self.assertIn('Slow start', result.output)
            self.assertEqual(
                Config(author='carol'), Config.load(Path('.evict/config')),
            )

    def test_unwritable_config_is_reported(self):
        with self.runner.isolated_filesystem():
            Path('.evict/config').mkdir(parents=True)
            result = self.runner.invoke(
                app.cli, ['new', '--no-body', 'Slow start'], input='carol\n',
            )
            self.assertEqual(1, result.exit_code, result.output)
            self.assertIn('Could not write', result.output)
            self.assertFalse(Path('.evict/issues.json').exists())


class BranchTest(TestCase):
    def test_outside_a_repository(self):
        with TemporaryDirectory() as directory:
            self.assertIsNone(current_branch(Path(directory)))

    def test_checked_out_branch(self):
        done = subprocess.CompletedProcess([], 0, stdout='main\n', stderr='')
        with patch('evict.vcs.subprocess.run', return_value=done):
            self.assertEqual('main', current_branch())

    def test_detached_head(self):
        done = subprocess.CompletedProcess([], 0, stdout='HEAD\n', stderr='')
        with patch('evict.vcs.subprocess.run', return_value=done):
            self.assertIsNone(current_branch())

    def test_git_fails(self):
        done = subprocess.CompletedProcess([], 128, stdout='', stderr='fatal')
        with patch('evict.vcs.subprocess.run', return_value=done):
            self.assertIsNone(current_branch())

    def test_git_missing(self):
        missing = FileNotFoundError('git')
        with patch('evict.vcs.subprocess.run', side_effect=missing):
            self.assertIsNone(current_branch())


class ComposeTest(TestCase):
    def test_written_text(self):
        with patch('evict.editor.click.edit', return_value='Seen it\n'):
            self.assertEqual('Seen it\n', compose())

    def test_editor_closed_without_saving(self):
        with patch('evict.editor.click.edit', return_value=None):
            self.assertIsNone(compose())

    def test_blank_text(self):
        with patch('evict.editor.click.edit', return_value='  \n'):
            self.assertIsNone(compose())
