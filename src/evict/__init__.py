from . import codec, commands, events
from .codec import DecodeError, UnsupportedFormat, decode_issue, encode_issue
from .commands import Command, CommandHandler, Handler, parse_command
from .events import Comment, Tag, TimelineEvent
from .fsm import Continue, Halt, StateMachine
from .issue import Issue, IssueStatus
from .selection import SelectionError
from .store import FileStore, IssueRepository, MemoryStore, StoreError


__all__ = [
    'Command',
    'CommandHandler',
    'Comment',
    'Continue',
    'DecodeError',
    'FileStore',
    'Halt',
    'Handler',
    'Issue',
    'IssueRepository',
    'IssueStatus',
    'MemoryStore',
    'SelectionError',
    'StateMachine',
    'StoreError',
    'Tag',
    'TimelineEvent',
    'UnsupportedFormat',
    'codec',
    'commands',
    'decode_issue',
    'encode_issue',
    'events',
    'parse_command',
]
