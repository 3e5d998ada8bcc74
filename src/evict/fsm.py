from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Text, TypeVar, Union

logger = logging.getLogger(__name__)

TState = TypeVar('TState')


@dataclass(frozen=True)
class Continue(Generic[TState]):
    state: TState


@dataclass(frozen=True)
class Halt(Generic[TState]):
    state: TState


NextState = Union[Continue[TState], Halt[TState]]
Step = Callable[[TState, Text], NextState[TState]]


class StateMachine(Generic[TState]):
    """Folds tokens into an accumulated state, one token at a time.

    ``step`` returns ``Continue`` to keep consuming or ``Halt`` to stop; once
    halted, further tokens are ignored.
    """

    def __init__(self, step: Step[TState], initial: TState) -> None:
        self._step = step
        self._state = initial
        self._halted = False

    @property
    def halted(self) -> bool:
        return self._halted

    def process(self, token: Text) -> None:
        if self._halted:
            logger.debug('Ignoring %r after halt', token)
            return
        outcome = self._step(self._state, token)
        if isinstance(outcome, Halt):
            logger.debug('Halted on %r', token)
            self._halted = True
        elif not isinstance(outcome, Continue):
            raise TypeError(f'Step returned {outcome!r}')
        self._state = outcome.state

    def process_all(self, tokens: Iterable[Text]) -> None:
        for token in tokens:
            self.process(token)

    def extract_state(self) -> TState:
        return self._state


def parse_arguments(
        step: Step[TState], initial: TState, tokens: Iterable[Text],
) -> TState:
    machine = StateMachine(step, initial)
    machine.process_all(tokens)
    return machine.extract_state()
