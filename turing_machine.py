"""
Turing Machine engine

A Turing machine is described by:
    - symbols: the tape alphabet, whose first symbol is the blank
    - num_states: control states are the integers 1..num_states, 1 is initial
    - transitions: list of ((state, symbol), rule) pairs
    - input: the initial tape content (head on its first cell)

Rules are StateTransition(next_state, next_symbol, shift) or HALT. Several
rules for the same (state, symbol) make that configuration non-deterministic;
the caller then picks one by index when stepping.

Programs written as 5-tuples (current_state, read, write, direction, next_state)
with named states can be converted with description_from_program().
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from machine_errors import AlreadyHalted, ConstructionError
from machine_tape import Tape
from rule_table import HALT, LEFT, RIGHT, Halt, RuleTable, StateTransition

logger = logging.getLogger(__name__)

INITIAL_STATE = 1
HALT_STATE = -1


@dataclass(frozen=True)
class TuringMachineDescription:
    """Validated-on-build description of a Turing machine."""
    symbols: Tuple[str, ...]
    num_states: int
    transitions: Tuple[Tuple[Tuple[int, str], object], ...] = field(default_factory=tuple)
    input: str = ''

    @property
    def blank(self):
        return self.symbols[0]


def check_alphabet(symbols: Sequence[str]):
    """
    Validate a tape alphabet.

    Raises:
        ConstructionError: If the alphabet is empty, has duplicates or
                           contains something other than single characters.
    """
    if not symbols:
        raise ConstructionError("The alphabet must contain at least the blank symbol")
    for symbol in symbols:
        if not isinstance(symbol, str) or len(symbol) != 1:
            raise ConstructionError(f"Symbols must be single characters, got {symbol!r}")
    if len(set(symbols)) != len(symbols):
        raise ConstructionError(f"Duplicate symbols in alphabet {list(symbols)}")


def check_content(content: str, symbols: Sequence[str]):
    """Raise ConstructionError if content uses a symbol outside the alphabet."""
    undefined = sorted(set(content) - set(symbols))
    if undefined:
        raise ConstructionError(f"Tape content uses undefined symbols {undefined}")


class TuringMachine:
    """
    Single-tape Turing machine stepping over a RuleTable.

    Args:
        description: TuringMachineDescription to build the machine from.

    Raises:
        ConstructionError: If the description is inconsistent.
    """

    kind = 'TuringMachine'

    def __init__(self, description: TuringMachineDescription):
        symbols = tuple(description.symbols)
        check_alphabet(symbols)
        if description.num_states < 1:
            raise ConstructionError(f"A Turing machine needs at least one state, got {description.num_states}")

        for (state, symbol), rule in description.transitions:
            if isinstance(rule, StateTransition):
                if not INITIAL_STATE <= rule.next_state <= description.num_states:
                    raise ConstructionError(
                        f"Rule for ({state}, {symbol!r}) enters undefined state {rule.next_state}"
                    )
                if rule.next_symbol not in symbols:
                    raise ConstructionError(
                        f"Rule for ({state}, {symbol!r}) writes undefined symbol {rule.next_symbol!r}"
                    )
            elif not isinstance(rule, Halt):
                raise ConstructionError(f"Invalid rule for a Turing machine: {rule!r}")

        required = [(state, symbol)
                    for state in range(INITIAL_STATE, description.num_states + 1)
                    for symbol in symbols]
        self.rules = RuleTable(description.transitions, required)
        self.symbols = symbols
        self.num_states = description.num_states

        check_content(description.input, symbols)
        self._tape = Tape(self.blank, description.input)
        self._state = INITIAL_STATE
        logger.debug("Built Turing machine with %d states over %r", self.num_states, ''.join(symbols))

    @property
    def blank(self):
        return self.symbols[0]

    @property
    def current_state(self) -> int:
        """Current control state; HALT_STATE once the machine halted."""
        return self._state

    @property
    def content(self) -> str:
        """Full tape content from front to end."""
        return str(self._tape)

    @property
    def head_index(self) -> int:
        return self._tape.head_index()

    def read(self):
        """Symbol under the head."""
        return self._tape.read()

    def is_halted(self) -> bool:
        return self._state == HALT_STATE

    def reset(self, content: str, head: int = 0):
        """
        Replace the tape with content and return to the initial state.

        Args:
            content: New tape content.
            head: Index of the head cell within content (default: 0).
        """
        check_content(content, self.symbols)
        self._tape = Tape(self.blank, content, head)
        self._state = INITIAL_STATE

    def _key(self):
        if self.is_halted():
            raise AlreadyHalted("The machine has already halted")
        return (self._state, self._tape.read())

    def is_deterministic(self) -> bool:
        """Whether the next step has a single candidate rule."""
        return self.rules.is_deterministic(self._key())

    def execute(self, choice: Optional[int] = None):
        """
        Run the machine for one step.

        Args:
            choice: Index of the rule to apply. Must be given exactly when the
                    current (state, symbol) has several rules.

        Returns:
            The rule that was applied.

        Raises:
            AlreadyHalted: If the machine has halted.
            ChoiceRequired, ChoiceNotApplicable, ChoiceOutOfRange: If choice
                does not fit the current configuration. The machine is left
                unchanged.
        """
        rule = self.rules.resolve(self._key(), choice)

        if isinstance(rule, StateTransition):
            self._tape.write(rule.next_symbol)
            self._tape.shift(rule.shift)
            self._state = rule.next_state
        else:
            self._state = HALT_STATE
            logger.debug("Turing machine halted")
        return rule

    def render(self) -> str:
        """Tape content with the head cell shown as (state, symbol)."""
        left, symbol, right = self._tape.context()
        state = 'halt' if self.is_halted() else f"q{self._state}"
        return f"{left}({state}, {symbol}){right}"

    def __str__(self):
        return self.render()


def description_from_program(program, symbols, initial_state='A', halt_state='H', input=''):
    """
    Convert a 5-tuple program with named states into a TuringMachineDescription.

    Args:
        program: List of 5-tuples (current_state, read, write, direction, next_state).
                 direction is 'L' or 'R'; write may be None to keep the read symbol.
        symbols: Tape alphabet, blank first.
        initial_state: Name of the starting state, numbered 1.
        halt_state: Name of the halt state. Entering it is modelled as a
                    numbered state whose every symbol maps to HALT.
        input: Initial tape content.

    Returns:
        TuringMachineDescription
    """
    names: List[str] = [initial_state]
    for current_state, _, _, _, next_state in program:
        for name in (current_state, next_state):
            if name != halt_state and name not in names:
                names.append(name)
    names.append(halt_state)
    numbers = {name: i for i, name in enumerate(names, start=INITIAL_STATE)}

    moves = {'L': LEFT, 'R': RIGHT}
    transitions = []
    for current_state, read, write, direction, next_state in program:
        if direction not in moves:
            raise ConstructionError(f"Bad direction {direction!r} in {(current_state, read, write, direction, next_state)}")
        write = read if write is None else write
        rule = StateTransition(numbers[next_state], str(write), moves[direction])
        transitions.append(((numbers[current_state], str(read)), rule))
    for symbol in symbols:
        transitions.append(((numbers[halt_state], symbol), HALT))

    return TuringMachineDescription(tuple(symbols), len(names), tuple(transitions), input)


# 4-State Busy Beaver
# This machine writes 13 ones on the tape before halting
# It runs for 107 steps (plus one more to apply the halt rule)
BUSY_BEAVER_4_PROGRAM = [
    # (current_state, read, write, direction, next_state)
    ('A', '0', '1', 'R', 'B'),
    ('A', '1', '1', 'L', 'B'),
    ('B', '0', '1', 'L', 'A'),
    ('B', '1', '0', 'L', 'C'),
    ('C', '0', '1', 'R', 'H'),  # Halt when in state C reading 0
    ('C', '1', '1', 'L', 'D'),
    ('D', '0', '1', 'R', 'D'),
    ('D', '1', '0', 'R', 'A'),
]

BUSY_BEAVER_4 = description_from_program(BUSY_BEAVER_4_PROGRAM, ('0', '1'))
