"""
Tag System engine

A tag system repeatedly reads the first symbol of its word, appends that
symbol's production to the end of the word and removes deletion_number
symbols from the front. It stops once a symbol with a HALT rule is read.

The word lives on a Tape: the head marks the front of the word, and removed
symbols are overwritten with blanks as the head moves past them. Once the word
is exhausted the head reads the blank, so the blank needs a rule as well.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from machine_errors import AlreadyHalted, ConstructionError
from machine_tape import Tape
from rule_table import Append, Halt, RuleTable
from turing_machine import check_alphabet, check_content

logger = logging.getLogger(__name__)

DEFAULT_DELETION_NUMBER = 2


@dataclass(frozen=True)
class TagSystemDescription:
    """Validated-on-build description of a tag system."""
    symbols: Tuple[str, ...]
    deletion_number: int = DEFAULT_DELETION_NUMBER
    transitions: Tuple[Tuple[str, object], ...] = field(default_factory=tuple)
    input: str = ''

    @property
    def blank(self):
        return self.symbols[0]


class TagSystem:
    """
    Tag system stepping over a symbol-keyed RuleTable.

    Args:
        description: TagSystemDescription to build the machine from.

    Raises:
        ConstructionError: If the description is inconsistent.
    """

    kind = 'TagSystem'

    def __init__(self, description: TagSystemDescription):
        symbols = tuple(description.symbols)
        check_alphabet(symbols)
        if description.deletion_number < 1:
            raise ConstructionError(f"Deletion number must be positive, got {description.deletion_number}")

        for symbol, rule in description.transitions:
            if isinstance(rule, Append):
                undefined = sorted(set(rule.string) - set(symbols))
                if undefined:
                    raise ConstructionError(f"Rule for {symbol!r} appends undefined symbols {undefined}")
            elif not isinstance(rule, Halt):
                raise ConstructionError(f"Invalid rule for a tag system: {rule!r}")

        self.rules = RuleTable(description.transitions, symbols)
        # only halting symbols may have several candidates
        for symbol in symbols:
            rules = self.rules.candidates(symbol)
            if len(rules) > 1 and any(isinstance(rule, Append) for rule in rules):
                raise ConstructionError(f"Symbol {symbol!r} must have exactly one rule, has {len(rules)}")
        self.symbols = symbols
        self.deletion_number = description.deletion_number

        check_content(description.input, symbols)
        self.input = description.input
        self._tape = Tape(self.blank, description.input)
        self._halted = False
        logger.debug("Built %d-tag system over %r", self.deletion_number, ''.join(symbols))

    @property
    def blank(self):
        return self.symbols[0]

    @property
    def current_state(self) -> str:
        return 'halt' if self._halted else 'tag'

    @property
    def content(self) -> str:
        """Full tape content, including the blanks left by deleted symbols."""
        return str(self._tape)

    @property
    def word(self) -> str:
        """The current word, from the head to the end of the tape."""
        return ''.join(self._tape.forward_from_head())

    @property
    def head_index(self) -> int:
        return self._tape.head_index()

    def read(self):
        return self._tape.read()

    def rules_for(self, symbol) -> Tuple[object, ...]:
        """All rules registered for symbol."""
        return self.rules.candidates(symbol)

    def is_halted(self) -> bool:
        return self._halted

    def reset(self, content: str, head: int = 0):
        """Replace the word with content and clear the halted flag."""
        check_content(content, self.symbols)
        self._tape = Tape(self.blank, content, head)
        self._halted = False

    def _key(self):
        if self._halted:
            raise AlreadyHalted("The tag system has already halted")
        return self._tape.read()

    def is_deterministic(self) -> bool:
        return self.rules.is_deterministic(self._key())

    def execute(self, choice: Optional[int] = None):
        """
        Run the tag system for one step.

        Args:
            choice: Index of the rule to apply. Must be given exactly when the
                    symbol at the front of the word has several rules.

        Returns:
            The rule that was applied.

        Raises:
            AlreadyHalted: If the tag system has halted.
            ChoiceRequired, ChoiceNotApplicable, ChoiceOutOfRange: If choice
                does not fit the current symbol. The tape is left unchanged.
        """
        rule = self.rules.resolve(self._key(), choice)

        if isinstance(rule, Append):
            self._tape.append(rule.string)
            for _ in range(self.deletion_number):
                self._tape.write(self.blank)
                self._tape.shift(1)
        else:
            self._halted = True
            logger.debug("Tag system halted on %r", self._tape.read())
        return rule

    def render(self) -> str:
        left, symbol, right = self._tape.context()
        return f"{left}({self.current_state}, {symbol}){right}"

    def __str__(self):
        return self.render()
