"""
Rules and rule tables.

A rule table maps a key to the ordered tuple of rules that may fire for it:

    - Turing machines are keyed by (state, symbol)
    - Tag systems are keyed by the symbol alone

A key with more than one rule is a non-deterministic choice point. The table
never picks among candidates itself; the caller supplies the choice index.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Optional, Tuple

from machine_errors import (
    ChoiceNotApplicable,
    ChoiceOutOfRange,
    ChoiceRequired,
    ConstructionError,
)

logger = logging.getLogger(__name__)

LEFT = -1
RIGHT = 1


@dataclass(frozen=True)
class StateTransition:
    """Turing machine rule: write next_symbol, move by shift, enter next_state."""
    next_state: int
    next_symbol: str
    shift: int

    def __post_init__(self):
        if self.shift not in (LEFT, RIGHT):
            raise ConstructionError(f"shift must be {LEFT} or {RIGHT}, got {self.shift!r}")

    def __str__(self):
        direction = 'L' if self.shift == LEFT else 'R'
        return f"write {self.next_symbol!r}, {direction}, q{self.next_state}"


@dataclass(frozen=True)
class Append:
    """Tag system rule: append string to the tail of the word."""
    string: str

    def __str__(self):
        return f"append {self.string!r}"


@dataclass(frozen=True)
class Halt:
    """Rule that stops the machine without touching the tape."""

    def __str__(self):
        return "halt"


HALT = Halt()


class RuleTable:
    """
    Immutable mapping from keys to their candidate rules.

    Args:
        entries: Iterable of (key, rule) pairs. Rules registered for the
                 same key keep their order; that order defines choice indices.
        required_keys: Every key the machine can ever look up. Each must get at
                       least one rule, and no entry may use a key outside them.

    Raises:
        ConstructionError: If an entry uses an undefined key or a required
                           key has no rule.
    """

    def __init__(self, entries: Iterable[Tuple[Hashable, object]], required_keys: Iterable[Hashable]):
        grouped: Dict[Hashable, list] = {key: [] for key in required_keys}
        for key, rule in entries:
            if key not in grouped:
                raise ConstructionError(f"Rule {rule} uses undefined key {key!r}")
            grouped[key].append(rule)

        missing = [key for key, rules in grouped.items() if not rules]
        if missing:
            raise ConstructionError(f"No rule defined for {', '.join(repr(k) for k in missing)}")

        self._rules: Dict[Hashable, Tuple[object, ...]] = {
            key: tuple(rules) for key, rules in grouped.items()
        }
        logger.debug("Built rule table with %d keys", len(self._rules))

    def __contains__(self, key):
        return key in self._rules

    def __len__(self):
        return len(self._rules)

    def candidates(self, key) -> Tuple[object, ...]:
        """Return all rules registered for key, in registration order."""
        try:
            return self._rules[key]
        except KeyError:
            raise ConstructionError(f"No rules registered for key {key!r}") from None

    def is_deterministic(self, key) -> bool:
        """True iff exactly one rule is registered for key."""
        return len(self.candidates(key)) == 1

    def lookup(self, key, choice: int = 0):
        """
        Return the rule at index choice among the candidates for key.

        Raises:
            ConstructionError: If key was never registered.
            ChoiceOutOfRange: If choice is not in [0, number of candidates).
        """
        rules = self.candidates(key)
        if not 0 <= choice < len(rules):
            raise ChoiceOutOfRange(
                f"Choice {choice} is out of range for {key!r}, which has {len(rules)} rules"
            )
        return rules[choice]

    def resolve(self, key, choice: Optional[int] = None):
        """
        Pick the rule to apply for key.

        A deterministic key must be stepped without a choice and a
        non-deterministic key must be stepped with one.

        Raises:
            ChoiceNotApplicable: If a choice was given for a deterministic key.
            ChoiceRequired: If no choice was given for a non-deterministic key.
            ChoiceOutOfRange: If the choice does not name a candidate.
        """
        if self.is_deterministic(key):
            if choice is not None:
                raise ChoiceNotApplicable(f"{key!r} has a single rule; no choice can be made")
            return self.lookup(key)
        if choice is None:
            raise ChoiceRequired(
                f"{key!r} has {len(self.candidates(key))} rules; a choice is required"
            )
        return self.lookup(key, choice)
