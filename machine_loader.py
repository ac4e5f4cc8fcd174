"""
YAML machine descriptions.

A Turing machine document:

    class: TuringMachine
    symbols: [' ', '0', '1']   # first symbol is the blank
    states: 3                  # optional, defaults to the highest state in table
    input: '0110'
    table:
      1:
        '0': {write: '1', R: 2}
        '1': R                 # move right, keep symbol and state
        ' ': [{write: '1', L: 1}, halt]   # several rules: non-deterministic
      2:
        [0, 1]: {L: 1}         # symbol groups; no write keeps the symbol
      3:                       # no transitions: halt on every symbol

A tag system document:

    class: TagSystem
    symbols: ['_', 'a', 'b', 'x']
    deletion number: 2
    input: x
    table:
      x: aa                    # append string
      a: halt
      b: {append: ''}          # explicit form, for empty or 'halt' productions
      _: halt

Every problem found while parsing is raised as ConstructionError.
"""

import logging
import re

import yaml

from machine import build_machine
from machine_errors import ConstructionError
from rule_table import HALT, LEFT, RIGHT, Append, StateTransition
from tag_system import DEFAULT_DELETION_NUMBER, TagSystemDescription
from turing_machine import TuringMachineDescription

logger = logging.getLogger(__name__)

HALT_KEYWORD = 'halt'
MOVES = {'L': LEFT, 'R': RIGHT}

# a table line whose key is a flow sequence, e.g. "    [0, 1]: R"
GROUP_KEY = re.compile(r'^([ \t]*)(\[[^\]\n]*\])([ \t]*:)', re.MULTILINE)


def _quote_group_keys(yaml_string):
    """
    Turn symbol group keys into single-quoted strings.

    YAML cannot use a list as a mapping key, so '[0,1]: R' is loaded as the
    string key '[0,1]' and expanded by _symbol_group.
    """
    def quote(match):
        indent, key, colon = match.groups()
        return "{}'{}'{}".format(indent, key.replace("'", "''"), colon)

    return GROUP_KEY.sub(quote, yaml_string)


def _symbol_group(key, symbols, context):
    """
    Expand a table key into the alphabet symbols it names.

    A key is a single symbol or a group such as [0, 1, ' '], which is read back
    as a YAML flow sequence. A symbol that is itself bracketed is taken as is.
    """
    text = str(key)
    if text in symbols or not (text.startswith('[') and text.endswith(']')):
        group = [text]
    else:
        try:
            group = [str(s) for s in yaml.safe_load(text)]
        except (yaml.YAMLError, TypeError) as e:
            raise ConstructionError(f"Cannot parse symbol group {text} in {context}") from e

    undefined = [s for s in group if s not in symbols]
    if undefined:
        raise ConstructionError(f"Symbols {undefined} in {context} are not in the alphabet")
    return group


def _parse_state(value, context):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConstructionError(f"State must be an integer in {context}, got {value!r}") from None


def _parse_turing_rule(state, read_symbol, value):
    """
    Parse a single Turing machine rule.

    Handles:
        'halt' -> HALT
        'R' / 'L' -> keep symbol, same state
        {L: next_state} / {R: next_state} -> keep symbol
        {write: x, L: next_state} -> write x
        {write: x, L} -> write x, same state
    """
    context = f"({state}, {read_symbol!r})"
    if isinstance(value, str) and value == HALT_KEYWORD:
        return HALT

    if isinstance(value, str) and value in MOVES:
        return StateTransition(state, read_symbol, MOVES[value])

    if isinstance(value, dict):
        write_symbol = value.get('write', None)
        write_symbol = read_symbol if write_symbol is None else str(write_symbol)

        directions = [d for d in MOVES if d in value]
        if len(directions) != 1:
            raise ConstructionError(f"Expected exactly one direction (L/R) in rule for {context}: {value}")
        direction = directions[0]
        next_state = state if value[direction] is None else _parse_state(value[direction], context)

        unknown = set(value) - {'write', direction}
        if unknown:
            raise ConstructionError(f"Unexpected keys {sorted(unknown)} in rule for {context}")
        return StateTransition(next_state, write_symbol, MOVES[direction])

    raise ConstructionError(f"Cannot parse rule for {context}: {value!r}")


def _parse_tag_rule(symbol, value):
    """
    Parse a single tag system rule: 'halt', an append string, or {append: s}.
    """
    if value == HALT_KEYWORD:
        return HALT
    if isinstance(value, dict):
        if set(value) != {'append'}:
            raise ConstructionError(f"Cannot parse rule for {symbol!r}: {value}")
        value = value['append']
    if value is None:
        value = ''
    if isinstance(value, (str, int)):
        return Append(str(value))
    raise ConstructionError(f"Cannot parse rule for {symbol!r}: {value!r}")


def _rule_values(value):
    """A list value holds several candidate rules; anything else is one rule."""
    return value if isinstance(value, list) else [value]


def _parse_symbols(value):
    if value is None:
        raise ConstructionError("Machine description has no symbols")
    if isinstance(value, str):
        return tuple(value)
    if isinstance(value, list):
        return tuple(str(s) for s in value)
    raise ConstructionError(f"Cannot parse symbols: {value!r}")


def _parse_input(value):
    return '' if value is None else str(value)


def _parse_turing_machine(data):
    symbols = _parse_symbols(data.get('symbols'))
    table = data.get('table') or {}
    if not isinstance(table, dict):
        raise ConstructionError("Transition table must be a mapping of states")

    transitions = []
    for state_key, state_rules in table.items():
        state = _parse_state(state_key, 'table')
        if state_rules is None:
            # a state without transitions halts on every symbol
            transitions.extend(((state, symbol), HALT) for symbol in symbols)
            continue
        if not isinstance(state_rules, dict):
            raise ConstructionError(f"Rules of state {state} must be a mapping of symbols")

        for key, value in state_rules.items():
            for read_symbol in _symbol_group(key, symbols, f"state {state}"):
                for rule_value in _rule_values(value):
                    rule = _parse_turing_rule(state, read_symbol, rule_value)
                    transitions.append(((state, read_symbol), rule))

    num_states = data.get('states')
    if num_states is None:
        num_states = max((state for (state, _), _ in transitions), default=0)
    num_states = _parse_state(num_states, 'states')

    return TuringMachineDescription(symbols, num_states, tuple(transitions), _parse_input(data.get('input')))


def _parse_tag_system(data):
    symbols = _parse_symbols(data.get('symbols'))
    table = data.get('table') or {}
    if not isinstance(table, dict):
        raise ConstructionError("Transition table must be a mapping of symbols")

    transitions = []
    for key, value in table.items():
        for symbol in _symbol_group(key, symbols, 'table'):
            for rule_value in _rule_values(value):
                transitions.append((symbol, _parse_tag_rule(symbol, rule_value)))

    deletion_number = data.get('deletion number', data.get('deletion_number', DEFAULT_DELETION_NUMBER))
    try:
        deletion_number = int(deletion_number)
    except (TypeError, ValueError):
        raise ConstructionError(f"Deletion number must be an integer, got {deletion_number!r}") from None

    return TagSystemDescription(symbols, deletion_number, tuple(transitions), _parse_input(data.get('input')))


PARSERS = {
    'TuringMachine': _parse_turing_machine,
    'TagSystem': _parse_tag_system,
}


def parse_yaml_machine(yaml_string):
    """
    Parse a YAML machine document into a description.

    Args:
        yaml_string: YAML text of a TuringMachine or TagSystem document.

    Returns:
        TuringMachineDescription or TagSystemDescription

    Raises:
        ConstructionError: If the YAML is malformed or does not describe a machine.
    """
    try:
        data = yaml.safe_load(_quote_group_keys(yaml_string))
    except yaml.YAMLError as e:
        raise ConstructionError(f"Invalid YAML machine description: {e}") from e

    if not isinstance(data, dict):
        raise ConstructionError("Machine description must be a YAML mapping")

    machine_class = data.get('class')
    if machine_class not in PARSERS:
        raise ConstructionError(f"Unknown machine class {machine_class!r}, expected one of {sorted(PARSERS)}")
    return PARSERS[machine_class](data)


def load_description(path):
    """Read and parse the YAML machine description stored at path."""
    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise ConstructionError(f"Cannot read machine description {path}: {e}") from e

    description = parse_yaml_machine(text)
    logger.info("Loaded %s description from %s", type(description).__name__, path)
    return description


def load_machine(path):
    """Load a YAML machine description and build its engine."""
    return build_machine(load_description(path))
