"""
Tests for YAML machine descriptions.
"""

from pathlib import Path

import pytest

from machine import build_machine
from machine_errors import ConstructionError
from machine_loader import load_description, load_machine, parse_yaml_machine
from rule_table import HALT, LEFT, RIGHT, Append, StateTransition
from tag_system import TagSystem, TagSystemDescription
from turing_machine import BUSY_BEAVER_4, TuringMachine, TuringMachineDescription
from utm_encoder import encode

MACHINES = Path(__file__).parent / 'machines'


def test_busy_beaver_file_matches_program():
    description = load_description(MACHINES / 'busy_beaver_4.yaml')
    assert isinstance(description, TuringMachineDescription)
    assert description.num_states == BUSY_BEAVER_4.num_states
    assert set(description.transitions) == set(BUSY_BEAVER_4.transitions)


def test_load_machine_builds_engine():
    machine = load_machine(MACHINES / 'busy_beaver_4.yaml')
    assert isinstance(machine, TuringMachine)
    assert machine.content == '0'


def test_tag_system_files():
    machine = load_machine(MACHINES / 'tag_x_aa.yaml')
    assert isinstance(machine, TagSystem)
    assert machine.symbols == ('_', 'a', 'b', 'x')
    assert machine.deletion_number == 2
    assert machine.rules_for('x') == (Append('aa'),)
    assert machine.rules_for('_') == (HALT,)
    assert encode(machine).tape == "1b1bbb111111b111111bbbb111"

    machine = load_machine(MACHINES / 'tag_two_symbols.yaml')
    assert encode(machine).head_index == 39


def test_non_deterministic_file():
    machine = load_machine(MACHINES / 'coin_flip.yaml')
    assert machine.rules.candidates((1, '_')) == (StateTransition(1, '1', RIGHT), HALT)


def test_rule_shorthands():
    description = parse_yaml_machine("""
class: TuringMachine
symbols: ' ab'
input: ab
table:
  1:
    a: R
    b: {L: 2}
    ' ': {write: a, R}
  2:
    [a,b, ' ']: {write: b, R: 1}
""")
    assert description.num_states == 2
    assert description.input == 'ab'
    rules = dict(description.transitions)
    assert rules[(1, 'a')] == StateTransition(1, 'a', RIGHT)
    assert rules[(1, 'b')] == StateTransition(2, 'b', LEFT)
    assert rules[(1, ' ')] == StateTransition(1, 'a', RIGHT)
    for symbol in ('a', 'b', ' '):
        assert rules[(2, symbol)] == StateTransition(1, 'b', RIGHT)
    build_machine(description)


def test_numeric_symbols():
    description = parse_yaml_machine("""
class: TuringMachine
symbols: [0, 1]
table:
  1:
    0: {write: 1, R: 2}
    1: halt
  2:
""")
    assert description.symbols == ('0', '1')
    rules = dict(description.transitions)
    assert rules[(1, '0')] == StateTransition(2, '1', RIGHT)
    assert rules[(2, '0')] == HALT
    assert rules[(2, '1')] == HALT


def test_tag_system_rule_forms():
    description = parse_yaml_machine("""
class: TagSystem
symbols: [_, h, x, y]
deletion number: 1
table:
  x: hx
  y: {append: ''}
  [h, _]: halt
""")
    assert isinstance(description, TagSystemDescription)
    assert description.deletion_number == 1
    assert description.transitions == (
        ('x', Append('hx')), ('y', Append('')), ('h', HALT), ('_', HALT))
    assert description.input == ''
    build_machine(description)


def test_explicit_append_of_halt_keyword():
    description = parse_yaml_machine("""
class: TagSystem
symbols: [_, a, h, l, t, x]
table:
  x: {append: halt}
  [_, a, h, l, t]: halt
""")
    assert dict(description.transitions)['x'] == Append('halt')


def test_tag_system_with_several_append_candidates_is_rejected():
    description = parse_yaml_machine("""
class: TagSystem
symbols: [_, h, x]
table:
  x: [hx, {append: ''}]
  [h, _]: halt
""")
    assert description.transitions[:2] == (('x', Append('hx')), ('x', Append('')))
    with pytest.raises(ConstructionError, match="exactly one rule"):
        build_machine(description)


def test_symbol_group_outside_alphabet():
    with pytest.raises(ConstructionError, match="not in the alphabet"):
        parse_yaml_machine("""
class: TuringMachine
symbols: [0, 1]
table:
  1:
    [0, 2]: halt
""")
    with pytest.raises(ConstructionError, match="not in the alphabet"):
        parse_yaml_machine("class: TagSystem\nsymbols: [_, x]\ntable:\n  z: halt\n")


def test_default_deletion_number():
    description = parse_yaml_machine("""
class: TagSystem
symbols: [_]
table:
  _: halt
""")
    assert description.deletion_number == 2


@pytest.mark.parametrize("text, message", [
    ("class: TuringMachine\nsymbols: [0]\ntable: {1: {0: {write: 0}}}", "direction"),
    ("class: TuringMachine\nsymbols: [0]\ntable: {1: {0: {write: 0, L: 1, R: 1}}}", "direction"),
    ("class: TuringMachine\nsymbols: [0]\ntable: {1: {0: {L: 1, jump: 2}}}", "Unexpected keys"),
    ("class: TuringMachine\nsymbols: [0]\ntable: {one: {0: halt}}", "State must be an integer"),
    ("class: TuringMachine\nsymbols: [0]\ntable: {1: {0: 5}}", "Cannot parse rule"),
    ("class: TuringMachine\ntable: {1: {0: halt}}", "no symbols"),
    ("class: TagSystem\nsymbols: [_]\ndeletion number: two\ntable: {_: halt}", "Deletion number"),
    ("class: TagSystem\nsymbols: [_]\ntable: {_: {prepend: x}}", "Cannot parse rule"),
    ("class: Automaton\nsymbols: [_]", "Unknown machine class"),
    ("- just\n- a list", "YAML mapping"),
    ("class: [unclosed", "Invalid YAML"),
])
def test_malformed_descriptions(text, message):
    with pytest.raises(ConstructionError, match=message):
        parse_yaml_machine(text)


def test_inconsistent_description_fails_on_build():
    description = parse_yaml_machine("""
class: TuringMachine
symbols: [0, 1]
table:
  1:
    0: halt
""")
    with pytest.raises(ConstructionError, match="No rule defined"):
        build_machine(description)


def test_missing_file():
    with pytest.raises(ConstructionError, match="Cannot read"):
        load_description(MACHINES / 'does_not_exist.yaml')


def test_unknown_description_type():
    with pytest.raises(ConstructionError, match="Unknown machine description"):
        build_machine(object())
