"""
Encoding of a 2-tag system as the initial tape of the universal machine UTM(5,5).

The alphabet symbols 'a' and 'b' are structural markers; every other
non-blank symbol is a data symbol. Each symbol s is represented on the UTM tape
as a run of N(s) ones, where the N-values are:

    N(first data symbol) = 3
    N(b)                 = 1
    N(next data symbol)  = N(previous data symbol) + len(production of previous) + 4
    N(a)                 = N(last data symbol) + 2

The encoded tape is laid out as

    1b1b | bb <production of d_k reversed> | ... | bb <production of d_1 reversed> | bbb | word

where a production character c is written as 1^N(c) followed by '1b' when c is
a marker and '1b1' otherwise, and the word's characters are written as 1^N(c)
separated by 'c'. The UTM starts with its head on the first cell of the word.

Halting data symbols have no production block and count as producing the
empty string in the N-value recurrence.
"""

from collections import namedtuple
from typing import Dict, List, Optional

from machine_errors import ConstructionError
from rule_table import Append
from tag_system import TagSystem

MARKERS = ('a', 'b')
UTM_SYMBOLS = ('1', 'b', 'c')

HEADER = '1b1b'
PRODUCTION_SEPARATOR = 'bb'
WORD_DELIMITER = 'bbb'
WORD_SEPARATOR = 'c'

EncodedTape = namedtuple('EncodedTape', ['tape', 'head_index'])


def data_symbols(tag_system: TagSystem) -> List[str]:
    """Non-blank, non-marker symbols in declaration order."""
    return [s for s in tag_system.symbols[1:] if s not in MARKERS]


def production(tag_system: TagSystem, symbol) -> Optional[str]:
    """
    Append string of a data symbol, or None when the symbol halts.

    Raises:
        ConstructionError: If symbol does not have exactly one rule.
    """
    rules = tag_system.rules_for(symbol)
    if len(rules) != 1:
        raise ConstructionError(f"Data symbol {symbol!r} must have exactly one rule, has {len(rules)}")
    rule = rules[0]
    return rule.string if isinstance(rule, Append) else None


def n_values(tag_system: TagSystem) -> Dict[str, int]:
    """
    Compute the run length N of every encodable symbol.

    Returns:
        Dict mapping each data symbol and both markers to its N-value.

    Raises:
        ConstructionError: If a marker is missing from the alphabet, there is
                           no data symbol, or a data symbol does not have
                           exactly one rule.
    """
    if tag_system.deletion_number != 2:
        raise ConstructionError(f"UTM(5,5) simulates 2-tag systems, got deletion number {tag_system.deletion_number}")
    for marker in MARKERS:
        if marker not in tag_system.symbols[1:]:
            raise ConstructionError(f"Marker symbol {marker!r} is not in the alphabet")
    symbols = data_symbols(tag_system)
    if not symbols:
        raise ConstructionError("The tag system has no data symbols to encode")

    values = {'b': 1}
    previous = None
    for symbol in symbols:
        if previous is None:
            values[symbol] = 3
        else:
            # a halting symbol produces nothing
            values[symbol] = values[previous] + len(production(tag_system, previous) or '') + 4
        previous = symbol
    # validates the last data symbol's rule as well
    production(tag_system, previous)
    values['a'] = values[previous] + 2
    return values


def _ones(values, symbol) -> str:
    try:
        return '1' * values[symbol]
    except KeyError:
        raise ConstructionError(f"Symbol {symbol!r} has no N-value") from None


def encode(tag_system: TagSystem, word: Optional[str] = None) -> EncodedTape:
    """
    Encode a tag system as UTM(5,5) tape content.

    Args:
        tag_system: The tag system to encode.
        word: Initial word to encode (default: the tag system's input).

    Returns:
        EncodedTape(tape, head_index), head_index pointing just past the
        'bbb' delimiter, at the start of the encoded word.
    """
    values = n_values(tag_system)
    word = tag_system.input if word is None else word
    if not word:
        raise ConstructionError("Cannot encode an empty word")

    parts = [HEADER]
    for symbol in reversed(data_symbols(tag_system)):
        string = production(tag_system, symbol)
        if string is None:
            continue
        parts.append(PRODUCTION_SEPARATOR)
        for char in reversed(string):
            parts.append(_ones(values, char))
            parts.append('1b' if char in MARKERS else '1b1')
    parts.append(WORD_DELIMITER)
    head_index = len(''.join(parts))

    parts.append(WORD_SEPARATOR.join(_ones(values, char) for char in word))
    return EncodedTape(''.join(parts), head_index)
