"""
Tests for the Tape: content fidelity, shifting and lazy extension.
"""

import pytest

from machine_tape import Tape


@pytest.mark.parametrize("content", ["", "a", "abc", "1b1bbb111", "  x  "])
def test_content_is_reproduced(content):
    for head in range(max(len(content), 1)):
        tape = Tape('_', content, head)
        expected = content or '_'
        assert str(tape) == expected
        assert ''.join(tape) == expected
        assert tape.head_index() == head


def test_empty_tape_has_one_blank_head_cell():
    tape = Tape('_')
    assert len(tape) == 1
    assert tape.read() == '_'
    assert tape.head_index() == 0


def test_head_out_of_bounds():
    with pytest.raises(IndexError):
        Tape('_', 'abc', 3)
    with pytest.raises(IndexError):
        Tape('_', 'abc', -1)
    with pytest.raises(IndexError):
        Tape('_', '', 1)


def test_read_and_write_touch_head_only():
    tape = Tape('_', 'abc', 1)
    assert tape.read() == 'b'
    tape.write('x')
    assert str(tape) == 'axc'
    assert tape.head_index() == 1


def test_shift_symmetry():
    tape = Tape('_', 'abcde', 2)
    for n in range(0, 8):
        tape.shift(-n)
        tape.shift(n)
        assert tape.read() == 'c'
    assert str(tape) == '_' * 5 + 'abcde'
    assert tape.head_index() == 7


def test_shift_one_cell_at_a_time_returns_to_start():
    tape = Tape('_', 'abcde', 2)
    for _ in range(4):
        tape.shift(-1)
    for _ in range(4):
        tape.shift(1)
    assert tape.read() == 'c'
    assert str(tape) == '__abcde'
    assert tape.head_index() == 4


@pytest.mark.parametrize("k", [1, 2, 5])
def test_extension_past_end(k):
    tape = Tape('_', 'abc', 2)
    tape.shift(k)
    assert len(tape) == 3 + k
    assert str(tape) == 'abc' + '_' * k
    assert tape.head_index() == 2 + k
    assert tape.read() == '_'


@pytest.mark.parametrize("k", [1, 2, 5])
def test_extension_past_front(k):
    tape = Tape('_', 'abc', 0)
    tape.shift(-k)
    assert len(tape) == 3 + k
    assert str(tape) == '_' * k + 'abc'
    assert tape.head_index() == 0
    assert tape.read() == '_'


def test_append_keeps_head():
    tape = Tape('_', 'ab', 1)
    tape.append('cd')
    assert str(tape) == 'abcd'
    assert tape.read() == 'b'
    assert tape.head_index() == 1


def test_append_after_extension():
    tape = Tape('_', 'ab', 1)
    tape.shift(2)
    tape.append('x')
    assert str(tape) == 'ab__x'


def test_iteration_is_restartable_and_lazy():
    tape = Tape('_', 'abcd', 2)
    assert list(tape) == list('abcd')
    assert list(tape) == list('abcd')
    assert list(tape.reverse_from_head()) == ['c', 'b', 'a']
    assert list(tape.forward_from_head()) == ['c', 'd']
    it = iter(tape)
    assert next(it) == 'a'


def test_context():
    tape = Tape('_', 'abcd', 1)
    assert tape.context() == ('a', 'b', 'cd')
    tape.shift(-2)
    assert tape.context() == ('', '_', 'abcd')
