"""
Tape shared by the Turing machine and the tag system.

The tape is unbounded on both ends. Cells are stored in a dictionary keyed by
position (like a sparse tape), with integer bounds marking the front and end
of the cells materialized so far and an integer head position:

    - front <= head <= end always holds
    - cells inside [front, end] that were never written read as blank
    - moving the head past either bound extends that bound by one cell per step
"""

from collections import defaultdict
from typing import Iterable, Iterator, Tuple


class Tape:
    """
    A single tape with one read/write head.

    Args:
        blank: The blank symbol of the tape.
        content: Initial content, placed from the front of the tape.
                 An empty string gives a tape with a single blank cell.
        head: Index of the head cell within content (default: 0).

    Raises:
        IndexError: If head does not denote a cell of a non-empty content.
    """

    def __init__(self, blank, content='', head=0):
        if content and not 0 <= head < len(content):
            raise IndexError(f"head index {head} is out of bounds for content of length {len(content)}")
        if not content and head != 0:
            raise IndexError(f"head index {head} is out of bounds for an empty tape")

        self.blank = blank
        self._cells = defaultdict(lambda: blank)
        for position, symbol in enumerate(content):
            self._cells[position] = symbol
        self._front = 0
        self._end = max(len(content) - 1, 0)
        self._head = head

    def read(self):
        """Return the symbol under the head."""
        return self._cells[self._head]

    def write(self, symbol):
        """Overwrite the symbol under the head."""
        self._cells[self._head] = symbol

    def shift(self, steps):
        """
        Move the head by steps cells (positive moves right, negative left).

        Blank cells are materialized when the head moves past either end,
        so this never fails.
        """
        self._head += steps
        if self._head < self._front:
            self._front = self._head
        elif self._head > self._end:
            self._end = self._head

    def append(self, symbols: Iterable[str]):
        """Attach symbols after the last cell without moving the head."""
        for symbol in symbols:
            self._end += 1
            self._cells[self._end] = symbol

    def head_index(self) -> int:
        """Distance of the head from the front of the tape."""
        return self._head - self._front

    def __len__(self):
        return self._end - self._front + 1

    def _symbol_at(self, position):
        return self._cells.get(position, self.blank)

    def __iter__(self) -> Iterator[str]:
        for position in range(self._front, self._end + 1):
            yield self._symbol_at(position)

    def forward_from_head(self) -> Iterator[str]:
        """Yield symbols from the head cell to the end of the tape."""
        for position in range(self._head, self._end + 1):
            yield self._symbol_at(position)

    def reverse_from_head(self) -> Iterator[str]:
        """Yield symbols from the head cell backward to the front of the tape."""
        for position in range(self._head, self._front - 1, -1):
            yield self._symbol_at(position)

    def context(self) -> Tuple[str, str, str]:
        """
        Split the tape around the head.

        Returns:
            Tuple of (left, head_symbol, right) where left is the content in
            front of the head and right the content after it.
        """
        left = ''.join(self._symbol_at(p) for p in range(self._front, self._head))
        right = ''.join(self._symbol_at(p) for p in range(self._head + 1, self._end + 1))
        return left, self.read(), right

    def __str__(self):
        return ''.join(self)

    def __repr__(self):
        return f"Tape({str(self)!r}, head={self.head_index()})"
