"""Cell positions, sizes, formula errors and the exceptions of the spreadsheet."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar

_LETTERS = 26
_MAX_LETTER_COUNT = 3
_INT_MAX = 2**31 - 1


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based position of a cell, ordered by row and then by column."""

    row: int = 0
    col: int = 0

    MAX_ROWS: ClassVar[int] = 16384
    MAX_COLS: ClassVar[int] = 16384
    NONE: ClassVar[Position]

    def is_valid(self) -> bool:
        return 0 <= self.row < self.MAX_ROWS and 0 <= self.col < self.MAX_COLS

    def to_string(self) -> str:
        """Return the A1-style name of the position, or "" if it is invalid."""
        if not self.is_valid():
            return ""
        letters = []
        c = self.col
        while c >= 0:
            letters.append(chr(ord("A") + c % _LETTERS))
            c = c // _LETTERS - 1
        return "".join(reversed(letters)) + str(self.row + 1)

    def __str__(self) -> str:
        return self.to_string()

    @staticmethod
    def from_string(text: str) -> Position:
        """Parse an A1-style name; return ``Position.NONE`` on malformed input.

        A well-formed name whose row or column is out of range yields a
        position that is not valid.
        """
        split = 0
        while split < len(text) and "A" <= text[split] <= "Z":
            split += 1
        letters, digits = text[:split], text[split:]

        if not letters or not digits or len(letters) > _MAX_LETTER_COUNT:
            return Position.NONE
        if not all("0" <= ch <= "9" for ch in digits):
            return Position.NONE
        row = int(digits)
        if row > _INT_MAX:
            return Position.NONE

        col = 0
        for ch in letters:
            col = col * _LETTERS + (ord(ch) - ord("A") + 1)
        return Position(row - 1, col - 1)


Position.NONE = Position(-1, -1)


@dataclass
class Size:
    """Number of rows and columns of a rectangular area."""

    rows: int = 0
    cols: int = 0


class ErrorCategory(enum.Enum):
    """Kinds of errors a formula can evaluate to."""

    REF = "#REF!"
    VALUE = "#VALUE!"
    ARITHMETIC = "#ARITHM!"


class FormulaError(Exception):
    """An error produced while evaluating a formula.

    It is raised during evaluation and also serves as a cell value.
    """

    def __init__(self, category: ErrorCategory) -> None:
        super().__init__(category)
        self.category = category

    def to_string(self) -> str:
        return self.category.value

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FormulaError({self.category})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FormulaError):
            return self.category == other.category
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.category)


class FormulaException(ValueError):
    """Raised for a syntactically incorrect formula."""


class CircularDependencyException(Exception):
    """Raised when a formula would create a cyclic dependency between cells."""


class InvalidPositionException(IndexError):
    """Raised when an invalid position is passed to the sheet."""


class TableTooBigException(Exception):
    """Raised when the table would grow beyond the maximum size."""


FORMULA_SIGN = "="
ESCAPE_SIGN = "'"