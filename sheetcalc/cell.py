"""Cells of a sheet: empty, text or formula, with dependency tracking."""

from __future__ import annotations

import enum
from typing import Iterable, Iterator, Protocol

from sheetcalc.common import (
    ESCAPE_SIGN,
    FORMULA_SIGN,
    CircularDependencyException,
    FormulaError,
    Position,
)
from sheetcalc.formula import parse_formula

CellValue = str | float | FormulaError


class _SheetAccess(Protocol):
    def get_cell(self, pos: Position) -> Cell | None: ...

    def set_cell(self, pos: Position, text: str) -> None: ...


class CellType(enum.Enum):
    """Kind of content held by a cell."""

    EMPTY = enum.auto()
    TEXT = enum.auto()
    FORMULA = enum.auto()


def check_type(text: str) -> CellType:
    """Classify raw cell text; a lone "=" is plain text."""
    if not text:
        return CellType.EMPTY
    if text[0] == FORMULA_SIGN and len(text) > 1 and text[1] != "\0":
        return CellType.FORMULA
    return CellType.TEXT


class _EmptyImpl:
    def value(self, sheet: _SheetAccess) -> CellValue:
        return ""

    def text(self) -> str:
        return ""

    def referenced_cells(self) -> list[Position]:
        return []


class _TextImpl:
    def __init__(self, text: str) -> None:
        self._text = text

    def value(self, sheet: _SheetAccess) -> CellValue:
        if self._text.startswith(ESCAPE_SIGN):
            return self._text[1:]
        return self._text

    def text(self) -> str:
        return self._text

    def referenced_cells(self) -> list[Position]:
        return []


class _FormulaImpl:
    def __init__(self, expression: str) -> None:
        self._formula = parse_formula(expression)

    def value(self, sheet: _SheetAccess) -> CellValue:
        return self._formula.evaluate(sheet)

    def text(self) -> str:
        return FORMULA_SIGN + self._formula.expression()

    def referenced_cells(self) -> list[Position]:
        return self._formula.referenced_cells()


class Cell:
    """A single cell bound to a sheet.

    A cell knows the cells its formula reads (parents) and the cells whose
    formulas read it (dependents), and caches its computed value.
    """

    def __init__(self, sheet: _SheetAccess) -> None:
        self._sheet = sheet
        self._impl: _EmptyImpl | _TextImpl | _FormulaImpl = _EmptyImpl()
        self._parents: set[Cell] = set()
        self._children: set[Cell] = set()
        self._cache: CellValue | None = None

    def set(self, text: str) -> None:
        """Replace the content of the cell.

        Raises FormulaException for an incorrect formula and
        CircularDependencyException if the formula would form a cycle; in
        both cases the previous content is kept.
        """
        kind = check_type(text)
        if kind is CellType.FORMULA:
            impl = _FormulaImpl(text[1:])
            referenced = set(self._cells_at(impl.referenced_cells()))
            if self._reaches(referenced):
                raise CircularDependencyException("Cyclic dependency detected")
            self._impl = impl
        elif kind is CellType.TEXT:
            self._impl = _TextImpl(text)
        else:
            self._impl = _EmptyImpl()

        self._invalidate()
        self._refresh_parents()

    def clear(self) -> None:
        """Make the cell empty."""
        self.set("")

    def value(self) -> CellValue:
        """Return the visible value: text without escape, number or error."""
        if self._cache is None:
            self._cache = self._impl.value(self._sheet)
        return self._cache

    def text(self) -> str:
        """Return the text as it would be edited."""
        return self._impl.text()

    def referenced_cells(self) -> list[Position]:
        """Return the positions the formula reads, sorted and unique."""
        return self._impl.referenced_cells()

    @property
    def dependents(self) -> frozenset[Cell]:
        """Cells whose formulas refer directly to this cell."""
        return frozenset(self._children)

    def _cells_at(self, positions: Iterable[Position]) -> Iterator[Cell]:
        for pos in positions:
            cell = self._sheet.get_cell(pos)
            if cell is None:
                self._sheet.set_cell(pos, "")
                cell = self._sheet.get_cell(pos)
            if cell is not None:
                yield cell

    def _reaches(self, targets: set[Cell]) -> bool:
        """Whether this cell or any of its transitive dependents is in targets."""
        stack = [self]
        visited: set[Cell] = set()
        while stack:
            cell = stack.pop()
            if cell in targets:
                return True
            if cell in visited:
                continue
            visited.add(cell)
            stack.extend(cell._children)
        return False

    def _invalidate(self) -> None:
        stack = [self]
        visited: set[Cell] = set()
        while stack:
            cell = stack.pop()
            if cell in visited:
                continue
            visited.add(cell)
            cell._cache = None
            stack.extend(cell._children)

    def _refresh_parents(self) -> None:
        new_parents = set(self._cells_at(self._impl.referenced_cells()))
        for old in self._parents - new_parents:
            old._children.discard(self)
        for parent in new_parents - self._parents:
            parent._children.add(self)
        self._parents = new_parents