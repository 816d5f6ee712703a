"""The sheet: a sparse table of cells with printing."""

from __future__ import annotations

from typing import TextIO

from sheetcalc.cell import Cell, CellValue
from sheetcalc.common import FormulaError, InvalidPositionException, Position, Size


def _format_value(value: CellValue) -> str:
    if isinstance(value, FormulaError):
        return value.to_string()
    if isinstance(value, float):
        return f"{value:g}"
    return value


class Sheet:
    """A spreadsheet table addressed by Position."""

    def __init__(self) -> None:
        self._cells: dict[Position, Cell] = {}
        # Cleared cells that other formulas still refer to; reused on next set.
        self._detached: dict[Position, Cell] = {}

    @staticmethod
    def _check(pos: Position) -> None:
        if not pos.is_valid():
            raise InvalidPositionException("InvalidPosition")

    def set_cell(self, pos: Position, text: str) -> None:
        """Set the content of the cell at pos, creating it if needed."""
        self._check(pos)
        cell = self._cells.get(pos)
        if cell is None:
            cell = self._detached.pop(pos, None)
            if cell is None:
                cell = Cell(self)
            self._cells[pos] = cell
        cell.set(text)

    def get_cell(self, pos: Position) -> Cell | None:
        """Return the cell at pos, or None if there is none."""
        self._check(pos)
        return self._cells.get(pos)

    def clear_cell(self, pos: Position) -> None:
        """Remove the cell at pos; later get_cell returns None."""
        self._check(pos)
        cell = self._cells.pop(pos, None)
        if cell is None:
            return
        cell.clear()
        if cell.dependents:
            self._detached[pos] = cell

    def printable_size(self) -> Size:
        """Return the bounding size of all existing cells."""
        if not self._cells:
            return Size(0, 0)
        rows = max(pos.row for pos in self._cells) + 1
        cols = max(pos.col for pos in self._cells) + 1
        return Size(rows, cols)

    def _print(self, output: TextIO, render) -> None:
        size = self.printable_size()
        for row in range(size.rows):
            fields = []
            for col in range(size.cols):
                cell = self._cells.get(Position(row, col))
                fields.append("" if cell is None else render(cell))
            output.write("\t".join(fields) + "\n")

    def print_values(self, output: TextIO) -> None:
        """Write cell values, tab-separated, one line per row."""
        self._print(output, lambda cell: _format_value(cell.value()))

    def print_texts(self, output: TextIO) -> None:
        """Write cell texts, tab-separated, one line per row."""
        self._print(output, lambda cell: cell.text())


def create_sheet() -> Sheet:
    """Return a new empty sheet."""
    return Sheet()