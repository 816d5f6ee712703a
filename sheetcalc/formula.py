"""Formulas: parsed arithmetic expressions that can be evaluated against a sheet."""

from __future__ import annotations

from sheetcalc.common import FormulaError, FormulaException, Position
from sheetcalc.formula_ast import SheetLike, parse_formula_ast


class Formula:
    """An arithmetic expression over numbers and cell references."""

    def __init__(self, expression: str) -> None:
        try:
            self._ast = parse_formula_ast(expression)
        except (ValueError, RecursionError) as exc:
            raise FormulaException("incorrect formula") from exc

    def evaluate(self, sheet: SheetLike) -> float | FormulaError:
        """Return the numeric value of the formula or the error it produced."""
        try:
            return self._ast.execute(sheet)
        except FormulaError as error:
            return error

    def expression(self) -> str:
        """Return the expression without spaces and redundant parentheses."""
        return self._ast.formula_text()

    def referenced_cells(self) -> list[Position]:
        """Return the referenced positions, sorted and without duplicates."""
        return list(dict.fromkeys(self._ast.cells))


def parse_formula(expression: str) -> Formula:
    """Parse an expression; raise FormulaException if it is incorrect."""
    return Formula(expression)