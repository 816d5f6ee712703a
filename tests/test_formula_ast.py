import sys

import pytest

from sheetcalc.common import ErrorCategory, FormulaError, FormulaException, Position
from sheetcalc.formula_ast import ParsingError, parse_formula_ast


class _Cell:
    def __init__(self, value):
        self._value = value

    def value(self):
        return self._value


class _Sheet:
    def __init__(self, values=None):
        self._cells = {
            Position.from_string(name): _Cell(value) for name, value in (values or {}).items()
        }

    def get_cell(self, pos):
        return self._cells.get(pos)


def _evaluate(expr, values=None):
    return parse_formula_ast(expr).execute(_Sheet(values))


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("1", 1),
        ("42", 42),
        ("2 + 2", 4),
        ("2 + 2*2", 6),
        ("4/2 + 6/3", 4),
        ("(2+3)*4 + (3-4)*5", 15),
        ("(12+13) * (14+(13-24/(1+1))*55-46)", 575),
    ],
)
def test_arithmetic(expr, expected):
    assert _evaluate(expr) == expected


def test_references():
    values = {"A1": 1.0, "A2": 2.0, "B3": ""}
    assert _evaluate("A1", values) == 1
    assert _evaluate("A1+A2", values) == 3
    assert _evaluate("A1+B3", values) == 1
    assert _evaluate("A1+B1", values) == 1
    assert _evaluate("A1+E4", values) == 1


def test_digit_text_is_number():
    assert _evaluate("A1*2", {"A1": "1"}) == 2


@pytest.mark.parametrize("text", ["A1", "3D"])
def test_non_numeric_text_is_value_error(text):
    with pytest.raises(FormulaError) as info:
        _evaluate("E2", {"E2": text})
    assert info.value.category is ErrorCategory.VALUE


def test_error_value_propagates():
    with pytest.raises(FormulaError) as info:
        _evaluate("1+A1", {"A1": FormulaError(ErrorCategory.REF)})
    assert info.value == FormulaError(ErrorCategory.REF)


_MAX = f"{sys.float_info.max:g}"


@pytest.mark.parametrize(
    "expr",
    ["1/0", "1e+200/1e-200", "0/0", f"{_MAX}+{_MAX}", f"-{_MAX}-{_MAX}", f"{_MAX}*{_MAX}"],
)
def test_arithmetic_errors(expr):
    with pytest.raises(FormulaError) as info:
        _evaluate(expr)
    assert info.value.category is ErrorCategory.ARITHMETIC


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("  1  ", "1"),
        ("  -1  ", "-1"),
        ("2 + 2", "2+2"),
        ("(2*3)+4", "2*3+4"),
        ("(2*3)-4", "2*3-4"),
        ("( ( (  1) ) )", "1"),
        ("A1 + A2 + A1 + A3 + A1 + A2 + A1", "A1+A2+A1+A3+A1+A2+A1"),
    ],
)
def test_expression_formatting(expr, expected):
    assert parse_formula_ast(expr).formula_text() == expected


@pytest.mark.parametrize("expr", ["1-(2+3)", "(1+2)*3", "-(1+2)", "1/(2*3)", "2.5*(2+3.5/7)"])
def test_needed_parentheses_are_kept(expr):
    assert parse_formula_ast(expr).formula_text() == expr


@pytest.mark.parametrize("expr", ["1-(2-3)/4", "-(-(1+2))*3", "(1+2)/(3-4)", "+(1*2)-3"])
def test_formatting_round_trip_preserves_value(expr):
    ast = parse_formula_ast(expr)
    again = parse_formula_ast(ast.formula_text())
    assert again.formula_text() == ast.formula_text()
    assert again.execute(_Sheet()) == ast.execute(_Sheet())


def test_tree_text():
    assert parse_formula_ast("-1").tree_text() == "(- 1)"
    assert parse_formula_ast("1+2*3").tree_text() == "(+ 1 (* 2 3))"


def test_cells_sorted_with_duplicates():
    ast = parse_formula_ast("A1 + A2 + A1 + A3 + A1 + A2 + A1")
    assert list(ast.cells) == sorted(ast.cells)
    assert set(ast.cells) == {Position.from_string(n) for n in ("A1", "A2", "A3")}
    assert len(ast.cells) == 7


def test_cells_text():
    assert parse_formula_ast("B2+A1").cells_text() == "A1 B2 "
    assert parse_formula_ast("1").cells_text() == ""


@pytest.mark.parametrize("expr", ["A2B", "3X", "A0++", "((1)", "2+4-", "R2D2", "", "1e400"])
def test_incorrect_formulas(expr):
    with pytest.raises(ParsingError):
        parse_formula_ast(expr)


@pytest.mark.parametrize(
    "expr",
    ["X0", "ABCD1", "A123456", "ABCDEFGHIJKLMNOPQRS1234567890", "XFD16385", "XFE16384"],
)
def test_invalid_positions(expr):
    with pytest.raises(FormulaException):
        parse_formula_ast(expr)