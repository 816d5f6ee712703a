import pytest

from sheetcalc.cell import Cell, CellType, check_type
from sheetcalc.common import CircularDependencyException, FormulaException, Position
from sheetcalc.sheet import Sheet


def pos(text):
    return Position.from_string(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", CellType.EMPTY),
        ("=", CellType.TEXT),
        ("=A1", CellType.FORMULA),
        ("Hello", CellType.TEXT),
        ("'=escaped", CellType.TEXT),
    ],
)
def test_check_type(text, expected):
    assert check_type(text) is expected


def test_new_cell_is_empty():
    cell = Cell(Sheet())
    assert cell.text() == ""
    assert cell.value() == ""
    assert cell.referenced_cells() == []


def test_text_and_escape():
    cell = Cell(Sheet())
    cell.set("Hello")
    assert cell.text() == "Hello"
    assert cell.value() == "Hello"
    cell.set("'=escaped")
    assert cell.text() == "'=escaped"
    assert cell.value() == "=escaped"


def test_formula_cell():
    cell = Cell(Sheet())
    cell.set("=2 + 2*2")
    assert cell.text() == "=2+2*2"
    assert cell.value() == 6


def test_incorrect_formula_keeps_content():
    cell = Cell(Sheet())
    cell.set("Ready")
    with pytest.raises(FormulaException):
        cell.set("=2+4-")
    assert cell.text() == "Ready"


def test_clear():
    cell = Cell(Sheet())
    cell.set("Hello")
    cell.clear()
    assert cell.text() == ""
    assert cell.value() == ""


def test_cache_invalidated_through_chain():
    sheet = Sheet()
    sheet.set_cell(pos("A1"), "42")
    sheet.set_cell(pos("B1"), "=A1")
    sheet.set_cell(pos("C1"), "=B1")
    assert sheet.get_cell(pos("C1")).value() == 42
    sheet.set_cell(pos("A1"), "1")
    assert sheet.get_cell(pos("B1")).value() == 1
    assert sheet.get_cell(pos("C1")).value() == 1


def test_dependents_tracking():
    sheet = Sheet()
    sheet.set_cell(pos("B1"), "=A1")
    a1 = sheet.get_cell(pos("A1"))
    b1 = sheet.get_cell(pos("B1"))
    assert a1.dependents == frozenset({b1})
    sheet.set_cell(pos("B1"), "text")
    assert a1.dependents == frozenset()


def test_self_reference_is_circular():
    sheet = Sheet()
    sheet.set_cell(pos("A1"), "Ready")
    with pytest.raises(CircularDependencyException):
        sheet.get_cell(pos("A1")).set("=A1")
    assert sheet.get_cell(pos("A1")).text() == "Ready"


def test_removed_reference_allows_back_reference():
    sheet = Sheet()
    sheet.set_cell(pos("B1"), "=A1")
    sheet.set_cell(pos("B1"), "text")
    sheet.set_cell(pos("A1"), "=B1")
    assert sheet.get_cell(pos("A1")).referenced_cells() == [pos("B1")]


def test_formula_creates_referenced_cells():
    sheet = Sheet()
    sheet.set_cell(pos("A1"), "=B2")
    created = sheet.get_cell(pos("B2"))
    assert created.text() == ""
    assert sheet.get_cell(pos("A1")).value() == 0.0