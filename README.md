# sheetcalc

sheetcalc is an in-memory spreadsheet library with arithmetic formulas. A cell
holds plain text or a formula, and a formula may refer to other cells. The sheet
records which cells depend on which, and it rejects any formula that would
create a cycle. It caches computed values and recomputes a value when a cell it
depends on changes.

## Installation

```
pip install sheetcalc
```

To run the tests, install the `test` extra and run `pytest`:

```
pip install "sheetcalc[test]"
pytest
```

## Usage

```python
import io

from sheetcalc.common import Position
from sheetcalc.sheet import create_sheet

sheet = create_sheet()
sheet.set_cell(Position.from_string("A1"), "2")
sheet.set_cell(Position.from_string("A2"), "=A1*(3+4)")

cell = sheet.get_cell(Position.from_string("A2"))
print(cell.value())   # 14.0
print(cell.text())    # =A1*(3+4)

out = io.StringIO()
sheet.print_values(out)
print(out.getvalue())
```

### Modules

* `sheetcalc.common`: contains `Position` (with `from_string`, `to_string` and
  `is_valid`), `Size`, `ErrorCategory`, `FormulaError` and the exception classes.
* `sheetcalc.formula_ast`: contains `parse_formula_ast` and `FormulaAST`.
  `FormulaAST` provides `execute`, `formula_text`, `tree_text` and `cells_text`.
  Parse failures raise `ParsingError`.
* `sheetcalc.formula`: contains `parse_formula` and `Formula`. `Formula`
  provides `evaluate`, `expression` and `referenced_cells`.
* `sheetcalc.cell`: contains `Cell`, `CellType` and `check_type`.
* `sheetcalc.sheet`: contains `Sheet` and `create_sheet`. `Sheet` provides
  `set_cell`, `get_cell`, `clear_cell`, `printable_size`, `print_values` and
  `print_texts`.

### Cell contents

* Empty text makes the cell empty.
* Text that starts with `=` and has at least one more character is a formula.
  A formula may contain:
  * numbers;
  * the operators `+ - * /`;
  * unary `+` and `-`;
  * parentheses;
  * cell references such as `B7` or `AA12`.

  A column label has at most three letters. Rows and columns each range from 1
  to 16384.
* Any other text is stored unchanged. A leading apostrophe (`'`) is left out of
  the value, so `'=1+2` shows as `=1+2`.

When a formula refers to a cell that does not exist, the sheet creates an empty
cell at that position. This empty cell is included in `printable_size` and in
the printed output.

### Formula values

Referenced cells are read as follows:

* An empty cell, a missing cell, or a cell holding empty text counts as `0`.
* A text cell made only of the digits 0 to 9 is read as a number.
* Any other text gives a `#VALUE!` error.

Division by zero and any non-finite result give `#ARITHM!`. Errors are
`FormulaError` values with a `category` attribute. `Cell.value()` and
`Formula.evaluate()` return errors instead of raising them. An error in a
referenced cell is passed on to every formula that depends on it.

`Cell.text()` returns the formula in normalised form: no spaces and no
redundant parentheses. `print_values` formats numbers with Python's `g` format.

### Errors raised

* `FormulaException` is raised when a formula does not parse or refers to a
  position outside the sheet's limits.
* `CircularDependencyException` is raised when a formula would create a cycle.
  The cell keeps its previous contents.
* `InvalidPositionException` is raised when a position outside the sheet's
  limits is passed to a `Sheet` method.

### Working with formulas directly

```python
from sheetcalc.formula import parse_formula

f = parse_formula("(2*3)+4 + B2 + A1")
print(f.expression())                                  # 2*3+4+B2+A1
print([p.to_string() for p in f.referenced_cells()])   # ['A1', 'B2']
```

## What it does not do

sheetcalc is a library only. It has no command-line program and no interactive
interface. It does not save sheets to files or load them. It has no functions
and no cell ranges, and it does not insert or delete rows or columns.