"""In-memory spreadsheet with arithmetic formulas, cell references and dependency tracking."""

__version__ = "0.1.0"
__all__ = ["common", "formula_ast", "formula", "cell", "sheet"]