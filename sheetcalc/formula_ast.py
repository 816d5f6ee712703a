"""Parsing, printing and evaluating arithmetic formula expressions."""

from __future__ import annotations

import enum
import math
import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

from sheetcalc.common import ErrorCategory, FormulaError, FormulaException, Position


class ParsingError(ValueError):
    """Raised when a formula cannot be lexed or parsed."""


class SheetLike(Protocol):
    def get_cell(self, pos: Position) -> Any: ...


class _Prec(enum.IntEnum):
    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3
    UNARY = 4
    ATOM = 5


_NONE, _LEFT, _RIGHT = 0b00, 0b01, 0b10
_BOTH = _LEFT | _RIGHT

# _RULES[parent][child]: bit set when parentheses are needed for that side.
_RULES = (
    (_NONE, _NONE, _NONE, _NONE, _NONE, _NONE),
    (_RIGHT, _RIGHT, _NONE, _NONE, _NONE, _NONE),
    (_BOTH, _BOTH, _NONE, _NONE, _NONE, _NONE),
    (_BOTH, _BOTH, _RIGHT, _RIGHT, _NONE, _NONE),
    (_BOTH, _BOTH, _NONE, _NONE, _NONE, _NONE),
    (_NONE, _NONE, _NONE, _NONE, _NONE, _NONE),
)


def _format_number(value: float) -> str:
    return f"{value:g}"


class _Expr:
    precedence: _Prec

    def tree(self) -> str:
        raise NotImplementedError

    def body(self) -> str:
        raise NotImplementedError

    def evaluate(self, sheet: SheetLike) -> float:
        raise NotImplementedError

    def formula(self, parent: _Prec, right_child: bool = False) -> str:
        mask = _RIGHT if right_child else _LEFT
        text = self.body()
        if _RULES[parent][self.precedence] & mask:
            return f"({text})"
        return text


_BINARY: dict[str, tuple[_Prec, Callable[[float, float], float]]] = {
    "+": (_Prec.ADD, operator.add),
    "-": (_Prec.SUB, operator.sub),
    "*": (_Prec.MUL, operator.mul),
    "/": (_Prec.DIV, operator.truediv),
}


@dataclass
class _BinaryOp(_Expr):
    op: str
    lhs: _Expr
    rhs: _Expr

    @property
    def precedence(self) -> _Prec:  # type: ignore[override]
        return _BINARY[self.op][0]

    def tree(self) -> str:
        return f"({self.op} {self.lhs.tree()} {self.rhs.tree()})"

    def body(self) -> str:
        prec = self.precedence
        return self.lhs.formula(prec) + self.op + self.rhs.formula(prec, right_child=True)

    def evaluate(self, sheet: SheetLike) -> float:
        left = self.lhs.evaluate(sheet)
        right = self.rhs.evaluate(sheet)
        try:
            result = _BINARY[self.op][1](left, right)
        except (ZeroDivisionError, OverflowError):
            raise FormulaError(ErrorCategory.ARITHMETIC) from None
        if not math.isfinite(result):
            raise FormulaError(ErrorCategory.ARITHMETIC)
        return result


@dataclass
class _UnaryOp(_Expr):
    op: str
    operand: _Expr
    precedence = _Prec.UNARY

    def tree(self) -> str:
        return f"({self.op} {self.operand.tree()})"

    def body(self) -> str:
        return self.op + self.operand.formula(self.precedence)

    def evaluate(self, sheet: SheetLike) -> float:
        value = self.operand.evaluate(sheet)
        return -value if self.op == "-" else value


def _only_digits(text: str) -> bool:
    return bool(text) and all("0" <= ch <= "9" for ch in text)


@dataclass
class _CellRef(_Expr):
    pos: Position
    precedence = _Prec.ATOM

    def tree(self) -> str:
        if not self.pos.is_valid():
            return ErrorCategory.REF.value
        return self.pos.to_string()

    def body(self) -> str:
        return self.tree()

    def evaluate(self, sheet: SheetLike) -> float:
        if not self.pos.is_valid():
            raise FormulaError(ErrorCategory.REF)
        cell = sheet.get_cell(self.pos)
        if cell is None:
            return 0.0
        value = cell.value()
        if isinstance(value, FormulaError):
            raise FormulaError(value.category)
        if isinstance(value, str):
            if not value:
                return 0.0
            if _only_digits(value):
                return float(value)
            raise FormulaError(ErrorCategory.VALUE)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return 0.0


@dataclass
class _Number(_Expr):
    value: float
    precedence = _Prec.ATOM

    def tree(self) -> str:
        return _format_number(self.value)

    def body(self) -> str:
        return self.tree()

    def evaluate(self, sheet: SheetLike) -> float:
        return self.value


_TOKEN_RE = re.compile(
    r"[ \t\r\n]*(?:"
    r"(?P<NUMBER>(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
    r"|(?P<CELL>[A-Z]+[0-9]+)"
    r"|(?P<OP>[-+*/()])"
    r")"
)
_TRAILING_WS = re.compile(r"[ \t\r\n]*")


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while True:
        ws = _TRAILING_WS.match(text, pos)
        if ws.end() == len(text):
            return tokens
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.lastgroup is None:
            start = ws.end()
            raise ParsingError(f"Error when lexing: token recognition error at: '{text[start]}'")
        kind = match.lastgroup
        value = match.group(kind)
        tokens.append((value if kind == "OP" else kind, value))
        pos = match.end()


class _Parser:
    def __init__(self, tokens: list[tuple[str, str]]) -> None:
        self._tokens = tokens
        self._index = 0
        self.cells: list[_CellRef] = []

    def _peek(self) -> str | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index][0]
        return None

    def _take(self) -> tuple[str, str]:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _fail(self) -> ParsingError:
        if self._index < len(self._tokens):
            found = self._tokens[self._index][1]
        else:
            found = "<EOF>"
        return ParsingError(f"Error when parsing: {found}")

    def parse(self) -> _Expr:
        root = self._additive()
        if self._peek() is not None:
            raise self._fail()
        return root

    def _additive(self) -> _Expr:
        node = self._multiplicative()
        while self._peek() in ("+", "-"):
            op = self._take()[0]
            node = _BinaryOp(op, node, self._multiplicative())
        return node

    def _multiplicative(self) -> _Expr:
        node = self._unary()
        while self._peek() in ("*", "/"):
            op = self._take()[0]
            node = _BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> _Expr:
        if self._peek() in ("+", "-"):
            op = self._take()[0]
            return _UnaryOp(op, self._unary())
        return self._primary()

    def _primary(self) -> _Expr:
        kind = self._peek()
        if kind == "NUMBER":
            text = self._take()[1]
            value = float(text)
            if not math.isfinite(value):
                raise ParsingError(f"Invalid number: {text}")
            return _Number(value)
        if kind == "CELL":
            text = self._take()[1]
            node = _CellRef(Position.from_string(text))
            node_text = text
            self.cells.append(node)
            node.__dict__["_source"] = node_text
            return node
        if kind == "(":
            self._take()
            inner = self._additive()
            if self._peek() != ")":
                raise self._fail()
            self._take()
            return inner
        raise self._fail()


class FormulaAST:
    """A parsed formula: its expression tree and the cells it refers to."""

    def __init__(self, root: _Expr, cells: Iterable[Position]) -> None:
        self._root = root
        self.cells: tuple[Position, ...] = tuple(sorted(cells))

    def execute(self, sheet: SheetLike) -> float:
        """Evaluate the formula; raise FormulaError on evaluation errors."""
        return self._root.evaluate(sheet)

    def cells_text(self) -> str:
        return "".join(f"{cell.to_string()} " for cell in self.cells)

    def tree_text(self) -> str:
        return self._root.tree()

    def formula_text(self) -> str:
        return self._root.formula(_Prec.ATOM)


def parse_formula_ast(text: str) -> FormulaAST:
    """Parse a formula expression.

    Raises ParsingError on a lexing or syntax error and FormulaException when
    a referenced cell position is out of range.
    """
    parser = _Parser(_tokenize(text))
    root = parser.parse()
    for cell in parser.cells:
        if not cell.pos.is_valid():
            raise FormulaException(f"Invalid position: {cell.__dict__['_source']}")
    return FormulaAST(root, (cell.pos for cell in parser.cells))