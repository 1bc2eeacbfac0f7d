"""Parser for arithmetic expressions over integers and variables.

Grammar::

    expr    = product (("+" | "-") product)*
    product = unary (("*" | "/") unary)*
    unary   = "-"* atom
    atom    = integer | "(" expr ")" | identifier
"""

from __future__ import annotations

from lndw.types import BinaryOp, Expr, Num, Operator, ParseError, UnaryOp, Var

_I32_MAX = 2**31 - 1


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _peek(self) -> str | None:
        return self.text[self.pos] if self.pos < len(self.text) else None

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _fail(self, expected: str) -> ParseError:
        ch = self._peek()
        found = "end of input" if ch is None else repr(ch)
        return ParseError(f"found {found} at {self.pos}, expected {expected}")

    def parse(self) -> Expr:
        expr = self._expr()
        if self.pos != len(self.text):
            raise self._fail("an operator or end of input")
        return expr

    def _expr(self) -> Expr:
        left = self._product()
        while (ch := self._peek()) is not None and ch in "+-":
            self.pos += 1
            left = BinaryOp(left, Operator.from_char(ch), self._product())
        return left

    def _product(self) -> Expr:
        left = self._unary()
        while (ch := self._peek()) is not None and ch in "*/":
            self.pos += 1
            left = BinaryOp(left, Operator.from_char(ch), self._unary())
        return left

    def _unary(self) -> Expr:
        negations = 0
        self._skip_ws()
        while self._peek() == "-":
            self.pos += 1
            negations += 1
            self._skip_ws()
        expr = self._atom()
        for _ in range(negations):
            expr = UnaryOp(Operator.SUB, expr)
        return expr

    def _atom(self) -> Expr:
        self._skip_ws()
        ch = self._peek()
        if ch is not None and ch.isascii() and ch.isdigit():
            expr: Expr = self._integer()
        elif ch == "(":
            self.pos += 1
            expr = self._expr()
            if self._peek() != ")":
                raise self._fail("')'")
            self.pos += 1
        elif ch is not None and _is_ident_start(ch):
            start = self.pos
            while (c := self._peek()) is not None and _is_ident_char(c):
                self.pos += 1
            expr = Var(self.text[start : self.pos])
        else:
            raise self._fail("a number, '(' or an identifier")
        self._skip_ws()
        return expr

    def _integer(self) -> Num:
        start = self.pos
        if self._peek() == "0":
            self.pos += 1
        else:
            while (c := self._peek()) is not None and c.isascii() and c.isdigit():
                self.pos += 1
        digits = self.text[start : self.pos]
        value = int(digits)
        if value > _I32_MAX:
            raise ParseError(f"integer {digits} at {start} is out of range")
        return Num(value)


def parse(text: str) -> Expr:
    """Parse source text into an expression tree, raising ParseError if invalid."""
    return _Parser(text).parse()