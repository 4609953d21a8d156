"""Boolean conditions for ``if``/``elif`` directives.

Grammar, lowest precedence first::

    expression := and-expr {"||" and-expr}
    and-expr   := primary {"&&" primary}
    primary    := "(" expression ")" | string relop string
    relop      := "==" | "!=" | "<=" | ">=" | "<" | ">"

Every clause is parsed in full so the cursor lands after the condition even
when short-circuiting skips evaluation of a right-hand side.
"""

import operator
from collections.abc import Callable

from mmp.context import SourceContext
from mmp.lexer import skip_whitespace

OperandReader = Callable[[SourceContext, bool], str | None]

RELATIONAL_OPERATORS: dict[str, Callable[[str, str], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<=": operator.le,
    ">=": operator.ge,
    "<": operator.lt,
    ">": operator.gt,
}


class ExpressionError(ValueError):
    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} at line {line}")
        self.message = message
        self.line = line


class ConditionParser:
    def __init__(self, context: SourceContext, read_operand: OperandReader) -> None:
        self._context = context
        self._read_operand = read_operand

    def parse(self, evaluate: bool = True) -> bool:
        return self._expression(evaluate)

    def _expression(self, evaluate: bool) -> bool:
        value = self._and_expression(evaluate)
        while self._accept("||"):
            right = self._and_expression(evaluate and not value)
            value = value or right
        return value

    def _and_expression(self, evaluate: bool) -> bool:
        value = self._primary(evaluate)
        while self._accept("&&"):
            right = self._primary(evaluate and value)
            value = value and right
        return value

    def _primary(self, evaluate: bool) -> bool:
        if self._accept("("):
            value = self._expression(evaluate)
            if not self._accept(")"):
                raise ExpressionError("Missing closing parenthesis", self._context.line)
            return value
        left = self._operand(evaluate)
        compare = self._relational_operator(left)
        right = self._operand(evaluate)
        return evaluate and compare(left, right)

    def _operand(self, evaluate: bool) -> str:
        skip_whitespace(self._context)
        line = self._context.line
        value = self._read_operand(self._context, evaluate)
        if value is None:
            raise ExpressionError("Expected a string operand", line)
        return value

    def _relational_operator(self, left: str) -> Callable[[str, str], bool]:
        skip_whitespace(self._context)
        for symbol, compare in RELATIONAL_OPERATORS.items():
            if self._context.startswith(symbol):
                self._context.advance(len(symbol))
                return compare
        raise ExpressionError(
            f'Expected relational operator after "{left}"',
            self._context.line,
        )

    def _accept(self, symbol: str) -> bool:
        skip_whitespace(self._context)
        if not self._context.startswith(symbol):
            return False
        self._context.advance(len(symbol))
        return True
