"""Compile-time checks on a parsed program.

Every expression in the language is built from literals, so the value of
each one is known before any code is emitted. The analyzer evaluates them
with the same 64-bit semantics the generated code has and rejects the
faults that would otherwise only show up when the program runs.
"""

from .errors import SemanticError
from .lexer import INT64_MIN, INT64_MAX
from .parser import Num, BinOp, Return, VarDecl, Op


def wrap64(value):
    value &= 2 ** 64 - 1
    if value > INT64_MAX:
        value -= 2 ** 64
    return value


def divide(left, right):
    # truncates toward zero like idiv / sdiv
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap64(quotient)


def apply(node, left, right):
    if node.op is Op.ADD:
        return wrap64(left + right)
    if node.op is Op.SUB:
        return wrap64(left - right)
    if node.op is Op.MUL:
        return wrap64(left * right)
    if right == 0:
        raise SemanticError(f"division by zero in {left} / {right}", node.line, node.col)
    if left == INT64_MIN and right == -1:
        raise SemanticError(f"signed division overflow in {left} / {right}", node.line, node.col)
    return divide(left, right)


def evaluate(node):
    """Value of a constant expression as a signed 64-bit integer."""
    values = []
    work = [(node, False)]
    while work:
        item, operands_ready = work.pop()
        if isinstance(item, Num):
            values.append(item.value)
        elif isinstance(item, BinOp):
            if operands_ready:
                right = values.pop()
                left = values.pop()
                values.append(apply(item, left, right))
            else:
                work += [(item, True), (item.right, False), (item.left, False)]
        else:
            raise SemanticError(f"cannot evaluate {type(item).__name__}")
    return values.pop()


class SemanticAnalyzer:
    def __init__(self, program):
        self.program = program
        self.warnings = []

    def analyze(self):
        """Check the whole program and return a list of warning strings."""
        self._check_return()
        for stmt in self.program:
            evaluate(stmt.value)
        return self.warnings

    def _check_return(self):
        for i, stmt in enumerate(self.program):
            if isinstance(stmt, Return):
                trailing = self.program[i + 1:]
                if trailing:
                    self.warnings.append(
                        f"{len(trailing)} statement(s) after return are unreachable"
                    )
                return
            if not isinstance(stmt, VarDecl):
                raise SemanticError(f"illegal statement: {type(stmt).__name__}")
        raise SemanticError("program has no return statement")
