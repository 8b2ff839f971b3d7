from dataclasses import dataclass, field
from enum import Enum

from .errors import ParseError
from .lexer import Token


class Op(Enum):
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'


class ASTNode:
    pass


@dataclass(frozen=True)
class Num(ASTNode):
    value: int


@dataclass(frozen=True)
class BinOp(ASTNode):
    left: ASTNode
    op: Op
    right: ASTNode
    # position of the operator token, for diagnostics
    line: int = field(default=None, compare=False, repr=False)
    col: int = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Return(ASTNode):
    value: ASTNode


@dataclass(frozen=True)
class VarDecl(ASTNode):
    name: str
    value: ASTNode


# token kind -> (operator, precedence); every operator is left-associative
BINARY_OPS = {
    'PLUS':  (Op.ADD, 1),
    'MINUS': (Op.SUB, 1),
    'MUL':   (Op.MUL, 2),
    'DIV':   (Op.DIV, 2),
}

EOF = Token('EOF')

MAX_NESTING = 200


class Parser:
    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.pos = 0
        self.depth = 0

    def consume(self):
        if self.pos < len(self.tokens):
            self.pos += 1

    def current_token(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        if self.tokens:
            last = self.tokens[-1]
            return Token('EOF', line=last.line, col=last.col)
        return EOF

    def expect(self, kind, what):
        token = self.current_token()
        if token.kind != kind:
            raise ParseError(f"expected {what}, got {token.describe()}", token, kind)
        self.consume()
        return token

    def parse(self):
        program = []
        while self.current_token().kind != 'EOF':
            program.append(self.statement())
        return program

    def statement(self):
        token = self.current_token()
        if token.kind == 'RETURN':
            self.consume()
            value = self.parse_expr(0)
            self.expect('SEMI', "';' after return value")
            return Return(value)
        if token.kind == 'VAR':
            self.consume()
            name = self.expect('ID', "variable name after 'var'").value
            self.expect('ASSIGN', "'=' after variable name")
            value = self.parse_expr(0)
            self.expect('SEMI', "';' after variable declaration")
            return VarDecl(name, value)
        raise ParseError(f"unexpected token {token.describe()} at start of statement", token)

    def parse_expr(self, min_prec):
        left = self.primary()
        while self.current_token().kind in BINARY_OPS:
            token = self.current_token()
            op, prec = BINARY_OPS[token.kind]
            if prec < min_prec:
                break
            self.consume()
            right = self.parse_expr(prec + 1)
            left = BinOp(left, op, right, token.line, token.col)
        return left

    def primary(self):
        token = self.current_token()
        if token.kind == 'NUMBER':
            self.consume()
            return Num(token.value)
        if token.kind == 'LPAREN':
            self.depth += 1
            if self.depth > MAX_NESTING:
                raise ParseError("expression nested too deeply", token)
            self.consume()
            node = self.parse_expr(0)
            self.expect('RPAREN', "')' to close '('")
            self.depth -= 1
            return node
        raise ParseError(f"unexpected token in primary: {token.describe()}", token)


def parse(tokens):
    return Parser(tokens).parse()


def dump(node):
    """Same text as repr(node), built without recursing into the tree."""
    out = []
    work = [node]
    while work:
        item = work.pop()
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, Num):
            out.append(repr(item))
        elif isinstance(item, BinOp):
            work += [")", item.right, f", op={item.op!r}, right=", item.left, "BinOp(left="]
        elif isinstance(item, Return):
            work += [")", item.value, "Return(value="]
        elif isinstance(item, VarDecl):
            work += [")", item.value, f"VarDecl(name={item.name!r}, value="]
        else:
            out.append(repr(item))
    return "".join(out)
