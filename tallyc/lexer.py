from dataclasses import dataclass, field

from .errors import LexError

KEYWORDS = {
    'return': 'RETURN',
    'var':    'VAR',
}

SYMBOLS = {
    ';': 'SEMI',
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'MUL',
    '/': 'DIV',
    '(': 'LPAREN',
    ')': 'RPAREN',
    '=': 'ASSIGN',
}

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Token:
    kind: str
    value: object = None
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)

    def __repr__(self):
        if self.value is None:
            return self.kind
        return f"{self.kind}({self.value!r})"

    def describe(self):
        # what error messages show the user
        if self.kind == 'EOF':
            return "end of input"
        if self.value is not None:
            return repr(str(self.value))
        for ch, kind in SYMBOLS.items():
            if kind == self.kind:
                return repr(ch)
        return repr(self.kind.lower())


def is_digit(ch):
    return ch is not None and '0' <= ch <= '9'


def is_letter(ch):
    return ch is not None and ('a' <= ch <= 'z' or 'A' <= ch <= 'Z')


class Lexer:
    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def peek(self):
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def advance(self):
        ch = self.peek()
        if ch is None:
            return None
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def skip_whitespace(self):
        while self.peek() is not None and self.peek().isspace():
            self.advance()

    def next_token(self):
        self.skip_whitespace()
        line, col = self.line, self.col
        ch = self.advance()
        if ch is None:
            return Token('EOF', line=line, col=col)
        if is_digit(ch):
            return self.lex_number(ch, line, col)
        if is_letter(ch):
            return self.lex_ident(ch, line, col)
        if ch in SYMBOLS:
            return Token(SYMBOLS[ch], line=line, col=col)
        raise LexError(f"unrecognized symbol {ch!r}", line, col)

    def lex_number(self, first, line, col):
        digits = first
        while is_digit(self.peek()):
            digits += self.advance()
        value = int(digits)
        if value > INT64_MAX:
            raise LexError(f"integer literal {digits} does not fit in 64 bits", line, col)
        return Token('NUMBER', value, line, col)

    def lex_ident(self, first, line, col):
        name = first
        while is_letter(self.peek()):
            name += self.advance()
        if name in KEYWORDS:
            return Token(KEYWORDS[name], line=line, col=col)
        return Token('ID', name, line, col)


def gen_tokens(code):
    lexer = Lexer(code)
    while True:
        token = lexer.next_token()
        yield token
        if token.kind == 'EOF':
            return


def tokenize(code):
    return list(gen_tokens(code))
