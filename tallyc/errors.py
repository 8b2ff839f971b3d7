class CompileError(Exception):
    """Base class for everything the compiler reports to the user."""

    def __init__(self, message, line=None, col=None):
        self.message = message
        self.line = line
        self.col = col
        if line is not None:
            message = f"{message} (line {line}, col {col})"
        super().__init__(message)


class SourceError(CompileError):
    pass


class LexError(CompileError):
    pass


class ParseError(CompileError):
    """Raised on the first structural violation.

    `token` is the offending token, `expected` names the construct the
    parser wanted in its place (None for a plain unexpected token).
    """

    def __init__(self, message, token, expected=None):
        self.token = token
        self.expected = expected
        super().__init__(message, token.line, token.col)


class SemanticError(CompileError):
    pass


class CodegenError(CompileError):
    pass
