__version__ = "0.1.0"

from .errors import CompileError, LexError, ParseError, SemanticError, CodegenError
from .lexer import tokenize
from .parser import parse
from .semantic import SemanticAnalyzer
from .codegen import CodeGen, generate
from .finisher import render_asm


def compile_source(source):
    """Compile program text to the complete NASM file contents."""
    program = parse(tokenize(source))
    SemanticAnalyzer(program).analyze()
    gen = CodeGen()
    lines = gen.generate(program)
    return render_asm(lines, gen.frame_size)
