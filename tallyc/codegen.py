"""x86-64 NASM code generator.

Expressions are evaluated with two registers and the machine stack:

* every expression leaves its value in the *primary* register;
* a binary node lowers its left operand, pushes it, lowers its right
  operand and pops the saved left value into the *secondary* register.

After the pop the right operand sits in primary and the left one in
secondary, so each non-commutative operator has to restore left-before-right
order before combining. `Registers` names those roles; `X86_64` binds them
to hardware registers.
"""

from collections import namedtuple

from .errors import CodegenError
from .parser import Num, BinOp, Return, VarDecl, Op

WORD = 8
SYS_EXIT = 60

Registers = namedtuple('Registers', 'primary secondary scratch remainder exit_arg frame')

X86_64 = Registers(
    primary='rax',
    secondary='rbx',
    scratch='rcx',
    remainder='rdx',
    exit_arg='rdi',
    frame='rbp',
)


def combine(op, regs=X86_64):
    """Instructions folding secondary (left) and primary (right) into primary."""
    p, s = regs.primary, regs.secondary
    if op is Op.ADD:
        return [f"    add {p}, {s}"]
    if op is Op.SUB:
        return [
            f"    mov {regs.scratch}, {p}",
            f"    mov {p}, {s}",
            f"    sub {p}, {regs.scratch}",
        ]
    if op is Op.MUL:
        return [
            f"    xchg {p}, {s}",
            f"    imul {p}, {s}",
        ]
    if op is Op.DIV:
        # cqo/idiv are fixed to rdx:rax, i.e. the primary and remainder roles of X86_64
        return [
            f"    xchg {p}, {s}",
            "    cqo",
            f"    idiv {s}",
        ]
    raise CodegenError(f"unsupported operator {op!r}")


# stages of a BinOp on the work stack: expand, push the left value, combine
LOWER, SAVE, COMBINE = range(3)


def codegen_into(node, asm, regs=X86_64):
    work = [(node, LOWER)]
    while work:
        item, stage = work.pop()
        if isinstance(item, Num):
            asm.append(f"    mov {regs.primary}, {item.value}")
        elif not isinstance(item, BinOp):
            raise CodegenError(f"unsupported expression {type(item).__name__}")
        elif stage == LOWER:
            work += [(item, COMBINE), (item.right, LOWER), (item, SAVE), (item.left, LOWER)]
        elif stage == SAVE:
            asm.append(f"    push {regs.primary}")
        else:
            asm.append(f"    pop {regs.secondary}")
            asm.extend(combine(item.op, regs))


def lower_stmt(stmt, stack_offset, regs=X86_64):
    """Lower one statement; returns its lines and the next free stack offset."""
    asm = []
    if isinstance(stmt, Return):
        codegen_into(stmt.value, asm, regs)
        asm.append(f"    mov {regs.exit_arg}, {regs.primary}")
        asm.append(f"    mov {regs.primary}, {SYS_EXIT}")
        asm.append("    syscall")
    elif isinstance(stmt, VarDecl):
        codegen_into(stmt.value, asm, regs)
        asm.append(f"    ; var {stmt.name}")
        asm.append(f"    mov qword [{regs.frame}-{stack_offset}], {regs.primary}")
        stack_offset += WORD
    else:
        raise CodegenError(f"unsupported statement {type(stmt).__name__}")
    return asm, stack_offset


class CodeGen:
    def __init__(self, regs=X86_64):
        self.regs = regs
        self.stack_offset = WORD
        self.blocks = []
        self.slots = {}

    @property
    def frame_size(self):
        # bytes used by declared variables, rounded up to a multiple of 16
        used = self.stack_offset - WORD
        return (used + 15) // 16 * 16

    def generate_code(self, stmt):
        offset = self.stack_offset
        lines, self.stack_offset = lower_stmt(stmt, offset, self.regs)
        if isinstance(stmt, VarDecl):
            # later declarations with the same name get a fresh slot
            self.slots[stmt.name] = offset
        self.blocks.append("\n".join(lines))
        return lines

    def generate(self, program):
        lines = []
        for stmt in program:
            lines.extend(self.generate_code(stmt))
        return lines

    def text(self):
        return "\n".join(self.blocks)


def generate(program):
    return CodeGen().generate(program)
