import ctypes

import llvmlite.binding as llvm
import llvmlite.ir as ir

from .errors import CodegenError
from .parser import Num, BinOp, Return, VarDecl, Op

llvm.initialize_native_target()
llvm.initialize_native_asmprinter()

I64 = ir.IntType(64)
I32 = ir.IntType(32)

ENTRY = "tally_main"


class LLVMCodeGen:
    def __init__(self):
        self.module = ir.Module(name="module")
        self.module.triple = llvm.get_default_triple()
        self.builder = None
        self.func = None
        self.slots = {}

    def generate_code(self, node):
        if isinstance(node, VarDecl):
            value = self.generate_expr(node.value)
            slot = self.builder.alloca(I64, name=node.name)
            self.builder.store(value, slot)
            self.slots[node.name] = slot
            return slot
        elif isinstance(node, Return):
            return self.builder.ret(self.generate_expr(node.value))
        elif isinstance(node, (BinOp, Num)):
            return self.generate_expr(node)
        raise CodegenError(f"unsupported node {type(node).__name__}")

    def generate_expr(self, node):
        values = []
        work = [(node, False)]
        while work:
            item, operands_ready = work.pop()
            if isinstance(item, Num):
                values.append(ir.Constant(I64, item.value))
            elif not isinstance(item, BinOp):
                raise CodegenError(f"unsupported node {type(item).__name__}")
            elif not operands_ready:
                work += [(item, True), (item.right, False), (item.left, False)]
            else:
                right = values.pop()
                left = values.pop()
                if item.op is Op.ADD:
                    values.append(self.builder.add(left, right))
                elif item.op is Op.SUB:
                    values.append(self.builder.sub(left, right))
                elif item.op is Op.MUL:
                    values.append(self.builder.mul(left, right))
                elif item.op is Op.DIV:
                    values.append(self.builder.sdiv(left, right))
        return values.pop()

    def create_main(self, program):
        func_type = ir.FunctionType(I64, [])
        self.func = ir.Function(self.module, func_type, name=ENTRY)
        block = self.func.append_basic_block(name="entry")
        self.builder = ir.IRBuilder(block)
        for i, stmt in enumerate(program):
            if self.builder.block.is_terminated:
                # code after a return still has to live in some block
                self.builder.position_at_end(self.func.append_basic_block(name=f"dead{i}"))
            if not isinstance(stmt, (Return, VarDecl)):
                raise CodegenError(f"unsupported statement {type(stmt).__name__}")
            self.generate_code(stmt)
        if not self.builder.block.is_terminated:
            self.builder.unreachable()
        self._create_exit_wrapper()
        return self.module

    def _create_exit_wrapper(self):
        # main() hands the value to the C runtime, which truncates it to an exit status
        wrapper = ir.Function(self.module, ir.FunctionType(I32, []), name="main")
        builder = ir.IRBuilder(wrapper.append_basic_block(name="entry"))
        value = builder.call(self.func, [])
        builder.ret(builder.trunc(value, I32))


def target_machine():
    target = llvm.Target.from_default_triple()
    return target.create_target_machine(reloc="pic")


def verified(module):
    mod = llvm.parse_assembly(str(module))
    mod.verify()
    return mod


def emit_object(module):
    return target_machine().emit_object(verified(module))


def emit_assembly(module):
    return target_machine().emit_assembly(verified(module))


def jit_run(module):
    """Run tally_main in-process and return its 64-bit result."""
    machine = target_machine()
    backing_mod = llvm.parse_assembly("")
    engine = llvm.create_mcjit_compiler(backing_mod, machine)
    engine.add_module(verified(module))
    engine.finalize_object()
    engine.run_static_constructors()
    func_ptr = engine.get_function_address(ENTRY)
    cfunc = ctypes.CFUNCTYPE(ctypes.c_int64)(func_ptr)
    return cfunc()
