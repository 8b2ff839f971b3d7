import argparse
import sys
from pathlib import Path

from . import __version__
from .errors import CompileError
from .reader import fetch_code
from .lexer import tokenize
from .parser import Parser, dump
from .semantic import SemanticAnalyzer
from .codegen import CodeGen
from . import compyler, finisher

SUFFIXES = {"asm": ".asm", "ll": ".ll", "obj": ".o", "exe": ""}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="tallyc", description="Compile a .tly program to x86-64")
    parser.add_argument("source", help="source file (.tly)")
    parser.add_argument("-o", dest="output", help="output file (default: source name with the artifact suffix)")
    parser.add_argument("--backend", choices=["nasm", "llvm"], default="nasm",
                        help="code generator to use (default: nasm)")
    parser.add_argument("--emit", choices=sorted(SUFFIXES), default="asm",
                        help="artifact to produce (default: asm)")
    parser.add_argument("--run", action="store_true",
                        help="build and run the program, exiting with its status")
    parser.add_argument("-v", "--verbose", action="store_true", help="dump every compiler stage to stderr")
    parser.add_argument("--version", action="version", version=f"tallyc {__version__}")
    args = parser.parse_args(argv)
    if args.output and Path(args.output).resolve() == Path(args.source).resolve():
        parser.error("output file would overwrite the source file")
    if args.emit == "ll" and args.backend != "llvm":
        parser.error("--emit ll needs --backend llvm")
    return args


def debug(args, message):
    if args.verbose:
        print(f"[DEBUG] {message}", file=sys.stderr)


def output_path(args, emit):
    if args.output:
        return Path(args.output)
    return Path(args.source).with_suffix(SUFFIXES[emit])


def intermediate_path(out, suffix):
    # build steps must never land on the requested artifact
    path = out.with_suffix(suffix)
    if path == out:
        path = out.with_name(out.name + suffix)
    return path


def build_nasm(args, program):
    gen = CodeGen()
    lines = gen.generate(program)
    debug(args, f"Generated {len(lines)} instructions, frame of {gen.frame_size} bytes")
    for name, offset in gen.slots.items():
        debug(args, f"  {name} -> [rbp-{offset}]")

    emit = "exe" if args.run else args.emit
    out = output_path(args, emit)
    text = finisher.render_asm(lines, gen.frame_size)
    if emit == "asm":
        finisher.make_output(out, text)
        debug(args, f"Wrote {out}")
        return out

    asm_path = intermediate_path(out, ".asm")
    finisher.make_output(asm_path, text)
    debug(args, f"Wrote {asm_path}")
    if emit == "obj":
        finisher.assemble(asm_path, out)
        debug(args, f"Assembled {out}")
        return out

    obj_path = intermediate_path(out, ".o")
    finisher.assemble(asm_path, obj_path)
    debug(args, f"Assembled {obj_path}")
    finisher.link(obj_path, out)
    debug(args, f"Linked {out}")
    return out


def build_llvm(args, program):
    module = compyler.LLVMCodeGen().create_main(program)
    if args.verbose:
        debug(args, f"LLVM IR:\n{module}")

    if args.run:
        return compyler.jit_run(module) & 0xFF

    out = output_path(args, args.emit)
    if args.emit == "ll":
        finisher.save_ir(module, out)
    elif args.emit == "asm":
        finisher.make_output(out, compyler.emit_assembly(module))
    elif args.emit == "obj":
        finisher.save_object(module, out)
    else:
        obj_path = intermediate_path(out, ".o")
        finisher.save_object(module, obj_path)
        finisher.link_with_cc(obj_path, out)
    debug(args, f"Wrote {out}")
    return out


def compile_file(args):
    debug(args, f"Path to file to compile: {args.source}")
    code = fetch_code(args.source)
    debug(args, f"File contents raw:\n{code!r}")

    tokens = tokenize(code)
    if args.verbose:
        debug(args, f"Produced {len(tokens)} tokens: {tokens}")

    program = Parser(tokens).parse()
    if args.verbose:
        for stmt in program:
            debug(args, f"stmt: {dump(stmt)}")

    for warning in SemanticAnalyzer(program).analyze():
        print(f"warning: {warning}", file=sys.stderr)

    if args.backend == "llvm":
        return build_llvm(args, program)
    return build_nasm(args, program)


def main(argv=None):
    args = parse_args(argv)
    try:
        result = compile_file(args)
        if args.run and args.backend == "nasm":
            return finisher.run_executable(result)
        if args.run:
            return result
    except CompileError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
