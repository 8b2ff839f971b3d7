import shutil
import subprocess
from pathlib import Path

from .errors import CompileError
from . import compyler


def prologue(frame_size):
    lines = [
        "global _start",
        "section .text",
        "_start:",
        "    push rbp",
        "    mov rbp, rsp",
    ]
    if frame_size:
        lines.append(f"    sub rsp, {frame_size}")
    return lines


def render_asm(lines, frame_size):
    return "\n".join(prologue(frame_size) + list(lines)) + "\n"


def make_output(path, text):
    mode = "wb" if isinstance(text, bytes) else "w"
    with open(path, mode) as f:
        f.write(text)
    return path


def save_ir(module, path):
    return make_output(path, str(module))


def save_object(module, path):
    return make_output(path, compyler.emit_object(module))


def run_tool(cmd):
    if shutil.which(cmd[0]) is None:
        raise CompileError(f"'{cmd[0]}' not found on PATH")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        raise CompileError(f"{cmd[0]} failed: {e.stderr.strip() or e.returncode}") from e


def assemble(asm_path, obj_path):
    run_tool(["nasm", "-felf64", str(asm_path), "-o", str(obj_path)])
    return obj_path


def link(obj_path, exe_path):
    # _start is the entry point, no C runtime
    run_tool(["ld", str(obj_path), "-o", str(exe_path)])
    return exe_path


def link_with_cc(obj_path, exe_path):
    cc = "clang" if shutil.which("clang") else "cc"
    run_tool([cc, str(obj_path), "-o", str(exe_path)])
    return exe_path


def run_executable(exe_path):
    return subprocess.run([str(Path(exe_path).resolve())]).returncode
