"""
LaTeX Compilation Module

Runs the document build tool (latexmk by default) against a project under a
hard wall-clock deadline and classifies the outcome from the exit status and
the artifacts left in the build directory.
"""

import os
import signal
import subprocess
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from texworker.logger import (
    _log_debug,
    log_compilation_result,
    log_compilation_start,
)
from texworker.models import CompileRequest, CompileResponse

load_dotenv()

BUILD_TOOL = os.getenv("TEXWORKER_BUILD_TOOL", "latexmk")

# Stem used when the entry file name has none (e.g. "" or "dir/")
DEFAULT_STEM = "main"

TIMEOUT_MESSAGE = "Compilation timed out."

# Longest single wait the poll-based selector accepts (2**31 - 1 ms)
MAX_WAIT_S = (2**31 - 1) // 1000


def build_command(build_tool: str, build_dir: Path, main_file: str) -> List[str]:
    """Fixed argument set: PDF output, non-interactive, halt on first error, file:line errors."""
    return [
        build_tool,
        "-pdf",
        "-interaction=nonstopmode",
        "-halt-on-error",
        "-file-line-error",
        "-output-directory",
        str(build_dir),
        main_file,
    ]


def tool_name(build_tool: str) -> str:
    """Display name of the build tool (basename of the executable path)."""
    return Path(build_tool).name or build_tool


def stem_for_main(main_file: str) -> str:
    """Artifact stem from the entry file name, falling back to DEFAULT_STEM."""
    path = Path(main_file)
    if path.name in ("", ".", ".."):
        return DEFAULT_STEM
    stem = path.stem
    if not stem.strip():
        return DEFAULT_STEM
    return stem


def resolve_build_dir(request: CompileRequest) -> Path:
    """
    Build directory as both the worker and the tool see it.

    The tool runs with cwd=project_root, so a relative build_dir is taken
    relative to project_root. Absolute paths are unchanged.
    """
    return Path(request.project_root) / request.build_dir


def file_size(path: Path) -> Optional[int]:
    """Size of path in bytes, or None if it does not exist."""
    try:
        return path.stat().st_size
    except OSError:
        return None


def _kill_process_group(proc: subprocess.Popen) -> None:
    """
    Force-kill the build tool and everything it spawned.

    latexmk runs the TeX engine as a child; killing only latexmk would leave
    the engine holding our pipes open.
    """
    try:
        if os.name == "posix":
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        _log_debug(f"Process group {proc.pid} already gone")


def _exit_code(returncode: Optional[int]) -> Optional[int]:
    # Negative returncode: terminated by a signal, no exit code
    if returncode is None or returncode < 0:
        return None
    return returncode


def execute_compile(request: CompileRequest, build_tool: str = BUILD_TOOL) -> CompileResponse:
    """
    Run the build tool for one request and classify the result.

    Pure compilation function: no logging setup, no retries. Every failure is
    returned as a CompileResponse, never raised.

    Args:
        request: Decoded compile request
        build_tool: Build tool executable (name on PATH or path)

    Returns:
        CompileResponse describing success, failure, or timeout
    """
    build_dir = resolve_build_dir(request)
    try:
        build_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return CompileResponse.failure(f"Failed to create build directory: {exc}")

    name = tool_name(build_tool)
    cmd = build_command(build_tool, build_dir, request.main_file)
    _log_debug(f"Running: {' '.join(cmd)}")

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=request.project_root,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
            start_new_session=(os.name == "posix"),
        )
    except OSError as exc:
        return CompileResponse.failure(f"Failed to launch {name}: {exc}")

    # communicate() drains both pipes while waiting, so a chatty tool cannot
    # block on a full pipe and turn into a false timeout
    timed_out = False
    try:
        stdout, stderr = proc.communicate(timeout=min(request.timeout_s, MAX_WAIT_S))
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_process_group(proc)
        try:
            stdout, stderr = proc.communicate()
        except Exception as exc:
            proc.wait()
            return CompileResponse.failure(f"Failed to collect compile output: {exc}")
    except Exception as exc:
        _kill_process_group(proc)
        proc.wait()
        return CompileResponse.failure(f"Failed while waiting for compile process: {exc}")

    stdout = stdout or ""
    stderr = stderr or ""
    code = _exit_code(proc.returncode)

    stem = stem_for_main(request.main_file)
    pdf_path = build_dir / f"{stem}.pdf"
    log_path = build_dir / f"{stem}.log"

    # Path and size are reported together, or not at all
    log_bytes = file_size(log_path)
    log_path_str = str(log_path) if log_bytes is not None else None

    if timed_out:
        return CompileResponse(
            success=False,
            timed_out=True,
            exit_code=code,
            stdout=stdout,
            stderr=stderr,
            log_path=log_path_str,
            log_bytes=log_bytes,
            error=TIMEOUT_MESSAGE,
        )

    pdf_bytes = file_size(pdf_path) if proc.returncode == 0 else None
    success = pdf_bytes is not None

    return CompileResponse(
        success=success,
        timed_out=False,
        exit_code=code,
        stdout=stdout,
        stderr=stderr,
        pdf_path=str(pdf_path) if success else None,
        log_path=log_path_str,
        pdf_bytes=pdf_bytes,
        log_bytes=log_bytes,
        error=None if success else f"{name} failed to produce a PDF.",
    )


def run_compile(
    request: CompileRequest,
    build_tool: str = BUILD_TOOL,
    verbose: bool = False,
) -> CompileResponse:
    """
    Compile one request with logging and timing.

    Wraps execute_compile() with start/result logging. The response is
    returned unchanged.

    Args:
        request: Decoded compile request
        build_tool: Build tool executable (default: TEXWORKER_BUILD_TOOL or latexmk)
        verbose: Log captured tool output even on success

    Returns:
        CompileResponse from execute_compile()
    """
    log_compilation_start(request, build_tool)

    start_time = time.time()
    response = execute_compile(request, build_tool=build_tool)
    compilation_time_s = time.time() - start_time

    log_compilation_result(response, elapsed_time=compilation_time_s, verbose=verbose)
    return response
