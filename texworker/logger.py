"""
Worker logger.

Configures loguru for the worker and provides [worker]-prefixed helpers.
Stdout carries the single response line, so no sink is ever attached to it:
the console sink is stderr and an optional DEBUG file sink records provenance.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

CONTEXT_PREFIX = "[worker]"
LOG_LEVEL = os.getenv("TEXWORKER_LOG_LEVEL", "WARNING").upper()
LOG_DIR = os.getenv("TEXWORKER_LOG_DIR")

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<white>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    log_dir: Optional[Path] = None,
    level: str = LOG_LEVEL,
    extra_provenance: dict = None,
) -> Optional[Path]:
    """
    Configure loguru for one worker invocation.

    Console output goes to stderr at `level`. When log_dir is given, a DEBUG
    file sink is added and the execution provenance (script, command, working
    directory, Python version) is written at the top of it.

    Args:
        log_dir: Directory for the session log file (None disables file logging)
        level: Minimum level for the stderr sink
        extra_provenance: Additional key-value pairs for provenance header

    Returns:
        Path to log file, or None when file logging is disabled
    """
    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=False,
    )

    if log_dir is None:
        return None

    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(exist_ok=True, parents=True)
    except OSError as exc:
        logger.warning(f"{CONTEXT_PREFIX} File logging disabled, cannot create {log_dir}: {exc}")
        return None

    log_file = log_dir / f"worker_{os.getpid()}_{_timestamp()}.log"

    logger.add(
        log_file, format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}", level="DEBUG"
    )
    log_provenance(extra_provenance)

    return log_file


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def log_provenance(extra_context: dict = None) -> None:
    """
    Log execution provenance to the debug sinks.

    Args:
        extra_context: Additional key-value pairs to log
    """
    logger.debug("=" * 80)
    logger.debug(f"Script: {sys.argv[0]}")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    logger.debug(f"Python: {sys.version.split()[0]}")
    logger.debug(f"PID: {os.getpid()}")

    if extra_context:
        for key, value in extra_context.items():
            logger.debug(f"{key}: {value}")

    logger.debug("=" * 80)


# Wrapper functions with automatic [worker] prefix


def _log_info(message: str) -> None:
    """Log info message with [worker] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [worker] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [worker] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [worker] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [worker] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level compilation logging helpers


def log_compilation_start(request, tool: str) -> None:
    """Log start of compilation with request context."""
    _log_info(f"Starting compilation: {request.main_file}")
    _log_debug(f"  Project root: {request.project_root}")
    _log_debug(f"  Build dir: {request.build_dir}")
    _log_debug(f"  Timeout: {request.timeout_ms} ms")
    _log_debug(f"  Build tool: {tool}")


def log_compilation_result(
    response,  # CompileResponse
    elapsed_time: float,
    verbose: bool = False,
) -> None:
    """
    Log compilation outcome.

    Args:
        response: CompileResponse from run_compile()
        elapsed_time: Time taken to compile
        verbose: Also dump captured tool output on success (default: False)
    """
    if response.success:
        _log_success(f"Compilation succeeded ({elapsed_time:.2f}s)")
        _log_debug(f"  PDF: {response.pdf_path} ({response.pdf_bytes} bytes)")
    elif response.timed_out:
        _log_warning(f"Compilation timed out ({elapsed_time:.2f}s)")
    else:
        _log_error(f"Compilation failed: {response.error} ({elapsed_time:.2f}s)")

    if response.log_path:
        _log_debug(f"  Log: {response.log_path} ({response.log_bytes} bytes)")

    # raw=True keeps multi-line tool output free of per-line timestamps
    if verbose or not response.success:
        if response.stdout:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nBUILD TOOL STDOUT:\n{'=' * 80}\n{response.stdout}\n"
            )
        if response.stderr:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nBUILD TOOL STDERR:\n{'=' * 80}\n{response.stderr}\n"
            )
