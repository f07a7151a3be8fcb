"""
One worker invocation: decode -> compile -> encode.

Control flow is strictly linear. Whatever happens, exactly one response line
is written to the output stream.
"""

from typing import BinaryIO, TextIO

from loguru import logger

from texworker.compiler import BUILD_TOOL, run_compile
from texworker.decoder import decode_request
from texworker.encoder import emit_response
from texworker.models import CompileResponse


def run_worker(
    stdin: BinaryIO,
    stdout: TextIO,
    build_tool: str = BUILD_TOOL,
    verbose: bool = False,
) -> CompileResponse:
    """
    Handle one compile request from stdin and write its response to stdout.

    Args:
        stdin: Byte stream holding the JSON request
        stdout: Text stream that receives the single response line
        build_tool: Build tool executable
        verbose: Log captured tool output even on success

    Returns:
        The response that was emitted
    """
    try:
        outcome = decode_request(stdin)
        if outcome.failure is not None:
            response = outcome.failure
        else:
            response = run_compile(outcome.request, build_tool=build_tool, verbose=verbose)
    except Exception as exc:
        # Last resort so the caller still gets a well-formed line
        logger.exception("[worker] Unexpected error")
        response = CompileResponse.failure(f"Unexpected worker error: {exc}")

    emit_response(response, stdout)
    return response
