"""Response encoding: CompileResponse -> one JSON line on stdout."""

import json
from typing import TextIO

from texworker.logger import _log_error
from texworker.models import CompileResponse

# Written when the response itself cannot be serialized
FALLBACK_MESSAGE = "{}"


def encode_response(response: CompileResponse) -> str:
    """Serialize a response as compact single-line JSON."""
    return json.dumps(response.to_dict(), separators=(",", ":"))


def emit_response(response: CompileResponse, stream: TextIO) -> str:
    """
    Write exactly one response line to stream.

    Falls back to FALLBACK_MESSAGE if serialization fails, so the caller
    always receives a line to parse.

    Returns:
        The line written (without the terminator)
    """
    try:
        line = encode_response(response)
    except (TypeError, ValueError, AttributeError) as exc:
        _log_error(f"Could not serialize response: {exc}")
        line = FALLBACK_MESSAGE

    stream.write(line + "\n")
    stream.flush()
    return line
