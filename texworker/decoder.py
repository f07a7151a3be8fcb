"""
Request decoding: stdin text -> CompileRequest.

Decoding never raises to the caller. A read or parse failure becomes a
failure CompileResponse and the compile step is skipped.
"""

import json
from dataclasses import dataclass
from typing import BinaryIO, Optional

from texworker.exceptions import RequestDecodeError, StdinReadError
from texworker.logger import _log_debug, _log_error
from texworker.models import CompileRequest, CompileResponse

READ_FAILURE_MESSAGE = "Failed to read stdin."


@dataclass
class DecodeOutcome:
    """Either a decoded request or the failure response to emit instead."""

    request: Optional[CompileRequest] = None
    failure: Optional[CompileResponse] = None


def read_request_text(stream: Optional[BinaryIO]) -> str:
    """
    Read the whole stream and decode it as UTF-8.

    Raises:
        StdinReadError: If the stream cannot be read or is not valid UTF-8
    """
    if stream is None:
        raise StdinReadError("stdin is not available")

    try:
        raw = stream.read()
    except (OSError, ValueError) as exc:
        raise StdinReadError(str(exc)) from exc

    if isinstance(raw, str):
        return raw

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StdinReadError(str(exc)) from exc


def parse_request(text: str) -> CompileRequest:
    """
    Parse request text into a CompileRequest.

    Raises:
        RequestDecodeError: If the text is not JSON or does not match the request shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RequestDecodeError(str(exc), snippet=text[:200]) from exc

    return CompileRequest.from_dict(data)


def decode_request(stream: Optional[BinaryIO]) -> DecodeOutcome:
    """
    Decode one compile request from a byte stream (normally stdin).

    Returns:
        DecodeOutcome with `request` set on success, `failure` set otherwise
    """
    try:
        text = read_request_text(stream)
    except StdinReadError as exc:
        _log_error(f"Could not read request: {exc}")
        return DecodeOutcome(failure=CompileResponse.failure(READ_FAILURE_MESSAGE))

    try:
        request = parse_request(text)
    except RequestDecodeError as exc:
        _log_error(f"Invalid request: {exc}")
        if exc.snippet:
            _log_debug(f"  Input: {exc.snippet!r}")
        return DecodeOutcome(failure=CompileResponse.failure(f"Invalid request JSON: {exc}"))

    _log_debug(f"Decoded request: {request}")
    return DecodeOutcome(request=request)
