"""
Compile request and response data structures.

Both types exist only for one worker invocation. Internally fields are
snake_case; the wire format (stdin request, stdout response) uses the
camelCase names from REQUEST_FIELDS / RESPONSE_FIELDS.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from texworker.exceptions import RequestDecodeError

# External (camelCase) name -> internal attribute
REQUEST_FIELDS = {
    "projectRoot": "project_root",
    "mainFile": "main_file",
    "buildDir": "build_dir",
    "timeoutMs": "timeout_ms",
}

RESPONSE_FIELDS = {
    "success": "success",
    "timedOut": "timed_out",
    "exitCode": "exit_code",
    "stdout": "stdout",
    "stderr": "stderr",
    "pdfPath": "pdf_path",
    "logPath": "log_path",
    "pdfBytes": "pdf_bytes",
    "logBytes": "log_bytes",
    "error": "error",
}


@dataclass(frozen=True)
class CompileRequest:
    """
    One compilation job as received on stdin.

    Attributes:
        project_root: Working directory for the build tool
        main_file: Document entry point (absolute or relative to project_root)
        build_dir: Output directory for artifacts and logs (created if absent)
        timeout_ms: Wall-clock budget for the build tool subprocess
    """

    project_root: str
    main_file: str
    build_dir: str
    timeout_ms: int

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_dict(cls, data: Any) -> "CompileRequest":
        """
        Build a request from decoded JSON, validating every required field.

        Raises:
            RequestDecodeError: If data is not an object, a field is missing,
                or a field has the wrong type. Unknown keys are ignored.
        """
        if not isinstance(data, dict):
            raise RequestDecodeError(
                f"expected a JSON object, got {type(data).__name__}"
            )

        values = {}
        for external, internal in REQUEST_FIELDS.items():
            if external not in data:
                raise RequestDecodeError("missing required field", field_name=external)
            values[internal] = data[external]

        for external in ("projectRoot", "mainFile", "buildDir"):
            if not isinstance(data[external], str):
                raise RequestDecodeError("expected a string", field_name=external)

        # bool is an int subclass; JSON true/false is not a timeout
        timeout = data["timeoutMs"]
        if isinstance(timeout, bool) or not isinstance(timeout, int):
            raise RequestDecodeError("expected an integer", field_name="timeoutMs")
        if timeout < 0:
            raise RequestDecodeError("expected a non-negative integer", field_name="timeoutMs")

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {external: getattr(self, internal) for external, internal in REQUEST_FIELDS.items()}


@dataclass
class CompileResponse:
    """
    Result of one worker invocation.

    Attributes:
        success: Build tool exited 0 and the expected PDF exists
        timed_out: Deadline elapsed before the build tool finished
        exit_code: Build tool exit code (None if never launched or killed by a signal)
        stdout: Captured build tool standard output
        stderr: Captured build tool standard error
        pdf_path: Path to the generated PDF (only when success)
        log_path: Path to the build log (whenever it exists)
        pdf_bytes: Size of pdf_path on disk
        log_bytes: Size of log_path on disk
        error: Human-readable failure cause (None on success)
    """

    success: bool
    timed_out: bool = False
    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    pdf_path: Optional[str] = None
    log_path: Optional[str] = None
    pdf_bytes: Optional[int] = None
    log_bytes: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(
        cls,
        message: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: Optional[int] = None,
    ) -> "CompileResponse":
        """Failure response that carries no artifacts."""
        return cls(
            success=False,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            error=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """External representation; absent optionals are emitted as None (JSON null)."""
        return {external: getattr(self, internal) for external, internal in RESPONSE_FIELDS.items()}
