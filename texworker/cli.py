"""
Compile worker CLI

Reads one JSON compile request from stdin and writes one JSON response line
to stdout. Logs go to stderr (and optionally a log file), never stdout.

Examples:\n

    echo '{"projectRoot":"/proj","mainFile":"main.tex","buildDir":"/proj/out","timeoutMs":5000}' | texworker

    texworker --verbose --log-dir /tmp/texworker-logs < request.json
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from texworker import __version__
from texworker.compiler import BUILD_TOOL
from texworker.logger import LOG_DIR, LOG_LEVEL, setup_logger
from texworker.worker import run_worker

app = typer.Typer(
    help="Compile one LaTeX project per invocation (request on stdin, JSON result on stdout)",
    add_completion=False,
)


@app.command()
def main(
    log_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--log-dir",
            help="Directory for a DEBUG session log (default: TEXWORKER_LOG_DIR)",
        ),
    ] = Path(LOG_DIR) if LOG_DIR else None,
    build_tool: Annotated[
        str,
        typer.Option(
            "--build-tool",
            help="Build tool executable (default: TEXWORKER_BUILD_TOOL or latexmk)",
        ),
    ] = BUILD_TOOL,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Debug logging on stderr, including build tool output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Print the texworker version (to stderr) and exit",
        ),
    ] = False,
):
    """
    Run one compile job.

    Always exits 0 once the response line is written; the compilation outcome
    is reported in the response body only.
    """
    if version:
        typer.echo(f"texworker {__version__}", err=True)
        raise typer.Exit()

    setup_logger(
        log_dir=log_dir,
        level="DEBUG" if verbose else LOG_LEVEL,
        extra_provenance={"Build tool": build_tool},
    )

    stdin = getattr(sys.stdin, "buffer", sys.stdin)
    run_worker(stdin, sys.stdout, build_tool=build_tool, verbose=verbose)
    raise typer.Exit(code=0)


if __name__ == "__main__":
    app()
