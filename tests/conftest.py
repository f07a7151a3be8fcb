"""Shared fixtures: fake build tools that mimic latexmk's artifact contract."""

import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent

# Prologue shared by every fake tool: parse latexmk-style arguments
FAKE_TOOL_PROLOGUE = """
import json
import os
import subprocess
import sys
import time
from pathlib import Path

args = sys.argv[1:]
out_dir = Path(args[args.index("-output-directory") + 1])
main_file = args[-1]
stem = Path(main_file).stem or "main"
pdf = out_dir / (stem + ".pdf")
log = out_dir / (stem + ".log")
"""

FAKE_TOOLS = {
    "success": """
log.write_text("This is a fake build log\\n")
pdf.write_bytes(b"%PDF-1.5\\n" + b"x" * 1000)
print("Output written on " + str(pdf))
""",
    "no_pdf": """
log.write_text("No pages of output.\\n")
print("Latexmk: No output produced")
""",
    "error": """
log.write_text("! Undefined control sequence.\\n")
print(main_file + ":3: Undefined control sequence.", file=sys.stderr)
sys.exit(12)
""",
    "error_with_pdf": """
log.write_text("! Emergency stop.\\n")
pdf.write_bytes(b"%PDF-1.5\\n")
sys.exit(1)
""",
    "hang": """
log.write_text("Started\\n")
print("compiling...", flush=True)
time.sleep(60)
""",
    "hang_with_child": """
log.write_text("Started\\n")
subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
time.sleep(60)
""",
    "record_args": """
(out_dir / "invocation.json").write_text(json.dumps({"argv": args, "cwd": os.getcwd()}))
log.write_text("ok\\n")
pdf.write_bytes(b"%PDF-1.5\\n")
""",
    "bad_bytes": """
sys.stdout.buffer.write(b"before \\xff\\xfe after\\n")
sys.stdout.flush()
log.write_text("ok\\n")
pdf.write_bytes(b"%PDF-1.5\\n")
""",
    "chatty": """
for i in range(20000):
    print("line %d of very verbose compiler output" % i)
log.write_text("ok\\n")
pdf.write_bytes(b"%PDF-1.5\\n")
""",
}


def _write_fake_tool(directory: Path, name: str) -> str:
    """Write fake tool `name` as an executable shell wrapper around the current Python."""
    directory.mkdir(parents=True, exist_ok=True)
    script = directory / f"{name}.py"
    script.write_text(FAKE_TOOL_PROLOGUE + textwrap.dedent(FAKE_TOOLS[name]))

    wrapper = directory / "latexmk"
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
    wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(wrapper)


@pytest.fixture
def fake_tool(tmp_path):
    """Factory: fake_tool("success") -> path to an executable fake latexmk."""

    def _make(name: str) -> str:
        return _write_fake_tool(tmp_path / "bin" / name, name)

    return _make


@pytest.fixture
def project(tmp_path):
    """A project root containing main.tex."""
    root = tmp_path / "proj"
    root.mkdir()
    (root / "main.tex").write_text(
        "\\documentclass{article}\n\\begin{document}\nHello World\n\\end{document}\n"
    )
    return root


@pytest.fixture
def request_payload(project):
    """Factory for wire-format request dicts rooted at the `project` fixture."""

    def _make(**overrides):
        payload = {
            "projectRoot": str(project),
            "mainFile": "main.tex",
            "buildDir": str(project / "out"),
            "timeoutMs": 10000,
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def worker_env():
    """Environment for running `python -m texworker` from the source tree."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.pop("TEXWORKER_LOG_DIR", None)
    return env
