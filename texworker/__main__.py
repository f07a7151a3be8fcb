"""Entry point for ``python -m texworker``."""

from texworker.cli import app

if __name__ == "__main__":
    app()
