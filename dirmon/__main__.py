"""Module entry point for ``python -m dirmon``."""

from __future__ import annotations

from dirmon.cli import app

if __name__ == "__main__":  # pragma: no cover
    app(prog_name="dirmon")
