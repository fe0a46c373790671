"""``python -m bpc.cli`` entry point."""

from cli.main import app, main

__all__ = ["app", "main"]
