"""Command line interface (python -m opsreport.cli)."""

from .__main__ import main

__all__ = ["main"]
