"""Command line interface of scoregate."""

from .main import cli, main

__all__ = ["cli", "main"]
