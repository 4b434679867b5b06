"""Command line surface for inspecting and initializing AutoRegister registries."""

from .cli import build_parser, main

__all__ = ["build_parser", "main"]
