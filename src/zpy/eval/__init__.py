"""Evaluator helper modules for the ZPy runtime."""

__all__ = [
    "common",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
    "mutation",
]
