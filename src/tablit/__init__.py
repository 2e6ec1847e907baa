"""Compact Lua style table literals"""
from __future__ import annotations

from importlib import metadata

from .pack import DecodeError, dump_text, load_text, parse_text
from .ranges import compress
from .table import Table

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "DecodeError",
    "Table",
    "compress",
    "dump_text",
    "load_text",
    "parse_text",
)
