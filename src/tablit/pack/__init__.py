"""

:mod:`~tablit.pack` converts values to a compact text format and back. The
format is a subset of Lua's table constructors: it is short, readable and
cannot execute anything when it is read back.

Supported types
---------------

+ :class:`int`, :class:`float`, :class:`str`, :class:`bool`: Basic python
  primitives
+ :class:`~tablit.Table`, :class:`dict` (and any other
  :class:`~collections.abc.Mapping`): where keys are numbers, strings,
  booleans or tables.
+ :class:`list`, :class:`tuple`: indexed from 1, :const:`None` elements are
  holes.
+ :const:`None`: a missing value.

Functions are printed as a placeholder that reads back as :const:`None`.

A container that is reachable through several paths is only printed once; the
other entries that point to it are dropped. This also means that recursive
values can be printed (but not faithfully).

"""
from __future__ import annotations

from .base import split_point, to_plain
from .bin import dump_bin, load_bin
from .text import DecodeError, dump_text, load_text, parse_text

__all__ = (
    "dump_text",
    "load_text",
    "parse_text",
    "dump_bin",
    "load_bin",
    "split_point",
    "to_plain",
    "DecodeError",
)
