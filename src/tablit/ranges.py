"""
``tablit.ranges``: Compact lists of numbers
===========================================

Print lists of numbers the way a human would write them down::

  >>> compress([9, 8, 7, 5, 3, 2, 1, "all"])
  '1~3,5,7~9,all'

"""
from __future__ import annotations

from typing import Any, Iterable

__all__ = ("compress", "compress_sorted")


def _is_number(x: Any) -> bool:
    return isinstance(x, int | float) and not isinstance(x, bool)


def compress_sorted(numbers: Iterable[Any]) -> str:
    """Compress an ascending sequence of numbers.

    Runs of three or more consecutive numbers are written as ``start~end``;
    shorter runs are written out. Items that aren't numbers end the current
    run and are otherwise ignored.

      >>> compress_sorted([1, 2, 3, 5, 7, 8])
      '1~3,5,7,8'
    """
    runs: list[list[Any]] = []
    current: list[Any] | None = None
    for x in numbers:
        if not _is_number(x):
            current = None
        elif current is not None and x - current[1] == 1:
            current[1] = x
        else:
            current = [x, x]
            runs.append(current)

    out: list[str] = []
    for start, end in runs:
        if start == end:
            out.append(f"{start}")
        elif end - start == 1:
            out.append(f"{start}")
            out.append(f"{end}")
        else:
            out.append(f"{start}~{end}")
    return ",".join(out)


def compress(items: Iterable[Any]) -> str:
    """Print a list of numbers and labels in a compact way.

    The numbers are sorted and compressed with :func:`compress_sorted`. The
    other items come afterward in their original order.

      >>> compress([4, 5])
      '4,5'
      >>> compress(["x", 3, 1, 2])
      '1~3,x'
      >>> compress([])
      ''
    """
    numbers: list[Any] = []
    others: list[str] = []
    for x in items:
        if _is_number(x):
            numbers.append(x)
        else:
            others.append(f"{x}")
    if numbers:
        numbers.sort()
        others.insert(0, compress_sorted(numbers))
    return ",".join(others)
