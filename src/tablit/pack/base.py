from __future__ import annotations

import math
import re
from collections.abc import Collection, Iterator, Mapping
from typing import Any, Final

from tablit import utils
from tablit.table import Table

__all__ = (
    "TRUE",
    "FALSE",
    "NIL",
    "FUNCTION",
    "EMPTY",
    "RESERVED",
    "format_number",
    "quote",
    "key_text",
    "is_container",
    "iter_entries",
    "as_index",
    "split_point",
    "parse_int",
    "to_plain",
)

TRUE: Final = "T"
FALSE: Final = "F"
# Holes in the positional part of a table (and the top level "no value")
NIL: Final = "_"
# Placeholder for values that can be printed but not read back
FUNCTION: Final = "(_)"
EMPTY: Final = "{}"

INFINITY: Final = "1e999"
NAN: Final = "(0/0)"

RESERVED: Final = frozenset(
    (
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "goto",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    )
)

IDENTIFIER: Final = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Cost (in characters) of a hole in the positional part: ``_,``
HOLE_COST: Final = 2
# Cost of writing the key of an entry explicitly: ``[1]=``. This grows by one
# with every extra digit.
KEY_COST: Final = 4

# Smaller than the lowest limit ``sys.set_int_max_str_digits`` accepts
DIGITS_CHUNK: Final = 600

_ESCAPES: Final = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_NEEDS_ESCAPE: Final = re.compile(r'[\\"\x00-\x1f\x7f]')


def format_number(num: int | float) -> str:
    """Lossless representation of a number

    >>> format_number(0.1), format_number(-math.inf), format_number(2**70)
    ('0.1', '-1e999', '1180591620717411303424')
    """
    if isinstance(num, float):
        if math.isnan(num):
            return NAN
        if math.isinf(num):
            return INFINITY if num > 0 else f"-{INFINITY}"
        return repr(num)
    try:
        return str(int(num))
    except ValueError:
        # Too many digits for a decimal conversion, hex has no such limit
        return hex(num)


def parse_int(digits: str) -> int:
    """Read a decimal integer of any length.

    Python refuses to convert strings of more than a few thousand digits with
    :func:`int`, so long inputs are read a chunk at a time.

    >>> parse_int("1" * 10_000) == (10**10_000 - 1) // 9
    True
    """
    if len(digits) <= DIGITS_CHUNK:
        return int(digits)
    res = 0
    for start in range(0, len(digits), DIGITS_CHUNK):
        chunk = digits[start : start + DIGITS_CHUNK]
        res = res * 10 ** len(chunk) + int(chunk)
    return res


def _escape(match: re.Match[str]) -> str:
    char = match.group()
    escaped = _ESCAPES.get(char)
    if escaped is None:
        # Always use 3 digits so a digit following the escape is not swallowed
        escaped = f"\\{ord(char):03d}"
    return escaped


def quote(s: str) -> str:
    r"""Quote a string so it can be read back.

    >>> print(quote('say "hi"\n'))
    "say \"hi\"\n"
    """
    return '"' + _NEEDS_ESCAPE.sub(_escape, s) + '"'


def key_text(key: str) -> str:
    """The text that precedes the ``=`` of an entry with a string key.

    >>> key_text("valid_name"), key_text("2lines"), key_text("end")
    ('valid_name', '["2lines"]', '["end"]')
    """
    if key not in RESERVED and IDENTIFIER.fullmatch(key):
        return key
    return f"[{quote(key)}]"


def is_container(v: Any) -> bool:
    return isinstance(v, Mapping | list | tuple)


def iter_entries(container: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate over the key/value pairs of a container.

    Lists and tuples are indexed from 1; entries with a :const:`None` value do
    not exist.
    """
    if isinstance(container, list | tuple):
        for idx, value in enumerate(container, 1):
            if value is not None:
                yield idx, value
    else:
        for key, value in container.items():
            if value is not None:
                yield key, value


def as_index(key: Any) -> int | None:
    """The position of *key* in the array part of a table (if any).

    >>> as_index(3), as_index(3.0), as_index(0), as_index(True), as_index(1.5)
    (3, 3, None, None, None)
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return int(key) if key >= 1 else None
    if isinstance(key, float) and key.is_integer() and key >= 1:
        return int(key)
    return None


def split_point(present: Collection[int]) -> int:
    """Find up to which index the array part of a table should be written
    positionally.

    Every index in ``1..n`` that is missing from *present* costs a hole while
    every index that is present saves writing out its key. We scan the indices
    in order and move the split point forward every time the savings since the
    last split point outweigh the holes. The cost of a key grows with the
    number of digits of the index: the scan goes through windows of indices
    with the same number of digits and stops after a window where the split
    point didn't move.

    >>> split_point({1, 2, 3, 11})
    3
    >>> split_point(range(1, 101))
    100
    >>> split_point({2, 3})
    3
    >>> split_point({*range(1, 10), *range(100, 201)})
    9
    """
    if not present:
        return 0
    last = max(present)
    pad = fly = split = 0
    cost = KEY_COST
    window = 10
    # Split point at the start of the current window
    start = 0
    pos = 1
    while pos <= last:
        if pos == window:
            if split == start:
                break
            start = split
            cost += 1
            window *= 10
        if pos in present:
            fly += cost
        else:
            pad += HOLE_COST
        if fly > pad:
            fly = pad = 0
            split = pos
        pos += 1
    return split


def to_plain(
    value: Any, *, string_keys: bool = False
) -> dict[Any, Any] | list[Any] | str | int | float | bool | None:
    """Convert tables to :class:`list` and :class:`dict`

    Tables whose keys are exactly ``1..n`` become lists, the other tables
    become dictionaries. If *string_keys* is set, the keys of the
    dictionaries are converted to strings (as required by json).

    Raises:
      TypeError: if a table is used as a key.
      ValueError: if the value is recursive.
    """
    active: set[int] = set()

    def convert_key(key: Any) -> Any:
        if is_container(key):
            raise TypeError("Tables used as keys cannot be converted")
        if not string_keys or isinstance(key, str):
            return key
        if isinstance(key, bool):
            return "true" if key else "false"
        return format_number(key)

    def convert(v: Any) -> utils.Task[Any]:
        if not is_container(v):
            return v
        addr = id(v)
        if addr in active:
            raise ValueError("Recursive value found")
        active.add(addr)
        entries = list(iter_entries(v))
        indexed = {as_index(k): item for k, item in entries}
        res: list[Any] | dict[Any, Any]
        if (
            entries
            and None not in indexed
            and len(indexed) == len(entries) == max(indexed)
        ):
            res = []
            for idx in range(1, len(entries) + 1):
                res.append((yield convert(indexed[idx])))
        else:
            res = {}
            for key, item in entries:
                res[convert_key(key)] = yield convert(item)
        active.discard(addr)
        return res

    if not is_container(value):
        return value
    return utils.trampoline(convert(value))
