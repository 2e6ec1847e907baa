"""
``tablit.table``: Lua style tables
==================================

:class:`Table` is the container type of :mod:`tablit`. It behaves like a
:class:`dict` with the semantic of a Lua table:

+ ``True`` and ``False`` are keys of their own (in python ``True == 1``).
+ Floats with an integral value are the same key as the matching int.
+ Assigning :const:`None` removes the entry.
+ Tables hash by identity so they can be used as keys of other tables.

"""
from __future__ import annotations

import math
import numbers
import reprlib
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Any, Hashable

__all__ = ("Table",)


def _normalize(key: Any) -> tuple[Hashable, Any]:
    """Get the slot used in the underlying dictionary and the key to store."""
    if isinstance(key, bool):
        return (bool, key), key
    if isinstance(key, int | str | Table):
        return key, key
    if isinstance(key, float):
        if math.isnan(key):
            raise ValueError("table index is NaN")
        if key.is_integer():
            key = int(key)
        return key, key
    if key is None:
        raise TypeError("table index is nil")
    raise TypeError(f"Unsupported table key type: {type(key).__name__}")


def _slot(key: Any) -> Hashable:
    return _normalize(key)[0]


class Table(MutableMapping[Any, Any]):
    """An associative array whose keys can be numbers, strings, booleans or
    other tables.

    >>> t = Table({"x": 1}, y=2)
    >>> t[True] = "yes"
    >>> t[1] = "one"
    >>> t
    Table({'x': 1, 'y': 2, True: 'yes', 1: 'one'})
    """

    __slots__ = ("_entries",)

    _entries: dict[Hashable, tuple[Any, Any]]

    def __init__(
        self,
        items: Mapping[Any, Any] | Iterable[tuple[Any, Any]] = (),
        /,
        **kwargs: Any,
    ) -> None:
        self._entries = {}
        self.update(items, **kwargs)

    @classmethod
    def array(cls, *values: Any) -> Table:
        """Build a table where the *n*-th value has the key *n* (starting from
        1). :const:`None` values leave a hole.

        >>> Table.array("a", None, "c")
        Table({1: 'a', 3: 'c'})
        """
        res = cls()
        for idx, value in enumerate(values, 1):
            if value is not None:
                res._entries[idx] = (idx, value)
        return res

    def __getitem__(self, key: Any) -> Any:
        return self._entries[_slot(key)][1]

    def __setitem__(self, key: Any, value: Any) -> None:
        slot, key = _normalize(key)
        if value is None:
            self._entries.pop(slot, None)
        else:
            self._entries[slot] = (key, value)

    def __delitem__(self, key: Any) -> None:
        del self._entries[_slot(key)]

    def __contains__(self, key: object) -> bool:
        try:
            return _slot(key) in self._entries
        except (TypeError, ValueError):
            return False

    def get(self, key: Any, default: Any = None) -> Any:
        try:
            return self._entries[_slot(key)][1]
        except (KeyError, TypeError, ValueError):
            return default

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self._entries.values():
            yield key

    def __len__(self) -> int:
        return len(self._entries)

    # Mapping sets __hash__ to None because it defines __eq__
    __hash__ = object.__hash__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Table):
            if len(self._entries) != len(other._entries):
                return False
            for slot, (_, value) in self._entries.items():
                found = other._entries.get(slot)
                if found is None or found[1] != value:
                    return False
            return True
        if isinstance(other, Mapping):
            try:
                return self == Table(other)
            except (TypeError, ValueError):
                return False
        return NotImplemented

    @reprlib.recursive_repr("Table({...})")
    def __repr__(self) -> str:
        inner = ", ".join(
            f"{key!r}: {value!r}" for key, value in self._entries.values()
        )
        return f"{type(self).__name__}({{{inner}}})"

    def border(self) -> int:
        """The length of the array part of the table (Lua's ``#t``).

        This is the largest ``n`` such that all the keys from ``1`` to ``n``
        are present.

        >>> Table.array(1, 2, None, 4).border()
        2
        """
        n = 0
        entries = self._entries
        while n + 1 in entries:
            n += 1
        return n

    def list_of(self) -> Table:
        "A new table with only the entries that have a number as their key."
        res = type(self)()
        for slot, kv in self._entries.items():
            if isinstance(kv[0], numbers.Real) and type(kv[0]) is not bool:
                res._entries[slot] = kv
        return res

    def sorted_columns(self) -> tuple[list[Any], list[Any]]:
        """Split the table in two lists: the sorted keys and their values.

        All the keys have to be comparable with each other.

        >>> Table({"b": 2, "a": 1}).sorted_columns()
        (['a', 'b'], [1, 2])
        """
        pairs = sorted(self._entries.values(), key=lambda kv: kv[0])
        return [k for k, _ in pairs], [v for _, v in pairs]
