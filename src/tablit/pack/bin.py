"""
``tablit.pack.bin``: msgpack bridge
===================================

Convert tables to and from `MessagePack <https://msgpack.org/>`_. This is
mostly useful to feed the output of other tools to :func:`dump_text` (and the
other way around).
"""

from __future__ import annotations

import typing
from typing import Any

from tablit.table import Table

from . import base

if typing.TYPE_CHECKING:  # pragma: no cover
    import types
    from typing import Type

__all__ = (
    "dump_bin",
    "load_bin",
)


class ImportGuard:
    def __enter__(self) -> None:
        pass

    def __exit__(
        self,
        exctype: Type[BaseException] | None,
        excinst: BaseException | None,
        exctb: types.TracebackType | None,
    ) -> None:
        if exctype is not None and issubclass(exctype, ModuleNotFoundError):
            import warnings

            warnings.warn(
                "Support for msgpack is not available because of missing "
                "dependencies. You can fix this by running ``pip install "
                "tablit[msgpack]``"
            )


def _array(items: list[Any]) -> Table:
    return Table.array(*items)


def dump_bin(obj: Any) -> bytes:
    """Serialise *obj* with msgpack

    Tables whose keys are ``1..n`` are packed as arrays, the others as maps.

    Raises:
      TypeError: if *obj* uses tables as keys or values msgpack cannot pack.
      OverflowError: for ints that do not fit in 64 bits.
      ValueError: if *obj* is recursive.

    Note:

      This feature is only available if tablit was installed with ``msgpack``
      (e.g.: via ``pip install tablit[msgpack]``).
    """
    with ImportGuard():
        import msgpack

    return typing.cast(bytes, msgpack.packb(base.to_plain(obj)))


def load_bin(packed: bytes) -> Any:
    """Read a msgpack document

    Maps and arrays are read as :class:`~tablit.Table` (arrays are indexed
    from 1 and ``nil`` elements leave holes).

    Note:

      This feature is only available if tablit was installed with ``msgpack``
      (e.g.: via ``pip install tablit[msgpack]``).
    """
    with ImportGuard():
        import msgpack

    return msgpack.unpackb(
        packed,
        list_hook=_array,
        object_pairs_hook=Table,
        strict_map_key=False,
    )
