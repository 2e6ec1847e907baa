from __future__ import annotations

import pydoc
import typing
from typing import Any, Generator, TypeAlias, TypeVar

T = TypeVar("T")

cram = pydoc.cram

# A computation that yields the sub-computations it needs and receives their
# results back.
Task: TypeAlias = Generator["Task[Any]", Any, T]


def trampoline(task: Task[T]) -> T:
    """Run a generator based recursion without growing the python stack.

    *task* yields other tasks whenever it needs their result; the result (the
    value returned by the sub task) gets sent back to it once the sub task is
    done:

        >>> def fact(n):
        ...     if n <= 1:
        ...         return 1
        ...     return n * (yield fact(n - 1))
        >>> trampoline(fact(5))
        120

    The nesting depth is only limited by the available memory.
    """
    stack: list[Task[Any]] = [task]
    result: Any = None
    while stack:
        try:
            sub = stack[-1].send(result)
        except StopIteration as stop:
            stack.pop()
            result = stop.value
        else:
            stack.append(sub)
            # Fresh generators have to be started with ``None``
            result = None
    return typing.cast(T, result)
