"""iter_coroutine - drive non-suspending coroutines from synchronous code."""

from __future__ import annotations

import typing

_T = typing.TypeVar("_T")


def iter_coroutine(coro: typing.Coroutine[typing.Any, None, _T]) -> _T:
    """
    Run a coroutine that never suspends and return its result.

    The sync client shares the async request code with the async client; with a
    ``BlockingTransport`` underneath, none of those coroutines ever yield, so a
    single ``send(None)`` completes them.

    Raises:
        RuntimeError: If the coroutine suspends (e.g. an async transport was
            wired into a sync client by mistake). The coroutine is closed first.
    """
    try:
        yielded = coro.send(None)
    except StopIteration as stop:
        return stop.value  # type: ignore [no-any-return]
    coro.close()
    raise RuntimeError(
        f"coroutine {coro!r} suspended on {yielded!r}; expected a blocking transport"
    )


__all__ = ["iter_coroutine"]
