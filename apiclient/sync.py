"""
Synchronous wrapper utilities for converting async methods to sync.
"""
import asyncio
import atexit
import functools
import inspect

from .client import ApiClient


_loop = None


def _get_loop() -> asyncio.AbstractEventLoop:
    global _loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        pass
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop


def close_loop() -> None:
    """Close the loop used by blocking wrappers; the next call opens a fresh one."""
    global _loop
    if _loop is None or _loop.is_running():
        return
    _loop.close()
    _loop = None


atexit.register(close_loop)


def async_to_sync(obj, name):
    """
    Replace the coroutine method ``name`` on ``obj`` with a blocking wrapper.

    Inside a running event loop the wrapper hands the coroutine back so it
    can still be awaited.
    """
    function = getattr(obj, name)
    if not inspect.iscoroutinefunction(function):
        return

    @functools.wraps(function)
    def async_to_sync_wrap(*args, **kwargs):
        coroutine = function(*args, **kwargs)
        loop = _get_loop()
        if loop.is_running():
            return coroutine
        return loop.run_until_complete(coroutine)

    setattr(obj, name, async_to_sync_wrap)


def wrap_methods(source):
    """
    Wrap asynchronous methods in a class to make them synchronous.

    Parameters:
    - source: Class containing asynchronous methods.
    """
    for name in dir(source):
        if not name.startswith("_") and inspect.iscoroutinefunction(getattr(source, name)):
            async_to_sync(source, name)


class SyncApiClient(ApiClient):
    """Blocking flavour of :class:`ApiClient` with the same methods and hooks."""

    def __enter__(self) -> "SyncApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
        close_loop()


wrap_methods(SyncApiClient)


__all__ = ["SyncApiClient", "async_to_sync", "close_loop", "wrap_methods"]
