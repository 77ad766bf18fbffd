"""Process-edge error boundary for CLI commands.

Business logic raises; it does not print and exit. Each CLI command is
wrapped in an ErrorBoundary that turns an escaped exception into a message on
stderr and a process exit code. Handlers are chosen by exception type
(``functools.singledispatch``, matched by MRO), so one handler registered for
ClaudeSwitchError covers the whole taxonomy, and a handler for Exception is
the crash fallback.

    boundary = ErrorBoundary()

    @boundary.handler(ClaudeSwitchError)
    def handle_expected(exc: ClaudeSwitchError) -> int:
        print(f'error: {exc}', file=sys.stderr)
        return 1

    @app.command()
    @boundary
    def use(name: str) -> None:
        ...

System exceptions (SystemExit, KeyboardInterrupt, GeneratorExit) are not
Exception subclasses and always pass through, so typer/click keep handling
their own exits and Ctrl-C.
"""

from __future__ import annotations

__all__ = [
    'ErrorBoundary',
    'ExitCodeHandler',
]

import functools
import sys
import traceback
from collections.abc import Callable
from functools import singledispatch
from types import TracebackType
from typing import Any, Self, TypeVar, cast

type ExitCodeHandler = Callable[[Exception], int]

_F = TypeVar('_F', bound=Callable[..., object])

CRASH_EXIT_CODE = 1


class ErrorBoundary:
    """Catch application exceptions, report them, and exit.

    Usable as a decorator (``@boundary``) or a context manager
    (``with boundary:``). The registered handler's return value becomes the
    process exit code. If a handler itself raises, the original exception's
    traceback is printed instead and the process exits with 1.
    """

    def __init__(self) -> None:
        self._dispatch = singledispatch(_print_traceback)

    def handler(self, exc_type: type[Exception]) -> Callable[[Callable[..., int]], Callable[..., int]]:
        """Register a handler for ``exc_type`` and its subclasses."""
        return self._dispatch.register(exc_type)

    def __call__(self, func: _F) -> _F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self:
                return func(*args, **kwargs)

        return cast(_F, wrapper)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if not isinstance(exc_value, Exception):
            return False  # No exception, or a system exception

        try:
            code = self._dispatch(exc_value)
        except Exception:
            try:  # noqa: SIM105
                _print_traceback(exc_value)
            except Exception:
                pass  # stderr unusable; still exit below
            code = CRASH_EXIT_CODE

        sys.exit(code)


def _print_traceback(exc: Exception) -> int:
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    return CRASH_EXIT_CODE
