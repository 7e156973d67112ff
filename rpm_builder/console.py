"""Console progress reporting for build runs."""

from __future__ import annotations

import datetime as dt
import sys
import typing as typ

__all__ = ["NULL_LOGGER", "ConsoleLogger", "Logger"]


class Logger(typ.Protocol):
    """Callable receiving one progress message per call."""

    def __call__(self, message: str) -> None: ...


class ConsoleLogger:
    """Write timestamped progress messages to ``stream`` when ``verbose``.

    Examples
    --------
    >>> import io
    >>> buffer = io.StringIO()
    >>> log = ConsoleLogger(verbose=False, stream=buffer)
    >>> log("hidden")
    >>> buffer.getvalue()
    ''
    """

    def __init__(self, *, verbose: bool = True, stream: typ.TextIO | None = None) -> None:
        self.verbose = verbose
        self._stream = stream

    def __call__(self, message: str) -> None:
        if not self.verbose:
            return
        stamp = dt.datetime.now().strftime("%H:%M:%S")
        print(f"[{stamp}] {message}", file=self._stream or sys.stderr)


NULL_LOGGER: Logger = ConsoleLogger(verbose=False)
