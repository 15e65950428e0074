"""Off-thread execution of blocking backup operations."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

from loguru import logger
from PySide6.QtCore import QObject, QThread, Signal

from balatro_saves.errors import SaveToolkitError

T = TypeVar("T")


class TaskWorker(QThread):
    """Run one core operation in a background thread.

    Emits ``succeeded`` with the return value, or ``failed`` with the
    exception raised. Classified :class:`SaveToolkitError` failures are
    logged at debug level, anything else as an error with its traceback.
    """

    succeeded = Signal(object)
    failed = Signal(object)

    def __init__(
        self,
        func: Callable[..., Any],
        *args: Any,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._func = func
        self._args = args

    def run(self) -> None:
        try:
            result = self._func(*self._args)
        except SaveToolkitError as e:
            logger.debug(f"{getattr(self._func, '__name__', 'task')} failed: {e}")
            self.failed.emit(e)
        except Exception as e:
            logger.exception(f"{getattr(self._func, '__name__', 'task')} raised unexpectedly: {e}")
            self.failed.emit(e)
        else:
            self.succeeded.emit(result)


async def run_in_thread(func: Callable[..., T], *args: Any) -> T:
    """Await a blocking core operation without stalling the event loop."""
    return await asyncio.to_thread(func, *args)
