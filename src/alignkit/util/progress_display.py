"""Progress reporting for long running loops.

A function decorated with ``display_wrap`` receives a ``ui`` argument whose
``series()`` method wraps the loop. Bars are only drawn when the caller asks
for them with ``show_progress=True`` and stdout is a terminal.
"""

import functools
import sys
import threading
from collections.abc import Callable, Generator, Iterable, Sized
from typing import Any, TypeVar

from tqdm import tqdm

T = TypeVar("T")


class ProgressContext:
    """draws one tqdm bar per series, nested contexts are drawn below their
    parent"""

    def __init__(self, depth: int = 0, mininterval: float = 1.0) -> None:
        self.depth = depth
        self.mininterval = mininterval
        self.progress_bar: tqdm | None = None

    def subcontext(self) -> "ProgressContext":
        return self.__class__(depth=self.depth + 1, mininterval=self.mininterval)

    def series(
        self, items: Iterable[T], noun: str = "", count: int | None = None
    ) -> Generator[T, None, None]:
        """yields the elements of items while advancing a progress bar"""
        if count is None:
            if not isinstance(items, Sized):
                items = list(items)
            count = len(items)
        if count == 0:
            return

        self.done()
        self.progress_bar = tqdm(
            total=count,
            desc=noun or None,
            unit=noun or "it",
            position=self.depth,
            leave=self.depth == 0,
            mininterval=self.mininterval,
            dynamic_ncols=True,
        )
        for item in items:
            yield item
            self.progress_bar.update(1)

    def done(self) -> None:
        if self.progress_bar is not None:
            self.progress_bar.close()
            self.progress_bar = None


class NullContext(ProgressContext):
    """A UI context which discards all output."""

    def subcontext(self) -> "NullContext":
        return self

    def series(
        self, items: Iterable[T], noun: str = "", count: int | None = None
    ) -> Generator[T, None, None]:
        yield from items

    def done(self) -> None:
        pass


NULL_CONTEXT = NullContext()
CURRENT = threading.local()


def display_wrap(slow_function: Callable[..., T]) -> Callable[..., T]:
    """Decorator which give the function its own UI context.
    The function will receive an extra argument, 'ui',
    which is used to report progress etc. The wrapped function accepts a
    show_progress argument, progress is only displayed on a terminal."""

    @functools.wraps(slow_function)
    def f(*args: Any, **kw: Any) -> T:
        parent = getattr(CURRENT, "context", None)
        show_progress = kw.pop("show_progress", None)
        if not show_progress or not sys.stdout.isatty():
            context = NULL_CONTEXT
        elif parent is None or parent is NULL_CONTEXT:
            context = ProgressContext()
        else:
            context = parent.subcontext()

        kw["ui"] = CURRENT.context = context
        try:
            return slow_function(*args, **kw)
        finally:
            CURRENT.context = parent
            context.done()

    return f
