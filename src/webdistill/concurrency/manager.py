"""Thread pool for the CPU-bound half of a request."""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class ConcurrencyManager:
    """
    Runs parsing, readability scoring and Markdown conversion off the event loop.

    BeautifulSoup work on a large page can take hundreds of milliseconds;
    running it inline would stall every other request sharing the loop.

    Example:
        async with ConcurrencyManager(max_workers=4) as pool:
            doc = await pool.run_cpu_bound(ParsedDocument.parse, html, url)
            article = await pool.run_cpu_bound(extractor.extract, doc)
    """

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        """Get or lazily create the thread pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="webdistill-cpu-",
            )
        return self._executor

    async def run_cpu_bound(
        self,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run ``func(*args, **kwargs)`` in the pool and await its result.

        The callable must not touch objects owned by another request.
        """
        loop = asyncio.get_running_loop()
        if kwargs:
            return await loop.run_in_executor(self.executor, functools.partial(func, *args, **kwargs))
        return await loop.run_in_executor(self.executor, func, *args)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    async def __aenter__(self) -> "ConcurrencyManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.shutdown(wait=True)
