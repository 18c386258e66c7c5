import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args, **kwargs) -> T:
    """Run a blocking call (ClickHouse I/O, CPU-bound aggregation) in a thread.

    Central helper so there is one place to switch to a dedicated pool.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
