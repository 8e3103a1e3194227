"""
Helpers shared by relational seeders.
"""

from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


async def with_transaction(
    session: AsyncSession, work: Callable[[], Awaitable[Any]]
) -> Any:
    """
    Run ``work`` inside a transaction on ``session``.

    If the session already has an explicit transaction the work joins it and
    the outer owner decides about commit. Otherwise a transaction is begun,
    committed on success and rolled back when ``work`` raises.
    """
    if session.in_transaction():
        return await work()

    async with session.begin():
        return await work()


async def execute_in_batches(
    items: Iterable[T],
    batch_size: int,
    action: Callable[[List[T]], Awaitable[None]],
) -> int:
    """
    Call ``action`` with consecutive slices of at most ``batch_size`` items.

    Returns:
        int: Number of batches processed
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than 0")

    batches = 0
    batch: List[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == batch_size:
            await action(batch)
            batches += 1
            batch = []

    if batch:
        await action(batch)
        batches += 1

    return batches
