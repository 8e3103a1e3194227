"""
Base seeder interface for the DataSeeder orchestration engine.

A seeder is one named unit of seeding work. The orchestrator only relies on
the members defined here: a stable ``key`` used for deduplication and as the
target of dependency edges, an integer ``order`` (lower runs earlier), a
display ``name`` and the ``seed()`` coroutine.

Identity:
    Keys are explicit strings. A subclass either sets the ``key`` class
    attribute or receives one at construction time; when neither is given the
    class name is used. Dependencies reference other seeders by key, so a
    seeder may depend on a key with no registered seeder (the edge is ignored).

Cancellation:
    ``seed()`` is an ordinary coroutine. Cancelling the orchestrating task,
    or hitting the per-seeder deadline, cancels it at its next await point.

Example:
    >>> class CategorySeeder(BaseSeeder):
    ...     key = "categories"
    ...     order = 1
    ...
    ...     async def seed(self) -> None:
    ...         self.logger.info("Seeding categories")
    >>>
    >>> class BookSeeder(BaseSeeder):
    ...     key = "books"
    ...     order = 3
    ...     dependencies = ("authors", "categories")
    ...
    ...     async def seed(self) -> None:
    ...         ...
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

from dataseeder.core.logging.logger import get_seeder_logger


class BaseSeeder(ABC):
    """
    Abstract base class for all seeders.

    Attributes:
        key: Unique identity of the seeder within one run
        order: Priority tier; lower values run earlier
        name: Display name used in logs and errors
        dependencies: Keys of seeders that must complete first
        logger: Logger bound to this seeder's name

    Subclasses set ``order`` (and usually ``key`` and ``dependencies``) as
    class attributes, or pass them to ``__init__`` when one class is reused
    for several seeders.
    """

    key: Optional[str] = None
    order: int = 0
    dependencies: Tuple[str, ...] = ()

    def __init__(
        self,
        key: Optional[str] = None,
        order: Optional[int] = None,
        dependencies: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        # Instance attributes shadow the class-level defaults
        self.key = key or type(self).key or type(self).__name__
        if order is not None:
            self.order = order
        if dependencies is not None:
            self.dependencies = tuple(dependencies)
        self._name = name
        self.logger = get_seeder_logger(self.name)

    @property
    def name(self) -> str:
        return self._name or type(self).__name__

    @abstractmethod
    async def seed(self) -> None:
        """
        Execute the seeding operation.

        Implementations should let exceptions propagate; the orchestrator
        wraps them, applies the error policy and logs them. They must not
        swallow ``asyncio.CancelledError``.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key!r} order={self.order}>"
