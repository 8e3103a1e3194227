"""
Custom exception hierarchy for DataSeeder error handling.

Every error raised by the library derives from ``DataSeederError`` and carries
a human-readable message, a machine-readable error code and a details
dictionary, so callers can decide programmatically whether to retry, abort or
continue.

Exception Hierarchy:
    DataSeederError (base)
    ├── ConfigurationError: Invalid builder, options or CLI input
    ├── SeederError: Seeding failures
    │   ├── DuplicateSeederError: Two seeders registered with one key
    │   ├── UnknownSeederError: Lookup by key found no usable seeder
    │   ├── CircularDependencyError: Dependency cycle between seeders
    │   ├── SeederTimeoutError: A seeder exceeded its deadline
    │   └── SeederExecutionError: A seeder raised; wraps the cause
    ├── DataProviderError: Seed data could not be loaded
    └── StorageError: Database write failures

Error Categories:
    - Initialization (duplicate/unknown seeder): always fatal
    - Ordering (circular dependency): fatal unless cycles are allowed
    - Execution (timeout, seeder failure): fatal under fail-fast, logged and
      skipped under continue-on-error

Caller cancellation is never represented here; it propagates as
``asyncio.CancelledError``.

Example:
    >>> try:
    ...     await orchestrator.seed_all()
    ... except CircularDependencyError as e:
    ...     logger.error("Bad seeder graph", cycle=e.cycle)
    ... except SeederExecutionError as e:
    ...     logger.error("Seeder failed", seeder=e.seeder_name, cause=e.__cause__)
"""

from typing import Any, Dict, Iterable, Optional, Tuple


class DataSeederError(Exception):
    """
    Base exception class for all DataSeeder errors.

    Attributes:
        message (str): Human-readable error description
        error_code (str): Machine-readable error identifier
        details (Dict[str, Any]): Additional contextual information

    The error_code defaults to the class name when not given.

    Example:
        >>> raise DataSeederError(
        ...     "Seeding aborted",
        ...     error_code="SEEDING_ABORTED",
        ...     details={"completed": 2, "remaining": 3}
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(DataSeederError):
    """
    Raised when configuration validation or setup fails.

    Common scenarios:
        - A CLI app reference that cannot be imported
        - Builder registrations with invalid arguments
        - Seeder options outside their valid range
    """

    pass


class SeederError(DataSeederError):
    """Raised when a seeding operation fails"""

    pass


class DuplicateSeederError(SeederError):
    """
    Raised when two registered seeders share one key.

    Detected by the registry while it builds its cache; always fatal.
    """

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Multiple seeders with key '{key}' were registered. "
            "Each seeder key must be unique.",
            details={"key": key},
        )
        self.key = key


class UnknownSeederError(SeederError):
    """Raised when a lookup by key finds no matching seeder"""

    def __init__(self, key: str, reason: Optional[str] = None) -> None:
        message = f"No seeder registered with key '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"key": key})
        self.key = key


class CircularDependencyError(SeederError):
    """
    Raised when seeder dependencies form a cycle.

    The cycle is reported in traversal order and closed on its first member,
    e.g. ``Circular dependency detected: books -> authors -> books``.

    Attributes:
        cycle (Tuple[str, ...]): Seeder keys on the cycle, without the
            closing repetition
    """

    def __init__(self, cycle: Iterable[str]) -> None:
        self.cycle: Tuple[str, ...] = tuple(cycle)
        super().__init__(
            f"Circular dependency detected: {self.format_cycle(self.cycle)}",
            details={"cycle": list(self.cycle)},
        )

    @staticmethod
    def format_cycle(cycle: Tuple[str, ...]) -> str:
        if not cycle:
            return ""
        return " -> ".join(cycle + (cycle[0],))


class SeederTimeoutError(SeederError):
    """Raised when a single seeder runs longer than its deadline"""

    def __init__(self, seeder_name: str, timeout: float) -> None:
        super().__init__(
            f"Seeder {seeder_name} timed out after {timeout:g} seconds",
            details={"seeder": seeder_name, "timeout_seconds": timeout},
        )
        self.seeder_name = seeder_name
        self.timeout = timeout


class SeederExecutionError(SeederError):
    """
    Raised when a seeder's action fails.

    The original exception is available as ``cause`` and is chained as
    ``__cause__`` by the orchestrator.
    """

    def __init__(self, seeder_name: str, cause: BaseException) -> None:
        super().__init__(
            f"Seeder {seeder_name} failed: {cause}",
            details={"seeder": seeder_name, "cause": type(cause).__name__},
        )
        self.seeder_name = seeder_name
        self.cause = cause


class DataProviderError(DataSeederError):
    """
    Raised when seed data cannot be loaded or mapped.

    Common scenarios:
        - Malformed JSON in a seed file
        - A seed file that is not an array of objects
        - Keys that do not match any column of the target model
    """

    pass


class StorageError(DataSeederError):
    """
    Raised when storage operations fail.

    Common scenarios:
        - Constraint violations while inserting seed rows
        - Transaction rollback after a failed batch
        - Database unavailable or schema missing
    """

    pass
