"""
DataSeeder - Dependency-Ordered Database Seeding

DataSeeder runs a set of named seeders against a database in an order that
respects both their declared priority and the dependencies between them. It
is meant for development fixtures, demo data and reference tables that must
be loaded in a consistent order.

Key Features:
    - Explicit seeder keys with duplicate detection
    - Dependency resolution with cycle detection and reporting
    - Sequential or tier-parallel execution with bounded concurrency
    - Per-seeder timeouts and continue-on-error policy
    - SQLAlchemy async seeders with transactions, validation and batching
    - JSON seed files mapped onto ORM models

Modules:
    core: Configuration, logging and the exception hierarchy
    seeding: Seeder contract, registry, resolver, orchestrator and builder
    storage: Async engine and session helpers
    samples: Runnable sample applications
    cli: Command-line interface

Example:
    >>> from dataseeder import SeederBuilder
    >>> orchestrator = (
    ...     SeederBuilder()
    ...     .configure(continue_on_error=True)
    ...     .add_seeder(CategorySeeder)
    ...     .build()
    ... )
    >>> await orchestrator.seed_all()
"""

__version__ = "0.1.0"
__author__ = "DataSeeder"
__description__ = (
    "Dependency-ordered database seeding with priority tiers, parallel "
    "execution, timeouts and SQLAlchemy/JSON integration."
)

from dataseeder.core.config.settings import SeederOptions, Settings
from dataseeder.core.exceptions.custom_exceptions import (
    CircularDependencyError,
    DataSeederError,
    DuplicateSeederError,
    SeederError,
    SeederExecutionError,
    SeederTimeoutError,
    UnknownSeederError,
)
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding import (
    BaseSeeder,
    DataProvider,
    DependencyResolver,
    SeederBuilder,
    SeederOrchestrator,
    SeederRegistry,
)

__all__ = [
    "Settings",
    "SeederOptions",
    "get_logger",
    "BaseSeeder",
    "DataProvider",
    "DependencyResolver",
    "SeederBuilder",
    "SeederOrchestrator",
    "SeederRegistry",
    "DataSeederError",
    "SeederError",
    "DuplicateSeederError",
    "UnknownSeederError",
    "CircularDependencyError",
    "SeederTimeoutError",
    "SeederExecutionError",
]
