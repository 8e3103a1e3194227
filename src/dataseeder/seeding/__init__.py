"""
DataSeeder Seeding Module - Dependency-Ordered Seed Execution.

This module contains the seeding engine: the seeder contract, discovery and
de-duplication of registered seeders, dependency resolution and the
orchestrator that runs the resolved order under the configured policy.

Components:
    - base: ``BaseSeeder`` and ``DataProvider`` contracts
    - registry: ``SeederProvider`` factories and the cached ``SeederRegistry``
    - resolver: ``DependencyResolver`` ordering by dependencies and priority
    - orchestrator: ``SeederOrchestrator`` with sequential and parallel runs
    - builder: ``SeederBuilder`` registration API
    - relational: SQLAlchemy seeders with transactions, validation, batching
    - providers: seed data sources such as JSON files

Execution Policy:
    - Priority tiers run in ascending ``order``
    - Dependencies always complete before their dependents
    - Each seeder runs under a timeout
    - Failures stop the run unless ``continue_on_error`` is set

Example:
    >>> from dataseeder.seeding import SeederBuilder
    >>>
    >>> orchestrator = SeederBuilder().add_seeder(CategorySeeder).build()
    >>> await orchestrator.seed_all()
"""

from .base import BaseSeeder, DataProvider, StaticDataProvider
from .builder import SeederBuilder
from .extensions import execute_in_batches, with_transaction
from .orchestrator import ExecutionStrategy, SeederOrchestrator
from .providers import JsonDataProvider, JsonDataProviderOptions
from .registry import SeederProvider, SeederRegistration, SeederRegistry
from .relational import RelationalSeeder, SqlAlchemySeeder, SqlAlchemySeederOptions
from .resolver import CycleBehavior, CycleDetected, DependencyResolver

__all__ = [
    "BaseSeeder",
    "DataProvider",
    "StaticDataProvider",
    "SeederBuilder",
    "execute_in_batches",
    "with_transaction",
    "ExecutionStrategy",
    "SeederOrchestrator",
    "JsonDataProvider",
    "JsonDataProviderOptions",
    "SeederProvider",
    "SeederRegistration",
    "SeederRegistry",
    "RelationalSeeder",
    "SqlAlchemySeeder",
    "SqlAlchemySeederOptions",
    "CycleBehavior",
    "CycleDetected",
    "DependencyResolver",
]
