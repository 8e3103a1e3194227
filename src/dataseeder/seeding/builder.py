"""
Fluent registration of seeders.

``SeederBuilder`` collects seeder registrations and the run options, then
builds a ready ``SeederOrchestrator``:

    >>> orchestrator = (
    ...     SeederBuilder()
    ...     .configure(enable_parallelization=True, max_degree_of_parallelization=2)
    ...     .add_seeder(CategorySeeder)
    ...     .add_json_seeder(Author, "authors", session_factory, provider_options)
    ...     .build()
    ... )
    >>> await orchestrator.seed_all()
"""

import functools
from pathlib import Path
from typing import Any, Iterable, Optional, Type, Union

from dataseeder.core.config.settings import SeederOptions
from dataseeder.core.exceptions.custom_exceptions import ConfigurationError
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.data_provider import DataProvider
from dataseeder.seeding.orchestrator import SeederOrchestrator
from dataseeder.seeding.providers.json_provider import (
    JsonDataProvider,
    JsonDataProviderOptions,
)
from dataseeder.seeding.registry import SeederFactory, SeederProvider, SeederRegistry
from dataseeder.seeding.relational import (
    SessionFactory,
    SqlAlchemySeeder,
    SqlAlchemySeederOptions,
)


class SeederBuilder:
    """Collects seeders and options for one orchestrator"""

    def __init__(self, options: Optional[SeederOptions] = None):
        self.options = options or SeederOptions()
        self.provider = SeederProvider()
        self.logger = get_logger(__name__)

    def configure(self, **overrides: Any) -> "SeederBuilder":
        """
        Override seeder options by field name.

        Raises:
            ConfigurationError: If a name is not a seeder option
            pydantic.ValidationError: If a value is out of range
        """
        unknown = set(overrides) - set(SeederOptions.model_fields)
        if unknown:
            raise ConfigurationError(
                f"Unknown seeder options: {', '.join(sorted(unknown))}",
                details={"options": sorted(unknown)},
            )

        self.options = SeederOptions(**{**self.options.model_dump(), **overrides})
        return self

    def add_seeder(
        self, factory: SeederFactory, key: Optional[str] = None
    ) -> "SeederBuilder":
        """Register a seeder class or any zero-argument seeder factory"""
        if not callable(factory):
            raise ConfigurationError(f"Seeder factory {factory!r} is not callable")

        self.provider.register(factory, key)
        return self

    def add_sqlalchemy_seeder(
        self,
        model: Type[Any],
        session_factory: SessionFactory,
        data_provider: DataProvider,
        options: Optional[SqlAlchemySeederOptions] = None,
        key: Optional[str] = None,
        dependencies: Iterable[str] = (),
    ) -> "SeederBuilder":
        """Register a ``SqlAlchemySeeder`` for ``model``"""
        key = key or model.__tablename__
        factory = functools.partial(
            SqlAlchemySeeder,
            model,
            session_factory,
            data_provider,
            options,
            key=key,
            dependencies=tuple(dependencies),
        )
        return self.add_seeder(factory, key)

    def add_json_seeder(
        self,
        model: Type[Any],
        file_path: Union[str, Path],
        session_factory: SessionFactory,
        provider_options: Optional[JsonDataProviderOptions] = None,
        seeder_options: Optional[SqlAlchemySeederOptions] = None,
        key: Optional[str] = None,
        dependencies: Iterable[str] = (),
    ) -> "SeederBuilder":
        """Register a ``SqlAlchemySeeder`` fed from a JSON seed file"""
        data_provider = JsonDataProvider(model, file_path, provider_options)
        return self.add_sqlalchemy_seeder(
            model,
            session_factory,
            data_provider,
            options=seeder_options,
            key=key,
            dependencies=dependencies,
        )

    def build(self) -> SeederOrchestrator:
        self.logger.debug(
            f"Building orchestrator with {len(self.provider.registrations)} "
            "seeder registrations"
        )
        return SeederOrchestrator(SeederRegistry(self.provider), self.options)
