"""
Relational seeders backed by the SQLAlchemy async ORM.

``RelationalSeeder`` is the plain template: open a session, optionally clear
the target table, load entities from a ``DataProvider``, add them and save.
``SqlAlchemySeeder`` adds the production knobs from ``SqlAlchemySeederOptions``:

- one transaction around the whole seeder, rolled back on error
- entity validation with a custom predicate or the column rules of the model
- batched inserts of ``batch_size`` entities

Failures inside ``SqlAlchemySeeder`` are logged and re-raised as
``StorageError`` chained to the original exception; the orchestrator then
wraps that in ``SeederExecutionError`` like any other seeder failure.

Example:
    >>> seeder = SqlAlchemySeeder(
    ...     Author,
    ...     session_factory,
    ...     JsonDataProvider(Author, "authors", provider_options),
    ...     SqlAlchemySeederOptions(order=1, batch_size=500),
    ... )
    >>> await seeder.seed()
"""

import functools
from typing import Any, Callable, Iterable, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from dataseeder.core.exceptions.custom_exceptions import StorageError
from dataseeder.seeding.base.data_provider import DataProvider
from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.extensions import execute_in_batches, with_transaction

SessionFactory = Callable[[], AsyncSession]


class RelationalSeeder(BaseSeeder):
    """
    Seeds one mapped model from a data provider.

    The key defaults to the model's table name so that several relational
    seeders can share this class. Subclasses customize the steps by
    overriding ``clean_existing_data``, ``seed_entities`` or ``save_changes``.
    """

    def __init__(
        self,
        model: Type[Any],
        session_factory: SessionFactory,
        data_provider: DataProvider,
        key: Optional[str] = None,
        order: Optional[int] = None,
        dependencies: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.model = model
        self.session_factory = session_factory
        self.data_provider = data_provider
        super().__init__(
            key=key or getattr(model, "__tablename__", None),
            order=order,
            dependencies=dependencies,
            name=name or f"{model.__name__}Seeder",
        )

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    async def seed(self) -> None:
        self.logger.info(f"Starting to seed {self.entity_name}")

        try:
            async with self.session_factory() as session:
                await self.seed_in_session(session)
        except Exception as e:
            self.logger.error(f"Failed to seed {self.entity_name}", error=str(e))
            raise

        self.logger.info(f"Successfully seeded {self.entity_name}")

    async def seed_in_session(self, session: AsyncSession) -> None:
        if self.data_provider.should_clean_existing_data:
            await self.clean_existing_data(session)

        entities = await self.data_provider.get_seed_data()
        await self.seed_entities(session, entities)

    async def clean_existing_data(self, session: AsyncSession) -> None:
        result = await session.execute(delete(self.model))
        self.logger.debug(
            f"Removed existing {self.entity_name} rows", rows=result.rowcount
        )
        await self.save_changes(session)

    async def seed_entities(self, session: AsyncSession, entities: List[Any]) -> None:
        session.add_all(entities)
        await self.save_changes(session)

    async def save_changes(self, session: AsyncSession) -> None:
        await session.commit()


class SqlAlchemySeederOptions(BaseModel):
    """Per-seeder settings of ``SqlAlchemySeeder``"""

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    order: int = 1
    use_batching: bool = True
    batch_size: int = Field(1000, ge=1)
    use_transactions: bool = True
    validate_entities: bool = True
    validation_function: Optional[Callable[[Any], bool]] = None


class SqlAlchemySeeder(RelationalSeeder):
    """
    Relational seeder with transactions, validation and batching.

    Attributes:
        options (SqlAlchemySeederOptions): Behavior switches; ``order`` is
            taken from here
        validation_failures (List[Any]): Entities dropped by the last run
    """

    def __init__(
        self,
        model: Type[Any],
        session_factory: SessionFactory,
        data_provider: DataProvider,
        options: Optional[SqlAlchemySeederOptions] = None,
        key: Optional[str] = None,
        dependencies: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.options = options or SqlAlchemySeederOptions()
        self.validation_failures: List[Any] = []
        super().__init__(
            model,
            session_factory,
            data_provider,
            key=key,
            order=self.options.order,
            dependencies=dependencies,
            name=name,
        )

    async def seed(self) -> None:
        try:
            await super().seed()
        except Exception as e:
            raise StorageError(
                f"Failed to seed {self.entity_name}",
                details={"entity": self.entity_name, "cause": type(e).__name__},
            ) from e

    async def seed_in_session(self, session: AsyncSession) -> None:
        if not self.options.use_transactions:
            await super().seed_in_session(session)
            return

        await with_transaction(
            session, functools.partial(super().seed_in_session, session)
        )

    async def seed_entities(self, session: AsyncSession, entities: List[Any]) -> None:
        valid = self.validate_entities(entities)

        if not self.options.use_batching:
            await super().seed_entities(session, valid)
            return

        async def insert_batch(batch: List[Any]) -> None:
            session.add_all(batch)
            await self.save_changes(session)

        batches = await execute_in_batches(
            valid, self.options.batch_size, insert_batch
        )
        self.logger.debug(
            f"Inserted {len(valid)} {self.entity_name} entities in {batches} batches"
        )

    async def save_changes(self, session: AsyncSession) -> None:
        # Inside the seeder transaction only flush; the transaction commits
        if self.options.use_transactions:
            await session.flush()
        else:
            await session.commit()

    def validate_entities(self, entities: List[Any]) -> List[Any]:
        """Return the entities that pass validation, remembering the rest"""
        if not self.options.validate_entities:
            return list(entities)

        self.validation_failures = []
        valid = []
        for entity in entities:
            if self._is_valid(entity):
                valid.append(entity)
            else:
                self.validation_failures.append(entity)

        if self.validation_failures:
            self.logger.warning(
                f"Validation failed for {len(self.validation_failures)} "
                f"entities of type {self.entity_name}"
            )
        return valid

    def _is_valid(self, entity: Any) -> bool:
        try:
            if self.options.validation_function is not None:
                return bool(self.options.validation_function(entity))

            problems = validate_columns(entity)
            for problem in problems:
                self.logger.warning(
                    f"Validation failed for entity {self.entity_name}: {problem}"
                )
            return not problems
        except Exception as e:
            self.logger.error(
                f"Error validating entity of type {self.entity_name}", error=str(e)
            )
            return False


def validate_columns(entity: Any) -> List[str]:
    """
    Check an ORM entity against its mapped columns.

    Non-nullable columns without a default must be set and string values must
    fit the declared length. Primary keys are left to the database.

    Returns:
        List[str]: One message per problem; empty when the entity is valid
    """
    problems = []
    for attr in inspect(type(entity)).column_attrs:
        column = attr.columns[0]
        value = getattr(entity, attr.key, None)

        if value is None:
            if (
                not column.nullable
                and not column.primary_key
                and column.default is None
                and column.server_default is None
            ):
                problems.append(f"{attr.key} is required")
            continue

        length = getattr(column.type, "length", None)
        if isinstance(value, str) and length is not None and len(value) > length:
            problems.append(f"{attr.key} exceeds maximum length of {length}")

    return problems
