"""
Bookstore sample: categories, authors and books seeded from JSON files.

Run it with the CLI against any async database URL:

    $ dataseeder run dataseeder.samples.bookstore:setup
    $ dataseeder run dataseeder.samples.bookstore:setup --only books

Seeding order: categories (order 1), authors (order 2), then books (order 3,
depends on authors and categories).
"""

import functools
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine

from dataseeder.seeding.builder import SeederBuilder
from dataseeder.seeding.providers.json_provider import (
    JsonDataProvider,
    JsonDataProviderOptions,
)
from dataseeder.seeding.relational import SqlAlchemySeederOptions
from dataseeder.storage.database import create_session_factory

from .models import Author, Base, Book, Category
from .seeders import BookSeeder

DATA_DIR = Path(__file__).parent / "data"


async def setup(builder: SeederBuilder, engine: AsyncEngine) -> None:
    """Create the bookstore schema and register its seeders"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = create_session_factory(engine)
    provider_options = JsonDataProviderOptions(base_directory=DATA_DIR)

    builder.add_json_seeder(
        Category,
        "categories",
        session_factory,
        provider_options,
        SqlAlchemySeederOptions(order=1),
        key="categories",
    )
    builder.add_json_seeder(
        Author,
        "authors",
        session_factory,
        provider_options,
        SqlAlchemySeederOptions(order=2),
        key="authors",
    )
    builder.add_seeder(
        functools.partial(
            BookSeeder,
            session_factory,
            JsonDataProvider(Book, "books", provider_options),
        ),
        key=BookSeeder.key,
    )


__all__ = ["Author", "Book", "BookSeeder", "Category", "DATA_DIR", "setup"]
