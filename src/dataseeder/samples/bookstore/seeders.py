"""
Bookstore seeders.

Categories and authors are plain JSON-fed ``SqlAlchemySeeder`` registrations.
Books need the category links from ``categoryIds`` in the seed file, which is
not a column, so ``BookSeeder`` reads the raw records and resolves the links
itself.
"""

from typing import Any, Dict, List

from sqlalchemy import delete, select

from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.providers.json_provider import JsonDataProvider
from dataseeder.seeding.relational import SessionFactory

from .models import Book, Category, book_categories


class BookSeeder(BaseSeeder):
    key = "books"
    order = 3
    dependencies = ("authors", "categories")

    def __init__(
        self, session_factory: SessionFactory, data_provider: JsonDataProvider
    ):
        super().__init__()
        self.session_factory = session_factory
        self.data_provider = data_provider

    async def seed(self) -> None:
        self.logger.info("Starting to seed books from JSON")

        records = await self.data_provider.read_records()

        async with self.session_factory() as session:
            async with session.begin():
                if self.data_provider.should_clean_existing_data:
                    await session.execute(delete(book_categories))
                    await session.execute(delete(Book))

                for record in records:
                    category_ids = _pop_category_ids(record)
                    book = self.data_provider.build_entity(record)
                    if category_ids:
                        result = await session.execute(
                            select(Category).where(Category.id.in_(category_ids))
                        )
                        book.categories = list(result.scalars())
                    session.add(book)

        self.logger.info(f"Completed seeding {len(records)} books from JSON")


def _pop_category_ids(record: Dict[str, Any]) -> List[int]:
    for field in list(record):
        if field.replace("_", "").lower() == "categoryids":
            return list(record.pop(field) or [])
    return []
