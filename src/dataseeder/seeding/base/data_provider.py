"""
Data provider interface: where a relational seeder gets its entities from.
"""

from abc import ABC, abstractmethod
from typing import Any, List


class DataProvider(ABC):
    """
    Supplies the entities a relational seeder inserts.

    Implementations may build entities in code, read them from files or fetch
    them from another service. ``should_clean_existing_data`` tells the seeder
    whether to delete the existing rows of the target table first.
    """

    @property
    def should_clean_existing_data(self) -> bool:
        return True

    @abstractmethod
    async def get_seed_data(self) -> List[Any]:
        """Return the entities to insert, in insertion order"""
        pass


class StaticDataProvider(DataProvider):
    """Serves a fixed list of entities built in code"""

    def __init__(self, entities: List[Any], clean_existing_data: bool = True):
        self._entities = list(entities)
        self._clean_existing_data = clean_existing_data

    @property
    def should_clean_existing_data(self) -> bool:
        return self._clean_existing_data

    async def get_seed_data(self) -> List[Any]:
        return list(self._entities)
