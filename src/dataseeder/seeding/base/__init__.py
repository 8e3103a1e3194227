"""
Base seeding components
"""

from .data_provider import DataProvider, StaticDataProvider
from .seeder import BaseSeeder

__all__ = [
    "BaseSeeder",
    "DataProvider",
    "StaticDataProvider",
]
