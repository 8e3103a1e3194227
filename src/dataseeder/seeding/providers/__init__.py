"""
Data providers that load seed entities from external sources.
"""

from dataseeder.seeding.providers.json_provider import (
    JsonDataProvider,
    JsonDataProviderOptions,
)

__all__ = ["JsonDataProvider", "JsonDataProviderOptions"]
