"""
Pytest configuration and fixtures for DataSeeder tests
"""

import asyncio
from typing import Callable, Iterable, List, Optional

import pytest
import pytest_asyncio

from dataseeder.core.config.settings import SeederOptions
from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.orchestrator import SeederOrchestrator
from dataseeder.seeding.registry import SeederProvider, SeederRegistry
from dataseeder.storage.database import create_engine, create_session_factory


class RecordingSeeder(BaseSeeder):
    """Seeder that records its key in a shared journal when it runs"""

    def __init__(
        self,
        key: str,
        journal: List[str],
        order: int = 0,
        dependencies: Iterable[str] = (),
        delay: float = 0.0,
        error: Optional[BaseException] = None,
    ):
        super().__init__(
            key=key,
            order=order,
            dependencies=dependencies,
            name=f"{key.title()}Seeder",
        )
        self.journal = journal
        self.delay = delay
        self.error = error

    async def seed(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.journal.append(self.key)


@pytest.fixture
def journal() -> List[str]:
    """Keys of the seeders that ran, in completion order"""
    return []


@pytest.fixture
def make_seeder(journal) -> Callable[..., RecordingSeeder]:
    """Factory for recording seeders sharing the test journal"""

    def factory(key: str, **kwargs) -> RecordingSeeder:
        return RecordingSeeder(key, journal, **kwargs)

    return factory


def provider_for(seeders: Iterable[BaseSeeder]) -> SeederProvider:
    provider = SeederProvider()
    for seeder in seeders:
        provider.register(lambda seeder=seeder: seeder, key=seeder.key)
    return provider


@pytest.fixture
def make_orchestrator() -> Callable[..., SeederOrchestrator]:
    """Build an orchestrator over fixed seeder instances"""

    def factory(seeders: Iterable[BaseSeeder], **options) -> SeederOrchestrator:
        registry = SeederRegistry(provider_for(seeders))
        return SeederOrchestrator(registry, SeederOptions(**options))

    return factory


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async SQLite engine on a temporary database file"""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
