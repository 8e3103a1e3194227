"""
Seeder discovery: the provider that creates seeders and the registry that
caches them.

``SeederProvider`` holds registrations (a factory plus the key it produces)
and instantiates them on demand. ``SeederRegistry`` pulls the full set from
the provider exactly once, rejects duplicate keys and serves the cached set
afterwards. Initialization is guarded by a lock so that concurrent first
callers never observe a partially populated cache.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from dataseeder.core.exceptions.custom_exceptions import (
    DuplicateSeederError,
    UnknownSeederError,
)
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.seeder import BaseSeeder

SeederFactory = Callable[[], Any]


@dataclass
class SeederRegistration:
    """A factory and the seeder key it is registered under"""

    factory: SeederFactory
    key: Optional[str] = None


class SeederProvider:
    """
    Creates seeder instances from registered factories.

    A factory is any zero-argument callable returning a seeder, usually the
    seeder class itself or a ``functools.partial`` carrying its collaborators.
    The registration key defaults to the factory's ``key`` attribute, then to
    its ``__name__``.
    """

    def __init__(self) -> None:
        self._registrations: List[SeederRegistration] = []

    def register(self, factory: SeederFactory, key: Optional[str] = None) -> None:
        if key is None:
            key = getattr(factory, "key", None) or getattr(factory, "__name__", None)
        self._registrations.append(SeederRegistration(factory=factory, key=key))

    @property
    def registrations(self) -> List[SeederRegistration]:
        return list(self._registrations)

    def get_all(self) -> List[Any]:
        """Instantiate every registration, in registration order"""
        return [self._instantiate(r) for r in self._registrations]

    def create(self, key: str) -> Any:
        """Instantiate the registration for ``key``"""
        for registration in self._registrations:
            if registration.key == key:
                return self._instantiate(registration)
        # Anonymous factories only reveal their key once instantiated
        for registration in self._registrations:
            if registration.key is None:
                seeder = self._instantiate(registration)
                if getattr(seeder, "key", None) == key:
                    return seeder
        raise UnknownSeederError(key)

    @staticmethod
    def _instantiate(registration: SeederRegistration) -> Any:
        seeder = registration.factory()
        # Explicit registration keys win over the seeder's own default
        if registration.key and isinstance(seeder, BaseSeeder):
            if getattr(registration.factory, "key", None) != registration.key:
                seeder.key = registration.key
        return seeder


class SeederRegistry:
    """
    De-duplicated, lazily built cache of all seeders.

    ``get_all_seeders()`` pulls from the provider on first use and returns the
    cached seeders afterwards. ``get_seeder()`` resolves a single seeder by
    key, creating and caching it if the full set has not been built yet.
    """

    def __init__(self, provider: SeederProvider):
        self.provider = provider
        self.logger = get_logger(__name__)
        self._seeders: Dict[str, BaseSeeder] = {}
        self._initialized = False
        self._lock = threading.Lock()

    def get_all_seeders(self) -> List[BaseSeeder]:
        """
        Return every registered seeder, building the cache on first call.

        Returns:
            List[BaseSeeder]: Seeders in discovery order

        Raises:
            DuplicateSeederError: If two seeders share a key
            UnknownSeederError: If a factory produced something that is not
                a seeder
        """
        if self._initialized:
            return list(self._seeders.values())

        with self._lock:
            if not self._initialized:
                self._initialize()
            return list(self._seeders.values())

    def get_seeder(self, key: str) -> BaseSeeder:
        """
        Resolve one seeder by key.

        Raises:
            UnknownSeederError: If no seeder is registered under ``key`` or
                the registered factory does not produce a seeder
        """
        seeder = self._seeders.get(key)
        if seeder is not None:
            return seeder

        with self._lock:
            seeder = self._seeders.get(key)
            if seeder is None:
                if self._initialized:
                    raise UnknownSeederError(key)
                seeder = self._ensure_seeder(self.provider.create(key), key)
                self._seeders[key] = seeder
            return seeder

    def _initialize(self) -> None:
        # Seeders created by get_seeder() before initialization are replaced
        # so the cache always reflects exactly one pull from the provider.
        pulled: Dict[str, BaseSeeder] = {}
        for candidate in self.provider.get_all():
            seeder = self._ensure_seeder(candidate)
            if seeder.key in pulled:
                raise DuplicateSeederError(seeder.key)
            pulled[seeder.key] = seeder

        self._seeders = pulled
        self._initialized = True
        self.logger.debug(f"Registered {len(pulled)} seeders: {', '.join(pulled)}")

    @staticmethod
    def _ensure_seeder(candidate: Any, key: Optional[str] = None) -> BaseSeeder:
        if not isinstance(candidate, BaseSeeder):
            raise UnknownSeederError(
                key or type(candidate).__name__,
                f"{type(candidate).__name__} is not a BaseSeeder",
            )
        if key is not None and candidate.key != key:
            raise UnknownSeederError(
                key, f"factory produced a seeder with key '{candidate.key}'"
            )
        return candidate
