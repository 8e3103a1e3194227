"""
Seeder orchestrator: runs the resolved seeding order.

The orchestrator asks the registry for all seeders, orders them with a fresh
``DependencyResolver`` and executes them with one of two strategies chosen
once per run:

- SEQUENTIAL: one seeder at a time, in resolved order
- PARALLEL: priority tiers one after another; inside a tier all seeders are
  started together, bounded by a semaphore of
  ``min(tier size, max_degree_of_parallelization)``

Every seeder runs under ``seeder_timeout``. A timeout raises
``SeederTimeoutError``; any other exception from the seeder becomes
``SeederExecutionError`` chained to the cause. With ``continue_on_error`` both
are logged and the run goes on. Cancelling the task awaiting the run
propagates ``asyncio.CancelledError`` unchanged; a seeder that cancels
itself without such a request fails like any other seeder.

Example:
    >>> orchestrator = SeederOrchestrator(registry, SeederOptions())
    >>> await orchestrator.seed_all()
    >>> await orchestrator.seed(["books"])
"""

import asyncio
import itertools
import time
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional

from dataseeder.core.config.settings import SeederOptions
from dataseeder.core.exceptions.custom_exceptions import (
    SeederError,
    SeederExecutionError,
    SeederTimeoutError,
)
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.registry import SeederRegistry
from dataseeder.seeding.resolver import CycleBehavior, DependencyResolver


class ExecutionStrategy(Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class SeederOrchestrator:
    """Executes registered seeders under the configured seeding policy"""

    def __init__(
        self, registry: SeederRegistry, options: Optional[SeederOptions] = None
    ):
        self.registry = registry
        self.options = options or SeederOptions()
        self.logger = get_logger(__name__)

    @property
    def strategy(self) -> ExecutionStrategy:
        if self.options.enable_parallelization:
            return ExecutionStrategy.PARALLEL
        return ExecutionStrategy.SEQUENTIAL

    def get_ordered_seeders(self) -> List[BaseSeeder]:
        """
        Resolve the execution order of all registered seeders.

        Nothing is executed; this is also what ``seed_all`` runs.

        Raises:
            DuplicateSeederError: If the registry finds duplicate keys
            CircularDependencyError: If a cycle exists and cycles are fatal
        """
        resolver = DependencyResolver(
            CycleBehavior.from_flag(self.options.throw_on_circular_dependency)
        )
        return resolver.resolve_order(self.registry.get_all_seeders())

    async def seed_all(self) -> None:
        """Execute every registered seeder in resolved order"""
        await self._execute(self.get_ordered_seeders())

    async def seed(self, keys: Iterable[str]) -> None:
        """
        Execute only the seeders whose key is in ``keys``.

        The resolved relative order is preserved. Dependencies outside the
        selection are not pulled in. Unknown keys are logged and ignored. A
        single key may be passed as a plain string.
        """
        if isinstance(keys, str):
            keys = [keys]
        selected = set(keys)
        ordered = self.get_ordered_seeders()

        unknown = selected - {s.key for s in ordered}
        if unknown:
            self.logger.warning(
                f"Ignoring unknown seeder keys: {', '.join(sorted(unknown))}"
            )

        await self._execute([s for s in ordered if s.key in selected])

    async def _execute(self, seeders: List[BaseSeeder]) -> None:
        run = self._select_strategy()
        self.logger.info(
            f"Seeding {len(seeders)} seeders",
            strategy=self.strategy.value,
            continue_on_error=self.options.continue_on_error,
        )
        started = time.perf_counter()
        await run(seeders)
        self.logger.info(
            "Seeding completed",
            seeders=len(seeders),
            duration=round(time.perf_counter() - started, 3),
        )

    def _select_strategy(self) -> Callable[[List[BaseSeeder]], Awaitable[None]]:
        if self.strategy is ExecutionStrategy.PARALLEL:
            return self._execute_in_parallel
        return self._execute_sequentially

    async def _execute_sequentially(self, seeders: List[BaseSeeder]) -> None:
        for seeder in seeders:
            await self._execute_with_timeout(seeder)

    async def _execute_in_parallel(self, seeders: List[BaseSeeder]) -> None:
        # The order is already tier-sorted, so adjacent runs form the tiers
        for order, tier in itertools.groupby(seeders, key=lambda s: s.order):
            group = list(tier)
            throttler = asyncio.Semaphore(
                min(len(group), self.options.max_degree_of_parallelization)
            )

            async def run_throttled(seeder: BaseSeeder) -> None:
                async with throttler:
                    await self._execute_with_timeout(seeder)

            self.logger.debug(f"Starting priority {order} with {len(group)} seeders")
            results = await asyncio.gather(
                *(run_throttled(s) for s in group), return_exceptions=True
            )

            # Siblings were allowed to finish; the first failure stops the run
            for result in results:
                if isinstance(result, asyncio.CancelledError):
                    raise result
            for result in results:
                if isinstance(result, BaseException):
                    raise result

    async def _execute_with_timeout(self, seeder: BaseSeeder) -> None:
        self.logger.info(f"Running seeder {seeder.name}", key=seeder.key)
        started = time.perf_counter()
        try:
            await self._race_deadline(seeder)
        except asyncio.CancelledError:
            raise
        except SeederTimeoutError as e:
            self._handle_failure(seeder, e)
            return
        except Exception as e:
            self._handle_failure(seeder, SeederExecutionError(seeder.name, e), cause=e)
            return

        self.logger.info(
            f"Seeder {seeder.name} completed",
            key=seeder.key,
            duration=round(time.perf_counter() - started, 3),
        )

    async def _race_deadline(self, seeder: BaseSeeder) -> None:
        timeout = self.options.seeder_timeout
        task = asyncio.ensure_future(seeder.seed())
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            # Do not wait for the seeder to acknowledge the cancellation
            task.add_done_callback(_discard_outcome)
            task.cancel()
            raise SeederTimeoutError(seeder.name, timeout)

        try:
            task.result()
        except asyncio.CancelledError as e:
            # The caller was not cancelled, so the seeder cancelled its own work
            raise RuntimeError("cancelled from inside the seeder") from e

    def _handle_failure(
        self,
        seeder: BaseSeeder,
        error: SeederError,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.logger.error(
            f"Error executing seeder: {seeder.name}",
            key=seeder.key,
            error=error.message,
            exc_info=cause,
        )
        if not self.options.continue_on_error:
            if cause is not None:
                raise error from cause
            raise error
        self.logger.warning(f"Continuing after failure of seeder {seeder.name}")


def _discard_outcome(task: "asyncio.Future[None]") -> None:
    # Abandoned after a timeout; its late outcome is irrelevant to the run
    if not task.cancelled():
        task.exception()
