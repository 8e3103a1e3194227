"""
Dependency resolution for seeders.

``DependencyResolver.resolve_order`` turns a set of seeders into one execution
order:

1. A depth-first walk places every dependency before its dependent. Keys
   that match no seeder in the set are ignored.
2. The walk result is grouped by ascending effective tier. A seeder's tier
   is its ``order``, raised to the tier of any dependency that sits in a
   later one, so a dependency never runs after its dependent.
3. Inside each group, seeders required by another member of the same group
   move to the front; the rest keep their walk order.

Step 3 is a stable partition, not a full topological sort of the group. A
multi-hop chain inside one priority is kept in order by step 1 alone.

Cycles are detected during the walk. The walk itself never raises; it reports
``CycleDetected`` values and ``resolve_order`` applies the configured
``CycleBehavior``.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Set, Tuple

from dataseeder.core.exceptions.custom_exceptions import CircularDependencyError
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.seeder import BaseSeeder

logger = get_logger(__name__)


class CycleBehavior(Enum):
    """What to do when the dependency walk closes a cycle"""

    FAIL = "fail"
    SKIP = "skip"

    @classmethod
    def from_flag(cls, throw_on_circular_dependency: bool) -> "CycleBehavior":
        return cls.FAIL if throw_on_circular_dependency else cls.SKIP


@dataclass(frozen=True)
class CycleDetected:
    """A cycle found by the walk, as the keys from the re-entered seeder on"""

    path: Tuple[str, ...]


@dataclass
class _WalkState:
    """Working set of one resolve_order call"""

    by_key: Dict[str, BaseSeeder]
    visited: Set[str] = field(default_factory=set)
    in_progress: Set[str] = field(default_factory=set)
    stack: List[str] = field(default_factory=list)
    resolved: List[BaseSeeder] = field(default_factory=list)
    resolved_keys: Set[str] = field(default_factory=set)
    cycles: List[CycleDetected] = field(default_factory=list)


class DependencyResolver:
    """
    Computes a total seeding order honoring priority and dependencies.

    The resolver keeps no state between calls; each ``resolve_order`` builds a
    fresh working set. It is not meant to be shared between threads.

    Args:
        cycle_behavior: FAIL raises ``CircularDependencyError`` on the first
            cycle found; SKIP drops the edge that closes the cycle
    """

    def __init__(self, cycle_behavior: CycleBehavior = CycleBehavior.FAIL):
        self.cycle_behavior = cycle_behavior

    def resolve_order(self, seeders: Iterable[BaseSeeder]) -> List[BaseSeeder]:
        """
        Order seeders so that dependencies and priorities are respected.

        Args:
            seeders: Seeders to order, in discovery order

        Returns:
            List[BaseSeeder]: Seeders in execution order

        Raises:
            CircularDependencyError: If a cycle exists and the behavior is FAIL
        """
        seeders = list(seeders)
        state = _WalkState(by_key={s.key: s for s in seeders})

        for seeder in seeders:
            if seeder.key not in state.visited:
                self._visit(seeder, state)

        if state.cycles:
            if self.cycle_behavior is CycleBehavior.FAIL:
                raise CircularDependencyError(state.cycles[0].path)
            for cycle in state.cycles:
                logger.warning(
                    "Ignoring circular dependency",
                    cycle=CircularDependencyError.format_cycle(cycle.path),
                )

        return self._order_by_priority(state.resolved)

    def _visit(self, seeder: BaseSeeder, state: _WalkState) -> None:
        key = seeder.key

        if key in state.in_progress:
            start = state.stack.index(key)
            state.cycles.append(CycleDetected(path=tuple(state.stack[start:])))
            return

        if key in state.visited:
            return

        state.in_progress.add(key)
        state.stack.append(key)

        for dependency_key in seeder.dependencies:
            dependency = state.by_key.get(dependency_key)
            if dependency is not None:
                self._visit(dependency, state)

        if key not in state.resolved_keys:
            state.resolved.append(seeder)
            state.resolved_keys.add(key)

        state.stack.pop()
        state.in_progress.discard(key)
        state.visited.add(key)

    @staticmethod
    def _order_by_priority(resolved: List[BaseSeeder]) -> List[BaseSeeder]:
        # Walk order puts dependencies first, so their tiers are already known
        tiers: Dict[str, int] = {}
        groups: Dict[int, List[BaseSeeder]] = defaultdict(list)
        for seeder in resolved:
            tier = max(
                [seeder.order] + [tiers[d] for d in seeder.dependencies if d in tiers]
            )
            tiers[seeder.key] = tier
            groups[tier].append(seeder)

        result: List[BaseSeeder] = []
        for order in sorted(groups):
            group = groups[order]
            required = {dep for s in group for dep in s.dependencies}
            result.extend(s for s in group if s.key in required)
            result.extend(s for s in group if s.key not in required)
        return result
