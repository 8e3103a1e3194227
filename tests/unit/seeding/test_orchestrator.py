"""
Unit tests for seeder orchestration
"""

import asyncio
import time
from unittest.mock import Mock

import pytest

from dataseeder.core.exceptions.custom_exceptions import (
    CircularDependencyError,
    DuplicateSeederError,
    SeederExecutionError,
    SeederTimeoutError,
)
from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.orchestrator import ExecutionStrategy


class TrackedSeeder(BaseSeeder):
    """Tracks how many seeders run at the same time"""

    def __init__(self, key, tracker, delay=0.1, order=1, dependencies=()):
        super().__init__(key=key, order=order, dependencies=dependencies)
        self.tracker = tracker
        self.delay = delay

    async def seed(self) -> None:
        self.tracker["events"].append(("start", self.key))
        self.tracker["running"] += 1
        self.tracker["peak"] = max(self.tracker["peak"], self.tracker["running"])
        await asyncio.sleep(self.delay)
        self.tracker["running"] -= 1
        self.tracker["events"].append(("end", self.key))


@pytest.fixture
def tracker():
    return {"running": 0, "peak": 0, "events": []}


def test_strategy_follows_options(make_orchestrator):
    assert make_orchestrator([]).strategy is ExecutionStrategy.SEQUENTIAL
    assert (
        make_orchestrator([], enable_parallelization=True).strategy
        is ExecutionStrategy.PARALLEL
    )


def test_get_ordered_seeders_does_not_execute(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("books", order=3, dependencies=("authors", "categories")),
            make_seeder("authors", order=2),
            make_seeder("categories", order=1),
        ]
    )

    ordered = orchestrator.get_ordered_seeders()

    assert [s.key for s in ordered] == ["categories", "authors", "books"]
    assert journal == []


@pytest.mark.asyncio
async def test_seed_all_runs_in_resolved_order(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("books", order=3, dependencies=("authors", "categories")),
            make_seeder("authors", order=2),
            make_seeder("categories", order=1),
        ]
    )

    await orchestrator.seed_all()

    assert journal == ["categories", "authors", "books"]


@pytest.mark.asyncio
async def test_seed_all_with_no_seeders(make_orchestrator):
    await make_orchestrator([]).seed_all()


@pytest.mark.asyncio
async def test_hanging_seeder_times_out(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("first", order=1),
            make_seeder("hanging", order=1, delay=3600),
            make_seeder("third", order=1),
        ],
        seeder_timeout=1,
    )

    started = time.perf_counter()
    with pytest.raises(SeederTimeoutError) as exc_info:
        await orchestrator.seed_all()
    elapsed = time.perf_counter() - started

    assert exc_info.value.seeder_name == "HangingSeeder"
    assert exc_info.value.timeout == 1
    assert "HangingSeeder timed out after 1 seconds" in str(exc_info.value)
    assert 0.9 <= elapsed < 1.5
    assert journal == ["first"]


@pytest.mark.asyncio
async def test_timeout_does_not_wait_for_seeder_to_acknowledge(make_orchestrator):
    finished = []

    class StubbornSeeder(BaseSeeder):
        key = "stubborn"

        async def seed(self) -> None:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                await asyncio.sleep(0.3)
                finished.append(True)

    orchestrator = make_orchestrator([StubbornSeeder()], seeder_timeout=0.1)

    started = time.perf_counter()
    with pytest.raises(SeederTimeoutError):
        await orchestrator.seed_all()

    assert time.perf_counter() - started < 0.3
    await asyncio.sleep(0.4)
    assert finished == [True]


@pytest.mark.asyncio
async def test_timeout_with_continue_on_error(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("slow", order=1, delay=3600),
            make_seeder("fast", order=2),
        ],
        seeder_timeout=0.1,
        continue_on_error=True,
    )

    await orchestrator.seed_all()

    assert journal == ["fast"]


@pytest.mark.asyncio
async def test_execution_error_wraps_cause(make_orchestrator, make_seeder, journal):
    cause = ValueError("boom")
    orchestrator = make_orchestrator(
        [make_seeder("a", order=1, error=cause), make_seeder("b", order=2)]
    )

    with pytest.raises(SeederExecutionError) as exc_info:
        await orchestrator.seed_all()

    assert exc_info.value.seeder_name == "ASeeder"
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert "ASeeder failed: boom" in str(exc_info.value)
    assert journal == []


@pytest.mark.asyncio
async def test_continue_on_error_runs_remaining_seeders(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [
            make_seeder("first", order=1),
            make_seeder("middle", order=2, error=RuntimeError("broken")),
            make_seeder("last", order=3),
        ],
        continue_on_error=True,
    )
    orchestrator.logger = Mock()

    await orchestrator.seed_all()

    assert journal == ["first", "last"]
    error_messages = [c.args[0] for c in orchestrator.logger.error.call_args_list]
    assert "Error executing seeder: MiddleSeeder" in error_messages
    error_call = orchestrator.logger.error.call_args_list[0]
    assert isinstance(error_call.kwargs["exc_info"], RuntimeError)


@pytest.mark.asyncio
async def test_failure_is_logged_before_raising(make_orchestrator, make_seeder):
    orchestrator = make_orchestrator([make_seeder("a", error=KeyError("x"))])
    orchestrator.logger = Mock()

    with pytest.raises(SeederExecutionError):
        await orchestrator.seed_all()

    orchestrator.logger.error.assert_called_once()
    assert orchestrator.logger.error.call_args.kwargs["key"] == "a"


@pytest.mark.asyncio
async def test_circular_dependency_prevents_execution(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [
            make_seeder("a", dependencies=("b",)),
            make_seeder("b", dependencies=("a",)),
        ]
    )

    with pytest.raises(CircularDependencyError):
        await orchestrator.seed_all()

    assert journal == []


@pytest.mark.asyncio
async def test_allowed_cycles_still_run(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("a", dependencies=("b",)),
            make_seeder("b", dependencies=("a",)),
        ],
        throw_on_circular_dependency=False,
    )

    await orchestrator.seed_all()

    assert sorted(journal) == ["a", "b"]


@pytest.mark.asyncio
async def test_duplicate_keys_fail_the_run(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator([make_seeder("a"), make_seeder("a")])

    with pytest.raises(DuplicateSeederError):
        await orchestrator.seed_all()

    assert journal == []


@pytest.mark.asyncio
async def test_seed_subset_preserves_resolved_order(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [
            make_seeder("books", order=3, dependencies=("authors",)),
            make_seeder("authors", order=2),
            make_seeder("categories", order=1),
        ]
    )

    await orchestrator.seed(["books", "categories"])

    # Dependencies outside the selection are not pulled in
    assert journal == ["categories", "books"]


@pytest.mark.asyncio
async def test_seed_ignores_unknown_keys(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator([make_seeder("a")])
    orchestrator.logger = Mock()

    await orchestrator.seed(["a", "nope"])

    assert journal == ["a"]
    orchestrator.logger.warning.assert_called_once()
    assert "nope" in orchestrator.logger.warning.call_args.args[0]


@pytest.mark.asyncio
async def test_parallel_respects_max_degree(make_orchestrator, tracker):
    seeders = [TrackedSeeder(f"s{i}", tracker, delay=0.1) for i in range(5)]
    orchestrator = make_orchestrator(
        seeders, enable_parallelization=True, max_degree_of_parallelization=2
    )

    started = time.perf_counter()
    await orchestrator.seed_all()
    elapsed = time.perf_counter() - started

    # Three waves of at most two seeders
    assert tracker["peak"] == 2
    assert 0.25 <= elapsed < 0.49


@pytest.mark.asyncio
async def test_parallel_tier_overlaps_seeders(make_orchestrator, tracker):
    seeders = [TrackedSeeder(f"s{i}", tracker, delay=0.1) for i in range(3)]
    orchestrator = make_orchestrator(
        seeders, enable_parallelization=True, max_degree_of_parallelization=8
    )

    started = time.perf_counter()
    await orchestrator.seed_all()

    assert tracker["peak"] == 3
    assert time.perf_counter() - started < 0.25


@pytest.mark.asyncio
async def test_parallel_tiers_run_one_after_another(make_orchestrator, tracker):
    seeders = [
        TrackedSeeder("a1", tracker, delay=0.05, order=1),
        TrackedSeeder("a2", tracker, delay=0.1, order=1),
        TrackedSeeder("b1", tracker, delay=0.01, order=2),
    ]
    orchestrator = make_orchestrator(seeders, enable_parallelization=True)

    await orchestrator.seed_all()

    events = tracker["events"]
    assert events.index(("start", "b1")) > events.index(("end", "a1"))
    assert events.index(("start", "b1")) > events.index(("end", "a2"))


@pytest.mark.asyncio
async def test_parallel_failure_lets_siblings_finish(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [
            make_seeder("failing", order=1, error=RuntimeError("broken")),
            make_seeder("sibling", order=1, delay=0.1),
            make_seeder("next_tier", order=2),
        ],
        enable_parallelization=True,
    )

    with pytest.raises(SeederExecutionError) as exc_info:
        await orchestrator.seed_all()

    assert exc_info.value.seeder_name == "FailingSeeder"
    assert journal == ["sibling"]


@pytest.mark.asyncio
async def test_parallel_continue_on_error(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("failing", order=1, error=RuntimeError("broken")),
            make_seeder("sibling", order=1),
            make_seeder("next_tier", order=2),
        ],
        enable_parallelization=True,
        continue_on_error=True,
    )

    await orchestrator.seed_all()

    assert journal == ["sibling", "next_tier"]


@pytest.mark.asyncio
async def test_cancellation_propagates_unwrapped(make_orchestrator):
    started = asyncio.Event()
    cancelled = []

    class BlockingSeeder(BaseSeeder):
        key = "blocking"

        async def seed(self) -> None:
            started.set()
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

    orchestrator = make_orchestrator([BlockingSeeder()], continue_on_error=True)
    run = asyncio.ensure_future(orchestrator.seed_all())
    await started.wait()

    run.cancel()
    with pytest.raises(asyncio.CancelledError):
        await run

    await asyncio.sleep(0.01)
    assert cancelled == [True]


@pytest.mark.asyncio
async def test_cancellation_in_parallel_mode(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [
            make_seeder("slow", order=1, delay=3600),
            make_seeder("later", order=2),
        ],
        enable_parallelization=True,
    )
    run = asyncio.ensure_future(orchestrator.seed_all())
    await asyncio.sleep(0.05)

    run.cancel()
    with pytest.raises(asyncio.CancelledError):
        await run

    await asyncio.sleep(0.01)
    assert journal == []


class SelfCancellingSeeder(BaseSeeder):
    """Cancels an inner task and lets the cancellation escape"""

    key = "self_cancelling"
    order = 1

    async def seed(self) -> None:
        inner = asyncio.ensure_future(asyncio.sleep(3600))
        await asyncio.sleep(0)
        inner.cancel()
        await inner


@pytest.mark.asyncio
async def test_self_cancelled_seeder_fails_the_run(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [SelfCancellingSeeder(), make_seeder("after", order=2)]
    )

    with pytest.raises(SeederExecutionError) as exc_info:
        await orchestrator.seed_all()

    assert exc_info.value.seeder_name == "SelfCancellingSeeder"
    assert isinstance(exc_info.value.cause.__cause__, asyncio.CancelledError)
    assert journal == []


@pytest.mark.asyncio
async def test_self_cancelled_seeder_with_continue_on_error(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [SelfCancellingSeeder(), make_seeder("after", order=2)],
        continue_on_error=True,
    )

    await orchestrator.seed_all()

    assert journal == ["after"]


@pytest.mark.asyncio
async def test_self_cancelled_seeder_in_parallel_mode(
    make_orchestrator, make_seeder, journal
):
    orchestrator = make_orchestrator(
        [
            SelfCancellingSeeder(),
            make_seeder("sibling", order=1),
            make_seeder("after", order=2),
        ],
        enable_parallelization=True,
        continue_on_error=True,
    )

    await orchestrator.seed_all()

    assert journal == ["sibling", "after"]


@pytest.mark.asyncio
async def test_seed_accepts_a_single_key(make_orchestrator, make_seeder, journal):
    orchestrator = make_orchestrator(
        [make_seeder("ab"), make_seeder("a"), make_seeder("b")]
    )
    orchestrator.logger = Mock()

    await orchestrator.seed("ab")

    assert journal == ["ab"]
    orchestrator.logger.warning.assert_not_called()


@pytest.mark.asyncio
async def test_parallel_dependency_in_later_tier_runs_first(
    make_orchestrator, tracker
):
    seeders = [
        TrackedSeeder("early", tracker, delay=0.01, order=1, dependencies=["late"]),
        TrackedSeeder("late", tracker, delay=0.05, order=5),
    ]
    orchestrator = make_orchestrator(seeders, enable_parallelization=True)

    assert [s.key for s in orchestrator.get_ordered_seeders()] == ["late", "early"]

    await orchestrator.seed_all()

    events = tracker["events"]
    assert events.index(("end", "late")) < events.index(("start", "early"))
    assert tracker["peak"] == 1
