"""
Tests for the concurrent score collector, using an in-memory client.
"""

import asyncio
from datetime import datetime
from datetime import timezone

import orjson
import pytest

from osutop.api.client import parse_body
from osutop.errors import RateLimited
from osutop.errors import TransportFailure
from osutop.models import SCORES
from osutop.models import UserStatistics
from osutop.objects.window import TimeWindow
from osutop.usecases.collector import Collector
from osutop.usecases.collector import CollectorState
from tests.fake_api import make_entry
from tests.fake_api import make_score

WINDOW = TimeWindow(
    datetime(2023, 5, 1, tzinfo=timezone.utc),
    datetime(2023, 6, 1, tzinfo=timezone.utc),
)


def entries(*users):
    return [
        UserStatistics.model_validate(make_entry(user_id, f"user{user_id}", 1000.0 * user_id, user_id * 10))
        for user_id in users
    ]


def scores(user_id, *timestamps):
    data = [
        make_score(user_id * 100 + idx, user_id, timestamp)
        for idx, timestamp in enumerate(timestamps)
    ]
    return parse_body(orjson.dumps(data), SCORES)


class FakeClient:
    def __init__(self, results, delays=None):
        self.results = results
        self.delays = delays or {}
        self.calls = []

    async def get_user_best_scores(self, user_id):
        self.calls.append(user_id)
        await asyncio.sleep(self.delays.get(user_id, 0))

        result = self.results[user_id]
        if isinstance(result, BaseException):
            raise result

        return result


def collect(client, ranking, window=WINDOW, queue_size=256):
    async def inner():
        collector = Collector(client, window, queue_size=queue_size)
        rows = await collector.collect(ranking)
        return collector, rows

    return asyncio.run(inner())


class TestFiltering:
    """Tests for the exclusive time window."""

    def test_bounds_are_exclusive(self):
        client = FakeClient(
            {
                1: scores(
                    1,
                    "2023-05-01T00:00:00Z",
                    "2023-05-15T10:00:00Z",
                    "2023-06-01T00:00:00Z",
                ),
            },
        )

        _, rows = collect(client, entries(1))

        assert [row.created_at.day for row in rows] == [15]

    def test_window_contains(self):
        assert datetime(2023, 5, 2, tzinfo=timezone.utc) in WINDOW
        assert WINDOW.start not in WINDOW
        assert WINDOW.end not in WINDOW


class TestRows:
    """Tests for the rows produced per user."""

    def test_rank_is_one_based_position(self):
        client = FakeClient(
            {
                5: scores(5, "2023-05-02T00:00:00Z"),
                9: scores(9, "2023-05-03T00:00:00Z"),
            },
        )

        _, rows = collect(client, entries(5, 9))

        ranks = {row.user_id: row.country_rank for row in rows}
        assert ranks == {5: 1, 9: 2}

    def test_copies_ranking_fields(self):
        client = FakeClient({3: scores(3, "2023-05-02T00:00:00Z")})

        _, (row,) = collect(client, entries(3))

        assert row.username == "user3"
        assert row.global_rank == 30
        assert row.total_pp == 3000.0
        assert row.score_id == 300

    def test_preserves_order_within_user(self):
        client = FakeClient(
            {
                1: scores(1, "2023-05-20T00:00:00Z", "2023-05-02T00:00:00Z", "2023-05-10T00:00:00Z"),
                2: scores(2, "2023-05-05T00:00:00Z", "2023-05-04T00:00:00Z"),
            },
            delays={1: 0.01},
        )

        _, rows = collect(client, entries(1, 2))

        assert [row.score_id for row in rows if row.user_id == 1] == [100, 101, 102]
        assert [row.score_id for row in rows if row.user_id == 2] == [200, 201]

    def test_no_entries(self):
        collector, rows = collect(FakeClient({}), [])

        assert rows == []
        assert collector.state is CollectorState.DONE


class TestIsolation:
    """Tests that one failing user does not affect the rest."""

    def test_failed_user_contributes_nothing(self):
        client = FakeClient(
            {
                1: scores(1, "2023-05-02T00:00:00Z", "2023-05-03T00:00:00Z"),
                2: TransportFailure(ConnectionResetError("reset")),
                3: scores(3, "2023-05-04T00:00:00Z"),
            },
        )

        collector, rows = collect(client, entries(1, 2, 3))

        assert sorted(row.score_id for row in rows) == [100, 101, 300]
        assert [entry.user.id for entry in collector.failed] == [2]
        assert sorted(client.calls) == [1, 2, 3]

    def test_unexpected_error_is_isolated(self):
        client = FakeClient(
            {
                1: RuntimeError("boom"),
                2: scores(2, "2023-05-02T00:00:00Z"),
            },
        )

        collector, rows = collect(client, entries(1, 2))

        assert [row.user_id for row in rows] == [2]
        assert [entry.user.id for entry in collector.failed] == [1]

    def test_every_user_failing_still_completes(self):
        client = FakeClient({1: RateLimited(), 2: RateLimited()})

        collector, rows = collect(client, entries(1, 2))

        assert rows == []
        assert len(collector.failed) == 2
        assert collector.state is CollectorState.DONE


class TestDraining:
    """Tests for closing the queue only once every unit finished."""

    def test_waits_for_slow_units(self):
        client = FakeClient(
            {
                1: scores(1, "2023-05-02T00:00:00Z"),
                2: scores(2, "2023-05-03T00:00:00Z"),
                3: scores(3, "2023-05-04T00:00:00Z"),
            },
            delays={1: 0.05, 3: 0.1},
        )

        _, rows = collect(client, entries(1, 2, 3))

        assert sorted(row.user_id for row in rows) == [1, 2, 3]

    def test_small_queue_does_not_deadlock(self):
        client = FakeClient(
            {
                user_id: scores(user_id, *["2023-05-02T00:00:00Z"] * 10)
                for user_id in range(1, 11)
            },
        )

        _, rows = collect(client, entries(*range(1, 11)), queue_size=1)

        assert len(rows) == 100

    def test_dispatches_concurrently(self):
        started = []

        class BlockingClient:
            async def get_user_best_scores(self, user_id):
                started.append(user_id)
                # every unit has to start before any of them can finish
                while len(started) < 3:
                    await asyncio.sleep(0)

                return []

        async def inner():
            collector = Collector(BlockingClient(), WINDOW)
            return await asyncio.wait_for(collector.collect(entries(1, 2, 3)), 5)

        assert asyncio.run(inner()) == []
        assert sorted(started) == [1, 2, 3]

    def test_states(self):
        seen = []

        async def inner():
            collector = Collector(FakeClient({1: scores(1, "2023-05-02T00:00:00Z")}), WINDOW)
            seen.append(collector.state)

            async for _ in collector.stream(entries(1)):
                seen.append(collector.state)

            seen.append(collector.state)

        asyncio.run(inner())

        assert seen == [CollectorState.IDLE, CollectorState.DRAINING, CollectorState.DONE]

    def test_collector_is_single_use(self):
        async def inner():
            collector = Collector(FakeClient({}), WINDOW)
            await collector.collect([])

            with pytest.raises(RuntimeError):
                await collector.collect([])

        asyncio.run(inner())

    def test_concurrent_streams_rejected(self):
        async def inner():
            collector = Collector(FakeClient({1: []}), WINDOW)
            first = collector.stream(entries(1))
            second = collector.stream(entries(1))

            # both are started before the dispatcher task ever runs
            first_next = asyncio.ensure_future(first.__anext__())
            await asyncio.sleep(0)

            with pytest.raises(RuntimeError):
                await second.__anext__()

            with pytest.raises(StopAsyncIteration):
                await first_next

        asyncio.run(inner())

    def test_early_stop_cancels_units(self):
        client = FakeClient(
            {
                1: scores(1, "2023-05-02T00:00:00Z"),
                2: scores(2, "2023-05-03T00:00:00Z"),
            },
            delays={2: 10},
        )

        async def inner():
            collector = Collector(client, WINDOW)
            stream = collector.stream(entries(1, 2))

            row = await stream.__anext__()
            await asyncio.wait_for(stream.aclose(), 1)
            return row

        row = asyncio.run(inner())

        assert row.user_id == 1
