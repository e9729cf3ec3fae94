from __future__ import annotations

import asyncio
from enum import IntEnum
from typing import AsyncIterator
from typing import Optional
from typing import Sequence
from typing import TYPE_CHECKING

import osutop.config
from osutop import log
from osutop.errors import OsuApiError
from osutop.models import UserStatistics
from osutop.objects.row import OutputRow
from osutop.objects.window import TimeWindow

if TYPE_CHECKING:
    from osutop.api.client import OsuApi


class CollectorState(IntEnum):
    IDLE = 0
    DISPATCHING = 1
    DRAINING = 2
    DONE = 3


class Collector:
    """Fetches the best scores of many users at once.

    Every ranking entry gets its own task, and all of them feed one bounded
    queue that `stream()` drains. The queue is closed once the last task
    has finished, a failing user just contributes no rows.
    """

    def __init__(
        self,
        api: OsuApi,
        window: TimeWindow,
        queue_size: int = osutop.config.QUEUE_SIZE,
    ) -> None:
        self.api = api
        self.window = window

        self.state = CollectorState.IDLE
        self.queue: asyncio.Queue[Optional[OutputRow]] = asyncio.Queue(queue_size)

        self.dispatched = 0
        self.failed: list[UserStatistics] = []

    def __repr__(self) -> str:
        return f"<Collector {self.window!r} ({self.state.name.lower()})>"

    async def stream(self, entries: Sequence[UserStatistics]) -> AsyncIterator[OutputRow]:
        if self.state is not CollectorState.IDLE:
            raise RuntimeError(f"{self!r} was already used")

        self.state = CollectorState.DISPATCHING
        dispatcher = asyncio.create_task(self.dispatch(entries))

        try:
            while (row := await self.queue.get()) is not None:
                yield row

            await dispatcher
        finally:
            if not dispatcher.done():
                # the consumer gave up early, nobody will drain the queue
                dispatcher.cancel()
                await asyncio.gather(dispatcher, return_exceptions=True)

        self.state = CollectorState.DONE

        if self.failed:
            log.warning(f"{len(self.failed)} of {self.dispatched} users failed.")

    async def collect(self, entries: Sequence[UserStatistics]) -> list[OutputRow]:
        return [row async for row in self.stream(entries)]

    async def dispatch(self, entries: Sequence[UserStatistics]) -> None:
        self.state = CollectorState.DISPATCHING

        units = [
            asyncio.create_task(self.fetch_user(idx + 1, entry))
            for idx, entry in enumerate(entries)
        ]
        self.dispatched = len(units)

        self.state = CollectorState.DRAINING

        try:
            results = await asyncio.gather(*units, return_exceptions=True)
        finally:
            for task in units:
                task.cancel()

        for entry, result in zip(entries, results):
            if isinstance(result, BaseException):
                log.error(f"Unexpected error fetching {entry.user.username}: {result!r}")
                self.failed.append(entry)

        await self.queue.put(None)

    async def fetch_user(self, rank: int, entry: UserStatistics) -> None:
        user = entry.user
        log.info(f"Processing user {user.username}")

        try:
            scores = await self.api.get_user_best_scores(user.id)
        except OsuApiError as err:
            log.warning(f"Failed fetching scores of {user.username}: {err}")
            self.failed.append(entry)
            return

        for score in scores:
            if score.created_at in self.window:
                await self.queue.put(OutputRow.from_score(rank, entry, score))
