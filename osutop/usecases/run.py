from __future__ import annotations

import time

from osutop import log
from osutop.api.client import OsuApi
from osutop.constants.ranking import pages_for
from osutop.constants.ranking import RankingType
from osutop.objects.credentials import Credentials
from osutop.objects.row import OutputRow
from osutop.objects.window import TimeWindow
from osutop.usecases.collector import Collector


async def run(
    credentials: Credentials,
    ranking: RankingType,
    amount: int,
    window: TimeWindow,
    **api_kwargs,
) -> list[OutputRow]:
    start = time.perf_counter_ns()

    async with await OsuApi.create(
        credentials.client_id,
        credentials.client_secret,
        **api_kwargs,
    ) as api:
        entries = await api.get_ranking(ranking, pages_for(amount))
        log.info(f"Fetched {len(entries)} users from {ranking!r}.")

        collector = Collector(api, window)
        rows = await collector.collect(entries[:amount])

    log.info(
        f"Collected {len(rows)} scores within {window!r} "
        f"in {log.format_time(time.perf_counter_ns() - start)}",
    )
    return rows
