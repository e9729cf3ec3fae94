from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import Optional
from typing import Sequence

import osutop.config
from osutop import log
from osutop.constants.ranking import CountryRanking
from osutop.constants.ranking import GlobalRanking
from osutop.constants.ranking import RankingType
from osutop.errors import OsuApiError
from osutop.objects.credentials import Credentials
from osutop.objects.window import TimeWindow
from osutop.usecases.export import write_csv
from osutop.usecases.run import run

DATE_FORMAT = "%d-%m-%Y"


def parse_date(value: str) -> datetime:
    try:
        date = datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date {value!r}, expected DD-MM-YYYY",
        ) from None

    return date.replace(tzinfo=timezone.utc)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="osutop",
        description="Export the best scores ranked players set within a date window.",
    )
    parser.add_argument(
        "-f",
        "--from",
        dest="start",
        type=parse_date,
        required=True,
        help="start date (%%d-%%m-%%Y) e.g. 01-05-2023",
    )
    parser.add_argument(
        "-t",
        "--to",
        dest="end",
        type=parse_date,
        required=True,
        help="end date (%%d-%%m-%%Y) e.g. 01-06-2023",
    )
    parser.add_argument(
        "-a",
        "--amount",
        type=int,
        default=200,
        help="amount of users to process",
    )

    ranking = parser.add_mutually_exclusive_group()
    ranking.add_argument(
        "-c",
        "--country",
        default=osutop.config.DEFAULT_COUNTRY,
        help="country code of the leaderboard to use",
    )
    ranking.add_argument(
        "-g",
        "--global",
        dest="use_global",
        action="store_true",
        help="use the global leaderboard",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("output.csv"),
    )
    return parser


def ranking_from_args(args: argparse.Namespace) -> RankingType:
    if args.use_global:
        return GlobalRanking()

    return CountryRanking(args.country)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log.configure(osutop.config.DEBUG)

    if args.amount < 1:
        log.error("Amount of users must be positive.")
        return 1

    credentials = Credentials(
        osutop.config.CLIENT_ID,
        str(osutop.config.CLIENT_SECRET),
    )
    if not credentials:
        log.error("CLIENT_ID and CLIENT_SECRET must be set in the environment or .env")
        return 1

    window = TimeWindow(args.start, args.end)
    ranking = ranking_from_args(args)

    try:
        rows = asyncio.run(run(credentials, ranking, args.amount, window))
    except OsuApiError as err:
        log.error(f"Aborting: {err.message}")
        return 1

    write_csv(rows, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
