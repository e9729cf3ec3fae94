from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from osutop import log
from osutop.objects.row import OutputRow

COLUMNS = (
    "username",
    "pp",
    "date",
    "replay",
    "map",
    "diff",
    "score_link",
    "mods",
    "country_rank",
    "global_rank",
    "total_pp",
)


def write_csv(rows: Iterable[OutputRow], path: Path) -> int:
    count = 0

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=COLUMNS)
        writer.writeheader()

        for row in rows:
            writer.writerow(row.as_dict())
            count += 1

    log.info(f"Wrote {count} rows to {path}")
    return count
