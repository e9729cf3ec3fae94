from __future__ import annotations

from dataclasses import dataclass
from typing import Union

GAME_MODE = "osu"
RANKING_TYPE = "performance"

RANKING_PAGE_SIZE = 50
BEST_SCORES_LIMIT = 100


@dataclass(frozen=True)
class CountryRanking:
    code: str

    def __repr__(self) -> str:
        return f"<{self.code.upper()} ranking>"

    @property
    def params(self) -> dict[str, str]:
        return {"country": self.code}


@dataclass(frozen=True)
class GlobalRanking:
    def __repr__(self) -> str:
        return "<global ranking>"

    @property
    def params(self) -> dict[str, str]:
        return {}


RankingType = Union[CountryRanking, GlobalRanking]


def pages_for(amount: int) -> int:
    return -(-amount // RANKING_PAGE_SIZE)
