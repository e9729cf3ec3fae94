from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from typing import Optional

from osutop.constants.mods import Mods
from osutop.models import Score
from osutop.models import UserStatistics

SCORE_URL = "https://osu.ppy.sh/scores/osu/{score_id}"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class OutputRow:
    user_id: int
    username: str

    score_id: int
    pp: float
    created_at: datetime
    replay: bool
    mods: Mods

    artist: str
    title: str
    diff: str

    country_rank: int
    global_rank: Optional[int]
    total_pp: float

    def __repr__(self) -> str:
        return f"<#{self.country_rank} {self.username}: {self.map} [{self.diff}] +{self.mods.acronyms}>"

    @classmethod
    def from_score(cls, rank: int, entry: UserStatistics, score: Score) -> OutputRow:
        return cls(
            user_id=entry.user.id,
            username=entry.user.username,
            score_id=score.id,
            pp=score.pp,
            created_at=score.created_at,
            replay=score.replay,
            mods=score.mods,
            artist=score.beatmapset.artist,
            title=score.beatmapset.title,
            diff=score.beatmap.version,
            country_rank=rank,
            global_rank=entry.global_rank,
            total_pp=entry.pp,
        )

    @property
    def map(self) -> str:
        return f"{self.artist} - {self.title}"

    @property
    def score_link(self) -> str:
        return SCORE_URL.format(score_id=self.score_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "pp": self.pp,
            "date": self.created_at.strftime(DATE_FORMAT),
            "replay": self.replay,
            "map": self.map,
            "diff": self.diff,
            "score_link": self.score_link,
            "mods": self.mods.acronyms,
            "country_rank": self.country_rank,
            "global_rank": self.global_rank,
            "total_pp": self.total_pp,
        }
