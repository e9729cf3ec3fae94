from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Annotated
from typing import Any
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import PlainValidator
from pydantic import TypeAdapter

from osutop.constants.mods import Mods

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp string, got {value!r}")

    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


ModsField = Annotated[Mods, PlainValidator(Mods.from_wire)]
Timestamp = Annotated[datetime, PlainValidator(parse_timestamp)]


class APIModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class OAuthResponse(APIModel):
    token_type: str
    expires_in: int
    access_token: str


class ApiErrorResponse(APIModel):
    error: str


class UserCompact(APIModel):
    id: int
    username: str


class UserStatistics(APIModel):
    pp: float
    global_rank: Optional[int] = None
    user: UserCompact


class RankingResponse(APIModel):
    ranking: list[UserStatistics]
    total: int


class BeatmapCompact(APIModel):
    version: str


class BeatmapsetCompact(APIModel):
    artist: str
    title: str

    artist_unicode: Optional[str] = None
    title_unicode: Optional[str] = None
    creator: Optional[str] = None
    source: Optional[str] = None


class Score(APIModel):
    id: int
    best_id: Optional[int] = None
    user_id: int

    accuracy: float
    mods: ModsField
    score: int
    pp: float

    created_at: Timestamp
    replay: bool

    beatmap: BeatmapCompact
    beatmapset: BeatmapsetCompact


OAUTH_RESPONSE = TypeAdapter(OAuthResponse)
API_ERROR = TypeAdapter(ApiErrorResponse)
RANKING_RESPONSE = TypeAdapter(RankingResponse)
SCORES = TypeAdapter(list[Score])
