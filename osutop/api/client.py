from __future__ import annotations

import asyncio
from typing import Any
from typing import Optional
from typing import TypeVar
from typing import Union

import aiohttp
import orjson
from pydantic import TypeAdapter
from pydantic import ValidationError
from starlette import status

import osutop.config
import osutop.models
from osutop import log
from osutop.constants.ranking import BEST_SCORES_LIMIT
from osutop.constants.ranking import GAME_MODE
from osutop.constants.ranking import RANKING_TYPE
from osutop.constants.ranking import RankingType
from osutop.errors import ApiFailure
from osutop.errors import BadRequest
from osutop.errors import DecodeFailure
from osutop.errors import MissingCredential
from osutop.errors import ProtocolFailure
from osutop.errors import RateLimited
from osutop.errors import ServiceUnavailable
from osutop.errors import TransportFailure
from osutop.models import OAuthResponse
from osutop.models import Score
from osutop.models import UserStatistics

T = TypeVar("T")

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "User-Agent": osutop.config.USER_AGENT,
}


def parse_body(body: bytes, adapter: TypeAdapter[T]) -> T:
    try:
        return adapter.validate_python(orjson.loads(body))
    except (orjson.JSONDecodeError, ValidationError) as err:
        raise DecodeFailure(body, err) from err


def check_status(status_code: int, body: bytes) -> None:
    if status_code == status.HTTP_200_OK:
        return

    if status_code == status.HTTP_400_BAD_REQUEST:
        raise BadRequest()

    if status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        raise RateLimited()

    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        raise ServiceUnavailable()

    error = parse_body(body, osutop.models.API_ERROR)
    raise ApiFailure(status_code, error.error)


class OsuApi:
    """An authenticated osu! api v2 client.

    Use `await OsuApi.create(...)` to get one, it only returns once the
    client credentials were exchanged for a token. The token is never
    refreshed, so a long enough run will see every request fail with
    whatever the api answers for an expired token.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token: Optional[OAuthResponse] = None,
        api_url: str = osutop.config.OSU_API_URL,
    ) -> None:
        self.session = session
        self.token = token
        self.api_url = api_url.rstrip("/")

    def __repr__(self) -> str:
        return f"<OsuApi {self.api_url}>"

    @classmethod
    async def create(
        cls,
        client_id: Union[int, str],
        client_secret: str,
        *,
        api_url: str = osutop.config.OSU_API_URL,
        oauth_url: str = osutop.config.OSU_OAUTH_URL,
    ) -> OsuApi:
        session = aiohttp.ClientSession(headers=DEFAULT_HEADERS)

        try:
            token = await request_token(session, oauth_url, client_id, client_secret)
            if not token.access_token:
                raise MissingCredential("the token exchange returned an empty token")
        except BaseException:
            await session.close()
            raise

        log.debug(f"Obtained {token.token_type} token valid for {token.expires_in}s.")
        return cls(session, token, api_url)

    async def __aenter__(self) -> OsuApi:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()

    @property
    def headers(self) -> dict[str, str]:
        if not self.token or not self.token.access_token:
            raise MissingCredential()

        return {"Authorization": f"Bearer {self.token.access_token}"}

    async def get_user_best_scores(self, user_id: int) -> list[Score]:
        return await self.get(
            f"/users/{user_id}/scores/best",
            {"mode": GAME_MODE, "limit": BEST_SCORES_LIMIT},
            osutop.models.SCORES,
        )

    async def get_ranking(
        self,
        ranking: RankingType,
        pages: int,
    ) -> list[UserStatistics]:
        entries: list[UserStatistics] = []

        # pages depend on each other's order, so they're fetched one by one
        for page in range(1, pages + 1):
            params = {**ranking.params, "cursor[page]": page}

            response = await self.get(
                f"/rankings/{GAME_MODE}/{RANKING_TYPE}",
                params,
                osutop.models.RANKING_RESPONSE,
            )
            entries.extend(response.ranking)

            log.debug(f"Fetched page {page}/{pages} of {ranking!r}.")

        return entries

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any],
        adapter: TypeAdapter[T],
    ) -> T:
        headers = self.headers
        body = await send(
            self.session,
            "GET",
            f"{self.api_url}{endpoint}",
            params=params,
            headers=headers,
        )

        return parse_body(body, adapter)


async def send(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    **kwargs: Any,
) -> bytes:
    try:
        async with session.request(method, url, **kwargs) as response:
            body = await response.read()
    except (aiohttp.InvalidURL, ValueError, TypeError) as err:
        # aiohttp rejected the request before sending it
        raise ProtocolFailure(err) from err
    except (aiohttp.ClientError, asyncio.TimeoutError) as err:
        raise TransportFailure(err) from err

    check_status(response.status, body)
    return body


async def request_token(
    session: aiohttp.ClientSession,
    oauth_url: str,
    client_id: Union[int, str],
    client_secret: str,
) -> OAuthResponse:
    payload = orjson.dumps(
        {
            "client_id": str(client_id),
            "client_secret": client_secret,
            "grant_type": "client_credentials",
            "scope": "public",
        },
    )

    body = await send(session, "POST", oauth_url, data=payload)
    return parse_body(body, osutop.models.OAUTH_RESPONSE)
