from __future__ import annotations

from starlette.config import Config
from starlette.datastructures import Secret

cfg = Config(".env")

CLIENT_ID: str = cfg("CLIENT_ID", default="")
CLIENT_SECRET: Secret = cfg("CLIENT_SECRET", cast=Secret, default="")

OSU_API_URL: str = cfg("OSU_API_URL", default="https://osu.ppy.sh/api/v2")
OSU_OAUTH_URL: str = cfg("OSU_OAUTH_URL", default="https://osu.ppy.sh/oauth/token")

DEFAULT_COUNTRY: str = cfg("DEFAULT_COUNTRY", default="by")
QUEUE_SIZE: int = cfg("QUEUE_SIZE", cast=int, default=256)

DEBUG: bool = cfg("DEBUG", cast=bool, default=False)

# do NOT change
VERSION = "0.1.0"
USER_AGENT = f"osutop/{VERSION}"
