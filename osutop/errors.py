"""Errors raised by the osu! api client.

Every failure of a request surfaces as a subclass of `OsuApiError`. The
classes are grouped by what the caller can do about them:

- `TransportFailure`: connection or io problem, may be retried later.
- `ProtocolFailure`, `DecodeFailure`: the request or the schema is wrong,
  which needs a code fix.
- `BadRequest`, `ApiFailure`, `MissingCredential`: the service rejected
  the request.
- `RateLimited`, `ServiceUnavailable`: the service is refusing work for now.
"""
from __future__ import annotations

from typing import Optional


class OsuApiError(Exception):
    description = "osu! api error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.description}: {self.detail}"

        return self.description


class TransportFailure(OsuApiError):
    description = "transport/connection problem"

    def __init__(self, inner: BaseException) -> None:
        self.inner = inner
        super().__init__(f"{type(inner).__name__}: {inner}")


class ProtocolFailure(OsuApiError):
    description = "request could not be constructed"

    def __init__(self, inner: BaseException) -> None:
        self.inner = inner
        super().__init__(f"{type(inner).__name__}: {inner}")


class ApiFailure(OsuApiError):
    description = "the service rejected the request"

    def __init__(self, status: int, error: str) -> None:
        self.status = status
        self.error = error
        super().__init__(f"{error} (HTTP {status})")


class DecodeFailure(OsuApiError):
    description = "protocol/schema mismatch"

    def __init__(self, raw_body: bytes, inner: Optional[BaseException] = None) -> None:
        self.raw_body = raw_body
        self.inner = inner
        super().__init__(f"{inner} for body {raw_body[:200]!r}")


class BadRequest(OsuApiError):
    description = "the service rejected the request as malformed (HTTP 400)"


class RateLimited(OsuApiError):
    description = "the service is rate limiting requests (HTTP 429)"


class ServiceUnavailable(OsuApiError):
    description = "the service is unavailable (HTTP 503)"


class MissingCredential(OsuApiError):
    description = "no access token available for the request"
