"""Fetch a user record and decode it into a typed model.

Run against any endpoint returning ``{"id": ..., "name": ..., "email": ...}``::

    python -m integrator.examples.fetch_user https://example.com/api/users/1
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

import httpx
from pydantic import BaseModel

from integrator.integrator import Integrator
from integrator.models.enums import CachePolicy
from integrator.models.outcome import Failure, IntegrationOutcome
from integrator.models.request import Request
from integrator.observability import configure_logging, get_logger
from integrator.transport.httpx_transport import HttpxTransport

logger = get_logger(__name__)

DEFAULT_USER_URL = "https://example.com/api/users"


class User(BaseModel):
    id: int
    name: str
    email: str


async def fetch_user(
    url: str = DEFAULT_USER_URL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IntegrationOutcome[User]:
    """Fetch ``url`` and decode the body into a User.

    Args:
        url: Endpoint returning a single user as JSON.
        transport: Optional custom httpx transport (for testing).
    """
    request = Request(url=url, cache_policy=CachePolicy.USE_PROTOCOL_CACHE_POLICY)
    async with HttpxTransport(transport=transport) as http:
        return await Integrator(http, request).integrate_async(User)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fetch a user and print the decoded record")
    parser.add_argument("url", nargs="?", default=DEFAULT_USER_URL)
    args = parser.parse_args(argv)

    configure_logging()
    outcome = asyncio.run(fetch_user(args.url))
    if isinstance(outcome, Failure):
        logger.error("example.fetch_user.failed", **outcome.error.to_dict())
        return 1
    logger.info("example.fetch_user.received", user=outcome.value.model_dump())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
