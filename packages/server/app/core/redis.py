"""Redis client construction; the client lives on `app.state.redis`."""

from __future__ import annotations

import redis.asyncio as redis
from fastapi import Request


def create_redis(url: str) -> redis.Redis:
    return redis.from_url(url, decode_responses=True)


async def close_redis(client: redis.Redis) -> None:
    await client.aclose()


def get_redis(request: Request) -> redis.Redis:
    """FastAPI dependency returning the process-wide Redis client."""
    return request.app.state.redis
