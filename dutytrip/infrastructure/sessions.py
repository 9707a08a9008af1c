"""
Redis-backed login sessions.

Each login gets an opaque bearer token stored as
``session:<token> -> "<role>:<username>"`` with a TTL (SET EX).
The resolved ``Principal`` is passed explicitly into request handlers,
so no process-wide mutable state holds who is signed in.
"""

from __future__ import annotations

import secrets
from typing import Optional

import redis.asyncio as aioredis

from dutytrip.domain.entities import Principal
from dutytrip.domain.enums import Role


class SessionStore:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 43_200):
        self.redis = client
        self.ttl = ttl_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    async def create(self, principal: Principal) -> str:
        token = secrets.token_urlsafe(32)
        await self.redis.set(
            self._key(token),
            f"{principal.role.value}:{principal.username}",
            ex=self.ttl,
        )
        return token

    async def resolve(self, token: str) -> Optional[Principal]:
        raw = await self.redis.get(self._key(token))
        if not raw:
            return None
        role, _, username = raw.partition(":")
        try:
            return Principal(username=username, role=Role(role))
        except ValueError:
            # Unknown role string: treat the session as invalid
            return None

    async def revoke(self, token: str) -> None:
        await self.redis.delete(self._key(token))
