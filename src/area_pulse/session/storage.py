from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from area_pulse.schemas.auth import Session, Workplace

logger = logging.getLogger(__name__)

SESSION_KEY = "area_pulse:session"
WORKPLACE_KEY = "area_pulse:workplace"


class SessionStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError


class RedisLikeClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> Any: ...

    async def delete(self, *keys: str) -> int: ...


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._items: dict[str, dict[str, Any]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self._items.get(key)
        return dict(value) if value is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self._items[key] = dict(value)

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)


class RedisSessionStore(SessionStore):
    def __init__(self, client: RedisLikeClient) -> None:
        self._client = client

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self._client.get(key)
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("stored_value_invalid", extra={"key": key})
            return None
        if not isinstance(value, dict):
            logger.warning("stored_value_invalid", extra={"key": key})
            return None
        return value

    async def set(self, key: str, value: dict[str, Any]) -> None:
        payload = json.dumps(value, ensure_ascii=True)
        await self._client.set(key, payload)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)


def create_session_store(redis_url: str | None) -> SessionStore:
    if not redis_url:
        return InMemorySessionStore()
    import redis.asyncio as redis

    client = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    return RedisSessionStore(client)


def encode_session(session: Session) -> dict[str, Any]:
    return session.model_dump(mode="json")


def decode_session(value: dict[str, Any] | None) -> Session | None:
    if not value:
        return None
    try:
        return Session.model_validate(value)
    except PydanticValidationError:
        logger.warning("stored_session_invalid")
        return None


def encode_workplace(workplace: Workplace) -> dict[str, Any]:
    return workplace.model_dump(mode="json")


def decode_workplace(value: dict[str, Any] | None) -> Workplace | None:
    if not value:
        return None
    try:
        return Workplace.model_validate(value)
    except PydanticValidationError:
        logger.warning("stored_workplace_invalid")
        return None
