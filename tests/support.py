from __future__ import annotations

import base64
import json
from collections.abc import Callable
from typing import Any

import httpx

from area_pulse.schemas.auth import Session
from area_pulse.session.http import UpstreamTransport
from area_pulse.session.manager import SessionManager
from area_pulse.session.storage import SESSION_KEY, InMemorySessionStore, encode_session

BASE_URL = "https://api.example.com/api/v1"


def _segment(payload: dict[str, Any]) -> str:
    raw = json.dumps(payload).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def make_jwt(claims: dict[str, Any]) -> str:
    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(claims)}.signature"


def build_transport(handler, metrics=None) -> UpstreamTransport:
    transport = httpx.MockTransport(handler)
    return UpstreamTransport(
        base_url=BASE_URL,
        timeout_seconds=5.0,
        client_factory=lambda: httpx.AsyncClient(transport=transport, timeout=5.0),
        metrics=metrics,
    )


async def build_manager(
    handler,
    session: Session | None = None,
    on_logged_out: Callable[[], None] | None = None,
) -> tuple[SessionManager, InMemorySessionStore]:
    store = InMemorySessionStore()
    if session is not None:
        await store.set(SESSION_KEY, encode_session(session))
    manager = SessionManager(build_transport(handler), store=store, on_logged_out=on_logged_out)
    await manager.restore()
    return manager, store

