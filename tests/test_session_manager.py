from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from support import build_manager, make_jwt

from area_pulse.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    NetworkError,
    ServerError,
    SessionExpiredError,
    ValidationError,
)
from area_pulse.schemas.auth import Session, Workplace
from area_pulse.session.http import RequestDescriptor
from area_pulse.session.manager import SessionState
from area_pulse.session.storage import SESSION_KEY


def expired_session(refresh_token: str = "refresh-1") -> Session:
    return Session(access_token="old-token", refresh_token=refresh_token, user_id=7, email="a@example.com")


def item(index: int) -> RequestDescriptor:
    return RequestDescriptor(name=f"item_{index}", method="GET", path=f"/items/{index}", requires_auth=True)


def refreshed_tokens() -> httpx.Response:
    return httpx.Response(
        200,
        json={"access_token": "new-token", "refresh_token": "refresh-2", "token_type": "bearer"},
    )


@pytest.mark.asyncio
async def test_expired_token_is_refreshed_and_call_replayed_transparently() -> None:
    seen: list[tuple[str, str | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, request.headers.get("authorization")))
        if request.url.path.endswith("/auth/refresh"):
            assert json.loads(request.content) == {"refresh_token": "refresh-1"}
            return refreshed_tokens()
        if request.headers.get("authorization") == "Bearer new-token":
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(401, json={"detail": "expired"})

    manager, store = await build_manager(handler, expired_session())
    result = await manager.authorized_request(item(1))

    assert result == {"ok": True}
    assert [path for path, _ in seen] == ["/api/v1/items/1", "/api/v1/auth/refresh", "/api/v1/items/1"]
    assert seen[-1][1] == "Bearer new-token"
    assert manager.current_session().access_token == "new-token"
    assert manager.current_session().user_id == 7
    assert manager.state is SessionState.AUTHENTICATED
    assert (await store.get(SESSION_KEY))["refresh_token"] == "refresh-2"


@pytest.mark.asyncio
async def test_concurrent_unauthorized_calls_share_one_refresh() -> None:
    count = 5
    arrived = 0
    all_arrived = asyncio.Event()
    refresh_calls = 0
    replays: dict[str, int] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal arrived, refresh_calls
        path = request.url.path
        if path.endswith("/auth/refresh"):
            refresh_calls += 1
            return refreshed_tokens()
        if request.headers.get("authorization") == "Bearer old-token":
            arrived += 1
            if arrived == count:
                all_arrived.set()
            await all_arrived.wait()
            return httpx.Response(401)
        replays[path] = replays.get(path, 0) + 1
        return httpx.Response(200, json={"path": path})

    manager, _ = await build_manager(handler, expired_session())
    results = await asyncio.gather(*(manager.authorized_request(item(index)) for index in range(count)))

    assert refresh_calls == 1
    assert results == [{"path": f"/api/v1/items/{index}"} for index in range(count)]
    assert replays == {f"/api/v1/items/{index}": 1 for index in range(count)}


@pytest.mark.asyncio
async def test_late_unauthorized_call_does_not_start_second_refresh() -> None:
    refreshed = asyncio.Event()
    refresh_calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal refresh_calls
        path = request.url.path
        if path.endswith("/auth/refresh"):
            refresh_calls += 1
            refreshed.set()
            return refreshed_tokens()
        if request.headers.get("authorization") == "Bearer new-token":
            return httpx.Response(200, json={"path": path})
        if path.endswith("/items/slow"):
            await refreshed.wait()
        return httpx.Response(401)

    slow = RequestDescriptor(name="slow", method="GET", path="/items/slow", requires_auth=True)
    manager, _ = await build_manager(handler, expired_session())
    results = await asyncio.gather(manager.authorized_request(slow), manager.authorized_request(item(1)))

    assert refresh_calls == 1
    assert results == [{"path": "/api/v1/items/slow"}, {"path": "/api/v1/items/1"}]


@pytest.mark.asyncio
async def test_refresh_rejection_fails_every_queued_call_and_logs_out() -> None:
    count = 3
    arrived = 0
    all_arrived = asyncio.Event()
    logged_out: list[bool] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal arrived
        if request.url.path.endswith("/auth/refresh"):
            return httpx.Response(401, json={"detail": "refresh expired"})
        arrived += 1
        if arrived == count:
            all_arrived.set()
        await all_arrived.wait()
        return httpx.Response(401)

    manager, store = await build_manager(handler, expired_session(), on_logged_out=lambda: logged_out.append(True))
    results = await asyncio.gather(
        *(manager.authorized_request(item(index)) for index in range(count)),
        return_exceptions=True,
    )

    assert all(isinstance(result, SessionExpiredError) for result in results)
    assert manager.is_authenticated() is False
    assert manager.current_session() is None
    assert manager.state is SessionState.LOGGED_OUT
    assert await store.get(SESSION_KEY) is None
    assert logged_out == [True]


@pytest.mark.asyncio
async def test_refresh_network_error_expires_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/auth/refresh"):
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(401)

    manager, _ = await build_manager(handler, expired_session())
    with pytest.raises(SessionExpiredError):
        await manager.authorized_request(item(1))

    assert manager.state is SessionState.LOGGED_OUT


@pytest.mark.asyncio
async def test_missing_refresh_token_fails_without_refresh_call() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(401)

    manager, _ = await build_manager(handler, expired_session(refresh_token=""))
    with pytest.raises(SessionExpiredError):
        await manager.authorized_request(item(1))

    assert paths == ["/api/v1/items/1"]
    assert manager.is_authenticated() is False


@pytest.mark.asyncio
async def test_repeated_unauthorized_after_refresh_raises_session_expired() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/auth/refresh"):
            return refreshed_tokens()
        return httpx.Response(401)

    manager, _ = await build_manager(handler, expired_session())
    with pytest.raises(SessionExpiredError):
        await manager.authorized_request(item(1))


@pytest.mark.asyncio
async def test_non_auth_errors_propagate() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/items/1"):
            return httpx.Response(503, text="maintenance")
        raise httpx.ReadTimeout("slow", request=request)

    manager, _ = await build_manager(handler, expired_session())
    with pytest.raises(ServerError) as exc_info:
        await manager.authorized_request(item(1))
    assert exc_info.value.status_code == 503
    assert exc_info.value.body == "maintenance"

    with pytest.raises(NetworkError):
        await manager.authorized_request(item(2))
    assert manager.is_authenticated() is True


@pytest.mark.asyncio
async def test_authorized_request_without_session_raises() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    manager, _ = await build_manager(handler)
    with pytest.raises(SessionExpiredError):
        await manager.authorized_request(item(1))


@pytest.mark.asyncio
async def test_request_sends_public_calls_anonymously() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "authorization" not in request.headers
        return httpx.Response(200, json={"public": True})

    manager, _ = await build_manager(handler)
    descriptor = RequestDescriptor(name="public", method="GET", path="/public")

    assert await manager.request(descriptor) == {"public": True}


@pytest.mark.asyncio
async def test_login_builds_session_from_token_claims() -> None:
    access = make_jwt({"sub": "42", "email": "user@example.com", "nickname": "mapper"})

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/auth/login"
        assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
        assert b"username=user%40example.com" in request.content
        return httpx.Response(200, json={"access_token": access, "refresh_token": "r", "token_type": "bearer"})

    manager, store = await build_manager(handler)
    session = await manager.login("user@example.com", "pw")

    assert session.user_id == 42
    assert session.nickname == "mapper"
    assert manager.is_authenticated() is True
    assert manager.state is SessionState.AUTHENTICATED
    assert (await store.get(SESSION_KEY))["access_token"] == access


@pytest.mark.asyncio
async def test_login_falls_back_to_supplied_email_for_opaque_tokens() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "opaque", "refresh_token": "r"})

    manager, _ = await build_manager(handler)
    session = await manager.login("user@example.com", "pw")

    assert session.email == "user@example.com"
    assert session.user_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 401, 403])
async def test_login_rejection_maps_to_invalid_credentials(status_code: int) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"detail": "Incorrect email or password"})

    manager, _ = await build_manager(handler)
    with pytest.raises(InvalidCredentialsError):
        await manager.login("user@example.com", "wrong")

    assert manager.state is SessionState.LOGGED_OUT


@pytest.mark.asyncio
async def test_login_transport_failure_maps_to_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    manager, _ = await build_manager(handler)
    with pytest.raises(NetworkError):
        await manager.login("user@example.com", "pw")

    assert manager.state is SessionState.LOGGED_OUT


@pytest.mark.asyncio
async def test_register_returns_user_without_authenticating() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content) == {"email": "new@example.com", "password": "pw", "nickname": "nick"}
        return httpx.Response(
            201,
            json={"user_id": 3, "email": "new@example.com", "nickname": "nick", "created_at": "2024-12-01T09:00:00"},
        )

    manager, _ = await build_manager(handler)
    user = await manager.register("new@example.com", "pw", "nick")

    assert user.user_id == 3
    assert user.created_at.year == 2024
    assert manager.is_authenticated() is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "detail", "expected"),
    [
        (409, "conflict", EmailTakenError),
        (400, "Email already registered", EmailTakenError),
        (400, "이미 가입된 이메일입니다", EmailTakenError),
        (400, "password too short", ValidationError),
        (422, "invalid email", ValidationError),
    ],
)
async def test_register_error_mapping(status_code: int, detail: str, expected: type[Exception]) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"detail": detail})

    manager, _ = await build_manager(handler)
    with pytest.raises(expected):
        await manager.register("new@example.com", "pw", "nick")


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome", ["ok", "error", "timeout"])
async def test_logout_always_clears_local_state(outcome: str) -> None:
    calls: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.headers.get("authorization"))
        if outcome == "timeout":
            raise httpx.ReadTimeout("slow", request=request)
        if outcome == "error":
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json={"message": "bye", "user_id": 7})

    manager, store = await build_manager(handler, expired_session())
    await manager.logout()

    assert calls == ["Bearer old-token"]
    assert manager.is_authenticated() is False
    assert manager.state is SessionState.LOGGED_OUT
    assert await store.get(SESSION_KEY) is None


@pytest.mark.asyncio
async def test_logout_keeps_workplace() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    manager, _ = await build_manager(handler, expired_session())
    await manager.set_workplace(Workplace(address="서울 중구 세종대로 110", latitude=37.5665, longitude=126.978))
    await manager.logout()

    workplace = await manager.workplace()
    assert workplace is not None
    assert workplace.address == "서울 중구 세종대로 110"

    await manager.clear_workplace()
    assert await manager.workplace() is None
