from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from opentelemetry import trace
from redis.exceptions import RedisError

from area_pulse.errors import (
    AreaPulseError,
    EmailTakenError,
    InvalidCredentialsError,
    SessionExpiredError,
    ValidationError,
)
from area_pulse.schemas.auth import Session, TokenPair, User, Workplace
from area_pulse.session.claims import read_token_claims, user_id_from_claims
from area_pulse.session.http import (
    RequestDescriptor,
    UpstreamTransport,
    decode_response,
    error_detail,
    is_success,
    raise_for_status,
)
from area_pulse.session.storage import (
    SESSION_KEY,
    WORKPLACE_KEY,
    InMemorySessionStore,
    SessionStore,
    decode_session,
    decode_workplace,
    encode_session,
    encode_workplace,
)

logger = logging.getLogger(__name__)

_STORE_ERRORS = (RedisError, OSError)


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGING_IN = "logging_in"
    AUTHENTICATED = "authenticated"
    REFRESH_IN_FLIGHT = "refresh_in_flight"


@dataclass
class _PendingReplay:
    descriptor: RequestDescriptor
    response_model: Any
    future: asyncio.Future


class SessionManager:
    """Holds the current session and makes 401 recovery transparent to callers.

    A request rejected with 401 joins the pending queue. At most one token
    refresh runs at a time; when it succeeds every queued descriptor is
    replayed once with the new access token and its own result is delivered to
    its own future. When it fails every queued caller gets
    ``SessionExpiredError`` and the session is cleared.
    """

    def __init__(
        self,
        transport: UpstreamTransport,
        store: SessionStore | None = None,
        on_logged_out: Callable[[], None] | None = None,
    ) -> None:
        self._transport = transport
        self._store = store or InMemorySessionStore()
        self._on_logged_out = on_logged_out
        self._session: Session | None = None
        self._state = SessionState.LOGGED_OUT
        self._lock = asyncio.Lock()
        self._refresh_task: asyncio.Task | None = None
        self._pending: list[_PendingReplay] = []
        self._tracer = trace.get_tracer("area-pulse-session")

    @property
    def state(self) -> SessionState:
        return self._state

    def is_authenticated(self) -> bool:
        return self._session is not None and self._session.is_authenticated

    def current_session(self) -> Session | None:
        return self._session

    async def restore(self) -> Session | None:
        try:
            stored = await self._store.get(SESSION_KEY)
        except _STORE_ERRORS:
            logger.warning("session_restore_failed", exc_info=True)
            return None
        session = decode_session(stored)
        if session is None or not session.is_authenticated:
            return None
        self._session = session
        self._state = SessionState.AUTHENTICATED
        logger.info("session_restored", extra={"user_id": session.user_id})
        return session

    async def login(self, email: str, password: str) -> Session:
        self._state = SessionState.LOGGING_IN
        try:
            return await self._authenticate(email, password)
        finally:
            self._state = self._settled_state()

    async def _authenticate(self, email: str, password: str) -> Session:
        descriptor = RequestDescriptor(
            name="auth_login",
            method="POST",
            path="/auth/login",
            form={"username": email, "password": password},
        )
        response = await self._transport.send(descriptor)
        if response.status_code in (400, 401, 403):
            logger.info("login_rejected", extra={"status_code": response.status_code})
            raise InvalidCredentialsError(error_detail(response))
        raise_for_status(response)
        tokens = decode_response(response, TokenPair)

        claims = read_token_claims(tokens.access_token)
        session = Session(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            user_id=user_id_from_claims(claims),
            email=str(claims.get("email") or email),
            nickname=str(claims.get("nickname") or ""),
        )
        self._session = session
        await self._persist(session)
        logger.info("login_succeeded", extra={"user_id": session.user_id})
        return session

    async def register(self, email: str, password: str, nickname: str) -> User:
        descriptor = RequestDescriptor(
            name="auth_register",
            method="POST",
            path="/auth/register",
            json={"email": email, "password": password, "nickname": nickname},
        )
        response = await self._transport.send(descriptor)
        if response.status_code == 409:
            raise EmailTakenError(error_detail(response))
        if response.status_code in (400, 422):
            detail = error_detail(response)
            if response.status_code == 400 and _mentions_existing_email(detail):
                raise EmailTakenError(detail)
            raise ValidationError(detail)
        raise_for_status(response)
        user = decode_response(response, User)
        logger.info("register_succeeded", extra={"user_id": user.user_id})
        return user

    async def logout(self) -> None:
        session = self._session
        try:
            if session is not None and session.access_token:
                descriptor = RequestDescriptor(
                    name="auth_logout",
                    method="POST",
                    path="/auth/logout",
                    json={"refresh_token": session.refresh_token},
                    requires_auth=True,
                )
                response = await self._transport.send(descriptor, session.access_token)
                if not is_success(response):
                    logger.warning("logout_rejected", extra={"status_code": response.status_code})
        except AreaPulseError as exc:
            logger.warning("logout_failed", extra={"error": type(exc).__name__})
        finally:
            await self._clear_session(reason="logout")

    async def request(self, descriptor: RequestDescriptor, response_model: Any = None) -> Any:
        if descriptor.requires_auth or self.is_authenticated():
            return await self.authorized_request(descriptor, response_model)
        response = await self._transport.send(descriptor)
        raise_for_status(response)
        return decode_response(response, response_model)

    async def authorized_request(self, descriptor: RequestDescriptor, response_model: Any = None) -> Any:
        session = self._session
        if session is None or not session.access_token:
            raise SessionExpiredError("no active session")
        token = session.access_token
        response = await self._transport.send(descriptor, token)
        if response.status_code == 401:
            logger.info("upstream_unauthorized", extra={"endpoint": descriptor.name})
            return await self._recover(descriptor, token, response_model)
        raise_for_status(response)
        return decode_response(response, response_model)

    async def _recover(self, descriptor: RequestDescriptor, stale_token: str, response_model: Any) -> Any:
        replay_token: str | None = None
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        async with self._lock:
            current = self._session
            if (
                self._refresh_task is None
                and current is not None
                and current.access_token
                and current.access_token != stale_token
            ):
                # another caller already refreshed past the token this one was rejected with
                replay_token = current.access_token
            else:
                self._pending.append(_PendingReplay(descriptor, response_model, future))
                if self._refresh_task is None:
                    self._state = SessionState.REFRESH_IN_FLIGHT
                    self._refresh_task = asyncio.create_task(self._refresh_and_replay(current))
        if replay_token is not None:
            return await self._replay(descriptor, replay_token, response_model)
        return await future

    async def _refresh_and_replay(self, expected: Session | None) -> None:
        try:
            session = await self._refresh_tokens(expected)
        except AreaPulseError as exc:
            pending = await self._take_pending()
            logger.warning(
                "token_refresh_failed",
                extra={"error": type(exc).__name__, "pending": len(pending)},
            )
            if expected is not None and self._session is expected:
                await self._clear_session(reason="refresh_failed")
            else:
                self._state = self._settled_state()
            _fail_pending(pending, "session could not be refreshed")
            return
        except BaseException:
            _fail_pending(await self._take_pending(), "token refresh aborted")
            self._state = self._settled_state()
            raise

        pending = await self._take_pending()
        self._state = self._settled_state()
        logger.info("token_refresh_succeeded", extra={"pending": len(pending)})
        await self._replay_pending(pending, session.access_token)

    async def _take_pending(self) -> list[_PendingReplay]:
        async with self._lock:
            pending, self._pending = self._pending, []
            self._refresh_task = None
        return pending

    async def _refresh_tokens(self, expected: Session | None) -> Session:
        if expected is None or not expected.refresh_token:
            raise SessionExpiredError("no refresh token held")

        with self._tracer.start_as_current_span("token_refresh"):
            logger.info("token_refresh_started")
            descriptor = RequestDescriptor(
                name="auth_refresh",
                method="POST",
                path="/auth/refresh",
                json={"refresh_token": expected.refresh_token},
            )
            response = await self._transport.send(descriptor)
            if not is_success(response):
                raise SessionExpiredError(f"refresh rejected status={response.status_code}")
            tokens = decode_response(response, TokenPair)

        if self._session is not expected:
            raise SessionExpiredError("session changed while refreshing")
        session = expected.model_copy(
            update={
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
                "token_type": tokens.token_type,
            }
        )
        self._session = session
        await self._persist(session)
        return session

    async def _replay_pending(self, pending: list[_PendingReplay], access_token: str) -> None:
        await asyncio.gather(*(self._replay_into(item, access_token) for item in pending))

    async def _replay_into(self, item: _PendingReplay, access_token: str) -> None:
        if item.future.done():
            return
        try:
            result = await self._replay(item.descriptor, access_token, item.response_model)
        except Exception as exc:
            if not item.future.done():
                item.future.set_exception(exc)
            return
        if not item.future.done():
            item.future.set_result(result)

    async def _replay(self, descriptor: RequestDescriptor, access_token: str, response_model: Any) -> Any:
        response = await self._transport.send(descriptor, access_token)
        if response.status_code == 401:
            logger.warning("replay_unauthorized", extra={"endpoint": descriptor.name})
            raise SessionExpiredError("request rejected after token refresh")
        raise_for_status(response)
        return decode_response(response, response_model)

    async def set_workplace(self, workplace: Workplace) -> None:
        await self._store.set(WORKPLACE_KEY, encode_workplace(workplace))

    async def workplace(self) -> Workplace | None:
        return decode_workplace(await self._store.get(WORKPLACE_KEY))

    async def clear_workplace(self) -> None:
        await self._store.delete(WORKPLACE_KEY)

    async def _persist(self, session: Session) -> None:
        try:
            await self._store.set(SESSION_KEY, encode_session(session))
        except _STORE_ERRORS:
            logger.warning("session_persist_failed", exc_info=True)

    async def _clear_session(self, reason: str) -> None:
        self._session = None
        self._state = SessionState.LOGGED_OUT
        try:
            await self._store.delete(SESSION_KEY)
        except _STORE_ERRORS:
            logger.warning("session_store_clear_failed", exc_info=True)
        logger.info("session_cleared", extra={"reason": reason})
        if self._on_logged_out is not None:
            self._on_logged_out()

    def _settled_state(self) -> SessionState:
        if self._refresh_task is not None:
            return SessionState.REFRESH_IN_FLIGHT
        if self.is_authenticated():
            return SessionState.AUTHENTICATED
        return SessionState.LOGGED_OUT


def _fail_pending(pending: list[_PendingReplay], message: str) -> None:
    for item in pending:
        if not item.future.done():
            item.future.set_exception(SessionExpiredError(message))


def _mentions_existing_email(detail: str) -> bool:
    if "이미" in detail:
        return True
    lowered = detail.lower()
    return "email" in lowered and ("exist" in lowered or "already" in lowered or "taken" in lowered)

