from area_pulse.session.http import RequestDescriptor, UpstreamTransport, decode_response, raise_for_status
from area_pulse.session.manager import SessionManager, SessionState
from area_pulse.session.storage import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    create_session_store,
    decode_session,
    encode_session,
)

__all__ = [
    "InMemorySessionStore",
    "RedisSessionStore",
    "RequestDescriptor",
    "SessionManager",
    "SessionState",
    "SessionStore",
    "UpstreamTransport",
    "create_session_store",
    "decode_response",
    "decode_session",
    "encode_session",
    "raise_for_status",
]
