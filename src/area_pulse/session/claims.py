from __future__ import annotations

import base64
import json
from typing import Any


def _urlsafe_b64decode(raw: str) -> bytes:
    padding = "=" * ((4 - len(raw) % 4) % 4)
    return base64.urlsafe_b64decode((raw + padding).encode("ascii"))


def read_token_claims(token: str) -> dict[str, Any]:
    """Read the payload segment of a JWT without verifying its signature.

    The signature belongs to the backend; the client only needs the identity
    claims it carries. Anything that is not a three-part token with a JSON
    object payload yields an empty dict.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    try:
        payload = json.loads(_urlsafe_b64decode(parts[1]))
    except (ValueError, UnicodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def user_id_from_claims(claims: dict[str, Any]) -> int | None:
    subject = claims.get("user_id", claims.get("sub"))
    if isinstance(subject, bool):
        return None
    if isinstance(subject, int):
        return subject
    if isinstance(subject, str) and subject.strip().isdigit():
        return int(subject.strip())
    return None
