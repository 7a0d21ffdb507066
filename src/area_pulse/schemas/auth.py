from __future__ import annotations

from pydantic import BaseModel, Field

from area_pulse.schemas.common import Timestamp, WireModel


class TokenPair(WireModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class User(WireModel):
    user_id: int
    email: str
    nickname: str
    created_at: Timestamp | None = None


class Session(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: int | None = None
    email: str = ""
    nickname: str = ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


class Workplace(BaseModel):
    address: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

