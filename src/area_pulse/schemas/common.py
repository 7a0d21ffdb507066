from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)
_FRACTION_PATTERN = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"unsupported timestamp value: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"epoch timestamp out of range: {value!r}") from exc
    if not isinstance(value, str):
        raise ValueError(f"unsupported timestamp value: {value!r}")

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    # strptime only understands microseconds
    normalized = _FRACTION_PATTERN.sub(r".\1", normalized)
    for fmt in _TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(normalized, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"timestamp does not match any supported format: {value!r}")


def parse_lenient_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            return int(number) if math.isfinite(number) else None
    return None


def parse_code(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
LenientInt = Annotated[int | None, BeforeValidator(parse_lenient_int)]
CodeString = Annotated[str | None, BeforeValidator(parse_code)]


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
