from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag

from area_pulse.schemas.common import LenientInt, Timestamp, WireModel

_NO_DATA = "정보없음"


def _grade(value: int | None, bounds: tuple[int, int, int]) -> str:
    if value is None:
        return _NO_DATA
    good, normal, bad = bounds
    if value <= good:
        return "좋음"
    if value <= normal:
        return "보통"
    if value <= bad:
        return "나쁨"
    return "매우나쁨"


class StationReading(WireModel):
    kind: Literal["station"] = "station"
    id: int | None = Field(default=None, alias="data_id")
    station_id: int
    measurement_time: Timestamp
    pm10_value: LenientInt = None
    pm25_value: LenientInt = Field(default=None, alias="pm2_5_value")
    noise_db: float | None = None

    @property
    def pm10_grade(self) -> str:
        return _grade(self.pm10_value, (30, 80, 150))

    @property
    def pm25_grade(self) -> str:
        return _grade(self.pm25_value, (15, 35, 75))


class AddressNoiseSummary(WireModel):
    kind: Literal["summary"] = "summary"
    address: str
    noise_max: float | None = None
    noise_avg: float | None = None
    noise_min: float | None = None
    latitude: float | None = None
    longitude: float | None = None


def _environment_kind(value: Any) -> str:
    if isinstance(value, dict):
        if "kind" in value:
            return str(value["kind"])
        return "station" if "station_id" in value else "summary"
    return getattr(value, "kind", "summary")


EnvironmentData = Annotated[
    Union[
        Annotated[StationReading, Tag("station")],
        Annotated[AddressNoiseSummary, Tag("summary")],
    ],
    Discriminator(_environment_kind),
]
