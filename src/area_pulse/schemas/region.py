from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag

from area_pulse.schemas.common import CodeString, LenientInt, WireModel


class StatsType(str, Enum):
    CRIME_TOTAL = "crime_total"
    CRIME_THEFT = "crime_theft"
    NOISE_DAY = "noise_day"
    NOISE_NIGHT = "noise_night"

    @property
    def display_name(self) -> str:
        return _STATS_DISPLAY_NAMES[self]

    @property
    def unit(self) -> str:
        if self in (StatsType.CRIME_TOTAL, StatsType.CRIME_THEFT):
            return "건"
        return "dB"


_STATS_DISPLAY_NAMES = {
    StatsType.CRIME_TOTAL: "총 범죄율",
    StatsType.CRIME_THEFT: "절도 범죄",
    StatsType.NOISE_DAY: "주간 소음",
    StatsType.NOISE_NIGHT: "야간 소음",
}


class Region(WireModel):
    bjd_code: str
    region_name_full: str
    region_polygon: str | None = None


class RegionStatRecord(WireModel):
    """Yearly statistic for a 법정동 code, served by ``/region/stats``."""

    kind: Literal["series"] = "series"
    id: int | None = Field(default=None, alias="stats_id")
    bjd_code: str
    stats_year: int
    stats_type: StatsType
    stats_value: float


class RegionSnapshot(WireModel):
    """Point-derived safety snapshot embedded in ``/search/point`` results."""

    kind: Literal["snapshot"] = "snapshot"
    region_name: str
    crime_count: LenientInt = None
    cctv_count: LenientInt = None
    danger_rating: CodeString = None
    cctv_security_rating: CodeString = None
    passenger_count: LenientInt = None
    complexity_rating: CodeString = None


def _region_stats_kind(value: Any) -> str:
    if isinstance(value, dict):
        if "kind" in value:
            return str(value["kind"])
        return "series" if "stats_type" in value else "snapshot"
    return getattr(value, "kind", "snapshot")


RegionStats = Annotated[
    Union[
        Annotated[RegionStatRecord, Tag("series")],
        Annotated[RegionSnapshot, Tag("snapshot")],
    ],
    Discriminator(_region_stats_kind),
]
