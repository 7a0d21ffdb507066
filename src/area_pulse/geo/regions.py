from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from area_pulse.geo.distance import haversine_distance_meters, is_point_inside_radius
from area_pulse.schemas.common import Coordinate

# beyond this no district is considered to contain the point
MAX_DISTRICT_DISTANCE_METERS = 15_000


class RegionCodeResolver(Protocol):
    def resolve(self, coordinate: Coordinate) -> str | None: ...


@dataclass(frozen=True)
class District:
    code: str
    name: str
    office: Coordinate

    @property
    def bjd_code(self) -> str:
        return f"{self.code}00000"


def _district(code: str, name: str, lat: float, lng: float) -> District:
    return District(code=code, name=name, office=Coordinate(latitude=lat, longitude=lng))


SEOUL_DISTRICTS: tuple[District, ...] = (
    _district("11110", "종로구", 37.5730, 126.9794),
    _district("11140", "중구", 37.5641, 126.9979),
    _district("11170", "용산구", 37.5326, 126.9905),
    _district("11200", "성동구", 37.5633, 127.0371),
    _district("11215", "광진구", 37.5385, 127.0823),
    _district("11230", "동대문구", 37.5744, 127.0396),
    _district("11260", "중랑구", 37.6066, 127.0927),
    _district("11290", "성북구", 37.5894, 127.0167),
    _district("11305", "강북구", 37.6396, 127.0257),
    _district("11320", "도봉구", 37.6688, 127.0471),
    _district("11350", "노원구", 37.6542, 127.0568),
    _district("11380", "은평구", 37.6027, 126.9291),
    _district("11410", "서대문구", 37.5791, 126.9368),
    _district("11440", "마포구", 37.5663, 126.9019),
    _district("11470", "양천구", 37.5170, 126.8665),
    _district("11500", "강서구", 37.5509, 126.8495),
    _district("11530", "구로구", 37.4954, 126.8874),
    _district("11545", "금천구", 37.4569, 126.8955),
    _district("11560", "영등포구", 37.5264, 126.8962),
    _district("11590", "동작구", 37.5124, 126.9393),
    _district("11620", "관악구", 37.4784, 126.9516),
    _district("11650", "서초구", 37.4837, 127.0324),
    _district("11680", "강남구", 37.5172, 127.0473),
    _district("11710", "송파구", 37.5145, 127.1059),
    _district("11740", "강동구", 37.5301, 127.1238),
)


class NearestDistrictResolver:
    """Resolves a coordinate to the 법정동 code of the closest district office."""

    def __init__(
        self,
        districts: tuple[District, ...] = SEOUL_DISTRICTS,
        max_distance_meters: float = MAX_DISTRICT_DISTANCE_METERS,
    ) -> None:
        if not districts:
            raise ValueError("districts must not be empty")
        self._districts = districts
        self._max_distance_meters = max_distance_meters

    def nearest(self, coordinate: Coordinate) -> tuple[District, float]:
        return min(
            ((district, haversine_distance_meters(coordinate, district.office)) for district in self._districts),
            key=lambda item: item[1],
        )

    def resolve(self, coordinate: Coordinate) -> str | None:
        district, _ = self.nearest(coordinate)
        if not is_point_inside_radius(district.office, coordinate, self._max_distance_meters):
            return None
        return district.bjd_code


class StaticRegionResolver:
    """Always yields the configured code, for callers that already know their region."""

    def __init__(self, bjd_code: str | None) -> None:
        self._bjd_code = bjd_code

    def resolve(self, coordinate: Coordinate) -> str | None:
        return self._bjd_code
