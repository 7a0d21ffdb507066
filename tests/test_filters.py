from __future__ import annotations

from area_pulse.schemas.building import Building, BuildingType
from area_pulse.schemas.common import Coordinate
from area_pulse.schemas.infrastructure import InfraCategory, Infrastructure, SchoolType
from area_pulse.schemas.search import PointResult
from area_pulse.services.filters import (
    filter_buildings,
    filter_infrastructure,
    filter_schools,
    group_by_category,
    narrow_point_result,
)


def infra(name: str, category: str, **extra) -> Infrastructure:
    return Infrastructure.model_validate(
        {"infra_category": category, "name": name, "latitude": 37.57, "longitude": 126.98, "address": "종로구", **extra}
    )


def building(building_id: int, building_type: str, name: str | None = None) -> Building:
    return Building.model_validate(
        {"building_id": building_id, "building_type": building_type, "building_name": name, "address": "서울 종로구"}
    )


INFRA = [
    infra("서울광장", "park"),
    infra("시청역(1호선,2호선)", "subway_station"),
    infra("덕수초등학교", "school", extra_data={"school_type": "초등학교"}),
    infra("서울대신중학교", "school"),
    infra("예일유치원", "school", extra_data={"school_type": "유치원"}),
    infra("배재고", "school", extra_data={"school_type": "고등학교"}),
]
BUILDINGS = [building(1, "아파트", "경희궁자이"), building(2, "오피스텔", "광화문 오피스텔"), building(3, "빌라")]


def test_filter_infrastructure_by_category() -> None:
    parks = filter_infrastructure(INFRA, [InfraCategory.PARK])

    assert [item.name for item in parks] == ["서울광장"]
    assert filter_infrastructure(INFRA) == INFRA
    assert filter_infrastructure(INFRA, []) == []


def test_filter_infrastructure_by_text_matches_category_label() -> None:
    result = filter_infrastructure(INFRA, text="지하철")

    assert [item.category for item in result] == [InfraCategory.SUBWAY_STATION]


def test_filter_buildings_by_type_and_text() -> None:
    assert [item.id for item in filter_buildings(BUILDINGS, [BuildingType.APARTMENT, BuildingType.VILLA])] == [1, 3]
    assert [item.id for item in filter_buildings(BUILDINGS, text="오피스텔")] == [2]
    assert filter_buildings(BUILDINGS, text="  ") == BUILDINGS


def test_narrow_point_result_does_not_touch_original() -> None:
    result = PointResult(
        coordinate=Coordinate(latitude=37.57, longitude=126.98),
        radius_meters=500,
        buildings=BUILDINGS,
        infrastructure=INFRA,
    )

    narrowed = narrow_point_result(result, categories=[InfraCategory.SCHOOL], building_types=[BuildingType.OFFICETEL])

    assert [item.id for item in narrowed.buildings] == [2]
    assert {item.category for item in narrowed.infrastructure} == {InfraCategory.SCHOOL}
    assert len(result.infrastructure) == len(INFRA)
    assert narrowed.radius_meters == 500


def test_group_by_category() -> None:
    grouped = group_by_category(INFRA)

    assert len(grouped[InfraCategory.SCHOOL]) == 4
    assert InfraCategory.BANK not in grouped


def test_filter_schools_prefers_declared_type_then_name() -> None:
    assert len(filter_schools(INFRA)) == 4
    assert [item.name for item in filter_schools(INFRA, SchoolType.ELEMENTARY)] == ["덕수초등학교"]
    assert [item.name for item in filter_schools(INFRA, SchoolType.MIDDLE)] == ["서울대신중학교"]
    assert [item.name for item in filter_schools(INFRA, SchoolType.HIGH)] == ["배재고"]
    assert [item.name for item in filter_schools(INFRA, SchoolType.KINDERGARTEN)] == ["예일유치원"]
