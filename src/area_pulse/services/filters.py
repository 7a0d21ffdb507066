"""Pure narrowing helpers over an already fetched point result."""

from __future__ import annotations

from collections.abc import Iterable

from area_pulse.schemas.building import Building, BuildingType
from area_pulse.schemas.infrastructure import InfraCategory, Infrastructure, SchoolType
from area_pulse.schemas.search import PointResult


def _matches_text(text: str, *candidates: str | None) -> bool:
    needle = text.casefold()
    return any(candidate and needle in candidate.casefold() for candidate in candidates)


def filter_infrastructure(
    items: Iterable[Infrastructure],
    categories: Iterable[InfraCategory] | None = None,
    text: str | None = None,
) -> list[Infrastructure]:
    """Keep items in ``categories`` (``None`` keeps every category).

    An empty category selection keeps nothing, the same as a map with every
    category toggle switched off.
    """
    selected = None if categories is None else {InfraCategory(category) for category in categories}
    query = (text or "").strip()
    result: list[Infrastructure] = []
    for item in items:
        if selected is not None and item.category not in selected:
            continue
        if query and not _matches_text(query, item.name, item.category.display_name, item.address):
            continue
        result.append(item)
    return result


def filter_buildings(
    buildings: Iterable[Building],
    building_types: Iterable[BuildingType] | None = None,
    text: str | None = None,
) -> list[Building]:
    selected = None if building_types is None else {BuildingType(value) for value in building_types}
    query = (text or "").strip()
    result: list[Building] = []
    for building in buildings:
        if selected is not None and building.building_type not in selected:
            continue
        if query and not _matches_text(
            query,
            building.building_name,
            building.address,
            building.building_type.display_name,
        ):
            continue
        result.append(building)
    return result


def narrow_point_result(
    result: PointResult,
    categories: Iterable[InfraCategory] | None = None,
    building_types: Iterable[BuildingType] | None = None,
) -> PointResult:
    return result.model_copy(
        update={
            "buildings": filter_buildings(result.buildings, building_types),
            "infrastructure": filter_infrastructure(result.infrastructure, categories),
        }
    )


def group_by_category(items: Iterable[Infrastructure]) -> dict[InfraCategory, list[Infrastructure]]:
    grouped: dict[InfraCategory, list[Infrastructure]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def filter_schools(items: Iterable[Infrastructure], school_type: SchoolType | None = None) -> list[Infrastructure]:
    schools = [item for item in items if item.category is InfraCategory.SCHOOL]
    if school_type is None:
        return schools
    wanted = SchoolType(school_type)
    result: list[Infrastructure] = []
    for school in schools:
        declared = school.school_type
        if declared is not None:
            if declared is wanted:
                result.append(school)
            continue
        if any(keyword in school.name for keyword in wanted.keywords):
            result.append(school)
    return result
