from area_pulse.services.building_service import BuildingDetail, BuildingDetailService
from area_pulse.services.filters import (
    filter_buildings,
    filter_infrastructure,
    filter_schools,
    group_by_category,
    narrow_point_result,
)
from area_pulse.services.location_query_service import LocationQueryService, merge_infrastructure
from area_pulse.services.subway_lines import SubwayLine, extract_station_name, parse_lines

__all__ = [
    "BuildingDetail",
    "BuildingDetailService",
    "LocationQueryService",
    "SubwayLine",
    "extract_station_name",
    "filter_buildings",
    "filter_infrastructure",
    "filter_schools",
    "group_by_category",
    "merge_infrastructure",
    "narrow_point_result",
    "parse_lines",
]
