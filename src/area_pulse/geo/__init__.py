"""Geo helpers for point queries."""

from area_pulse.geo.distance import haversine_distance_meters, is_point_inside_radius
from area_pulse.geo.regions import (
    SEOUL_DISTRICTS,
    District,
    NearestDistrictResolver,
    RegionCodeResolver,
    StaticRegionResolver,
)

__all__ = [
    "District",
    "NearestDistrictResolver",
    "RegionCodeResolver",
    "SEOUL_DISTRICTS",
    "StaticRegionResolver",
    "haversine_distance_meters",
    "is_point_inside_radius",
]
