from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from area_pulse.schemas.building import Building, BuildingReview, RealEstateTransaction, SavedBuilding
from area_pulse.schemas.common import Coordinate, WireModel
from area_pulse.schemas.environment import EnvironmentData
from area_pulse.schemas.infrastructure import Infrastructure
from area_pulse.schemas.region import Region, RegionStats


class PointSearchResponse(WireModel):
    buildings: list[Building] = Field(default_factory=list)
    infrastructure: list[Infrastructure] = Field(default_factory=list)
    search_radius: int | None = None
    result_count: int | None = None
    region_stats: list[RegionStats] = Field(default_factory=list)
    environment_data: list[EnvironmentData] = Field(default_factory=list)

    @field_validator("buildings", "infrastructure", "region_stats", "environment_data", mode="before")
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class BuildingDetailResponse(WireModel):
    building: Building
    transactions: list[RealEstateTransaction] = Field(default_factory=list)
    reviews: list[BuildingReview] = Field(default_factory=list)
    nearby_infrastructure: list[Infrastructure] = Field(default_factory=list)
    region_stats: list[RegionStats] = Field(default_factory=list)
    environment_data: list[EnvironmentData] = Field(default_factory=list)

    @field_validator(
        "transactions",
        "reviews",
        "nearby_infrastructure",
        "region_stats",
        "environment_data",
        mode="before",
    )
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class BuildingReviewsResponse(WireModel):
    reviews: list[BuildingReview] = Field(default_factory=list)
    total_count: int = 0


class CreateReviewResponse(WireModel):
    review_id: int
    success: bool
    message: str = ""


class SavedBuildingsResponse(WireModel):
    saved_buildings: list[SavedBuilding] = Field(default_factory=list)
    total_count: int = 0


class SaveBuildingResponse(WireModel):
    save_id: int
    success: bool
    message: str = ""


class DeleteSavedBuildingResponse(WireModel):
    success: bool
    message: str = ""


class InfrastructureResponse(WireModel):
    infrastructure: list[Infrastructure] = Field(default_factory=list)

    @field_validator("infrastructure", mode="before")
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class RegionStatsResponse(WireModel):
    region_stats: list[RegionStats] = Field(default_factory=list)
    region: Region | None = None

    @field_validator("region_stats", mode="before")
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class EnvironmentDataResponse(WireModel):
    environment_data: list[EnvironmentData] = Field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("environment_data", mode="before")
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class PointResult(BaseModel):
    coordinate: Coordinate
    radius_meters: int
    buildings: list[Building] = Field(default_factory=list)
    infrastructure: list[Infrastructure] = Field(default_factory=list)
    region_stats: list[RegionStats] = Field(default_factory=list)
    environment: list[EnvironmentData] = Field(default_factory=list)
