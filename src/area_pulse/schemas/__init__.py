"""Wire and domain models for the AreaPulse API."""

from area_pulse.schemas.auth import Session, TokenPair, User, Workplace
from area_pulse.schemas.building import (
    Building,
    BuildingReview,
    BuildingType,
    RealEstateTransaction,
    SavedBuilding,
    average_rating,
    most_recent_transaction,
)
from area_pulse.schemas.common import Coordinate, parse_lenient_int, parse_timestamp
from area_pulse.schemas.environment import AddressNoiseSummary, EnvironmentData, StationReading
from area_pulse.schemas.infrastructure import InfraCategory, Infrastructure, SchoolType, derive_infra_id
from area_pulse.schemas.region import Region, RegionSnapshot, RegionStatRecord, RegionStats, StatsType
from area_pulse.schemas.search import (
    BuildingDetailResponse,
    BuildingReviewsResponse,
    CreateReviewResponse,
    DeleteSavedBuildingResponse,
    EnvironmentDataResponse,
    InfrastructureResponse,
    PointResult,
    PointSearchResponse,
    RegionStatsResponse,
    SaveBuildingResponse,
    SavedBuildingsResponse,
)

__all__ = [
    "AddressNoiseSummary",
    "Building",
    "BuildingDetailResponse",
    "BuildingReview",
    "BuildingReviewsResponse",
    "BuildingType",
    "Coordinate",
    "CreateReviewResponse",
    "DeleteSavedBuildingResponse",
    "EnvironmentData",
    "EnvironmentDataResponse",
    "InfraCategory",
    "Infrastructure",
    "InfrastructureResponse",
    "PointResult",
    "PointSearchResponse",
    "RealEstateTransaction",
    "Region",
    "RegionSnapshot",
    "RegionStatRecord",
    "RegionStats",
    "RegionStatsResponse",
    "SaveBuildingResponse",
    "SavedBuilding",
    "SavedBuildingsResponse",
    "SchoolType",
    "Session",
    "StationReading",
    "StatsType",
    "TokenPair",
    "User",
    "Workplace",
    "average_rating",
    "derive_infra_id",
    "most_recent_transaction",
    "parse_lenient_int",
    "parse_timestamp",
]
