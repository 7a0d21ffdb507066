from __future__ import annotations

from area_pulse.schemas.infrastructure import InfraCategory
from area_pulse.schemas.search import (
    BuildingDetailResponse,
    BuildingReviewsResponse,
    CreateReviewResponse,
    DeleteSavedBuildingResponse,
    EnvironmentDataResponse,
    InfrastructureResponse,
    PointSearchResponse,
    RegionStatsResponse,
    SaveBuildingResponse,
    SavedBuildingsResponse,
)
from area_pulse.session.http import RequestDescriptor
from area_pulse.session.manager import SessionManager


class AreaPulseApi:
    """Typed access to every AreaPulse backend endpoint.

    Calls are routed through the session manager, so user-scoped endpoints
    get the bearer credential and the 401 refresh-and-replay behavior.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._sessions = session_manager

    async def search_point(self, latitude: float, longitude: float, radius_meters: int) -> PointSearchResponse:
        descriptor = RequestDescriptor(
            name="search_point",
            method="POST",
            path="/search/point",
            json={"latitude": latitude, "longitude": longitude, "radius_meters": radius_meters},
        )
        return await self._sessions.request(descriptor, PointSearchResponse)

    async def building_detail(self, building_id: int) -> BuildingDetailResponse:
        descriptor = RequestDescriptor(
            name="building_detail",
            method="POST",
            path="/buildings/detail",
            json={"building_id": building_id},
        )
        return await self._sessions.request(descriptor, BuildingDetailResponse)

    async def building_reviews(self, building_id: int) -> BuildingReviewsResponse:
        descriptor = RequestDescriptor(
            name="building_reviews",
            method="POST",
            path="/buildings/reviews",
            json={"building_id": building_id},
        )
        return await self._sessions.request(descriptor, BuildingReviewsResponse)

    async def create_review(self, building_id: int, rating: int, content: str) -> CreateReviewResponse:
        if not 1 <= rating <= 5:
            raise ValueError("rating must be between 1 and 5")
        if not content.strip():
            raise ValueError("review content must not be blank")
        descriptor = RequestDescriptor(
            name="create_review",
            method="POST",
            path="/reviews/create",
            json={"building_id": building_id, "rating": rating, "content": content.strip()},
            requires_auth=True,
        )
        return await self._sessions.request(descriptor, CreateReviewResponse)

    async def saved_buildings(self) -> SavedBuildingsResponse:
        descriptor = RequestDescriptor(
            name="saved_buildings",
            method="GET",
            path="/user/saved-buildings",
            requires_auth=True,
        )
        return await self._sessions.request(descriptor, SavedBuildingsResponse)

    async def save_building(self, building_id: int, memo: str | None = None) -> SaveBuildingResponse:
        payload: dict[str, object] = {"building_id": building_id}
        if memo is not None:
            payload["memo"] = memo
        descriptor = RequestDescriptor(
            name="save_building",
            method="POST",
            path="/user/save-building",
            json=payload,
            requires_auth=True,
        )
        return await self._sessions.request(descriptor, SaveBuildingResponse)

    async def delete_saved_building(self, save_id: int) -> DeleteSavedBuildingResponse:
        descriptor = RequestDescriptor(
            name="delete_saved_building",
            method="DELETE",
            path="/user/delete-saved-building",
            json={"save_id": save_id},
            requires_auth=True,
        )
        return await self._sessions.request(descriptor, DeleteSavedBuildingResponse)

    async def infrastructure_by_category(
        self,
        category: InfraCategory,
        latitude: float,
        longitude: float,
        radius_meters: int,
    ) -> InfrastructureResponse:
        descriptor = RequestDescriptor(
            name="infrastructure_by_category",
            method="POST",
            path="/infrastructure/category",
            json={
                "category": InfraCategory(category).value,
                "latitude": latitude,
                "longitude": longitude,
                "radius_meters": radius_meters,
            },
        )
        return await self._sessions.request(descriptor, InfrastructureResponse)

    async def region_stats(self, bjd_code: str) -> RegionStatsResponse:
        descriptor = RequestDescriptor(
            name="region_stats",
            method="GET",
            path="/region/stats",
            params={"bjd_code": bjd_code},
        )
        return await self._sessions.request(descriptor, RegionStatsResponse)

    async def environment_data(self, latitude: float, longitude: float) -> EnvironmentDataResponse:
        descriptor = RequestDescriptor(
            name="environment_data",
            method="GET",
            path="/environment/data",
            params={"latitude": latitude, "longitude": longitude},
        )
        return await self._sessions.request(descriptor, EnvironmentDataResponse)
