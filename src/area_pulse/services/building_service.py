from __future__ import annotations

import logging
from dataclasses import dataclass, field

from area_pulse.clients.area_pulse_api import AreaPulseApi
from area_pulse.schemas.building import (
    Building,
    BuildingReview,
    RealEstateTransaction,
    average_rating,
    most_recent_transaction,
)
from area_pulse.schemas.infrastructure import InfraCategory, Infrastructure
from area_pulse.schemas.search import BuildingDetailResponse
from area_pulse.services.filters import group_by_category

logger = logging.getLogger(__name__)


@dataclass
class BuildingDetail:
    building: Building
    transactions: list[RealEstateTransaction] = field(default_factory=list)
    reviews: list[BuildingReview] = field(default_factory=list)
    nearby_infrastructure: list[Infrastructure] = field(default_factory=list)
    save_id: int | None = None

    @property
    def is_saved(self) -> bool:
        return self.save_id is not None

    @property
    def average_rating(self) -> float:
        return average_rating(self.reviews)

    @property
    def recent_transaction(self) -> RealEstateTransaction | None:
        return most_recent_transaction(self.transactions)

    @property
    def infrastructure_by_category(self) -> dict[InfraCategory, list[Infrastructure]]:
        return group_by_category(self.nearby_infrastructure)


class BuildingDetailService:
    def __init__(self, api: AreaPulseApi) -> None:
        self._api = api

    async def load(self, building_id: int) -> BuildingDetail:
        response: BuildingDetailResponse = await self._api.building_detail(building_id)
        detail = BuildingDetail(
            building=response.building,
            transactions=response.transactions,
            reviews=response.reviews,
            nearby_infrastructure=response.nearby_infrastructure,
        )
        logger.info(
            "building_detail_loaded",
            extra={"building_id": building_id, "reviews": len(detail.reviews)},
        )
        return detail

    async def find_save_id(self, building_id: int) -> int | None:
        saved = await self._api.saved_buildings()
        for item in saved.saved_buildings:
            if item.building_id == building_id:
                return item.id
        return None

    async def toggle_saved(self, detail: BuildingDetail, memo: str | None = None) -> BuildingDetail:
        if detail.save_id is not None:
            await self._api.delete_saved_building(detail.save_id)
            detail.save_id = None
            logger.info("building_unsaved", extra={"building_id": detail.building.id})
            return detail
        response = await self._api.save_building(detail.building.id, memo)
        detail.save_id = response.save_id
        logger.info("building_saved", extra={"building_id": detail.building.id, "save_id": response.save_id})
        return detail
