from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from area_pulse.schemas.common import CodeString, Coordinate, LenientInt, Timestamp, WireModel


class BuildingType(str, Enum):
    APARTMENT = "아파트"
    OFFICETEL = "오피스텔"
    VILLA = "빌라"
    ROW_HOUSE = "연립다세대"
    HOUSE = "단독주택"
    COMMERCIAL = "상가"

    @classmethod
    def _missing_(cls, value: object) -> BuildingType | None:
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key in cls.__members__:
                return cls.__members__[key]
        return None

    @property
    def display_name(self) -> str:
        return self.value


def _coerce_building_type(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return BuildingType(value)
        except ValueError:
            return value
    return value


class Building(WireModel):
    id: int = Field(alias="building_id")
    bjd_code: CodeString = None
    address: str | None = None
    building_name: str | None = None
    building_type: Annotated[BuildingType, BeforeValidator(_coerce_building_type)]
    build_year: LenientInt = None
    total_units: LenientInt = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def coordinate(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    @property
    def has_valid_coordinate(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class RealEstateTransaction(WireModel):
    id: int = Field(alias="tx_id")
    building_id: int
    transaction_date: Timestamp
    price: int
    area_sqm: float
    floor: int

    @property
    def formatted_price(self) -> str:
        """Price in 억/만원 units; ``price`` is stored in 만원."""
        eok, man = divmod(self.price, 10000)
        if eok > 0 and man > 0:
            return f"{eok}억 {man}만원"
        if eok > 0:
            return f"{eok}억원"
        return f"{man}만원"


class BuildingReview(WireModel):
    id: int = Field(alias="review_id")
    user_id: int
    building_id: int
    rating: int = Field(ge=1, le=5)
    content: str
    created_at: Timestamp


class SavedBuilding(WireModel):
    id: int = Field(alias="save_id")
    user_id: int
    building_id: int
    memo: str | None = None
    created_at: Timestamp
    building: Building


def most_recent_transaction(transactions: list[RealEstateTransaction]) -> RealEstateTransaction | None:
    if not transactions:
        return None
    return max(transactions, key=lambda tx: tx.transaction_date)


def average_rating(reviews: list[BuildingReview]) -> float:
    if not reviews:
        return 0.0
    return sum(review.rating for review in reviews) / len(reviews)
