from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import NAMESPACE_URL, uuid5

from pydantic import Field, JsonValue, model_validator

from area_pulse.schemas.common import Coordinate, WireModel

_KNOWN_KEYS = frozenset(
    {
        "infra_id",
        "id",
        "infra_category",
        "category",
        "name",
        "address",
        "latitude",
        "longitude",
        "extra_data",
        "extra",
        "id_derived",
    }
)


class InfraCategory(str, Enum):
    SCHOOL = "school"
    PARK = "park"
    SUBWAY_STATION = "subway_station"
    BUS_STOP = "bus_stop"
    HOSPITAL = "hospital"
    MART = "mart"
    BANK = "bank"
    PUBLIC_OFFICE = "public_office"
    CCTV = "cctv"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    InfraCategory.SCHOOL: "학교",
    InfraCategory.PARK: "공원",
    InfraCategory.SUBWAY_STATION: "지하철역",
    InfraCategory.BUS_STOP: "버스정류장",
    InfraCategory.HOSPITAL: "병원",
    InfraCategory.MART: "마트",
    InfraCategory.BANK: "은행",
    InfraCategory.PUBLIC_OFFICE: "관공서",
    InfraCategory.CCTV: "CCTV",
}


class SchoolType(str, Enum):
    KINDERGARTEN = "유치원"
    ELEMENTARY = "초등학교"
    MIDDLE = "중학교"
    HIGH = "고등학교"
    SPECIAL = "특수학교"

    @property
    def keywords(self) -> tuple[str, ...]:
        return _SCHOOL_KEYWORDS[self]


_SCHOOL_KEYWORDS = {
    SchoolType.KINDERGARTEN: ("유치원",),
    SchoolType.ELEMENTARY: ("초등학교", "초등"),
    SchoolType.MIDDLE: ("중학교", "중학"),
    SchoolType.HIGH: ("고등학교", "고등"),
    SchoolType.SPECIAL: ("특수학교", "특수"),
}


def derive_infra_id(name: str, latitude: float, longitude: float) -> int:
    """Stable positive 63-bit id for infrastructure the server did not number.

    Coordinates are normalised to 7 decimals (about 1 cm) so that ``37.5`` and
    ``37.50`` map to the same entity.
    """
    key = f"infrastructure:{name.strip()}:{float(latitude):.7f}:{float(longitude):.7f}"
    return uuid5(NAMESPACE_URL, key).int >> 65


class Infrastructure(WireModel):
    id: int = Field(alias="infra_id")
    category: InfraCategory = Field(alias="infra_category")
    name: str
    address: str | None = None
    latitude: float
    longitude: float
    extra: dict[str, JsonValue] = Field(default_factory=dict, alias="extra_data")
    id_derived: bool = False

    @model_validator(mode="before")
    @classmethod
    def fill_identity_and_extra(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        if payload.get("infra_id") is None and payload.get("id") is not None:
            payload["infra_id"] = payload.pop("id")
        if payload.get("infra_id") is None:
            name = payload.get("name")
            try:
                latitude = float(payload["latitude"])
                longitude = float(payload["longitude"])
            except (KeyError, TypeError, ValueError):
                # left to field validation, which reports the missing coordinate
                return payload
            if isinstance(name, str):
                payload["infra_id"] = derive_infra_id(name, latitude, longitude)
                payload["id_derived"] = True
        if "category" in payload and "infra_category" not in payload:
            payload["infra_category"] = payload.pop("category")

        extra: dict[str, Any] = {}
        for key in ("extra", "extra_data"):
            value = payload.pop(key, None)
            if isinstance(value, dict):
                extra.update(value)
        for key in [key for key in payload if key not in _KNOWN_KEYS]:
            extra.setdefault(key, payload.pop(key))
        payload["extra_data"] = extra
        return payload

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    def attribute(self, key: str, default: JsonValue = None) -> JsonValue:
        return self.extra.get(key, default)

    @property
    def school_type(self) -> SchoolType | None:
        raw = self.extra.get("school_type")
        if not isinstance(raw, str):
            return None
        try:
            return SchoolType(raw)
        except ValueError:
            return None
