from __future__ import annotations

import asyncio
import logging
import os

from area_pulse.clients.area_pulse_api import AreaPulseApi
from area_pulse.config import ClientSettings, load_settings
from area_pulse.geo.regions import NearestDistrictResolver, RegionCodeResolver, StaticRegionResolver
from area_pulse.observability import InMemoryUpstreamMetricsCollector, configure_otel
from area_pulse.schemas.common import Coordinate
from area_pulse.schemas.search import PointResult
from area_pulse.services.location_query_service import LocationQueryService
from area_pulse.session.http import UpstreamTransport
from area_pulse.session.manager import SessionManager
from area_pulse.session.storage import create_session_store

logger = logging.getLogger("area_pulse")


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"missing required environment variable: {name}")
    return value


def _parse_float(name: str) -> float:
    raw = _required_env(name)
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number") from exc


def _parse_optional_positive_int(name: str) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return None
    value = int(raw)
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0")
    return value


async def run_point_query(settings: ClientSettings, coordinate: Coordinate, radius_meters: int | None) -> PointResult:
    metrics = InMemoryUpstreamMetricsCollector()
    transport = UpstreamTransport(
        base_url=settings.BASE_URL,
        timeout_seconds=settings.TIMEOUT_SECONDS,
        metrics=metrics,
    )
    sessions = SessionManager(transport, store=create_session_store(settings.REDIS_URL))
    if await sessions.restore() is None:
        email = os.getenv("AREA_PULSE_EMAIL")
        password = os.getenv("AREA_PULSE_PASSWORD")
        if email and password:
            await sessions.login(email, password)

    resolver: RegionCodeResolver = (
        StaticRegionResolver(settings.BJD_CODE) if settings.BJD_CODE else NearestDistrictResolver()
    )
    service = LocationQueryService(
        AreaPulseApi(sessions),
        region_resolver=resolver,
        default_radius_meters=settings.DEFAULT_RADIUS_METERS,
    )
    result = await service.query_point(coordinate, radius_meters)
    calls = metrics.snapshot()
    logger.info(
        "cli_point_query_finished",
        extra={
            "upstream_calls": len(calls),
            "upstream_failures": sum(1 for call in calls if call["outcome"] != "success"),
        },
    )
    return result


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    configure_otel(settings.SERVICE_NAME)

    coordinate = Coordinate(
        latitude=_parse_float("AREA_PULSE_LATITUDE"),
        longitude=_parse_float("AREA_PULSE_LONGITUDE"),
    )
    radius_meters = _parse_optional_positive_int("AREA_PULSE_RADIUS_METERS")
    result = asyncio.run(run_point_query(settings, coordinate, radius_meters))
    print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
