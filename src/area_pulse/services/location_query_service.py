from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from time import perf_counter
from typing import Any
from uuid import uuid4

from opentelemetry import trace

from area_pulse.clients.area_pulse_api import AreaPulseApi
from area_pulse.errors import AreaPulseError
from area_pulse.geo.regions import NearestDistrictResolver, RegionCodeResolver
from area_pulse.observability import set_trace_id
from area_pulse.schemas.common import Coordinate
from area_pulse.schemas.infrastructure import InfraCategory, Infrastructure
from area_pulse.schemas.search import PointResult

logger = logging.getLogger(__name__)


async def _absent() -> None:
    return None


def merge_infrastructure(primary: Iterable[Infrastructure], *extras: Iterable[Infrastructure]) -> list[Infrastructure]:
    """Concatenate infrastructure lists keeping the first item seen for each id."""
    seen: set[int] = set()
    merged: list[Infrastructure] = []
    for group in (primary, *extras):
        for item in group:
            if item.id in seen:
                continue
            seen.add(item.id)
            merged.append(item)
    return merged


class LocationQueryService:
    """Builds a :class:`PointResult` for a coordinate from independent upstream domains.

    The point search is required. Region statistics, environment data and
    per-category infrastructure are enrichments: their failure or absence
    leaves the matching contribution empty.
    """

    def __init__(
        self,
        api: AreaPulseApi,
        region_resolver: RegionCodeResolver | None = None,
        default_radius_meters: int = 1000,
    ) -> None:
        self._api = api
        self._region_resolver = region_resolver or NearestDistrictResolver()
        self._default_radius_meters = default_radius_meters
        self._tracer = trace.get_tracer("area-pulse-location")
        self._generation = 0
        self._inflight: asyncio.Task | None = None
        self._latest: PointResult | None = None

    @property
    def latest_result(self) -> PointResult | None:
        return self._latest

    async def query_point(
        self,
        coordinate: Coordinate,
        radius_meters: int | None = None,
        categories: Iterable[InfraCategory] = (),
    ) -> PointResult:
        radius = self._default_radius_meters if radius_meters is None else radius_meters
        if radius <= 0:
            raise ValueError("radius_meters must be > 0")
        wanted = list(dict.fromkeys(InfraCategory(category) for category in categories))

        trace_id = uuid4().hex
        set_trace_id(trace_id)
        bjd_code = self._region_resolver.resolve(coordinate)
        started = perf_counter()

        with self._tracer.start_as_current_span("point_query") as span:
            span.set_attribute("area_pulse.radius_meters", radius)
            span.set_attribute("area_pulse.categories", len(wanted))
            results = await asyncio.gather(
                self._api.search_point(coordinate.latitude, coordinate.longitude, radius),
                self._api.region_stats(bjd_code) if bjd_code else _absent(),
                self._api.environment_data(coordinate.latitude, coordinate.longitude),
                *(
                    self._api.infrastructure_by_category(category, coordinate.latitude, coordinate.longitude, radius)
                    for category in wanted
                ),
                return_exceptions=True,
            )

        primary, region_result, environment_result, *category_results = results
        if isinstance(primary, BaseException):
            logger.warning(
                "point_query_failed",
                extra={"trace_id": trace_id, "error": type(primary).__name__},
            )
            raise primary

        region = self._supplement(region_result, "region_stats", trace_id)
        environment = self._supplement(environment_result, "environment_data", trace_id)
        category_responses = [
            self._supplement(result, f"infrastructure_{category.value}", trace_id)
            for category, result in zip(wanted, category_results)
        ]

        result = PointResult(
            coordinate=coordinate,
            radius_meters=radius,
            buildings=primary.buildings,
            infrastructure=merge_infrastructure(
                primary.infrastructure,
                *(response.infrastructure for response in category_responses if response is not None),
            ),
            region_stats=[*primary.region_stats, *(region.region_stats if region else [])],
            environment=[*primary.environment_data, *(environment.environment_data if environment else [])],
        )
        logger.info(
            "point_query_completed",
            extra={
                "trace_id": trace_id,
                "bjd_code": bjd_code,
                "buildings": len(result.buildings),
                "infrastructure": len(result.infrastructure),
                "region_stats": len(result.region_stats),
                "environment": len(result.environment),
                "duration_ms": round((perf_counter() - started) * 1000.0, 2),
            },
        )
        return result

    def _supplement(self, outcome: Any, source: str, trace_id: str) -> Any:
        if isinstance(outcome, AreaPulseError):
            logger.warning(
                "supplementary_source_failed",
                extra={"trace_id": trace_id, "source": source, "error": type(outcome).__name__},
            )
            return None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def select_point(
        self,
        coordinate: Coordinate,
        radius_meters: int | None = None,
        categories: Iterable[InfraCategory] = (),
    ) -> PointResult | None:
        """Query ``coordinate``, abandoning any selection still in flight.

        Returns ``None`` when a newer selection supersedes this one; only the
        newest selection updates :attr:`latest_result`.
        """
        self._generation += 1
        generation = self._generation
        previous = self._inflight
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.create_task(self.query_point(coordinate, radius_meters, categories))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation and task.cancelled():
                logger.info("point_query_superseded", extra={"generation": generation})
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if generation != self._generation:
            return None
        self._latest = result
        return result
