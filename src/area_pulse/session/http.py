from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from time import perf_counter
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from area_pulse.errors import DecodingError, NetworkError, ServerError
from area_pulse.observability import UpstreamCallMetric, UpstreamMetricCollector, get_trace_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to issue, and later replay, one upstream call."""

    name: str
    method: str
    path: str
    params: Mapping[str, Any] | None = None
    json: Mapping[str, Any] | None = None
    form: Mapping[str, Any] | None = None
    requires_auth: bool = False


class UpstreamTransport:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        metrics: UpstreamMetricCollector | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory
        self._metrics = metrics

    async def send(self, descriptor: RequestDescriptor, access_token: str | None = None) -> httpx.Response:
        headers = {"accept": "application/json"}
        if access_token:
            headers["authorization"] = f"Bearer {access_token}"
        trace_id = get_trace_id()
        if trace_id:
            headers["x-trace-id"] = trace_id

        started = perf_counter()
        status_code = 0
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.request(
                    method=descriptor.method,
                    url=f"{self._base_url}{descriptor.path}",
                    params=dict(descriptor.params) if descriptor.params else None,
                    json=dict(descriptor.json) if descriptor.json is not None else None,
                    data=dict(descriptor.form) if descriptor.form is not None else None,
                    headers=headers,
                )
                # body is read inside the client context so it outlives the connection
                await response.aread()
            status_code = response.status_code
        except httpx.TimeoutException as exc:
            logger.warning("upstream_timeout", extra={"endpoint": descriptor.name, "trace_id": trace_id})
            raise NetworkError(f"upstream timeout: {descriptor.name}", cause=exc) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "upstream_request_failed",
                extra={"endpoint": descriptor.name, "trace_id": trace_id, "error": type(exc).__name__},
            )
            raise NetworkError(f"upstream request failed: {descriptor.name}", cause=exc) from exc
        finally:
            self._observe(descriptor, status_code, started, trace_id)
        return response

    def _observe(self, descriptor: RequestDescriptor, status_code: int, started: float, trace_id: str) -> None:
        if self._metrics is None:
            return
        self._metrics.observe(
            UpstreamCallMetric(
                endpoint=descriptor.name,
                method=descriptor.method,
                status_code=status_code,
                duration_ms=(perf_counter() - started) * 1000.0,
                trace_id=trace_id,
            )
        )


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def raise_for_status(response: httpx.Response) -> None:
    if not is_success(response):
        raise ServerError(status_code=response.status_code, body=response.text)


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode_response(response: httpx.Response, model: Any = None) -> Any:
    try:
        payload = response.json()
    except ValueError as exc:
        raise DecodingError("upstream response is not valid json") from exc
    if model is None:
        return payload
    try:
        return _adapter(model).validate_python(payload)
    except PydanticValidationError as exc:
        raise DecodingError(f"upstream payload does not match {getattr(model, '__name__', model)}") from exc


def error_detail(response: httpx.Response) -> str:
    """Best-effort human readable error message from an upstream error body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        detail = payload.get("detail") or payload.get("message")
        if detail is None and isinstance(payload.get("error"), dict):
            detail = payload["error"].get("message")
        if detail is not None:
            return str(detail)
    return response.text
