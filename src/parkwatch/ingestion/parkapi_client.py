"""
ParkAPI ingestion client.

This module is responsible only for:
- issuing the three ParkAPI GETs (metadata, city snapshot, lot forecast),
- classifying every outcome into the `parkwatch.ingestion.errors` taxonomy,
- parsing successful bodies into the frozen models in `parkwatch.domain.models`.

It does not cache, deduplicate or retry; every call goes to the network and every
failure is raised to the caller exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from parkwatch.config.settings import Settings
from parkwatch.core.activity import NetworkActivity
from parkwatch.core.http import build_async_client, decode_json, get
from parkwatch.core.time import day_window, format_api_timestamp, week_window
from parkwatch.domain.models import ForecastSeries, Metadata, ParkingSnapshot
from parkwatch.ingestion.errors import (
    IncompatibleApiError,
    NoDataError,
    NotFoundError,
    RequestError,
    ServerError,
    UnknownError,
)
from parkwatch.storage.preferences import SelectedCityStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class SnapshotUpdate:
    """Result of the metadata -> snapshot pipeline."""

    metadata: Metadata
    snapshot: ParkingSnapshot


class ParkApiClient:
    """Async ParkAPI client with strict version checking."""

    def __init__(
        self,
        settings: Settings,
        *,
        http: httpx.AsyncClient | None = None,
        activity: NetworkActivity | None = None,
    ):
        self._settings = settings
        self._owns_http = http is None
        self._http = http or build_async_client(
            timeout_seconds=settings.app.http_timeout_seconds,
            user_agent=settings.app.user_agent,
        )
        self.activity = activity or NetworkActivity()
        self._incompatible: IncompatibleApiError | None = None

    async def __aenter__(self) -> "ParkApiClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    @property
    def base_url(self) -> str:
        return self._settings.api.base_url

    @property
    def incompatible(self) -> bool:
        """True once the server announced an API version this client cannot read."""
        return self._incompatible is not None

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(str(s), safe="") for s in segments)
        return f"{self.base_url}/{path}"

    def _ensure_compatible(self) -> None:
        if self._incompatible is None:
            return
        raise IncompatibleApiError(
            str(self._incompatible),
            found=self._incompatible.found,
            supported=self._incompatible.supported,
            url=self._incompatible.url,
        )

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        not_found_is_distinct: bool = True,
    ) -> Any:
        """GET `url` and return the decoded body, or raise a classified error."""
        self._ensure_compatible()
        logger.debug("GET %s params=%s", url, params)

        try:
            with self.activity.track():
                resp = await get(self._http, url, params=params)
        except httpx.TransportError as exc:
            logger.warning("ParkAPI transport error for %s: %s", url, exc)
            raise RequestError(f"Request to {url} failed: {exc}", url=url) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("ParkAPI request to %s failed unexpectedly: %s", url, exc)
            raise UnknownError(f"Request to {url} failed: {exc}", url=url) from exc

        status = resp.status_code
        if not_found_is_distinct and status == 404:
            logger.warning("ParkAPI returned 404 for %s", url)
            raise NotFoundError(f"{url} not found", url=url, status_code=status)
        if status != 200:
            logger.warning("ParkAPI returned status=%s for %s", status, url)
            raise ServerError(f"Unexpected status {status} from {url}", url=url, status_code=status)

        try:
            return decode_json(resp)
        except ValueError as exc:
            logger.warning("ParkAPI returned an unreadable body for %s", url)
            raise ServerError(f"Invalid JSON from {url}", url=url, status_code=status) from exc

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, *, url: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.warning("ParkAPI body from %s does not match %s: %s", url, model.__name__, exc)
            raise ServerError(f"Unexpected response shape from {url}", url=url, status_code=200) from exc

    async def fetch_metadata(self) -> Metadata:
        """GET the API version and the supported cities.

        Raises:
            RequestError, ServerError, UnknownError: See `_get_json`.
            IncompatibleApiError: If `api_version` differs from the supported version.
        """
        url = f"{self.base_url}/"
        payload = await self._get_json(url, not_found_is_distinct=False)
        metadata = self._parse(Metadata, payload, url=url)

        supported = self._settings.api.supported_version
        if metadata.api_version != supported:
            logger.error(
                "Found API version %s. This client can only understand %s",
                metadata.api_version,
                supported,
            )
            self._incompatible = IncompatibleApiError(
                f"Server speaks API version {metadata.api_version}, expected {supported}",
                found=metadata.api_version,
                supported=supported,
                url=url,
                status_code=200,
            )
            raise self._incompatible
        return metadata

    async def fetch_snapshot(self, city_id: str) -> ParkingSnapshot:
        """GET the current lot data for one city."""
        url = self._url(city_id)
        payload = await self._get_json(url)
        snapshot = self._parse(ParkingSnapshot, payload, url=url)
        logger.info("Fetched %s lots for %s", len(snapshot.lots), city_id)
        return snapshot

    async def fetch_forecast(
        self,
        lot_id: str,
        from_time: datetime,
        to_time: datetime,
        *,
        region: str | None = None,
    ) -> ForecastSeries:
        """GET the forecast for `lot_id` between `from_time` and `to_time`.

        Both bounds are sent verbatim in the `yyyy-MM-ddTHH:mm:ss` wire format.

        Raises:
            NoDataError: If the server answered with an empty series.
        """
        url = self._url(region or self._settings.api.forecast_region, lot_id, "timespan")
        params = {"from": format_api_timestamp(from_time), "to": format_api_timestamp(to_time)}
        payload = await self._get_json(url, params=params)

        if not isinstance(payload, dict):
            raise ServerError(f"Unexpected response shape from {url}", url=url, status_code=200)
        series = self._parse(ForecastSeries, {"lot_id": lot_id, "data": payload.get("data")}, url=url)
        if series.is_empty():
            logger.info("No forecast data for %s between %s and %s", lot_id, params["from"], params["to"])
            raise NoDataError(f"No forecast data for {lot_id}", url=url, status_code=200)
        return series

    async def fetch_forecast_week(
        self, lot_id: str, from_time: datetime, *, region: str | None = None
    ) -> ForecastSeries:
        start, end = week_window(from_time, days=self._settings.forecast.week_days)
        return await self.fetch_forecast(lot_id, start, end, region=region)

    async def fetch_forecast_day(
        self, lot_id: str, reference_time: datetime, *, region: str | None = None
    ) -> ForecastSeries:
        start, end = day_window(reference_time)
        return await self.fetch_forecast(lot_id, start, end, region=region)

    async def update_snapshot_for_selected_city(self, city_id: str) -> SnapshotUpdate:
        """Metadata first, then the snapshot; the first failure ends the pipeline.

        The snapshot request is never issued unless the metadata request succeeded
        (including the version check).
        """
        metadata = await self.fetch_metadata()
        snapshot = await self.fetch_snapshot(city_id)
        return SnapshotUpdate(metadata=metadata, snapshot=snapshot)

    async def update_snapshot_for_saved_city(self, store: SelectedCityStore) -> SnapshotUpdate:
        """Run the pipeline for the persisted city.

        Raises:
            LookupError: If no city has been selected yet (no request is issued).
        """
        city_id = store.city_id()
        if not city_id:
            raise LookupError("No city selected")
        return await self.update_snapshot_for_selected_city(city_id)
