"""
Reverse geocoding (OpenStreetMap Nominatim).

Resolves a coordinate to a locality name for display. This is enrichment only:
every failure is logged and turned into `None`, and nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from parkwatch.config.settings import Settings
from parkwatch.core.activity import NetworkActivity
from parkwatch.core.geo import Coordinate
from parkwatch.core.http import build_async_client, decode_json, get

logger = logging.getLogger(__name__)

# Nominatim address keys, most specific settlement first.
LOCALITY_KEYS = ("city", "town", "village", "municipality", "hamlet", "suburb")


def extract_locality(payload: Any) -> str | None:
    """Pick the locality out of a Nominatim `reverse` response."""
    if not isinstance(payload, dict) or payload.get("error"):
        return None
    address = payload.get("address")
    if not isinstance(address, dict):
        return None
    for key in LOCALITY_KEYS:
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class ReverseGeocoder:
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
        self._activity = activity or NetworkActivity()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def resolve_locality(self, coordinate: Coordinate) -> str | None:
        cfg = self._settings.geocoding
        url = f"{cfg.base_url.rstrip('/')}/reverse"
        params: dict[str, Any] = {
            "format": "jsonv2",
            "lat": f"{coordinate.lat:.6f}",
            "lon": f"{coordinate.lon:.6f}",
            "zoom": str(cfg.zoom),
            "addressdetails": "1",
        }
        if cfg.language:
            params["accept-language"] = cfg.language

        try:
            with self._activity.track():
                resp = await get(self._http, url, params=params)
            resp.raise_for_status()
            payload = decode_json(resp)
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Reverse geocoding failed for %s: %s", coordinate, exc)
            return None

        locality = extract_locality(payload)
        if locality is None:
            logger.info("Reverse geocoding returned no locality for %s", coordinate)
        return locality
