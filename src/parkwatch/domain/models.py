"""
Domain models (Pydantic).

These types are the stable "contract" between the ParkAPI wire format and the rest
of the client:
- metadata (`Metadata`, `CityInfo`) and the selectable catalog (`City`)
- per-city parking snapshots (`ParkingSnapshot`, `ParkingLot`)
- per-lot forecasts (`ForecastSeries`)

All models are frozen: a snapshot is handed to the caller as-is and never patched.
Validation errors here are what the client reports as a `Server` error.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parkwatch.core.geo import Coordinate
from parkwatch.core.time import parse_api_timestamp, parse_utc_timestamp


class LotState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    NODATA = "nodata"
    UNKNOWN = "unknown"


class LatLng(BaseModel):
    """Wire-format coordinate (`{"lat": .., "lng": ..}`)."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lng)


class City(BaseModel):
    """A supported city that can be ranked by distance."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinate: Coordinate


class CityInfo(BaseModel):
    """One entry of the metadata `cities` mapping.

    Older servers send only a display name; newer ones send an object with
    coordinates and source links.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    coords: LatLng | None = None
    url: str | None = None
    source: str | None = None
    active_support: bool | None = None


class Metadata(BaseModel):
    """API version + supported cities, fetched before every snapshot."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    cities: dict[str, CityInfo]

    @field_validator("api_version", mode="before")
    @classmethod
    def _version_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("cities", mode="before")
    @classmethod
    def _expand_name_only_entries(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            city_id: {"name": entry} if isinstance(entry, str) else entry
            for city_id, entry in value.items()
        }

    def display_name(self, city_id: str) -> str | None:
        info = self.cities.get(city_id)
        return info.name if info else None

    def supported_cities(self) -> list[str]:
        """Display names, sorted, for city pickers."""
        return sorted(info.name for info in self.cities.values())

    def locatable_cities(self) -> list[City]:
        """Cities that carry coordinates, in response order."""
        return [
            City(id=city_id, name=info.name, coordinate=info.coords.to_coordinate())
            for city_id, info in self.cities.items()
            if info.coords is not None
        ]


class ParkingLot(BaseModel):
    """One lot inside a snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    total: int = Field(..., ge=0)
    free: int
    state: LotState = LotState.UNKNOWN
    coords: LatLng | None = None
    address: str | None = None
    region: str | None = None
    lot_type: str | None = None
    forecast: bool = False

    @field_validator("state", mode="before")
    @classmethod
    def _unknown_state_fallback(cls, value: Any) -> Any:
        if value is None:
            return LotState.UNKNOWN
        try:
            return LotState(str(value).strip().lower())
        except ValueError:
            return LotState.UNKNOWN

    @property
    def coordinate(self) -> Coordinate | None:
        return self.coords.to_coordinate() if self.coords else None

    @property
    def occupied(self) -> int:
        return max(self.total - self.free, 0)


class ParkingSnapshot(BaseModel):
    """All lots of one city at one point in time."""

    model_config = ConfigDict(frozen=True)

    lots: tuple[ParkingLot, ...]
    last_updated: datetime
    last_downloaded: datetime
    url: str

    @field_validator("last_updated", "last_downloaded", mode="before")
    @classmethod
    def _parse_utc(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_utc_timestamp(value)
        return value

    def lots_with_forecast(self) -> list[ParkingLot]:
        return [lot for lot in self.lots if lot.forecast]


class ForecastSeries(BaseModel):
    """Occupancy per timestamp for one lot."""

    model_config = ConfigDict(frozen=True)

    lot_id: str
    data: dict[datetime, int]

    @field_validator("data", mode="before")
    @classmethod
    def _parse_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            parse_api_timestamp(k) if isinstance(k, str) else k: v for k, v in value.items()
        }

    def is_empty(self) -> bool:
        return not self.data

    def points(self) -> list[tuple[datetime, int]]:
        """Entries ordered by timestamp."""
        return sorted(self.data.items())
