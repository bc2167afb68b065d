"""
Location tracker.

Wraps a `LocationProvider` and owns two pieces of state, both written only from
the provider's callback stream:
- the current `AuthorizationState`
- the most recently accepted `LocationSample`

Coordinates pass a movement filter before they replace the held sample: the first
one only sets the baseline, later ones must be strictly farther than the threshold.
Accepted moves are fanned out synchronously to subscribers in registration order.

Becoming authorized triggers a one-shot nearest-city selection. A failing metadata
fetch abandons it with a log line; it is never surfaced to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from parkwatch.config.settings import Settings
from parkwatch.core.geo import Coordinate, haversine_m
from parkwatch.domain.models import City, Metadata
from parkwatch.ingestion.errors import ParkApiError
from parkwatch.location.provider import (
    AuthorizationChanged,
    AuthorizationState,
    LocationProvider,
    TrackerAction,
    transition,
)
from parkwatch.selection.nearest import DistanceFn, select_nearest
from parkwatch.storage.preferences import SelectedCityStore

logger = logging.getLogger(__name__)

DEFAULT_MOVEMENT_THRESHOLD_M = 100.0


@dataclass(frozen=True)
class LocationSample:
    coordinate: Coordinate
    captured_at: datetime


@dataclass(frozen=True)
class CitySelection:
    """Payload of the "selection changed" notification."""

    city: City
    coordinate: Coordinate


class MetadataSource(Protocol):
    async def fetch_metadata(self) -> Metadata: ...


MovementListener = Callable[[LocationSample], object]
SelectionListener = Callable[[CitySelection], object]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationTracker:
    def __init__(
        self,
        provider: LocationProvider,
        *,
        metadata_source: MetadataSource,
        selection_store: SelectedCityStore,
        movement_threshold_m: float = DEFAULT_MOVEMENT_THRESHOLD_M,
        distance: DistanceFn = haversine_m,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._provider = provider
        self._metadata_source = metadata_source
        self._selection_store = selection_store
        self._threshold_m = float(movement_threshold_m)
        self._distance = distance
        self._clock = clock

        self._state = provider.authorization_status()
        self._last: LocationSample | None = None
        self._escalated = False
        self._movement_listeners: list[MovementListener] = []
        self._selection_listeners: list[SelectionListener] = []

        provider.register_sink(self.handle_coordinate)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: LocationProvider,
        *,
        metadata_source: MetadataSource,
        selection_store: SelectedCityStore,
    ) -> "LocationTracker":
        return cls(
            provider,
            metadata_source=metadata_source,
            selection_store=selection_store,
            movement_threshold_m=settings.location.movement_threshold_m,
        )

    def request_authorization(self) -> None:
        """Start the platform permission flow (foreground first)."""
        self._provider.request_authorization(background=False)

    def current_authorization(self) -> AuthorizationState:
        return self._state

    def last_accepted(self) -> LocationSample | None:
        return self._last

    def on_movement(self, callback: MovementListener) -> None:
        # No unsubscribe: listeners live as long as the tracker.
        self._movement_listeners.append(callback)

    def on_selection_changed(self, callback: SelectionListener) -> None:
        self._selection_listeners.append(callback)

    def handle_coordinate(self, coordinate: Coordinate) -> bool:
        """Provider sink. Returns True when the coordinate became the held sample."""
        sample = LocationSample(coordinate=coordinate, captured_at=self._clock())
        held = self._last
        if held is None:
            self._last = sample
            logger.debug("Baseline location set to %s", coordinate)
            return True

        moved_m = self._distance(held.coordinate, coordinate)
        if moved_m <= self._threshold_m:
            logger.debug("Ignoring location update (moved %.1fm)", moved_m)
            return False

        self._last = sample
        logger.debug("Accepted location update (moved %.1fm)", moved_m)
        for listener in list(self._movement_listeners):
            listener(sample)
        return True

    async def handle_authorization_change(self, event: AuthorizationChanged) -> CitySelection | None:
        """Provider callback for permission changes."""
        self._state = event.state
        action = transition(event.state)
        logger.info("Location authorization is now %s (%s)", event.state.value, action.value)

        if action is TrackerAction.ESCALATE:
            if not self._escalated:
                self._escalated = True
                self._provider.request_authorization(background=True)
            return None
        if action is TrackerAction.SELECT_CITY:
            return await self._select_nearest_city()
        return None

    async def _select_nearest_city(self) -> CitySelection | None:
        coordinate = self._provider.last_known_coordinate()
        if coordinate is None:
            logger.info("No last known location; skipping city selection.")
            return None
        if self._last is None:
            self._last = LocationSample(coordinate=coordinate, captured_at=self._clock())

        try:
            metadata = await self._metadata_source.fetch_metadata()
        except ParkApiError as exc:
            logger.warning("City selection abandoned: metadata fetch failed (%s): %s", exc.kind.value, exc)
            return None

        cities = metadata.locatable_cities()
        if not cities:
            logger.warning("City selection abandoned: no supported city has coordinates.")
            return None

        city = select_nearest(cities, coordinate, distance=self._distance)
        previous = self._selection_store.display_name()
        self._selection_store.save(city.id, city.name)
        if previous and previous != city.name:
            logger.info("Selected city changed from %s to %s (%s)", previous, city.name, city.id)
        else:
            logger.info("Selected nearest city %s (%s)", city.name, city.id)

        selection = CitySelection(city=city, coordinate=coordinate)
        for listener in list(self._selection_listeners):
            listener(selection)
        return selection
