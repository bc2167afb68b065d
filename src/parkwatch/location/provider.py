"""
Location provider capability + authorization state machine.

The platform location service is reduced to four capabilities so the tracker can
be driven by a fake in tests:
- report the current authorization
- report the last known coordinate
- ask for (foreground or background) authorization
- register a sink for coordinate updates

Authorization transitions come only from the provider. The tracker's reaction is
the pure `transition()` function below.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from parkwatch.core.geo import Coordinate

CoordinateSink = Callable[[Coordinate], object]


class AuthorizationState(str, Enum):
    UNDETERMINED = "undetermined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED_FOREGROUND = "authorized_foreground"
    AUTHORIZED_BACKGROUND = "authorized_background"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationState.AUTHORIZED_FOREGROUND, AuthorizationState.AUTHORIZED_BACKGROUND)


@dataclass(frozen=True)
class AuthorizationChanged:
    """Provider event: the platform permission is now `state`."""

    state: AuthorizationState


class TrackerAction(str, Enum):
    NONE = "none"
    ESCALATE = "escalate"
    SELECT_CITY = "select_city"


def transition(state: AuthorizationState) -> TrackerAction:
    """What the tracker does on entering `state`.

    `restricted` and `denied` are terminal for the session.
    """
    if state is AuthorizationState.UNDETERMINED:
        return TrackerAction.ESCALATE
    if state.is_authorized:
        return TrackerAction.SELECT_CITY
    return TrackerAction.NONE


class LocationProvider(Protocol):
    def authorization_status(self) -> AuthorizationState: ...

    def last_known_coordinate(self) -> Coordinate | None: ...

    def request_authorization(self, *, background: bool) -> None: ...

    def register_sink(self, sink: CoordinateSink) -> None: ...
