"""
Data types shared by the Itinerario modules.

Waypoints are immutable records owned by the caller. The optimiser only
reorders references to them and never edits a record in place; state
changes always build a new record via ``dataclasses.replace``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

ROUTE_TYPES = ("fastest", "scenic")
TRANSPORT_MODES = ("driving", "walking", "bicycling", "transit")


@dataclass(frozen=True)
class Waypoint:
    """A single destination of the itinerary.

    Coordinates of exactly ``(0, 0)`` mean the address has not been
    geocoded yet. The optimiser still treats them as a real point; use
    :attr:`has_coordinates` to filter them out beforehand. It also
    rejects NaN and infinite values.
    """

    id: str
    name: str = ""
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    visit_duration: Optional[int] = None  # minutes
    notes: Optional[str] = None
    is_required: bool = False
    is_starting_point: bool = False
    is_end_point: bool = False

    @property
    def has_coordinates(self) -> bool:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return False
        return not (self.latitude == 0 and self.longitude == 0)

    @property
    def coords(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


@dataclass(frozen=True)
class RoutePreferences:
    route_type: str = "fastest"
    avoid_tolls: bool = False
    avoid_highways: bool = False
    transport_mode: str = "driving"  # not used by the duration estimate


@dataclass(frozen=True)
class RouteMetrics:
    total_distance_km: float = 0.0
    total_duration_minutes: int = 0


@dataclass(frozen=True)
class ItineraryState:
    """Snapshot of the planner: destinations, preferences and the last route."""

    destinations: Tuple[Waypoint, ...] = ()
    optimized_route: Tuple[Waypoint, ...] = ()
    preferences: RoutePreferences = field(default_factory=RoutePreferences)
    total_distance: float = 0.0
    total_duration: int = 0
    starting_point_id: Optional[str] = None
    end_point_id: Optional[str] = None
