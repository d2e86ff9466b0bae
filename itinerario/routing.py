"""
Distance and duration estimates for Itinerario routes.

Everything here works on straight-line (great-circle) distances; there
is no road network and no traffic model. Travel time assumes a flat
average speed of 60 km/h whatever transport mode the user picked in
the preferences.

Example usage:

    from itinerario.routing import total_distance, estimate_total_duration
    km = total_distance(route)
    minutes = estimate_total_duration(route)
"""

from __future__ import annotations

import math
from typing import Sequence, Union

from itinerario.models import RouteMetrics, Waypoint

EARTH_RADIUS_KM = 6371.0
AVERAGE_SPEED_KMH = 60.0


def great_circle_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute the great‑circle distance between two coordinates in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def waypoint_distance_km(a: Waypoint, b: Waypoint) -> float:
    return great_circle_distance_km(a.latitude, a.longitude, b.latitude, b.longitude)


def total_distance(route: Sequence[Waypoint]) -> float:
    """Sum of the great‑circle distances between consecutive stops.

    Returns 0 for routes with fewer than two stops.
    """
    if len(route) <= 1:
        return 0.0
    return sum(waypoint_distance_km(route[i], route[i + 1]) for i in range(len(route) - 1))


def _round_half_up(value: float) -> Union[int, float]:
    # NaN and infinities from malformed coordinates are passed through
    if not math.isfinite(value):
        return value
    return int(math.floor(value + 0.5))


def estimate_total_duration(route: Sequence[Waypoint]) -> int:
    """Estimate the total time of a route in minutes.

    Travel time between consecutive stops is the great‑circle distance at
    ``AVERAGE_SPEED_KMH``; the visit duration of every entry in the route
    is added on top (a missing duration counts as zero). In a circular
    route the start appears twice, so its visit duration is counted twice.

    Args:
        route: Ordered stops.

    Returns:
        Total minutes rounded to the nearest integer (halves round up),
        or 0 for routes with fewer than two stops. Malformed coordinates
        (NaN, infinities) yield the unrounded non-finite total.
    """
    if len(route) <= 1:
        return 0
    travel_minutes = 0.0
    for i in range(len(route) - 1):
        distance_km = waypoint_distance_km(route[i], route[i + 1])
        travel_minutes += distance_km / AVERAGE_SPEED_KMH * 60.0
    visit_minutes = sum(stop.visit_duration or 0 for stop in route)
    return _round_half_up(travel_minutes + visit_minutes)


def route_metrics(route: Sequence[Waypoint]) -> RouteMetrics:
    return RouteMetrics(
        total_distance_km=total_distance(route),
        total_duration_minutes=estimate_total_duration(route),
    )
