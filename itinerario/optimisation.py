"""
Route optimisation for Itinerario.

This module orders the destinations of an itinerary with the nearest
neighbour heuristic: starting from a fixed first stop, it repeatedly
visits the closest destination not yet placed. An optional last stop
can be pinned, and when the first and last stop coincide the route is
closed into a loop.

The result is deterministic for a given input order but is not a
shortest tour; nearest neighbour trades optimality for an O(n²) run
time that is instant for itineraries of a few dozen stops.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from itinerario.models import Waypoint
from itinerario.routing import waypoint_distance_km


class InvalidIndexError(IndexError):
    """Raised when a start, end or reorder index lies outside the list."""


def check_index(index: int, length: int, label: str) -> None:
    if not 0 <= index < length:
        raise InvalidIndexError(f"{label} {index} out of range for {length} waypoints")


def _pop_nearest(current: Waypoint, pool: List[Waypoint]) -> Waypoint:
    # strict comparison keeps the first of equally distant candidates
    nearest_index = 0
    min_distance = waypoint_distance_km(current, pool[0])
    for i in range(1, len(pool)):
        distance = waypoint_distance_km(current, pool[i])
        if distance < min_distance:
            min_distance = distance
            nearest_index = i
    return pool.pop(nearest_index)


def optimize_route(
    waypoints: Sequence[Waypoint],
    start_index: int = 0,
    end_index: Optional[int] = None,
) -> List[Waypoint]:
    """Order waypoints using the nearest neighbour heuristic.

    Args:
        waypoints: Destinations to visit. Neither the sequence nor the
            records are modified.
        start_index: Index of the first stop.
        end_index: Index of the last stop, or ``None`` to leave it to the
            heuristic. Equal to ``start_index`` means a circular route that
            returns to the first stop.

    Returns:
        A new list with every waypoint exactly once, except in a circular
        route where the first stop is repeated at the end.

    Raises:
        InvalidIndexError: If ``start_index`` or a given ``end_index`` is
            out of range for an input of two or more waypoints.
    """
    if len(waypoints) <= 1:
        return list(waypoints)

    check_index(start_index, len(waypoints), "start index")
    if end_index is not None:
        check_index(end_index, len(waypoints), "end index")

    is_circular = start_index == end_index
    pool = list(waypoints)
    starting_point = pool.pop(start_index)
    route = [starting_point]

    ending_point: Optional[Waypoint] = None
    if end_index is not None and not is_circular:
        adjusted_end = end_index - 1 if end_index > start_index else end_index
        ending_point = pool.pop(adjusted_end)

    current = starting_point
    while pool:
        current = _pop_nearest(current, pool)
        route.append(current)

    if ending_point is not None:
        route.append(ending_point)
    if is_circular:
        route.append(starting_point)
    return route
