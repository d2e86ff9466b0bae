"""
Itinerary state updates.

The planner keeps one ``ItineraryState`` value per session. Each function
here takes the current state and returns a new one; nothing is changed
in place, so the front end can simply swap the stored value.
"""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Iterable, List, Optional, Sequence

from itinerario.models import (
    ROUTE_TYPES,
    TRANSPORT_MODES,
    ItineraryState,
    RoutePreferences,
    Waypoint,
)
from itinerario.optimisation import check_index, optimize_route
from itinerario.routing import estimate_total_duration, total_distance

logger = logging.getLogger(__name__)


def initial_state() -> ItineraryState:
    return ItineraryState()


def find_index(destinations: Sequence[Waypoint], waypoint_id: Optional[str]) -> Optional[int]:
    """Return the position of ``waypoint_id`` in ``destinations`` or ``None``."""
    if waypoint_id is None:
        return None
    for i, dest in enumerate(destinations):
        if dest.id == waypoint_id:
            return i
    return None


def add_waypoint(state: ItineraryState, waypoint: Waypoint) -> ItineraryState:
    return replace(state, destinations=state.destinations + (waypoint,))


def import_waypoints(state: ItineraryState, waypoints: Iterable[Waypoint]) -> ItineraryState:
    return replace(state, destinations=state.destinations + tuple(waypoints))


def remove_waypoint(state: ItineraryState, waypoint_id: str) -> ItineraryState:
    """Drop a destination, clearing the start/end marker if it pointed at it."""
    return replace(
        state,
        destinations=tuple(d for d in state.destinations if d.id != waypoint_id),
        starting_point_id=None if state.starting_point_id == waypoint_id else state.starting_point_id,
        end_point_id=None if state.end_point_id == waypoint_id else state.end_point_id,
    )


def update_waypoint(state: ItineraryState, waypoint: Waypoint) -> ItineraryState:
    return replace(
        state,
        destinations=tuple(waypoint if d.id == waypoint.id else d for d in state.destinations),
    )


def clear_waypoints(state: ItineraryState) -> ItineraryState:
    """Forget all destinations and the computed route; keep the preferences."""
    return ItineraryState(preferences=state.preferences)


def reorder_waypoints(state: ItineraryState, from_index: int, to_index: int) -> ItineraryState:
    """Move the destination at ``from_index`` so it ends up at ``to_index``."""
    check_index(from_index, len(state.destinations), "from index")
    check_index(to_index, len(state.destinations), "to index")
    destinations = list(state.destinations)
    moved = destinations.pop(from_index)
    destinations.insert(to_index, moved)
    return replace(state, destinations=tuple(destinations))


def set_starting_point(state: ItineraryState, waypoint_id: Optional[str]) -> ItineraryState:
    """Mark one destination as the start; it stops being the end point."""
    destinations = tuple(
        replace(
            d,
            is_starting_point=d.id == waypoint_id,
            is_end_point=False if d.id == waypoint_id else d.is_end_point,
        )
        for d in state.destinations
    )
    end_point_id = None if waypoint_id == state.end_point_id else state.end_point_id
    return replace(
        state,
        destinations=destinations,
        starting_point_id=waypoint_id,
        end_point_id=end_point_id,
    )


def set_end_point(state: ItineraryState, waypoint_id: Optional[str]) -> ItineraryState:
    """Mark one destination as the end; it stops being the starting point."""
    destinations = tuple(
        replace(
            d,
            is_end_point=d.id == waypoint_id,
            is_starting_point=False if d.id == waypoint_id else d.is_starting_point,
        )
        for d in state.destinations
    )
    starting_point_id = None if waypoint_id == state.starting_point_id else state.starting_point_id
    return replace(
        state,
        destinations=destinations,
        end_point_id=waypoint_id,
        starting_point_id=starting_point_id,
    )


def update_preferences(state: ItineraryState, **changes) -> ItineraryState:
    """Apply a partial update to the route preferences.

    Raises:
        ValueError: On an unknown preference name or an unsupported
            route type / transport mode.
    """
    known = {f.name for f in fields(RoutePreferences)}
    unknown = set(changes) - known
    if unknown:
        raise ValueError(f"Unknown route preferences: {', '.join(sorted(unknown))}")
    if "route_type" in changes and changes["route_type"] not in ROUTE_TYPES:
        raise ValueError(f"Unsupported route type: {changes['route_type']!r}")
    if "transport_mode" in changes and changes["transport_mode"] not in TRANSPORT_MODES:
        raise ValueError(f"Unsupported transport mode: {changes['transport_mode']!r}")
    return replace(state, preferences=replace(state.preferences, **changes))


def set_optimized_route(state: ItineraryState, route: Sequence[Waypoint]) -> ItineraryState:
    """Store a route together with its freshly computed distance and duration."""
    return replace(
        state,
        optimized_route=tuple(route),
        total_distance=total_distance(route),
        total_duration=estimate_total_duration(route),
    )


def create_itinerary(state: ItineraryState) -> ItineraryState:
    """Optimise the current destinations and store the result.

    The start defaults to the first destination when no starting point is
    set (or it no longer exists); without an end point the heuristic picks
    the last stop freely. An empty itinerary is returned unchanged.
    """
    if not state.destinations:
        return state
    start_index = find_index(state.destinations, state.starting_point_id)
    if start_index is None:
        start_index = 0
    end_index = find_index(state.destinations, state.end_point_id)
    route: List[Waypoint] = optimize_route(state.destinations, start_index, end_index)
    new_state = set_optimized_route(state, route)
    logger.info(
        "Optimised %d destinations: %.1f km, %d min",
        len(state.destinations),
        new_state.total_distance,
        new_state.total_duration,
    )
    return new_state
