"""
Map visualisation utilities for Itinerario.

This module builds an interactive Folium map of an itinerary: numbered
markers in visiting order (green for the start, red for the end) and a
polyline for the route. Stops that have not been geocoded yet carry the
``(0, 0)`` placeholder and are left off the map. The map can be embedded
in the Streamlit front end via ``streamlit_folium``.
"""

from __future__ import annotations

from typing import Sequence

import folium

from itinerario.config import settings
from itinerario.models import Waypoint

START_COLOUR = "#2ecc71"
END_COLOUR = "#e74c3c"
STOP_COLOUR = "#007bff"


def _marker_colour(order: int, count: int, stop: Waypoint) -> str:
    if order == 1 or stop.is_starting_point:
        return START_COLOUR
    if order == count or stop.is_end_point:
        return END_COLOUR
    return STOP_COLOUR


def create_route_map(route: Sequence[Waypoint]) -> folium.Map:
    """Create a Folium map with numbered markers and a polyline for the route.

    Args:
        route: Stops in visiting order.

    Returns:
        A Folium Map object ready for display.
    """
    located = [(order, stop) for order, stop in enumerate(route, start=1) if stop.has_coordinates]
    if not located:
        return folium.Map(location=[0, 0], zoom_start=2)
    avg_lat = sum(stop.latitude for _, stop in located) / len(located)
    avg_lon = sum(stop.longitude for _, stop in located) / len(located)
    m = folium.Map(location=[avg_lat, avg_lon], zoom_start=settings.map_zoom_start, tiles="OpenStreetMap")
    for order, stop in located:
        colour = _marker_colour(order, len(route), stop)
        label = stop.name or stop.address or f"Tappa {order}"
        folium.Marker(
            location=[stop.latitude, stop.longitude],
            popup=folium.Popup(f"{order}. {label}", parse_html=True),
            tooltip=label,
            icon=folium.DivIcon(html=f"<div style='font-size: 12px; color: white; background-color: {colour}; border-radius: 50%; width: 24px; height: 24px; text-align: center; line-height: 24px;'>{order}</div>"),
        ).add_to(m)
    if len(located) > 1:
        folium.PolyLine([list(stop.coords) for _, stop in located], color="blue", weight=4, opacity=0.6).add_to(m)
    return m
