"""
Itinerario package initialization.

This package provides the core functionality of the Itinerario trip
planner: destinations are collected, ordered into a route, and
summarised with distance and duration estimates.

Modules:
    models        – Waypoint, preferences and itinerary state types.
    routing       – Great-circle distances and route distance/duration totals.
    optimisation  – Nearest neighbour ordering with fixed start/end stops.
    state         – Pure update functions for the itinerary state.
    spreadsheet   – Excel/CSV import, itinerary export and template.
    geocode       – Address validation and Nominatim geocoding.
    visualisation – Folium based map creation utilities.
    config        – Runtime settings.

The route estimates use straight-line distances and a flat average
speed; they are indicative and do not replace a road router.
"""

__all__ = [
    "models",
    "routing",
    "optimisation",
    "state",
    "spreadsheet",
    "geocode",
    "visualisation",
    "config",
]
