"""
Spreadsheet import and export for Itinerario.

Destinations can be loaded in bulk from an Excel workbook or a CSV file.
Column headers vary between English and Italian spellings, so every
field has an ordered list of accepted names; the first one present in
the sheet is used for the whole import.

The optimised itinerary is exported back to an Excel workbook, and a
small template workbook shows the expected layout.
"""

from __future__ import annotations

import io
import logging
import math
import uuid
import zipfile
from typing import BinaryIO, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from itinerario.geocode import validate_address
from itinerario.models import ItineraryState, Waypoint

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Optional[Tuple[float, float]]]
Source = Union[str, bytes, BinaryIO]

COLUMN_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "name": ("name", "Name", "location", "Location", "nome", "Nome"),
    "address": ("address", "Address", "indirizzo", "Indirizzo"),
    "latitude": ("latitude", "Latitude", "lat", "Lat"),
    "longitude": ("longitude", "Longitude", "lng", "Lng"),
    "notes": ("notes", "Notes", "note", "Note"),
    "visit_duration": ("duration", "Duration", "durata", "Durata"),
    "is_required": ("required", "Required", "obbligatorio", "Obbligatorio"),
}

TRUTHY = {"1", "true", "yes", "y", "si", "sì", "x"}

EXPORT_COLUMNS = [
    "Ordine",
    "Nome",
    "Indirizzo",
    "Latitudine",
    "Longitudine",
    "Note",
    "Durata Visita (min)",
    "Tappa Obbligatoria",
    "Punto di Partenza",
    "Punto di Arrivo",
]

TEMPLATE_ROWS = [
    {
        "name": "Milano Duomo",
        "address": "Piazza del Duomo, 1, Milano",
        "latitude": 45.4642,
        "longitude": 9.1900,
        "notes": "Visita al Duomo",
        "duration": 120,
        "required": True,
    },
    {
        "name": "Bologna Piazza Maggiore",
        "address": "Piazza Maggiore, 6, Bologna",
        "latitude": 44.4938,
        "longitude": 11.3426,
        "notes": "Pranzo in centro",
        "duration": 90,
        "required": True,
    },
    {
        "name": "Firenze Duomo",
        "address": "Piazza del Duomo, 8, Firenze",
        "latitude": 43.7731,
        "longitude": 11.2566,
        "notes": "Visita agli Uffizi",
        "duration": 180,
        "required": True,
    },
]


class SpreadsheetImportError(ValueError):
    """Raised when an uploaded file cannot be read as a table."""


def resolve_columns(columns: Sequence[str]) -> Dict[str, Optional[str]]:
    """Map every field to the first matching column header (or ``None``)."""
    present = set(columns)
    return {
        field: next((name for name in synonyms if name in present), None)
        for field, synonyms in COLUMN_SYNONYMS.items()
    }


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _cell(row: pd.Series, column: Optional[str]):
    if column is None:
        return None
    value = row[column]
    return None if _is_blank(value) else value


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _to_duration(value) -> Optional[int]:
    number = _to_float(value)
    if number is None or number < 0:
        return None
    return int(round(number))


def _to_bool(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def waypoints_from_frame(frame: pd.DataFrame, geocoder: Optional[Geocoder] = None) -> List[Waypoint]:
    """Convert a table of destinations into waypoints.

    Rows without a usable address are skipped. When a row has no valid
    coordinates (missing, non numeric, or the ``(0, 0)`` placeholder) and
    a ``geocoder`` is given, the address is geocoded; rows that still lack
    coordinates keep the ``(0, 0)`` placeholder.

    Args:
        frame: Table as read by pandas, one destination per row.
        geocoder: Optional callable mapping an address to (lat, lon).

    Returns:
        The waypoints in row order.
    """
    columns = resolve_columns([str(c) for c in frame.columns])
    waypoints: List[Waypoint] = []
    for position, (_, row) in enumerate(frame.iterrows(), start=1):
        address = _cell(row, columns["address"])
        address = str(address).strip() if address is not None else ""
        if not address:
            logger.warning("Skipping row %d: missing address", position)
            continue
        if not validate_address(address):
            logger.warning("Skipping row %d: invalid address format - %s", position, address)
            continue

        latitude = _to_float(_cell(row, columns["latitude"]))
        longitude = _to_float(_cell(row, columns["longitude"]))
        if latitude is None or longitude is None or (latitude == 0 and longitude == 0):
            latitude, longitude = None, None
            if geocoder is not None:
                coords = geocoder(address)
                if coords is not None:
                    latitude, longitude = coords
                    logger.info("Geocoded address for row %d: %s -> (%s, %s)", position, address, latitude, longitude)
                else:
                    logger.warning("Could not geocode address for row %d: %s", position, address)

        name = _cell(row, columns["name"])
        notes = _cell(row, columns["notes"])
        waypoints.append(
            Waypoint(
                id=f"imported-{position}-{uuid.uuid4().hex}",
                name=str(name) if name is not None else f"Destinazione {position}",
                address=address,
                latitude=latitude if latitude is not None else 0.0,
                longitude=longitude if longitude is not None else 0.0,
                notes=str(notes) if notes is not None else None,
                visit_duration=_to_duration(_cell(row, columns["visit_duration"])),
                is_required=_to_bool(_cell(row, columns["is_required"])),
            )
        )
    return waypoints


def _read_frame(source: Source, filename: Optional[str]) -> pd.DataFrame:
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    if filename is None and isinstance(source, str):
        filename = source
    if filename is None:
        filename = getattr(source, "name", "") or ""
    if filename.lower().endswith(".csv"):
        return pd.read_csv(source)
    return pd.read_excel(source, sheet_name=0)


def read_waypoints(
    source: Source,
    geocoder: Optional[Geocoder] = None,
    filename: Optional[str] = None,
) -> List[Waypoint]:
    """Read destinations from the first sheet of a workbook or from a CSV file.

    Args:
        source: Path, raw bytes, or a binary file object.
        geocoder: Optional callable used for rows without coordinates.
        filename: Name used to detect CSV input when ``source`` is not a path.

    Raises:
        SpreadsheetImportError: If the file cannot be parsed.
    """
    try:
        frame = _read_frame(source, filename)
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise SpreadsheetImportError(
            "Impossibile leggere il file. Verifica che il formato sia corretto."
        ) from exc
    waypoints = waypoints_from_frame(frame, geocoder=geocoder)
    logger.info("Imported %d of %d rows", len(waypoints), len(frame))
    return waypoints


def _yes_no(flag: bool) -> str:
    return "Sì" if flag else "No"


def itinerary_frame(
    route: Sequence[Waypoint],
    starting_point_id: Optional[str] = None,
    end_point_id: Optional[str] = None,
) -> pd.DataFrame:
    """Tabulate a route in visiting order using the export column layout."""
    rows = [
        {
            "Ordine": order,
            "Nome": dest.name,
            "Indirizzo": dest.address,
            "Latitudine": dest.latitude,
            "Longitudine": dest.longitude,
            "Note": dest.notes or "",
            "Durata Visita (min)": dest.visit_duration if dest.visit_duration is not None else "",
            "Tappa Obbligatoria": _yes_no(dest.is_required),
            "Punto di Partenza": _yes_no(dest.id == starting_point_id),
            "Punto di Arrivo": _yes_no(dest.id == end_point_id),
        }
        for order, dest in enumerate(route, start=1)
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def _workbook_bytes(frame: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def export_itinerary(state: ItineraryState) -> bytes:
    """Export the optimised route (or the raw destinations) as an xlsx workbook.

    Raises:
        ValueError: If the itinerary has no destinations.
    """
    route = state.optimized_route or state.destinations
    if not route:
        raise ValueError("Nessuna destinazione da esportare")
    frame = itinerary_frame(route, state.starting_point_id, state.end_point_id)
    return _workbook_bytes(frame, "Itinerario")


def template_workbook() -> bytes:
    """Return a sample workbook with the columns the importer understands."""
    return _workbook_bytes(pd.DataFrame(TEMPLATE_ROWS), "Destinazioni")
