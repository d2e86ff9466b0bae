"""
Streamlit application for Itinerario trip planning.

This script defines the user interface and orchestrates the underlying
modules: destinations are entered by hand or imported from a
spreadsheet, geocoded when needed, ordered by the route optimiser, and
shown on an interactive map together with the estimated distance and
duration. The final itinerary can be downloaded as an Excel workbook.

All changes to the itinerary go through ``itinerario.state``; the
current ``ItineraryState`` lives in ``st.session_state``.

To run this app locally for development, install the package and
execute:

    streamlit run itinerario/app.py
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Optional

import streamlit as st
from streamlit_folium import folium_static

import os
import sys
# ``streamlit run`` executes this file as a script; make the package
# importable when it has not been installed.
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.append(parent_dir)

from itinerario import state as itinerary
from itinerario.config import settings
from itinerario.geocode import format_address, geocode_address, validate_address
from itinerario.models import ROUTE_TYPES, TRANSPORT_MODES, ItineraryState, Waypoint
from itinerario.spreadsheet import (
    SpreadsheetImportError,
    export_itinerary,
    read_waypoints,
    template_workbook,
)
from itinerario.visualisation import create_route_map

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ROUTE_TYPE_LABELS = {"fastest": "Più veloce", "scenic": "Panoramico"}
TRANSPORT_MODE_LABELS = {
    "driving": "Auto",
    "walking": "A piedi",
    "bicycling": "Bicicletta",
    "transit": "Mezzi pubblici",
}


def get_state() -> ItineraryState:
    if "itinerary" not in st.session_state:
        st.session_state["itinerary"] = itinerary.initial_state()
    return st.session_state["itinerary"]


def put_state(new_state: ItineraryState) -> None:
    st.session_state["itinerary"] = new_state


def parse_optional_float(text: str) -> Optional[float]:
    """Parse a coordinate field; blank means not given.

    Raises:
        ValueError: If the text is not a finite number.
    """
    text = text.strip().replace(",", ".")
    if not text:
        return None
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Not a finite number: {text!r}")
    return value


def needs_geocoding(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """True when a coordinate is missing or both are the (0, 0) placeholder."""
    if latitude is None or longitude is None:
        return True
    return latitude == 0 and longitude == 0


def format_duration(minutes: int) -> str:
    if not math.isfinite(minutes):
        return "n/d"
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}m" if hours else f"{mins}m"


def destination_form() -> None:
    """Form for adding a destination by hand."""
    with st.form("destination_form", clear_on_submit=True):
        st.subheader("Nuova destinazione")
        col_name, col_addr, col_num = st.columns([2, 3, 1])
        with col_name:
            name = st.text_input("Nome")
        with col_addr:
            address = st.text_input("Indirizzo", help="Via, numero civico e città separati da virgole")
        with col_num:
            street_number = st.text_input("Civico")
        col_lat, col_lon, col_dur = st.columns(3)
        with col_lat:
            lat_text = st.text_input("Latitudine (opzionale)")
        with col_lon:
            lon_text = st.text_input("Longitudine (opzionale)")
        with col_dur:
            visit_duration = st.number_input("Durata visita (min)", min_value=0, max_value=1440, value=0, step=5)
        notes = st.text_area("Note", height=68)
        is_required = st.checkbox("Tappa obbligatoria")
        submitted = st.form_submit_button("Aggiungi")

    if not submitted:
        return
    errors = []
    if not name.strip():
        errors.append("Il nome è obbligatorio")
    formatted = format_address(address.strip(), street_number.strip() or None)
    if not formatted:
        errors.append("L'indirizzo è obbligatorio")
    elif not validate_address(formatted):
        errors.append("L'indirizzo non è valido. Assicurati di includere via, numero civico e città")
    try:
        latitude = parse_optional_float(lat_text)
        longitude = parse_optional_float(lon_text)
    except ValueError:
        errors.append("Latitudine e longitudine devono essere numeri")
        latitude = longitude = None
    if errors:
        for message in errors:
            st.error(message)
        return

    if needs_geocoding(latitude, longitude):
        with st.spinner("Geocodifica dell'indirizzo…"):
            coords = geocode_address(formatted)
        if coords is None:
            st.warning(
                "Non è stato possibile trovare le coordinate per questo indirizzo. "
                "La destinazione è stata aggiunta senza posizione."
            )
            latitude, longitude = 0.0, 0.0
        else:
            latitude, longitude = coords

    waypoint = Waypoint(
        id=uuid.uuid4().hex,
        name=name.strip(),
        address=formatted,
        latitude=latitude,
        longitude=longitude,
        visit_duration=int(visit_duration) or None,
        notes=notes.strip() or None,
        is_required=is_required,
    )
    put_state(itinerary.add_waypoint(get_state(), waypoint))
    st.success(f"{waypoint.name} aggiunta.")


def destinations_list() -> None:
    """List destinations with start/end selectors and reordering buttons."""
    current = get_state()
    st.subheader(f"Destinazioni ({len(current.destinations)})")
    if not current.destinations:
        st.info("Nessuna destinazione. Aggiungine una o importa un file Excel.")
        return

    ids = [None] + [d.id for d in current.destinations]
    labels = {None: "—"}
    labels.update({d.id: d.name or d.address for d in current.destinations})
    col_start, col_end = st.columns(2)
    with col_start:
        start_id = st.selectbox(
            "Punto di partenza",
            ids,
            index=ids.index(current.starting_point_id) if current.starting_point_id in ids else 0,
            format_func=labels.get,
        )
    with col_end:
        end_id = st.selectbox(
            "Punto di arrivo",
            ids,
            index=ids.index(current.end_point_id) if current.end_point_id in ids else 0,
            format_func=labels.get,
        )
    if start_id != current.starting_point_id:
        put_state(itinerary.set_starting_point(get_state(), start_id))
        st.rerun()
    if end_id != current.end_point_id:
        put_state(itinerary.set_end_point(get_state(), end_id))
        st.rerun()

    for i, dest in enumerate(current.destinations):
        cols = st.columns([6, 1, 1, 1])
        badges = []
        if dest.id == current.starting_point_id:
            badges.append("partenza")
        if dest.id == current.end_point_id:
            badges.append("arrivo")
        if dest.is_required:
            badges.append("obbligatoria")
        if not dest.has_coordinates:
            badges.append("senza coordinate")
        suffix = f" ({', '.join(badges)})" if badges else ""
        cols[0].markdown(f"**{i + 1}. {dest.name}**{suffix}  \n{dest.address}")
        if cols[1].button("↑", key=f"up_{dest.id}", disabled=i == 0):
            put_state(itinerary.reorder_waypoints(get_state(), i, i - 1))
            st.rerun()
        if cols[2].button("↓", key=f"down_{dest.id}", disabled=i == len(current.destinations) - 1):
            put_state(itinerary.reorder_waypoints(get_state(), i, i + 1))
            st.rerun()
        if cols[3].button("✕", key=f"remove_{dest.id}"):
            put_state(itinerary.remove_waypoint(get_state(), dest.id))
            st.rerun()

    if st.button("Svuota elenco"):
        put_state(itinerary.clear_waypoints(get_state()))
        st.rerun()


def import_section() -> None:
    """Spreadsheet upload and template download."""
    st.subheader("Importa da Excel")
    st.download_button(
        "Scarica modello",
        data=template_workbook(),
        file_name="modello_destinazioni.xlsx",
        mime=XLSX_MIME,
    )
    uploaded = st.file_uploader("File Excel o CSV", type=["xlsx", "xls", "csv"])
    geocode_missing = st.checkbox("Geocodifica gli indirizzi senza coordinate", value=True)
    if uploaded is None or not st.button("Importa"):
        return
    try:
        with st.spinner("Lettura del file…"):
            waypoints = read_waypoints(
                uploaded.getvalue(),
                geocoder=geocode_address if geocode_missing else None,
                filename=uploaded.name,
            )
    except SpreadsheetImportError as exc:
        logger.warning("Import of %s failed: %s", uploaded.name, exc.__cause__)
        st.error(str(exc))
        return
    put_state(itinerary.import_waypoints(get_state(), waypoints))
    st.success(f"Importate {len(waypoints)} destinazioni.")


def preferences_form() -> None:
    prefs = get_state().preferences
    with st.form("preferences_form"):
        st.subheader("Preferenze di percorso")
        route_type = st.radio(
            "Tipo di percorso",
            ROUTE_TYPES,
            index=ROUTE_TYPES.index(prefs.route_type),
            format_func=ROUTE_TYPE_LABELS.get,
            horizontal=True,
        )
        transport_mode = st.radio(
            "Mezzo di trasporto",
            TRANSPORT_MODES,
            index=TRANSPORT_MODES.index(prefs.transport_mode),
            format_func=TRANSPORT_MODE_LABELS.get,
            horizontal=True,
            help="La durata stimata usa sempre una velocità media di 60 km/h.",
        )
        avoid_tolls = st.checkbox("Evita pedaggi", value=prefs.avoid_tolls)
        avoid_highways = st.checkbox("Evita autostrade", value=prefs.avoid_highways)
        if st.form_submit_button("Salva preferenze"):
            put_state(
                itinerary.update_preferences(
                    get_state(),
                    route_type=route_type,
                    transport_mode=transport_mode,
                    avoid_tolls=avoid_tolls,
                    avoid_highways=avoid_highways,
                )
            )
            st.success("Preferenze salvate.")


def itinerary_section() -> None:
    """Route creation, summary, map and export."""
    st.subheader("Itinerario")
    current = get_state()
    if st.button("Crea itinerario", type="primary", disabled=not current.destinations):
        missing = [d.name for d in current.destinations if not d.has_coordinates]
        if missing:
            st.warning("Destinazioni senza coordinate: " + ", ".join(missing))
        put_state(itinerary.create_itinerary(current))
        current = get_state()

    if not current.optimized_route:
        return
    col_dist, col_dur, col_stops = st.columns(3)
    col_dist.metric("Distanza totale", f"{current.total_distance:.1f} km")
    col_dur.metric("Durata stimata", format_duration(current.total_duration))
    col_stops.metric("Tappe", len(current.optimized_route))
    st.table(
        [
            {
                "Ordine": order,
                "Nome": stop.name,
                "Indirizzo": stop.address,
                "Durata visita (min)": stop.visit_duration or "",
            }
            for order, stop in enumerate(current.optimized_route, start=1)
        ]
    )
    folium_static(create_route_map(current.optimized_route), width=700, height=500)
    st.download_button(
        "Esporta itinerario",
        data=export_itinerary(current),
        file_name="itinerario.xlsx",
        mime=XLSX_MIME,
    )


def main():
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.set_page_config(page_title=settings.app_name, layout="wide")
    st.title("🗺️ Itinerario")
    tab_plan, tab_import, tab_settings = st.tabs(["Pianifica", "Importa", "Impostazioni"])
    with tab_plan:
        destination_form()
        destinations_list()
        itinerary_section()
    with tab_import:
        import_section()
    with tab_settings:
        preferences_form()


if __name__ == "__main__":
    main()
