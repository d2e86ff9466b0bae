import unittest

import folium

from itinerario.models import Waypoint
from itinerario.visualisation import create_route_map


def markers(m):
    return [child for child in m._children.values() if isinstance(child, folium.Marker)]


def polylines(m):
    return [child for child in m._children.values() if isinstance(child, folium.PolyLine)]


class TestCreateRouteMap(unittest.TestCase):
    def test_empty_route(self):
        m = create_route_map([])
        self.assertEqual(markers(m), [])

    def test_markers_and_polyline(self):
        route = [
            Waypoint(id="a", name="Milano", latitude=45.46, longitude=9.19),
            Waypoint(id="b", name="Bologna", latitude=44.49, longitude=11.34),
            Waypoint(id="c", name="Firenze", latitude=43.77, longitude=11.26),
        ]
        m = create_route_map(route)
        self.assertEqual(len(markers(m)), 3)
        self.assertEqual(len(polylines(m)), 1)
        self.assertAlmostEqual(m.location[0], (45.46 + 44.49 + 43.77) / 3)

    def test_ungeocoded_stops_are_skipped(self):
        route = [
            Waypoint(id="a", name="Milano", latitude=45.46, longitude=9.19),
            Waypoint(id="x", name="Sconosciuto"),
        ]
        m = create_route_map(route)
        self.assertEqual(len(markers(m)), 1)
        self.assertEqual(polylines(m), [])
        self.assertEqual(m.location, [45.46, 9.19])

    def test_nan_stops_are_skipped(self):
        route = [
            Waypoint(id="a", name="Milano", latitude=45.46, longitude=9.19),
            Waypoint(id="n", name="Rotto", latitude=float("nan"), longitude=9.0),
            Waypoint(id="b", name="Bologna", latitude=44.49, longitude=11.34),
        ]
        m = create_route_map(route)
        self.assertEqual(len(markers(m)), 2)
        self.assertEqual(len(polylines(m)), 1)


if __name__ == "__main__":
    unittest.main()
