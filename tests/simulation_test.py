import unittest
import random
from collections import Counter

from itinerario import state as itinerary
from itinerario.models import Waypoint
from itinerario.optimisation import optimize_route
from itinerario.routing import estimate_total_duration, total_distance


class TestSimulation(unittest.TestCase):
    def test_random_cases(self):
        # Random itineraries around northern Italy: check the route shape
        # for every start/end combination and that the pipeline runs end to end.
        rng = random.Random(42)
        for _ in range(20):
            n = rng.randint(2, 8)
            waypoints = [
                Waypoint(
                    id=f"w{i}",
                    latitude=43.5 + rng.random() * 2.5,
                    longitude=8.0 + rng.random() * 4.0,
                    visit_duration=rng.choice([None, 15, 30, 60]),
                )
                for i in range(n)
            ]
            start = rng.randrange(n)
            end = rng.choice([None, start, rng.randrange(n)])
            route = optimize_route(waypoints, start, end)
            self.assertIs(route[0], waypoints[start])
            if end == start:
                self.assertEqual(len(route), n + 1)
                self.assertIs(route[-1], waypoints[start])
                self.assertEqual(Counter(w.id for w in route[1:-1]), Counter(w.id for w in waypoints if w is not waypoints[start]))
            else:
                self.assertEqual(Counter(w.id for w in route), Counter(w.id for w in waypoints))
                if end is not None:
                    self.assertIs(route[-1], waypoints[end])
            self.assertEqual(route, optimize_route(waypoints, start, end))
            self.assertGreaterEqual(total_distance(route), 0)
            self.assertGreaterEqual(estimate_total_duration(route), 0)

    def test_state_pipeline(self):
        rng = random.Random(7)
        s = itinerary.initial_state()
        for i in range(6):
            s = itinerary.add_waypoint(
                s, Waypoint(id=f"w{i}", latitude=45 + rng.random(), longitude=9 + rng.random(), visit_duration=20)
            )
        s = itinerary.set_starting_point(s, "w3")
        s = itinerary.set_end_point(s, "w0")
        s = itinerary.create_itinerary(s)
        self.assertEqual(s.optimized_route[0].id, "w3")
        self.assertEqual(s.optimized_route[-1].id, "w0")
        self.assertEqual(len(s.optimized_route), 6)
        self.assertGreaterEqual(s.total_duration, 6 * 20)


if __name__ == "__main__":
    unittest.main()
