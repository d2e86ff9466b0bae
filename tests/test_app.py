import unittest

from itinerario.app import format_duration, needs_geocoding, parse_optional_float


class TestCoordinateInput(unittest.TestCase):
    def test_parse_optional_float(self):
        self.assertIsNone(parse_optional_float("  "))
        self.assertEqual(parse_optional_float("45,4642"), 45.4642)
        self.assertEqual(parse_optional_float("-0.5"), -0.5)

    def test_parse_rejects_non_finite(self):
        for text in ["nan", "NaN", "inf", "-inf", "abc"]:
            with self.assertRaises(ValueError):
                parse_optional_float(text)

    def test_equator_and_prime_meridian_are_kept(self):
        self.assertFalse(needs_geocoding(0.0, 9.19))
        self.assertFalse(needs_geocoding(51.48, 0.0))

    def test_missing_or_placeholder_needs_geocoding(self):
        self.assertTrue(needs_geocoding(None, 9.19))
        self.assertTrue(needs_geocoding(45.0, None))
        self.assertTrue(needs_geocoding(0.0, 0.0))

    def test_format_duration(self):
        self.assertEqual(format_duration(45), "45m")
        self.assertEqual(format_duration(135), "2h 15m")
        self.assertEqual(format_duration(float("nan")), "n/d")


if __name__ == "__main__":
    unittest.main()
