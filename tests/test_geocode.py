import unittest
from types import SimpleNamespace
from unittest import mock

from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from itinerario import geocode
from itinerario.geocode import format_address, geocode_address, validate_address


class TestAddressValidation(unittest.TestCase):
    def test_valid(self):
        self.assertTrue(validate_address("Piazza del Duomo, 1, Milano"))
        self.assertTrue(validate_address("Via Roma, Torino"))

    def test_invalid(self):
        for address in [None, "", "   ", "Roma", "Via Roma Torino", "a,b"]:
            self.assertFalse(validate_address(address), address)

    def test_format_keeps_existing_number(self):
        self.assertEqual(format_address("Via Roma 10, Torino", "5"), "Via Roma 10, Torino")

    def test_format_inserts_before_first_comma(self):
        self.assertEqual(format_address("Via Roma, Torino", "10"), "Via Roma, 10, Torino")

    def test_format_appends_without_comma(self):
        self.assertEqual(format_address("Via Roma", "10"), "Via Roma, 10")

    def test_format_without_number(self):
        self.assertEqual(format_address("Via Roma, Torino"), "Via Roma, Torino")


class TestGeocodeAddress(unittest.TestCase):
    def setUp(self):
        geocode_address.cache_clear()
        self.geocoder = mock.Mock()
        patcher = mock.patch.object(geocode, "_get_geocoder", return_value=self.geocoder)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(geocode_address.cache_clear)

    def test_success(self):
        self.geocoder.geocode.return_value = SimpleNamespace(latitude=45.46, longitude=9.19)
        self.assertEqual(geocode_address("Piazza del Duomo, 1, Milano"), (45.46, 9.19))

    def test_results_are_cached(self):
        self.geocoder.geocode.return_value = SimpleNamespace(latitude=1.0, longitude=2.0)
        geocode_address("Via A, 1, Milano")
        geocode_address("Via A, 1, Milano")
        self.assertEqual(self.geocoder.geocode.call_count, 1)

    def test_no_match(self):
        self.geocoder.geocode.return_value = None
        self.assertIsNone(geocode_address("Nowhere, 0, Atlantis"))

    def test_retry_once_after_timeout(self):
        self.geocoder.geocode.side_effect = [GeocoderTimedOut("slow"), SimpleNamespace(latitude=3.0, longitude=4.0)]
        self.assertEqual(geocode_address("Via B, 2, Bologna"), (3.0, 4.0))
        self.assertEqual(self.geocoder.geocode.call_count, 2)
        second_timeout = self.geocoder.geocode.call_args_list[1].kwargs["timeout"]
        self.assertGreater(second_timeout, self.geocoder.geocode.call_args_list[0].kwargs["timeout"])

    def test_gives_up_after_second_failure(self):
        self.geocoder.geocode.side_effect = [GeocoderServiceError("down"), GeocoderTimedOut("slow")]
        self.assertIsNone(geocode_address("Via C, 3, Firenze"))
        self.assertEqual(self.geocoder.geocode.call_count, 2)


if __name__ == "__main__":
    unittest.main()
