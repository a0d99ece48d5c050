"""
Unit tests for destination slot persistence and background resolution
"""
import unittest

from navigation.core.data_types import Coordinate, SENTINEL_COORDINATE
from navigation.destination_manager import DestinationManager
from storage.key_value_store import InMemoryKeyValueStore
from tests.fakes import DictResolver, run_inline

CASTLE = Coordinate(35.1856, 136.8997)


class TestDestinationLoading(unittest.TestCase):

    def test_empty_store(self):
        manager = DestinationManager(InMemoryKeyValueStore())
        self.assertEqual(manager.load(), [])
        self.assertFalse(manager.has_destinations())
        self.assertFalse(manager.has_setup())
        self.assertIsNone(manager.get(0))

    def test_loads_each_slot_with_its_own_keys(self):
        store = InMemoryKeyValueStore({
            "address1": "A", "address1Lat": "35.1", "address1Lon": "136.1",
            "address2": "B", "address2Lat": "35.2", "address2Lon": "136.2",
            "address3": "C", "address3Lat": "35.3", "address3Lon": "136.3",
        })
        manager = DestinationManager(store)
        self.assertEqual(manager.load(), [])

        self.assertEqual(manager.get(0).coordinate, Coordinate(35.1, 136.1))
        self.assertEqual(manager.get(1).coordinate, Coordinate(35.2, 136.2))
        self.assertEqual(manager.get(2).coordinate, Coordinate(35.3, 136.3))
        self.assertEqual([d.label for d in manager.get_all()], ["Home", "Work", "Other"])

    def test_missing_or_bad_coordinates_are_unresolved(self):
        store = InMemoryKeyValueStore({
            "address1": "no coordinate",
            "address2": "sentinel", "address2Lat": "0", "address2Lon": "0",
            "address3": "garbage", "address3Lat": "north", "address3Lon": "136.3",
        })
        manager = DestinationManager(store)
        self.assertEqual(manager.load(), [0, 1, 2])
        for destination in manager.get_all():
            self.assertEqual(destination.coordinate, SENTINEL_COORDINATE)
            self.assertFalse(destination.is_resolved)

    def test_non_finite_or_out_of_range_coordinates_are_unresolved(self):
        store = InMemoryKeyValueStore({
            "address1": "not a number", "address1Lat": "nan", "address1Lon": "nan",
            "address2": "infinite", "address2Lat": "35.1", "address2Lon": "inf",
            "address3": "off the globe", "address3Lat": "95", "address3Lon": "136.3",
        })
        manager = DestinationManager(store)
        self.assertEqual(manager.load(), [0, 1, 2])
        for destination in manager.get_all():
            self.assertFalse(destination.is_resolved)

    def test_blank_address_is_not_a_destination(self):
        manager = DestinationManager(InMemoryKeyValueStore({"address1": "   ", "address2": "B"}))
        manager.load()
        self.assertEqual(manager.configured_slots(), [1])

    def test_custom_label(self):
        manager = DestinationManager(InMemoryKeyValueStore({"address1": "A", "label1": "Mum"}))
        manager.load()
        self.assertEqual(manager.label_for_slot(0), "Mum")
        self.assertEqual(manager.label_for_slot(2), "Other")


class TestDestinationEditing(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.manager = DestinationManager(self.store)
        self.manager.load()

    def test_save_with_coordinate(self):
        destination = self.manager.save_address(0, "  名古屋城 ", label="Castle", coordinate=CASTLE)

        self.assertEqual(destination.address_text, "名古屋城")
        self.assertEqual(destination.label, "Castle")
        self.assertTrue(destination.is_resolved)
        self.assertEqual(self.store.get_string("address1"), "名古屋城")
        self.assertEqual(self.store.get_string("address1Lat"), "35.1856")
        self.assertEqual(self.store.get_string("address1Lon"), "136.8997")
        self.assertEqual(self.store.get_string("label1"), "Castle")
        self.assertTrue(self.manager.has_setup())

    def test_save_without_coordinate_drops_old_one(self):
        self.manager.save_address(1, "old", coordinate=CASTLE)
        destination = self.manager.save_address(1, "new")

        self.assertFalse(destination.is_resolved)
        self.assertIsNone(self.store.get_string("address2Lat"))
        self.assertIsNone(self.store.get_string("address2Lon"))

    def test_save_rejects_empty_address(self):
        with self.assertRaises(ValueError):
            self.manager.save_address(0, "  ")

    def test_invalid_slot(self):
        with self.assertRaises(ValueError):
            self.manager.save_address(3, "somewhere")

    def test_clear_keeps_label(self):
        self.manager.save_address(2, "somewhere", label="Gym", coordinate=CASTLE)
        self.assertTrue(self.manager.clear(2))

        self.assertIsNone(self.manager.get(2))
        self.assertIsNone(self.store.get_string("address3"))
        self.assertIsNone(self.store.get_string("address3Lat"))
        self.assertEqual(self.store.get_string("label3"), "Gym")
        self.assertFalse(self.manager.clear(2))

    def test_update_coordinate(self):
        self.manager.save_address(0, "somewhere")
        self.assertTrue(self.manager.update_coordinate(0, CASTLE, address="somewhere"))
        self.assertEqual(self.manager.get(0).coordinate, CASTLE)
        self.assertFalse(self.manager.update_coordinate(0, CASTLE))

    def test_stale_coordinate_is_ignored(self):
        self.manager.save_address(0, "first")
        self.manager.save_address(0, "second")
        self.assertFalse(self.manager.update_coordinate(0, CASTLE, address="first"))
        self.assertFalse(self.manager.get(0).is_resolved)

    def test_sentinel_coordinate_is_ignored(self):
        self.manager.save_address(0, "somewhere")
        self.assertFalse(self.manager.update_coordinate(0, SENTINEL_COORDINATE))

    def test_non_finite_coordinate_is_ignored(self):
        self.manager.save_address(0, "somewhere")
        self.assertFalse(self.manager.update_coordinate(0, Coordinate(float("nan"), 136.0)))
        self.assertFalse(self.manager.get(0).is_resolved)
        self.assertIsNone(self.store.get_string("address1Lat"))


class TestResolvePending(unittest.TestCase):

    def test_resolves_only_unresolved_slots(self):
        store = InMemoryKeyValueStore({
            "address1": "名古屋城",
            "address2": "resolved", "address2Lat": "35.1", "address2Lon": "136.1",
            "address3": "unknown",
        })
        resolver = DictResolver({"名古屋城": CASTLE})
        manager = DestinationManager(store, resolver=resolver, run_in_background=run_inline)
        manager.load()

        resolved, failed = [], []
        started = manager.resolve_pending(
            lambda slot, address, coordinate: resolved.append((slot, address, coordinate)),
            on_failed=lambda slot, address: failed.append((slot, address))
        )

        self.assertEqual(started, 2)
        self.assertEqual(resolved, [(0, "名古屋城", CASTLE)])
        self.assertEqual(failed, [(2, "unknown")])

    def test_resolver_exception_reports_failure(self):
        class BrokenResolver(DictResolver):
            def resolve(self, address):
                raise RuntimeError("geocoder down")

        manager = DestinationManager(InMemoryKeyValueStore({"address1": "x"}),
                                     resolver=BrokenResolver(), run_in_background=run_inline)
        manager.load()
        failed = []
        manager.resolve_pending(lambda *args: None, on_failed=lambda slot, address: failed.append(slot))
        self.assertEqual(failed, [0])

    def test_without_resolver(self):
        manager = DestinationManager(InMemoryKeyValueStore({"address1": "x"}))
        manager.load()
        self.assertEqual(manager.resolve_pending(lambda *args: None), 0)


if __name__ == '__main__':
    unittest.main()
