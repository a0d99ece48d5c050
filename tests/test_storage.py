import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from storage.key_value_store import InMemoryKeyValueStore, JsonFileKeyValueStore, StorageError
from storage.label_store import AddressLabelStore


class TestInMemoryStore(unittest.TestCase):
    def test_set_get_remove(self):
        store = InMemoryKeyValueStore()
        store.set_string("address1", "somewhere")
        self.assertEqual(store.get_string("address1"), "somewhere")
        store.remove("address1")
        self.assertIsNone(store.get_string("address1"))

    def test_empty_value_removes(self):
        store = InMemoryKeyValueStore({"a": "1"})
        store.set_string("a", "")
        self.assertEqual(store.to_dict(), {})


class TestJsonFileStore(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "nested", "destinations.json")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_missing_file_starts_empty(self):
        store = JsonFileKeyValueStore(self.path)
        self.assertIsNone(store.get_string("address1"))
        self.assertFalse(os.path.exists(self.path))

    def test_persists_across_instances(self):
        store = JsonFileKeyValueStore(self.path)
        store.set_string("address1", "名古屋城")
        store.set_string("address1Lat", "35.1856")

        reopened = JsonFileKeyValueStore(self.path)
        self.assertEqual(reopened.get_string("address1"), "名古屋城")
        self.assertEqual(reopened.get_string("address1Lat"), "35.1856")

        reopened.remove("address1Lat")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"address1": "名古屋城"})
        self.assertFalse(os.path.exists(self.path + ".tmp"))

    def test_failed_write_keeps_previous_values(self):
        store = JsonFileKeyValueStore(self.path)
        store.set_string("address1", "old")

        with patch("storage.key_value_store.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                store.set_string("address1", "new")
            with self.assertRaises(OSError):
                store.remove("address1")

        self.assertEqual(store.get_string("address1"), "old")
        self.assertEqual(JsonFileKeyValueStore(self.path).get_string("address1"), "old")

    def test_corrupt_file_raises(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("{not json")
        with self.assertRaises(StorageError):
            JsonFileKeyValueStore(self.path)

    def test_non_object_raises(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            json.dump(["a", "b"], f)
        with self.assertRaises(StorageError):
            JsonFileKeyValueStore(self.path)


class TestLabelStore(unittest.TestCase):
    def test_defaults_and_custom_labels(self):
        store = InMemoryKeyValueStore()
        labels = AddressLabelStore(store)
        self.assertEqual(labels.label_for_slot(0), "Home")
        self.assertEqual(labels.label_for_slot(1), "Work")
        self.assertEqual(labels.label_for_slot(2), "Other")

        labels.save(1, "  Office ")
        self.assertEqual(labels.label_for_slot(1), "Office")
        self.assertEqual(store.get_string("label2"), "Office")

        labels.save(1, "")
        self.assertEqual(labels.label_for_slot(1), "Work")

    def test_default_label_clamps_slot(self):
        self.assertEqual(AddressLabelStore.default_label(-1), "Home")
        self.assertEqual(AddressLabelStore.default_label(7), "Other")


if __name__ == '__main__':
    unittest.main()
