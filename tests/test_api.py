"""
Integration tests for the HTTP API over a real compass manager
"""
import os
import shutil
import tempfile
import time
import unittest

from app import create_app, validate_coordinates, validate_heading
from compass_manager import CompassManager
from geocoding.service import GeocodingService
from publishing.snapshot_store import SnapshotStore
from storage.key_value_store import InMemoryKeyValueStore


class TestValidators(unittest.TestCase):
    def test_validate_coordinates(self):
        self.assertEqual(validate_coordinates(35.0, 136.0), (True, None))
        self.assertFalse(validate_coordinates("35", 136.0)[0])
        self.assertFalse(validate_coordinates(True, 136.0)[0])
        self.assertFalse(validate_coordinates(float('nan'), 136.0)[0])
        self.assertFalse(validate_coordinates(91.0, 136.0)[0])
        self.assertFalse(validate_coordinates(35.0, -181.0)[0])

    def test_validate_heading(self):
        self.assertTrue(validate_heading(0)[0])
        self.assertTrue(validate_heading(359.9)[0])
        self.assertFalse(validate_heading(360)[0])
        self.assertFalse(validate_heading(-1)[0])
        self.assertFalse(validate_heading("north")[0])


class TestCompassApi(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.store = InMemoryKeyValueStore({
            "address1": "名古屋城", "address1Lat": "35.1856", "address1Lon": "136.8997",
        })
        self.manager = CompassManager(
            store=self.store,
            resolver=GeocodingService(),
            snapshot_store=SnapshotStore(os.path.join(self.tmp_dir, "navi_snapshot.json"))
        )
        self.assertTrue(self.manager.start())
        self.app = create_app(self.manager)
        self.client = self.app.test_client()

    def tearDown(self):
        self.manager.stop()
        shutil.rmtree(self.tmp_dir)

    def wait_for(self, predicate, timeout=3.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.05)
        return False

    def test_health(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['running'])

    def test_direction_uses_fallback_origin(self):
        data = self.client.get('/api/direction').get_json()
        self.assertEqual(data['mode'], 'active')
        self.assertEqual(data['slot'], 0)
        self.assertEqual(data['destination_label'], 'Home')
        self.assertTrue(data['using_fallback_origin'])
        self.assertGreater(data['distance_m'], 0)

    def test_position_and_heading(self):
        response = self.client.post('/api/position', json={'lat': 35.1856, 'lon': 136.8997})
        self.assertEqual(response.status_code, 200)
        response = self.client.post('/api/heading', json={'heading': 90.0})
        self.assertEqual(response.status_code, 200)

        data = self.client.get('/api/direction').get_json()
        self.assertFalse(data['using_fallback_origin'])
        self.assertEqual(data['distance_m'], 0.0)
        self.assertEqual(data['heading_deg'], 90.0)

    def test_position_validation(self):
        self.assertEqual(self.client.post('/api/position', json={'lat': 35.0}).status_code, 400)
        self.assertEqual(self.client.post('/api/position', json={'lat': 95.0, 'lon': 1.0}).status_code, 400)
        self.assertEqual(self.client.post('/api/position', data='nope').status_code, 400)
        self.assertEqual(self.client.post('/api/heading', json={'heading': 400}).status_code, 400)

    def test_destinations_crud(self):
        response = self.client.put('/api/destinations/1', json={
            'address': '名古屋駅', 'label': 'Office', 'lat': 35.1706, 'lon': 136.8816
        })
        self.assertEqual(response.status_code, 200)
        destination = response.get_json()['destination']
        self.assertEqual(destination['label'], 'Office')
        self.assertTrue(destination['resolved'])

        data = self.client.get('/api/destinations').get_json()
        self.assertEqual([d['slot'] for d in data['destinations']], [0, 1])
        self.assertEqual(data['selected_slot'], 0)
        self.assertTrue(data['has_setup'])

        response = self.client.post('/api/destinations/select', json={'slot': 1})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get('/api/direction').get_json()['slot'], 1)

        self.assertEqual(self.client.delete('/api/destinations/1').status_code, 200)
        self.assertEqual(self.client.delete('/api/destinations/1').status_code, 404)
        self.assertEqual(self.client.get('/api/direction').get_json()['slot'], 0)

    def test_destination_without_coordinate_is_geocoded(self):
        response = self.client.put('/api/destinations/2', json={'address': '熱田神宮'})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.get_json()['destination']['resolved'])

        def resolved():
            slots = self.client.get('/api/destinations').get_json()['destinations']
            return any(d['slot'] == 2 and d['resolved'] for d in slots)
        self.assertTrue(self.wait_for(resolved))
        self.assertEqual(self.store.get_string("address3Lat"), "35.1282")

    def test_destination_validation(self):
        self.assertEqual(self.client.put('/api/destinations/5', json={'address': 'x'}).status_code, 400)
        self.assertEqual(self.client.put('/api/destinations/0', json={'address': ' '}).status_code, 400)
        self.assertEqual(self.client.put('/api/destinations/0', json={'address': 'x', 'lat': 1}).status_code, 400)
        self.assertEqual(self.client.delete('/api/destinations/abc').status_code, 400)

    def test_select_unconfigured_slot(self):
        response = self.client.post('/api/destinations/select', json={'slot': 2})
        self.assertEqual(response.status_code, 409)
        self.assertTrue(response.get_json()['show_setup_prompt'])
        self.assertTrue(self.client.get('/api/direction').get_json()['show_setup_prompt'])

    def test_reload(self):
        self.store.set_string("address2", "名古屋駅")
        response = self.client.post('/api/destinations/reload')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['geocoding_started'], 1)

    def test_spin(self):
        self.assertTrue(self.client.post('/api/spin').get_json()['success'])
        self.assertFalse(self.client.post('/api/spin').get_json()['success'])

    def test_display_profile(self):
        self.assertEqual(self.client.post('/api/display-profile', json={'active': False}).status_code, 200)
        self.assertEqual(self.manager.coordinator.unwrapper.epsilon, 0.18)
        self.assertEqual(self.client.post('/api/display-profile', json={'active': 'no'}).status_code, 400)

    def test_snapshot_and_live_activity(self):
        self.assertTrue(self.wait_for(lambda: self.client.get('/api/snapshot').status_code == 200))
        snapshot = self.client.get('/api/snapshot').get_json()
        self.assertEqual(snapshot['slot'], 0)
        self.assertEqual(snapshot['destinationLabel'], 'Home')

        activity = self.client.get('/api/live-activity').get_json()['activity']
        self.assertEqual(activity['slot'], 0)

    def test_suggestions(self):
        data = self.client.get('/api/geocoding/suggestions', query_string={'q': '栄'}).get_json()
        self.assertIn("愛知県名古屋市中区栄3-15-33", data['suggestions'])

    def test_metrics(self):
        data = self.client.get('/api/metrics').get_json()
        self.assertGreaterEqual(data['recomputes'], 1)

    def test_unknown_endpoint(self):
        response = self.client.get('/api/nope')
        self.assertEqual(response.status_code, 404)
        self.assertIn('error', response.get_json())

    def test_stopped_manager_is_unavailable(self):
        self.manager.stop()
        self.assertEqual(self.client.get('/api/direction').status_code, 503)
        self.assertEqual(self.client.get('/api/health').status_code, 503)


if __name__ == '__main__':
    unittest.main()
