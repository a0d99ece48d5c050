"""
Compass Manager - Main integration class
Wires storage, address resolution, the direction coordinator and snapshot sinks
"""
import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional

from config.settings import (
    fallback_config, compass_config, publish_config, storage_config, geocoding_config
)
from navigation.core.interfaces import (
    PositionSource, HeadingSource, PositionObserver, HeadingObserver,
    KeyValueStore, AddressResolver, SnapshotSink
)
from navigation.core.data_types import Coordinate
from navigation.algorithms.angle_unwrapper import AngleUnwrapper, AlignmentDetector, SpinAnimation
from navigation.destination_manager import DestinationManager
from navigation.direction_coordinator import DirectionUpdateCoordinator
from navigation.event_loop import EventLoop
from geocoding.nominatim_client import NominatimGeocoder
from geocoding.service import GeocodingService
from publishing.snapshot_store import SnapshotStore
from publishing.live_activity import LiveActivityFeed
from publishing.webhook_sink import WebhookSink
from storage.key_value_store import JsonFileKeyValueStore
from telemetry.metrics import DirectionMetrics

logger = logging.getLogger(__name__)


class CompassUnavailableError(Exception):
    """The control loop did not answer in time"""
    pass


class SensorFeed(PositionSource, HeadingSource):
    """
    Position / heading source fed from outside (HTTP clients, simulators).
    Observers are called on the pushing thread.
    """

    def __init__(self):
        self._position_observers: List[PositionObserver] = []
        self._heading_observers: List[HeadingObserver] = []
        self._lock = threading.Lock()

    def add_position_observer(self, observer: PositionObserver):
        with self._lock:
            self._position_observers.append(observer)

    def add_heading_observer(self, observer: HeadingObserver):
        with self._lock:
            self._heading_observers.append(observer)

    def push_position(self, lat: float, lon: float):
        coordinate = Coordinate(lat, lon)
        with self._lock:
            observers = list(self._position_observers)
        for observer in observers:
            observer.on_position_update(coordinate)

    def push_heading(self, heading: float):
        with self._lock:
            observers = list(self._heading_observers)
        for observer in observers:
            observer.on_heading_update(heading)


class CompassManager:
    """
    Central manager owning the control loop and every collaborator.
    All reads and commands are executed on the control loop thread.
    """

    def __init__(self,
                 store: KeyValueStore,
                 resolver: Optional[AddressResolver] = None,
                 snapshot_store: Optional[SnapshotStore] = None,
                 live_activity: Optional[LiveActivityFeed] = None,
                 extra_sinks: Optional[List[SnapshotSink]] = None,
                 event_loop: Optional[EventLoop] = None,
                 call_timeout: float = 2.0):
        """
        Args:
            store: Destination key-value store
            resolver: Address resolver for destinations without coordinates
            snapshot_store: JSON snapshot sink (also read back by the API)
            live_activity: Live activity sink
            extra_sinks: Additional snapshot sinks (webhooks)
            event_loop: Control loop; a new one is created if omitted
            call_timeout: Max seconds to wait for the control loop
        """
        self.store = store
        self.resolver = resolver
        self.snapshot_store = snapshot_store
        self.live_activity = live_activity or LiveActivityFeed(
            throttle_interval=publish_config['live_activity_interval']
        )
        self.event_loop = event_loop or EventLoop()
        self.call_timeout = call_timeout
        self.metrics = DirectionMetrics()
        self.sensor_feed = SensorFeed()
        self._is_running = False

        sinks: List[SnapshotSink] = []
        if self.snapshot_store is not None:
            sinks.append(self.snapshot_store)
        sinks.append(self.live_activity)
        sinks.extend(extra_sinks or [])

        self.destinations = DestinationManager(store, resolver=resolver)
        self.coordinator = DirectionUpdateCoordinator(
            destinations=self.destinations,
            scheduler=self.event_loop,
            sinks=sinks,
            unwrapper=AngleUnwrapper(epsilon=compass_config['angle_epsilon']),
            alignment=AlignmentDetector(
                threshold=compass_config['alignment_threshold'],
                cooldown=compass_config['alignment_cooldown']
            ),
            spin=SpinAnimation(
                degrees=compass_config['spin_degrees'],
                duration=compass_config['spin_duration']
            ),
            fallback_origin=Coordinate(*fallback_config['station']),
            fallback_destination=Coordinate(*fallback_config['city_center']),
            coalesce_interval=publish_config['coalesce_interval'],
            distance_threshold=publish_config['distance_threshold'],
            bearing_threshold=publish_config['bearing_threshold'],
            passive_epsilon=compass_config['passive_angle_epsilon'],
            metrics=self.metrics
        )
        self.coordinator.alignment.add_listener(self._on_aligned)

        # Register as sensor observer
        self.sensor_feed.add_position_observer(self.coordinator)
        self.sensor_feed.add_heading_observer(self.coordinator)

        logger.info("Compass Manager initialized")

    def _on_aligned(self):
        logger.info("🧭 Facing the destination")

    def start(self) -> bool:
        """Start the control loop and load destinations"""
        if self._is_running:
            logger.warning("Compass already running")
            return False

        self.event_loop.start()
        self._is_running = True
        try:
            started = self._call(self.coordinator.reload_destinations)
            logger.info(f"Compass started ({started} destination(s) queued for geocoding)")
            return True
        except CompassUnavailableError as e:
            logger.error(f"Failed to load destinations: {e}")
            self.stop()
            return False

    def stop(self):
        if not self._is_running:
            return
        logger.info("Stopping compass...")
        self._is_running = False
        self.event_loop.stop()
        self.live_activity.end()
        logger.info("Compass stopped")

    @property
    def is_running(self) -> bool:
        return self._is_running

    def _call(self, callback, *args):
        try:
            return self.event_loop.call_and_wait(callback, *args, timeout=self.call_timeout)
        except FutureTimeoutError as e:
            raise CompassUnavailableError("Control loop did not respond") from e

    # Sensor input

    def push_position(self, lat: float, lon: float):
        self.sensor_feed.push_position(lat, lon)

    def push_heading(self, heading: float):
        self.sensor_feed.push_heading(heading)

    # Commands

    def reload(self) -> int:
        """Re-read destinations, e.g. after leaving settings"""
        return self._call(self.coordinator.reload_destinations)

    def select_slot(self, slot: int) -> bool:
        return self._call(self.coordinator.select_slot, slot)

    def save_destination(self, slot: int, address: str, label: Optional[str] = None,
                         coordinate: Optional[Coordinate] = None) -> dict:
        destination = self._call(self.coordinator.save_destination, slot, address, label, coordinate)
        return destination.to_dict()

    def clear_destination(self, slot: int) -> bool:
        return self._call(self.coordinator.clear_destination, slot)

    def spin(self) -> bool:
        return self._call(self.coordinator.spin)

    def set_display_profile(self, active: bool):
        self._call(self.coordinator.set_display_profile, active)

    # Queries

    def get_direction_state(self) -> dict:
        return self._call(lambda: self.coordinator.get_state().to_dict())

    def get_destinations(self) -> dict:
        def collect():
            return {
                'destinations': [d.to_dict() for d in self.destinations.get_all()],
                'selected_slot': self.coordinator.selected_slot,
                'has_setup': self.destinations.has_setup()
            }
        return self._call(collect)

    def get_snapshot(self) -> Optional[dict]:
        if self.snapshot_store is None:
            return None
        snapshot = self.snapshot_store.load()
        return snapshot.to_dict() if snapshot else None

    def get_live_activity(self) -> Optional[dict]:
        return self.live_activity.get_state()

    def get_suggestions(self, text: str) -> List[str]:
        if isinstance(self.resolver, GeocodingService):
            return self.resolver.get_suggestions(text)
        return []

    def get_metrics(self) -> dict:
        return self._call(self.metrics.to_dict)

    def get_status(self) -> dict:
        return {
            'running': self._is_running,
            'loop_running': self.event_loop.is_running,
            'geocoder': type(self.resolver).__name__ if self.resolver else None,
            'snapshot_path': self.snapshot_store.path if self.snapshot_store else None
        }


def create_compass_manager() -> CompassManager:
    """Build a CompassManager from environment configuration"""
    store = JsonFileKeyValueStore(storage_config['path'])

    geocoder = None
    if geocoding_config['enabled']:
        geocoder = NominatimGeocoder(
            search_url=geocoding_config['search_url'],
            user_agent=geocoding_config['user_agent'],
            timeout=geocoding_config['timeout'],
            country_codes=geocoding_config['country_codes']
        )
    else:
        logger.warning("Online geocoder disabled - using offline address table only")
    resolver = GeocodingService(geocoder=geocoder, default_coordinate=Coordinate(*fallback_config['city_center']))

    snapshot_store = SnapshotStore(
        path=publish_config['snapshot_path'],
        min_save_interval=publish_config['store_min_save_interval'],
        distance_epsilon=publish_config['store_distance_epsilon'],
        bearing_epsilon=publish_config['store_bearing_epsilon']
    )

    extra_sinks: List[SnapshotSink] = []
    if publish_config['webhook_url']:
        extra_sinks.append(WebhookSink(publish_config['webhook_url'], timeout=publish_config['webhook_timeout']))
        logger.info(f"Snapshot webhook enabled: {publish_config['webhook_url']}")

    return CompassManager(
        store=store,
        resolver=resolver,
        snapshot_store=snapshot_store,
        extra_sinks=extra_sinks
    )
