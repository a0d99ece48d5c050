"""Live-activity style feed: a running 'navigating to X' card updated at ~1 Hz"""
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from navigation.core.data_types import PublishedSnapshot
from navigation.core.interfaces import SnapshotSink

logger = logging.getLogger(__name__)


class LiveActivityFeed(SnapshotSink):
    def __init__(self, throttle_interval: float = 1.0,
                 clock: Callable[[], float] = time.monotonic,
                 enabled: bool = True):
        self.throttle_interval = throttle_interval
        self.enabled = enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._activity: Optional[dict] = None
        self._last_update: Optional[float] = None

    def start_if_available(self, slot: int, destination_label: str) -> bool:
        """
        Start an activity for slot; a running activity for another slot is
        ended first, one for the same slot is kept

        Returns:
            True if a new activity was started
        """
        if not self.enabled:
            return False
        with self._lock:
            if self._activity is not None:
                if self._activity['slot'] == slot:
                    return False
                logger.info(f"Ending live activity for slot {self._activity['slot']}")
                self._activity = None

            self._activity = {
                'slot': slot,
                'destination_label': destination_label,
                'distance_m': 0.0,
                'bearing_rel_deg': 0.0,
                'last_updated': datetime.now().isoformat(),
                'started_at': datetime.now().isoformat()
            }
            self._last_update = None
        logger.info(f"Live activity started for '{destination_label}' (slot {slot})")
        return True

    def update(self, distance_meters: float, bearing_rel_to_device: float,
               last_updated: Optional[datetime] = None) -> bool:
        """Update the running activity, throttled; False if dropped"""
        now = self._clock()
        with self._lock:
            if self._activity is None:
                return False
            if self._last_update is not None and now - self._last_update < self.throttle_interval:
                return False
            self._last_update = now
            self._activity['distance_m'] = distance_meters
            self._activity['bearing_rel_deg'] = bearing_rel_to_device
            self._activity['last_updated'] = (last_updated or datetime.now()).isoformat()
        return True

    def publish(self, snapshot: PublishedSnapshot):
        self.start_if_available(snapshot.slot, snapshot.destination_label)
        self.update(snapshot.distance_meters, snapshot.bearing_rel_to_device, snapshot.last_updated)

    def end(self):
        with self._lock:
            if self._activity is not None:
                logger.info(f"Live activity ended for slot {self._activity['slot']}")
            self._activity = None
            self._last_update = None

    def get_state(self) -> Optional[dict]:
        with self._lock:
            return dict(self._activity) if self._activity else None
