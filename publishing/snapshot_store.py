"""
Snapshot Store - shares the latest direction snapshot with widget-style readers
"""

import json
import os
import threading
import time
import logging
from typing import Callable, Optional

from navigation.core.data_types import PublishedSnapshot
from navigation.core.interfaces import SnapshotSink
from navigation.algorithms.geo_utils import GeoUtils

logger = logging.getLogger(__name__)


class SnapshotStore(SnapshotSink):
    """Writes the latest snapshot to a JSON file, skipping trivial rewrites"""

    def __init__(self, path: str, min_save_interval: float = 0.4,
                 distance_epsilon: float = 2.0, bearing_epsilon: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        self.path = path
        self.min_save_interval = min_save_interval
        self.distance_epsilon = distance_epsilon
        self.bearing_epsilon = bearing_epsilon
        self._clock = clock
        self._lock = threading.Lock()
        self._last_snapshot: Optional[PublishedSnapshot] = None
        self._last_save_time: Optional[float] = None

    def _is_trivial_change(self, snapshot: PublishedSnapshot, now: float) -> bool:
        last = self._last_snapshot
        if last is None or self._last_save_time is None:
            return False
        if snapshot.slot != last.slot or snapshot.destination_label != last.destination_label:
            return False
        distance_diff = abs(snapshot.distance_meters - last.distance_meters)
        bearing_diff = abs(GeoUtils.normalize_angle(snapshot.bearing_rel_to_device - last.bearing_rel_to_device))
        recently_saved = (now - self._last_save_time) < self.min_save_interval
        return distance_diff < self.distance_epsilon and bearing_diff < self.bearing_epsilon and recently_saved

    def publish(self, snapshot: PublishedSnapshot):
        """Persist snapshot; write errors are logged and dropped"""
        now = self._clock()
        with self._lock:
            if self._is_trivial_change(snapshot, now):
                logger.debug("Snapshot change too small, not saved")
                return

            try:
                directory = os.path.dirname(self.path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                tmp_path = f"{self.path}.tmp"
                with open(tmp_path, 'w', encoding='utf-8') as f:
                    json.dump(snapshot.to_dict(), f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except OSError as e:
                logger.error(f"Error saving snapshot to {self.path}: {e}")
                return

            self._last_snapshot = snapshot
            self._last_save_time = now
        logger.debug(f"Saved snapshot to {self.path}")

    def load(self) -> Optional[PublishedSnapshot]:
        """Read the stored snapshot, or None if missing or unreadable"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return PublishedSnapshot.from_dict(json.load(f))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Cannot read snapshot {self.path}: {e}")
            return None
