"""Direction update coordinator implementation"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .core.interfaces import PositionObserver, HeadingObserver, Scheduler, SnapshotSink
from .core.data_types import (
    Coordinate, HeadingState, DirectionSample, DirectionMode,
    DirectionState, PublishedSnapshot, Destination
)
from .algorithms.geo_utils import GeoUtils
from .algorithms.angle_unwrapper import AngleUnwrapper, AlignmentDetector, SpinAnimation
from .debounce import DebouncedAction
from .destination_manager import DestinationManager
from telemetry.metrics import DirectionMetrics

logger = logging.getLogger(__name__)

# Nagoya city centre / Nagoya station
DEFAULT_FALLBACK_DESTINATION = Coordinate(35.1815, 136.9066)
DEFAULT_FALLBACK_ORIGIN = Coordinate(35.1706, 136.8816)


class DirectionUpdateCoordinator(PositionObserver, HeadingObserver):
    """
    Turns position, heading and destination changes into one consistent
    direction sample, drives the arrow angle and publishes coalesced snapshots.

    on_position_update, on_heading_update, on_destination_resolved and
    on_destination_resolution_failed may be called from any thread: they only
    enqueue work on the scheduler. Every other method must run on the
    scheduler's control thread.
    """

    def __init__(self,
                 destinations: DestinationManager,
                 scheduler: Scheduler,
                 sinks: Optional[List[SnapshotSink]] = None,
                 unwrapper: Optional[AngleUnwrapper] = None,
                 alignment: Optional[AlignmentDetector] = None,
                 spin: Optional[SpinAnimation] = None,
                 fallback_origin: Coordinate = DEFAULT_FALLBACK_ORIGIN,
                 fallback_destination: Coordinate = DEFAULT_FALLBACK_DESTINATION,
                 coalesce_interval: float = 0.5,
                 distance_threshold: float = 1.0,
                 bearing_threshold: float = 0.5,
                 active_epsilon: Optional[float] = None,
                 passive_epsilon: float = 0.18,
                 metrics: Optional[DirectionMetrics] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize coordinator

        Args:
            destinations: Destination slots (already loaded or loaded via reload_destinations)
            scheduler: Control-thread scheduler; also runs the publish debounce timer
            sinks: Snapshot consumers
            unwrapper: Arrow angle tracker
            alignment: Alignment event detector
            spin: Decorative spin animation
            fallback_origin: Used while no device position is known
            fallback_destination: Used while no resolved destination is selected
            coalesce_interval: Publish debounce delay (seconds)
            distance_threshold: Minimum distance change to publish (meters)
            bearing_threshold: Minimum relative bearing change to publish (degrees)
            active_epsilon: Arrow jitter threshold in the foreground (defaults to the unwrapper's)
            passive_epsilon: Arrow jitter threshold in the background
            metrics: Counters
            clock: Timestamp source for snapshots
        """
        self.destinations = destinations
        self._scheduler = scheduler
        self._sinks: List[SnapshotSink] = list(sinks or [])
        self.unwrapper = unwrapper or AngleUnwrapper()
        self.alignment = alignment or AlignmentDetector()
        self.spin_animation = spin or SpinAnimation()
        self.fallback_origin = fallback_origin
        self.fallback_destination = fallback_destination
        self.distance_threshold = distance_threshold
        self.bearing_threshold = bearing_threshold
        self.active_epsilon = active_epsilon if active_epsilon is not None else self.unwrapper.epsilon
        self.passive_epsilon = passive_epsilon
        self.metrics = metrics or DirectionMetrics()
        self._clock = clock

        # State
        self._position: Optional[Coordinate] = None
        self._heading = HeadingState(0.0)
        self._selected_slot: Optional[int] = None
        self._mode = DirectionMode.IDLE
        self._sample: Optional[DirectionSample] = None
        self._using_fallback_origin = True
        self._using_fallback_destination = True
        self._show_setup_prompt = False

        # Publish coalescing
        self._last_published_distance: Optional[float] = None
        self._last_published_bearing: Optional[float] = None
        self._publisher = DebouncedAction(scheduler, coalesce_interval, self._publish_if_significant)

        self.alignment.add_listener(self.metrics.add_alignment_event)

        self._select_default_slot()
        logger.info(f"Direction coordinator initialized (coalesce={coalesce_interval}s, "
                    f"thresholds={distance_threshold}m/{bearing_threshold}°)")

    # ------------------------------------------------------------------
    # Thread-safe entry points
    # ------------------------------------------------------------------

    def on_position_update(self, coordinate: Coordinate):
        """Position callback from a location source (any thread)"""
        self._scheduler.call_soon(self._apply_position, coordinate)

    def on_heading_update(self, heading: float):
        """Heading callback from a compass source (any thread)"""
        self._scheduler.call_soon(self._apply_heading, heading)

    def on_destination_resolved(self, slot: int, address: str, coordinate: Coordinate):
        """Address resolver result (any thread)"""
        self._scheduler.call_soon(self._apply_resolved, slot, address, coordinate)

    def on_destination_resolution_failed(self, slot: int, address: str):
        """Address resolver failure (any thread); the slot keeps its sentinel coordinate"""
        self._scheduler.call_soon(self.metrics.add_geocode_result, False)

    def add_sink(self, sink: SnapshotSink):
        self._sinks.append(sink)

    # ------------------------------------------------------------------
    # Control-thread handlers
    # ------------------------------------------------------------------

    def _apply_position(self, coordinate: Coordinate):
        self._position = coordinate
        logger.debug(f"Position updated: ({coordinate.lat:.6f}, {coordinate.lon:.6f})")
        self.recompute()

    def _apply_heading(self, heading: float):
        self._heading = HeadingState(heading)
        self.recompute()

    def _apply_resolved(self, slot: int, address: str, coordinate: Coordinate):
        if not self.destinations.update_coordinate(slot, coordinate, address=address):
            return
        self.metrics.add_geocode_result(True)
        if slot == self._selected_slot:
            self.recompute()

    def _select_default_slot(self):
        """Keep the current slot if still configured, otherwise take the first one"""
        slots = self.destinations.configured_slots()
        if self._selected_slot not in slots:
            self._selected_slot = slots[0] if slots else None

    def _selected_destination(self) -> Optional[Destination]:
        if self._selected_slot is None:
            return None
        return self.destinations.get(self._selected_slot)

    def recompute(self) -> DirectionSample:
        """Recalculate distance and bearing, move the arrow, schedule a publish"""
        destination, sample = self._compute_sample()
        self.metrics.add_recompute(self._using_fallback_origin, self._using_fallback_destination)

        self._update_arrow(sample.absolute_bearing_degrees)

        logger.debug(f"Direction [{self._mode.value}]: {sample.distance_meters:.1f}m @ "
                     f"{sample.absolute_bearing_degrees:.1f}° (heading {self._heading.heading_degrees:.1f}°)")

        self._schedule_publish(destination, sample)
        return sample

    def _compute_sample(self) -> Tuple[Optional[Destination], DirectionSample]:
        """Pick target and origin and measure between them. No arrow or publish side effects."""
        destination = self._selected_destination()

        if destination is not None and destination.is_resolved:
            target = destination.coordinate
            self._mode = DirectionMode.ACTIVE
            self._using_fallback_destination = False
        else:
            target = self.fallback_destination
            self._mode = DirectionMode.IDLE
            self._using_fallback_destination = True

        if self._position is not None:
            origin = self._position
            self._using_fallback_origin = False
        else:
            origin = self.fallback_origin
            self._using_fallback_origin = True

        sample = DirectionSample(
            distance_meters=GeoUtils.distance(origin, target),
            absolute_bearing_degrees=GeoUtils.bearing(origin, target)
        )
        self._sample = sample
        return destination, sample

    def _update_arrow(self, bearing: float):
        heading = self._heading.heading_degrees
        # While spinning every delta is applied so the arrow settles on the target
        self.unwrapper.update(bearing, heading, force=self.spin_animation.is_spinning())
        self.alignment.update(GeoUtils.normalize_angle(bearing - heading))

    # ------------------------------------------------------------------
    # Publish coalescing
    # ------------------------------------------------------------------

    def _schedule_publish(self, destination: Optional[Destination], sample: DirectionSample):
        if destination is None:
            self._publisher.cancel()
            return

        bearing_rel = GeoUtils.normalize_angle(
            sample.absolute_bearing_degrees - self._heading.heading_degrees
        )
        self._publisher.trigger(destination.slot, destination.label, sample.distance_meters, bearing_rel)

    @property
    def publish_pending(self) -> bool:
        return self._publisher.pending

    def _publish_if_significant(self, slot: int, label: str, distance: float, bearing_rel: float) -> bool:
        if self._last_published_distance is not None and self._last_published_bearing is not None:
            distance_diff = abs(distance - self._last_published_distance)
            bearing_diff = abs(GeoUtils.normalize_angle(bearing_rel - self._last_published_bearing))
            if distance_diff < self.distance_threshold and bearing_diff < self.bearing_threshold:
                self.metrics.add_publish_skipped()
                logger.debug(f"Skipping publish: Δd={distance_diff:.2f}m, Δb={bearing_diff:.2f}°")
                return False

        snapshot = PublishedSnapshot(
            slot=slot,
            destination_label=label,
            distance_meters=distance,
            bearing_rel_to_device=bearing_rel,
            last_updated=self._clock()
        )
        self._last_published_distance = distance
        self._last_published_bearing = bearing_rel
        self.metrics.add_publish()

        for sink in self._sinks:
            try:
                sink.publish(snapshot)
            except Exception as e:
                self.metrics.add_publish_failure()
                logger.warning(f"Snapshot sink {type(sink).__name__} failed: {e}")

        logger.debug(f"Published snapshot for slot {slot}: {distance:.1f}m, {bearing_rel:.1f}°")
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_slot(self, slot: int) -> bool:
        """
        Point the arrow at another destination slot

        Returns:
            False if the slot has no address; the setup prompt flag is raised instead
        """
        if self.destinations.get(slot) is None:
            self._show_setup_prompt = True
            logger.info(f"Slot {slot} is not configured, setup required")
            return False

        self._selected_slot = slot
        self._show_setup_prompt = False
        logger.info(f"🎯 Selected destination #{slot} '{self.destinations.label_for_slot(slot)}'")
        self.recompute()
        return True

    def dismiss_setup_prompt(self):
        self._show_setup_prompt = False

    def reload_destinations(self) -> int:
        """
        Re-read destinations from storage (session start, leaving settings)

        Returns:
            Number of background geocoding jobs started
        """
        unresolved = self.destinations.load()
        self._select_default_slot()
        self.recompute()
        return self._resolve(unresolved)

    def save_destination(self, slot: int, address: str, label: Optional[str] = None,
                         coordinate: Optional[Coordinate] = None) -> Destination:
        destination = self.destinations.save_address(slot, address, label=label, coordinate=coordinate)
        if self._selected_slot is None:
            self._selected_slot = slot
        if not destination.is_resolved:
            self._resolve([slot])
        self.recompute()
        return destination

    def clear_destination(self, slot: int) -> bool:
        cleared = self.destinations.clear(slot)
        if cleared:
            self._select_default_slot()
            self.recompute()
        return cleared

    def _resolve(self, slots: List[int]) -> int:
        if not slots:
            return 0
        return self.destinations.resolve_pending(
            self.on_destination_resolved,
            slots=slots,
            on_failed=self.on_destination_resolution_failed
        )

    def spin(self) -> bool:
        """Start the decorative spin; False if one is already running"""
        if not self.spin_animation.start():
            return False
        self.metrics.add_spin()
        return True

    def set_display_profile(self, active: bool):
        """Foreground uses a finer jitter threshold than background"""
        self.unwrapper.epsilon = self.active_epsilon if active else self.passive_epsilon
        logger.info(f"Display profile {'active' if active else 'passive'} (epsilon={self.unwrapper.epsilon}°)")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def selected_slot(self) -> Optional[int]:
        return self._selected_slot

    @property
    def mode(self) -> DirectionMode:
        return self._mode

    @property
    def last_sample(self) -> Optional[DirectionSample]:
        return self._sample

    @property
    def display_angle(self) -> float:
        """Arrow rotation including any running spin"""
        return self.unwrapper.current_display + self.spin_animation.offset()

    def get_state(self) -> DirectionState:
        sample = self._sample or self._compute_sample()[1]
        heading = self._heading.heading_degrees
        destination = self._selected_destination()
        return DirectionState(
            mode=self._mode,
            slot=destination.slot if destination else None,
            destination_label=destination.label if destination else None,
            distance_meters=sample.distance_meters,
            bearing_degrees=sample.absolute_bearing_degrees,
            heading_degrees=heading,
            relative_bearing=GeoUtils.normalize_angle(sample.absolute_bearing_degrees - heading),
            display_angle=self.display_angle,
            is_spinning=self.spin_animation.is_spinning(),
            is_aligned=self.alignment.is_aligned,
            using_fallback_origin=self._using_fallback_origin,
            using_fallback_destination=self._using_fallback_destination,
            show_setup_prompt=self._show_setup_prompt,
            timestamp=self._clock()
        )
