"""
Example script simulating a walk towards a saved destination
Shows how the compass manager reacts to position and heading updates
"""
import logging
import time

from compass_manager import CompassManager
from navigation.algorithms.geo_utils import GeoUtils
from navigation.core.data_types import Coordinate
from storage.key_value_store import InMemoryKeyValueStore
from geocoding.service import GeocodingService
from publishing.live_activity import LiveActivityFeed

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

NAGOYA_STATION = Coordinate(35.1706, 136.8816)
NAGOYA_CASTLE = Coordinate(35.1856, 136.8997)


def example_walk(steps: int = 12, step_meters: float = 60.0, step_delay: float = 0.3):
    """Walk from Nagoya station towards Nagoya castle"""
    logger.info("=" * 60)
    logger.info("Walk demo: Nagoya station -> Nagoya castle")
    logger.info("=" * 60)

    manager = CompassManager(
        store=InMemoryKeyValueStore(),
        resolver=GeocodingService(),  # offline table only
        live_activity=LiveActivityFeed(throttle_interval=1.0)
    )
    manager.start()

    try:
        manager.save_destination(0, "名古屋城", label="Castle")
        # Let the background geocoding report back
        time.sleep(0.5)

        position = NAGOYA_STATION
        heading = 0.0
        for step in range(steps):
            bearing = GeoUtils.bearing(position, NAGOYA_CASTLE)
            # Wobble the walker's heading around the true bearing
            heading = (bearing + (15.0 if step % 2 else -15.0)) % 360

            manager.push_position(position.lat, position.lon)
            manager.push_heading(heading)
            time.sleep(step_delay)

            state = manager.get_direction_state()
            logger.info(
                f"Step {step + 1:2d}: {state['distance_m']:7.1f}m, "
                f"arrow {state['relative_bearing_deg']:6.1f}° "
                f"(display {state['display_angle_deg']:7.1f}°) mode={state['mode']}"
            )

            position = GeoUtils.destination_point(position, bearing, step_meters)

        # Wait for the coalesced publish to go out
        time.sleep(1.0)
        logger.info(f"Live activity: {manager.get_live_activity()}")
        logger.info(f"Metrics: {manager.get_metrics()}")
    finally:
        manager.stop()


def example_spin():
    """Spin the arrow while standing still"""
    logger.info("\n" + "=" * 60)
    logger.info("Spin demo")
    logger.info("=" * 60)

    manager = CompassManager(store=InMemoryKeyValueStore())
    manager.start()
    try:
        manager.push_heading(90.0)
        time.sleep(0.1)
        logger.info(f"Spin started: {manager.spin()}")
        logger.info(f"Second spin while running: {manager.spin()}")
        state = manager.get_direction_state()
        logger.info(f"Display angle during spin: {state['display_angle_deg']}° (spinning={state['is_spinning']})")
        time.sleep(0.8)
        state = manager.get_direction_state()
        logger.info(f"Display angle after spin: {state['display_angle_deg']}° (spinning={state['is_spinning']})")
    finally:
        manager.stop()


if __name__ == '__main__':
    example_walk()
    example_spin()
