"""Arrow angle tracking without spurious full turns"""
import logging
import time
from typing import Callable, List, Optional

from .geo_utils import GeoUtils

logger = logging.getLogger(__name__)


class AngleUnwrapper:
    """
    Keeps a continuously varying display angle for the compass arrow.

    The target is bearing minus heading. Each update moves the display angle by
    the shortest equivalent delta, so the value may grow past +-360 over a
    session while always pointing the same way as the target.
    """

    def __init__(self, epsilon: float = 0.1, initial_display: Optional[float] = None):
        """
        Args:
            epsilon: Deltas smaller than this (degrees) are ignored to avoid jitter
            initial_display: Starting display angle; None snaps to the first target
        """
        self.epsilon = epsilon
        self._display = initial_display
        self._last_delta = 0.0

    @property
    def current_display(self) -> float:
        return self._display if self._display is not None else 0.0

    @property
    def last_delta(self) -> float:
        """Delta applied by the most recent update (0 when suppressed)"""
        return self._last_delta

    def update(self, target_absolute: float, heading: float, force: bool = False) -> float:
        """
        Track a new target

        Args:
            target_absolute: Absolute bearing to the destination (degrees)
            heading: Current device heading (degrees)
            force: Apply the delta even below epsilon (used while spinning)

        Returns:
            New display angle
        """
        target = target_absolute - heading

        if self._display is None:
            self._display = target
            self._last_delta = 0.0
            logger.debug(f"Arrow initialised at {target:.2f}°")
            return self._display

        delta = GeoUtils.normalize_angle(target - self._display)

        if abs(delta) < self.epsilon and not force:
            self._last_delta = 0.0
            return self._display

        self._display += delta
        self._last_delta = delta
        return self._display

    def reset(self, initial_display: Optional[float] = None):
        self._display = initial_display
        self._last_delta = 0.0


class AlignmentDetector:
    """
    One-shot notification when the arrow comes to point straight ahead.

    Fires on entering the alignment zone (|relative bearing| < threshold).
    An entry that lands inside the cooldown fires once the cooldown has passed
    if the arrow is still aligned. Staying aligned never fires twice.
    """

    def __init__(self, threshold: float = 5.0, cooldown: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        self.threshold = threshold
        self.cooldown = cooldown
        self._clock = clock
        self._aligned = False
        self._armed = True
        self._last_fired: Optional[float] = None
        self._listeners: List[Callable[[], None]] = []

    @property
    def is_aligned(self) -> bool:
        return self._aligned

    def add_listener(self, listener: Callable[[], None]):
        self._listeners.append(listener)

    def update(self, relative_target: float) -> bool:
        """
        Feed the current relative bearing

        Returns:
            True if the alignment event fired on this update
        """
        self._aligned = abs(GeoUtils.normalize_angle(relative_target)) < self.threshold
        if not self._aligned:
            self._armed = True
            return False
        if not self._armed:
            return False

        now = self._clock()
        if self._last_fired is not None and now - self._last_fired < self.cooldown:
            return False

        self._armed = False
        self._last_fired = now
        logger.debug(f"Aligned with target ({relative_target:.1f}°)")
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Alignment listener failed: {e}", exc_info=True)
        return True


class SpinAnimation:
    """Decorative full turn superimposed on the tracked arrow angle"""

    def __init__(self, degrees: float = 360.0, duration: float = 0.7,
                 clock: Callable[[], float] = time.monotonic):
        self.degrees = degrees
        self.duration = duration
        self._clock = clock
        self._started_at: Optional[float] = None

    def start(self) -> bool:
        """Begin a spin; ignored while one is still running"""
        if self.is_spinning():
            return False
        self._started_at = self._clock()
        return True

    def is_spinning(self) -> bool:
        if self._started_at is None:
            return False
        if self._clock() - self._started_at >= self.duration:
            self._started_at = None
            return False
        return True

    def offset(self) -> float:
        """Extra rotation to add to the display angle right now"""
        return self.degrees if self.is_spinning() else 0.0
