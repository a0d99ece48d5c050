"""Telemetry and metrics collection for the compass service"""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DirectionMetrics:
    """Counters for direction updates and snapshot publishing"""

    # Direction updates
    recomputes: int = 0
    fallback_origin_uses: int = 0
    fallback_destination_uses: int = 0

    # Publishing
    publishes: int = 0
    publishes_skipped: int = 0
    publish_failures: int = 0

    # Arrow events
    alignment_events: int = 0
    spins: int = 0

    # Address resolution
    geocode_successes: int = 0
    geocode_failures: int = 0

    # Session info
    session_start: datetime = field(default_factory=datetime.now)

    def add_recompute(self, fallback_origin: bool, fallback_destination: bool):
        """Record a direction recompute and which fallbacks it needed"""
        self.recomputes += 1
        if fallback_origin:
            self.fallback_origin_uses += 1
        if fallback_destination:
            self.fallback_destination_uses += 1

    def add_publish(self):
        self.publishes += 1

    def add_publish_skipped(self):
        self.publishes_skipped += 1

    def add_publish_failure(self):
        self.publish_failures += 1

    def add_alignment_event(self):
        self.alignment_events += 1

    def add_spin(self):
        self.spins += 1

    def add_geocode_result(self, success: bool):
        if success:
            self.geocode_successes += 1
        else:
            self.geocode_failures += 1

    def to_dict(self) -> dict:
        """Convert metrics to dictionary"""
        return {
            'recomputes': self.recomputes,
            'fallback_origin_uses': self.fallback_origin_uses,
            'fallback_destination_uses': self.fallback_destination_uses,
            'publishes': self.publishes,
            'publishes_skipped': self.publishes_skipped,
            'publish_failures': self.publish_failures,
            'alignment_events': self.alignment_events,
            'spins': self.spins,
            'geocode_successes': self.geocode_successes,
            'geocode_failures': self.geocode_failures,
            'session_start': self.session_start.isoformat(),
            'session_duration_s': (datetime.now() - self.session_start).total_seconds()
        }
