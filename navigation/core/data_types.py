"""Data structures for the direction system"""
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum
from datetime import datetime


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in degrees"""
    lat: float
    lon: float

    def is_sentinel(self) -> bool:
        """True for the (0, 0) placeholder meaning 'not resolved yet'"""
        return self.lat == 0.0 and self.lon == 0.0

    def to_dict(self):
        return {'lat': self.lat, 'lon': self.lon}


SENTINEL_COORDINATE = Coordinate(0.0, 0.0)


class DirectionMode(Enum):
    """Coordinator state for the selected destination"""
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class Destination:
    """One configured address slot (0: home, 1: work, 2: other)"""
    slot: int
    label: str
    coordinate: Coordinate = SENTINEL_COORDINATE
    address_text: str = ""

    @property
    def is_resolved(self) -> bool:
        return not self.coordinate.is_sentinel()

    @property
    def is_empty(self) -> bool:
        return not self.address_text

    def to_dict(self):
        return {
            'slot': self.slot,
            'label': self.label,
            'address': self.address_text,
            'coordinate': self.coordinate.to_dict() if self.is_resolved else None,
            'resolved': self.is_resolved
        }


@dataclass
class HeadingState:
    """Current device compass heading"""
    heading_degrees: float = 0.0
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        self.heading_degrees = self.heading_degrees % 360.0
        if self.timestamp is None:
            self.timestamp = datetime.now()


@dataclass(frozen=True)
class DirectionSample:
    """Distance and absolute bearing from the current origin to the target"""
    distance_meters: float
    absolute_bearing_degrees: float


@dataclass
class DirectionState:
    """Complete direction state as shown to clients"""
    mode: DirectionMode
    slot: Optional[int]
    destination_label: Optional[str]
    distance_meters: float
    bearing_degrees: float
    heading_degrees: float
    relative_bearing: float  # -180..180
    display_angle: float  # unbounded, spin offset included
    is_spinning: bool
    is_aligned: bool
    using_fallback_origin: bool
    using_fallback_destination: bool
    show_setup_prompt: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            'mode': self.mode.value,
            'slot': self.slot,
            'destination_label': self.destination_label,
            'distance_m': round(self.distance_meters, 2),
            'bearing_deg': round(self.bearing_degrees, 2),
            'heading_deg': round(self.heading_degrees, 2),
            'relative_bearing_deg': round(self.relative_bearing, 2),
            'display_angle_deg': round(self.display_angle, 2),
            'is_spinning': self.is_spinning,
            'is_aligned': self.is_aligned,
            'using_fallback_origin': self.using_fallback_origin,
            'using_fallback_destination': self.using_fallback_destination,
            'show_setup_prompt': self.show_setup_prompt,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class PublishedSnapshot:
    """Snapshot handed to widget / live-activity style consumers"""
    slot: int
    destination_label: str
    distance_meters: float
    bearing_rel_to_device: float  # -180..180, positive = clockwise
    last_updated: datetime

    def to_dict(self):
        return {
            'slot': self.slot,
            'destinationLabel': self.destination_label,
            'distanceMeters': self.distance_meters,
            'bearingRelToDevice': self.bearing_rel_to_device,
            'lastUpdated': self.last_updated.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PublishedSnapshot':
        return cls(
            slot=int(data['slot']),
            destination_label=str(data['destinationLabel']),
            distance_meters=float(data['distanceMeters']),
            bearing_rel_to_device=float(data['bearingRelToDevice']),
            last_updated=datetime.fromisoformat(data['lastUpdated'])
        )
