"""Direction core interfaces and data structures"""
from .interfaces import (
    PositionObserver, HeadingObserver, PositionSource, HeadingSource,
    SnapshotSink, AddressResolver, KeyValueStore, Scheduler, TimerHandle
)
from .data_types import (
    Coordinate, SENTINEL_COORDINATE, Destination, HeadingState,
    DirectionSample, DirectionMode, DirectionState, PublishedSnapshot
)

__all__ = [
    'PositionObserver',
    'HeadingObserver',
    'PositionSource',
    'HeadingSource',
    'SnapshotSink',
    'AddressResolver',
    'KeyValueStore',
    'Scheduler',
    'TimerHandle',
    'Coordinate',
    'SENTINEL_COORDINATE',
    'Destination',
    'HeadingState',
    'DirectionSample',
    'DirectionMode',
    'DirectionState',
    'PublishedSnapshot'
]
