"""Direction system interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, Callable
from .data_types import Coordinate, PublishedSnapshot


class PositionObserver(ABC):
    @abstractmethod
    def on_position_update(self, coordinate: Coordinate): pass


class HeadingObserver(ABC):
    @abstractmethod
    def on_heading_update(self, heading: float): pass


class PositionSource(ABC):
    """Delivers device positions, possibly from a background thread"""

    @abstractmethod
    def add_position_observer(self, observer: PositionObserver): pass


class HeadingSource(ABC):
    """Delivers compass headings, possibly from a background thread"""

    @abstractmethod
    def add_heading_observer(self, observer: HeadingObserver): pass


class SnapshotSink(ABC):
    """External display surface (widget, live activity, webhook)"""

    @abstractmethod
    def publish(self, snapshot: PublishedSnapshot):
        """Deliver a snapshot; delivery is best effort"""
        pass


class AddressResolver(ABC):
    """Converts free-text addresses to coordinates"""

    @abstractmethod
    def resolve(self, address: str) -> Optional[Coordinate]:
        """Return the coordinate for address, or None if it cannot be resolved"""
        pass


class KeyValueStore(ABC):
    """Opaque string store for destination records"""

    @abstractmethod
    def get_string(self, key: str) -> Optional[str]: pass

    @abstractmethod
    def set_string(self, key: str, value: Optional[str]):
        """Store value; None or empty string removes the key"""
        pass

    @abstractmethod
    def remove(self, key: str): pass


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self): pass

    @property
    @abstractmethod
    def cancelled(self) -> bool: pass


class Scheduler(ABC):
    """Single control thread onto which all direction state changes are marshalled"""

    @abstractmethod
    def call_soon(self, callback: Callable, *args): pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable, *args) -> TimerHandle: pass
