"""Direction finding module"""
from .direction_coordinator import DirectionUpdateCoordinator
from .destination_manager import DestinationManager
from .event_loop import EventLoop

__all__ = ['DirectionUpdateCoordinator', 'DestinationManager', 'EventLoop']
