"""Direction algorithms implementations"""
from .geo_utils import GeoUtils
from .angle_unwrapper import AngleUnwrapper, AlignmentDetector, SpinAnimation

__all__ = ['GeoUtils', 'AngleUnwrapper', 'AlignmentDetector', 'SpinAnimation']
