"""Geographic utility functions for direction finding"""
import math

from ..core.data_types import Coordinate


class GeoUtils:
    """Utilities for geographic calculations on a spherical Earth"""

    EARTH_RADIUS = 6371000  # meters

    @staticmethod
    def distance(origin: Coordinate, target: Coordinate) -> float:
        """
        Calculate great-circle distance using the Haversine formula

        Args:
            origin: Starting point
            target: Target point

        Returns:
            Distance in meters
        """
        # Convert to radians
        lat1_rad = math.radians(origin.lat)
        lat2_rad = math.radians(target.lat)
        delta_lat = math.radians(target.lat - origin.lat)
        delta_lon = math.radians(target.lon - origin.lon)

        # Haversine formula
        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        a = max(0.0, min(1.0, a))  # rounding can push a just outside [0, 1]
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return GeoUtils.EARTH_RADIUS * c

    @staticmethod
    def bearing(origin: Coordinate, target: Coordinate) -> float:
        """
        Calculate initial great-circle bearing from origin to target

        Args:
            origin: Starting point
            target: Target point

        Returns:
            Bearing in degrees (0-360, where 0 is North, clockwise).
            Coincident points give atan2(0, 0) = 0.
        """
        lat1_rad = math.radians(origin.lat)
        lat2_rad = math.radians(target.lat)
        delta_lon = math.radians(target.lon - origin.lon)

        x = math.sin(delta_lon) * math.cos(lat2_rad)
        y = (math.cos(lat1_rad) * math.sin(lat2_rad) -
             math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon))

        bearing_deg = math.degrees(math.atan2(x, y))

        # Normalize to 0-360
        bearing_deg = (bearing_deg + 360) % 360
        return bearing_deg

    @staticmethod
    def normalize_angle(angle: float) -> float:
        """Wrap angle into the -180 to 180 range"""
        d = math.fmod(angle, 360.0)
        if d > 180:
            d -= 360
        if d < -180:
            d += 360
        return d

    @staticmethod
    def calculate_angle_difference(current: float, target: float) -> float:
        """
        Calculate shortest angle difference between current and target heading

        Args:
            current: Current heading (0-360)
            target: Target heading (0-360)

        Returns:
            Angle difference (-180 to 180, negative = turn left, positive = turn right)
        """
        return GeoUtils.normalize_angle(target - current)

    @staticmethod
    def destination_point(origin: Coordinate, bearing: float, distance: float) -> Coordinate:
        """
        Calculate destination point given start point, bearing and distance

        Args:
            origin: Starting point
            bearing: Bearing in degrees
            distance: Distance in meters

        Returns:
            Coordinate of the destination point
        """
        lat_rad = math.radians(origin.lat)
        lon_rad = math.radians(origin.lon)
        bearing_rad = math.radians(bearing)

        angular_distance = distance / GeoUtils.EARTH_RADIUS

        dest_lat = math.asin(
            math.sin(lat_rad) * math.cos(angular_distance) +
            math.cos(lat_rad) * math.sin(angular_distance) * math.cos(bearing_rad)
        )

        dest_lon = lon_rad + math.atan2(
            math.sin(bearing_rad) * math.sin(angular_distance) * math.cos(lat_rad),
            math.cos(angular_distance) - math.sin(lat_rad) * math.sin(dest_lat)
        )

        # Keep longitude in -180..180
        lon_deg = (math.degrees(dest_lon) + 540) % 360 - 180
        return Coordinate(math.degrees(dest_lat), lon_deg)
