import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


def _env_float(name: str, default: float, minimum: float = None, exclusive: bool = False) -> float:
    """Read a float from the environment, falling back to default on bad input"""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name}='{raw}' is not a number, using default {default}")
        return default
    if minimum is not None and (value < minimum or (exclusive and value == minimum)):
        logger.warning(f"{name}={value} is out of range, using default {default}")
        return default
    return value


def validate_compass_config():
    """Validate compass configuration taken from environment variables"""
    errors = []
    warnings = []

    # Fallback coordinates must be real positions
    for prefix in ("CITY_CENTER", "STATION"):
        for axis, limit in (("LAT", 90.0), ("LON", 180.0)):
            name = f"{prefix}_{axis}"
            raw = os.getenv(name, "").strip()
            if not raw:
                continue
            try:
                value = float(raw)
            except ValueError:
                errors.append(f"{name} must be a number, got '{raw}'")
                continue
            if not -limit <= value <= limit:
                errors.append(f"{name} must be between -{limit:g} and {limit:g}, got {value}")

    # Timing values
    for name in ("PUBLISH_COALESCE_INTERVAL", "ALIGNMENT_COOLDOWN", "SPIN_DURATION",
                 "LIVE_ACTIVITY_INTERVAL", "GEOCODER_TIMEOUT", "WEBHOOK_TIMEOUT"):
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            if float(raw) <= 0:
                errors.append(f"{name} must be positive, got {raw}")
        except ValueError:
            errors.append(f"{name} must be a number, got '{raw}'")

    # Thresholds
    for name in ("ANGLE_EPSILON", "PASSIVE_ANGLE_EPSILON", "ALIGNMENT_THRESHOLD", "PUBLISH_DISTANCE_THRESHOLD",
                 "PUBLISH_BEARING_THRESHOLD"):
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            if float(raw) < 0:
                errors.append(f"{name} cannot be negative, got {raw}")
        except ValueError:
            errors.append(f"{name} must be a number, got '{raw}'")

    if not os.getenv("GEOCODER_USER_AGENT", "").strip():
        warnings.append("GEOCODER_USER_AGENT is not set - using built-in default agent string")

    # Log results
    if errors:
        error_msg = "Compass configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    if warnings:
        warning_msg = "Compass configuration warnings:\n" + "\n".join(f"  - {warn}" for warn in warnings)
        logger.warning(warning_msg)

    logger.info("Compass configuration validation passed")
    return True

# Validate configuration on import
try:
    config_valid = validate_compass_config()
except ConfigurationError as e:
    logger.error(f"Compass configuration invalid: {e}")
    logger.info("Invalid values are replaced by built-in defaults")
    config_valid = False


def _coordinate(prefix: str, default_lat: float, default_lon: float) -> tuple:
    lat = _env_float(f"{prefix}_LAT", default_lat)
    lon = _env_float(f"{prefix}_LON", default_lon)
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return default_lat, default_lon
    return lat, lon


# Fallback coordinates used whenever real ones are unavailable
fallback_config = {
    "city_center": _coordinate("CITY_CENTER", 35.1815, 136.9066),  # fallback destination
    "station": _coordinate("STATION", 35.1706, 136.8816),  # fallback origin
}

# Arrow behaviour
compass_config = {
    "angle_epsilon": _env_float("ANGLE_EPSILON", 0.12, minimum=0.0),  # degrees, app in foreground
    "passive_angle_epsilon": _env_float("PASSIVE_ANGLE_EPSILON", 0.18, minimum=0.0),  # degrees, app in background
    "alignment_threshold": _env_float("ALIGNMENT_THRESHOLD", 5.0, minimum=0.0),  # degrees
    "alignment_cooldown": _env_float("ALIGNMENT_COOLDOWN", 1.0, minimum=0.0, exclusive=True),  # seconds
    "spin_degrees": _env_float("SPIN_DEGREES", 360.0),
    "spin_duration": _env_float("SPIN_DURATION", 0.7, minimum=0.0, exclusive=True),  # seconds
}

# Snapshot publishing
publish_config = {
    "coalesce_interval": _env_float("PUBLISH_COALESCE_INTERVAL", 0.5, minimum=0.0, exclusive=True),  # seconds
    "distance_threshold": _env_float("PUBLISH_DISTANCE_THRESHOLD", 1.0, minimum=0.0),  # meters
    "bearing_threshold": _env_float("PUBLISH_BEARING_THRESHOLD", 0.5, minimum=0.0),  # degrees
    "snapshot_path": os.getenv("SNAPSHOT_PATH", "data/navi_snapshot.json"),
    "store_min_save_interval": _env_float("SNAPSHOT_MIN_SAVE_INTERVAL", 0.4, minimum=0.0, exclusive=True),  # seconds
    "store_distance_epsilon": _env_float("SNAPSHOT_DISTANCE_EPSILON", 2.0, minimum=0.0),  # meters
    "store_bearing_epsilon": _env_float("SNAPSHOT_BEARING_EPSILON", 1.0, minimum=0.0),  # degrees
    "live_activity_interval": _env_float("LIVE_ACTIVITY_INTERVAL", 1.0, minimum=0.0, exclusive=True),  # ~1Hz
    "webhook_url": os.getenv("SNAPSHOT_WEBHOOK_URL", "").strip(),
    "webhook_timeout": _env_float("WEBHOOK_TIMEOUT", 3.0, minimum=0.0, exclusive=True),
}

# Destination storage
storage_config = {
    "path": os.getenv("DESTINATION_STORE_PATH", "data/destinations.json"),
}

# Address resolution
geocoding_config = {
    "enabled": os.getenv("GEOCODER_ENABLED", "True").lower() == "true",
    "search_url": os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search"),
    "user_agent": os.getenv("GEOCODER_USER_AGENT", "").strip() or "compass-navi/1.0",
    "timeout": _env_float("GEOCODER_TIMEOUT", 5.0, minimum=0.0, exclusive=True),  # seconds
    "country_codes": os.getenv("GEOCODER_COUNTRY_CODES", "jp"),
}
