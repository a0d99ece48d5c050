from enum import Enum


class GeocodingErrorReason(Enum):
    NO_RESULTS = "no_results"
    INVALID_ADDRESS = "invalid_address"
    NETWORK_ERROR = "network_error"


class GeocodingError(Exception):
    """Address could not be resolved by a geocoder"""

    def __init__(self, reason: GeocodingErrorReason, message: str = ""):
        self.reason = reason
        super().__init__(message or reason.value)
