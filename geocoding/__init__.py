"""Address resolution"""
from .errors import GeocodingError, GeocodingErrorReason
from .japanese_address import JapaneseAddressFormatter
from .nominatim_client import NominatimGeocoder
from .service import GeocodingService

__all__ = [
    'GeocodingError',
    'GeocodingErrorReason',
    'JapaneseAddressFormatter',
    'NominatimGeocoder',
    'GeocodingService'
]
