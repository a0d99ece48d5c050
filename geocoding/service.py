"""Address resolver combining the online geocoder and the offline table"""
import logging
from typing import List, Optional

from navigation.core.data_types import Coordinate
from navigation.core.interfaces import AddressResolver
from . import fallback_table
from .errors import GeocodingError
from .japanese_address import JapaneseAddressFormatter
from .nominatim_client import NominatimGeocoder

logger = logging.getLogger(__name__)


class GeocodingService(AddressResolver):
    """
    Formats the address, asks the online geocoder, and falls back to the
    built-in table (and finally the default city centre) when that fails
    """

    def __init__(self, geocoder: Optional[NominatimGeocoder] = None,
                 formatter: Optional[JapaneseAddressFormatter] = None,
                 default_coordinate: Coordinate = fallback_table.NAGOYA_CENTER):
        self.geocoder = geocoder
        self.formatter = formatter or JapaneseAddressFormatter()
        self.default_coordinate = default_coordinate

    def resolve(self, address: str) -> Optional[Coordinate]:
        if not address or not address.strip():
            return None

        formatted = self.formatter.format_address(address)

        if self.geocoder is not None:
            try:
                return self.geocoder.geocode(formatted)
            except GeocodingError as e:
                logger.warning(f"Geocoder failed for '{formatted}' ({e.reason.value}), using offline table")

        return fallback_table.lookup(address, default=self.default_coordinate)

    def get_suggestions(self, text: str) -> List[str]:
        suggestions = self.formatter.get_suggestions(text)
        return suggestions or list(fallback_table.SUGGESTED_ADDRESSES)
