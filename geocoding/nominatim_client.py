"""
Online geocoder backed by a Nominatim-compatible search endpoint
"""
import logging
from typing import Optional

import requests

from navigation.core.data_types import Coordinate
from .errors import GeocodingError, GeocodingErrorReason

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """Resolves an address with a single HTTP search request"""

    def __init__(self, search_url: str, user_agent: str, timeout: float = 5.0,
                 country_codes: Optional[str] = None, session: Optional[requests.Session] = None):
        self.search_url = search_url
        self.timeout = timeout
        self.country_codes = country_codes
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def geocode(self, address: str) -> Coordinate:
        """
        Args:
            address: Free-text address

        Returns:
            Coordinate of the best match

        Raises:
            GeocodingError: on invalid input, network failure or no results
        """
        if not address or not address.strip():
            raise GeocodingError(GeocodingErrorReason.INVALID_ADDRESS, "Address is empty")

        params = {"q": address, "format": "json", "limit": 1}
        if self.country_codes:
            params["countrycodes"] = self.country_codes

        try:
            response = self._session.get(self.search_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            raise GeocodingError(GeocodingErrorReason.NETWORK_ERROR, f"Geocoder request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError(GeocodingErrorReason.NETWORK_ERROR, f"Geocoder returned invalid JSON: {e}") from e

        if not results:
            raise GeocodingError(GeocodingErrorReason.NO_RESULTS, f"No results for '{address}'")

        try:
            best = results[0]
            coordinate = Coordinate(float(best["lat"]), float(best["lon"]))
        except (KeyError, TypeError, ValueError, IndexError) as e:
            raise GeocodingError(GeocodingErrorReason.NO_RESULTS, f"Malformed geocoder result: {e}") from e

        logger.debug(f"Geocoded '{address}' -> ({coordinate.lat:.6f}, {coordinate.lon:.6f})")
        return coordinate
