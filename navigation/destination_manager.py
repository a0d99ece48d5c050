"""Destination slot manager implementation"""
import logging
import math
import threading
from typing import Callable, Dict, List, Optional

from config import storage_keys
from storage.label_store import AddressLabelStore
from .core.interfaces import KeyValueStore, AddressResolver
from .core.data_types import Coordinate, Destination, SENTINEL_COORDINATE

logger = logging.getLogger(__name__)


def _start_daemon_thread(target: Callable, name: str):
    threading.Thread(target=target, daemon=True, name=name).start()


class DestinationManager:
    """
    Keeps the three address slots (home / work / other) in sync with the store.

    Mutating methods are meant to run on the control thread; only address
    resolution runs in the background and reports back through a callback.
    """

    def __init__(self, store: KeyValueStore,
                 label_store: Optional[AddressLabelStore] = None,
                 resolver: Optional[AddressResolver] = None,
                 run_in_background: Callable[[Callable, str], None] = _start_daemon_thread):
        """
        Args:
            store: Persistent key-value store holding addresses and coordinates
            label_store: Slot labels; defaults to one backed by the same store
            resolver: Address resolver used for slots without coordinates
            run_in_background: Runs a callable off the control thread
        """
        self._store = store
        self.label_store = label_store or AddressLabelStore(store)
        self.resolver = resolver
        self._run_in_background = run_in_background
        self._destinations: Dict[int, Destination] = {}

    def load(self) -> List[int]:
        """
        Read all slots from the store

        Returns:
            Slots that have an address but no stored coordinate
        """
        destinations: Dict[int, Destination] = {}
        unresolved: List[int] = []

        for slot in range(storage_keys.SLOT_COUNT):
            address = (self._store.get_string(storage_keys.address_key(slot)) or "").strip()
            if not address:
                continue

            coordinate = self._read_coordinate(slot)
            if coordinate is None:
                coordinate = SENTINEL_COORDINATE
                unresolved.append(slot)

            destinations[slot] = Destination(
                slot=slot,
                label=self.label_store.label_for_slot(slot),
                coordinate=coordinate,
                address_text=address
            )

        self._destinations = destinations
        logger.info(f"📍 Loaded {len(destinations)} destination(s), {len(unresolved)} awaiting geocoding")
        return unresolved

    def _read_coordinate(self, slot: int) -> Optional[Coordinate]:
        lat_str = self._store.get_string(storage_keys.lat_key(slot))
        lon_str = self._store.get_string(storage_keys.lon_key(slot))
        if lat_str is None or lon_str is None:
            return None
        try:
            lat, lon = float(lat_str), float(lon_str)
        except ValueError:
            logger.warning(f"Stored coordinate for slot {slot} is not numeric: ({lat_str}, {lon_str})")
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)) or not (-90 <= lat <= 90 and -180 <= lon <= 180):
            logger.warning(f"Stored coordinate for slot {slot} is invalid: ({lat_str}, {lon_str})")
            return None
        coordinate = Coordinate(lat, lon)
        return None if coordinate.is_sentinel() else coordinate

    def get(self, slot: int) -> Optional[Destination]:
        """Destination for slot, or None if the slot has no address"""
        return self._destinations.get(slot)

    def get_all(self) -> List[Destination]:
        return [self._destinations[slot] for slot in sorted(self._destinations)]

    def configured_slots(self) -> List[int]:
        return sorted(self._destinations)

    def has_destinations(self) -> bool:
        return len(self._destinations) > 0

    def has_setup(self) -> bool:
        return self._store.get_string(storage_keys.HAS_SETUP_ADDRESSES) == "true"

    def label_for_slot(self, slot: int) -> str:
        destination = self._destinations.get(slot)
        if destination is not None:
            return destination.label
        return self.label_store.label_for_slot(max(0, min(slot, storage_keys.SLOT_COUNT - 1)))

    def save_address(self, slot: int, address: str, label: Optional[str] = None,
                     coordinate: Optional[Coordinate] = None) -> Destination:
        """
        Store an address for slot

        Without a coordinate the stored one is dropped and the slot becomes
        unresolved until resolve_pending() completes.
        """
        address = address.strip()
        if not address:
            raise ValueError("address cannot be empty")

        self._store.set_string(storage_keys.address_key(slot), address)
        if label is not None:
            self.label_store.save(slot, label)

        if coordinate is not None and not coordinate.is_sentinel():
            self._write_coordinate(slot, coordinate)
        else:
            coordinate = SENTINEL_COORDINATE
            self._store.remove(storage_keys.lat_key(slot))
            self._store.remove(storage_keys.lon_key(slot))

        self._store.set_string(storage_keys.HAS_SETUP_ADDRESSES, "true")

        destination = Destination(
            slot=slot,
            label=self.label_store.label_for_slot(slot),
            coordinate=coordinate,
            address_text=address
        )
        self._destinations[slot] = destination
        logger.info(f"➕ Saved destination #{slot} '{destination.label}': {address}")
        return destination

    def clear(self, slot: int) -> bool:
        """Empty a slot; its label is kept"""
        storage_keys.address_key(slot)  # validates slot
        self._store.remove(storage_keys.address_key(slot))
        self._store.remove(storage_keys.lat_key(slot))
        self._store.remove(storage_keys.lon_key(slot))
        removed = self._destinations.pop(slot, None)
        if removed:
            logger.info(f"🗑️  Cleared destination #{slot} '{removed.label}'")
        return removed is not None

    def update_coordinate(self, slot: int, coordinate: Coordinate, address: Optional[str] = None) -> bool:
        """
        Attach a resolved coordinate to slot

        Args:
            address: Address the coordinate was resolved for; if the slot has
                been edited since, the result is stale and ignored

        Returns:
            True if the destination changed
        """
        destination = self._destinations.get(slot)
        if destination is None:
            return False
        if address is not None and destination.address_text != address:
            logger.debug(f"Ignoring stale coordinate for slot {slot} ('{address}' was replaced)")
            return False
        if coordinate.is_sentinel() or coordinate == destination.coordinate:
            return False
        if not (math.isfinite(coordinate.lat) and math.isfinite(coordinate.lon)):
            logger.warning(f"Ignoring non-finite coordinate for slot {slot}")
            return False

        self._write_coordinate(slot, coordinate)
        destination.coordinate = coordinate
        logger.info(f"📌 Destination #{slot} resolved to ({coordinate.lat:.6f}, {coordinate.lon:.6f})")
        return True

    def _write_coordinate(self, slot: int, coordinate: Coordinate):
        self._store.set_string(storage_keys.lat_key(slot), repr(coordinate.lat))
        self._store.set_string(storage_keys.lon_key(slot), repr(coordinate.lon))

    def resolve_pending(self, on_resolved: Callable[[int, str, Coordinate], None],
                        slots: Optional[List[int]] = None,
                        on_failed: Optional[Callable[[int, str], None]] = None) -> int:
        """
        Geocode unresolved destinations in the background

        Args:
            on_resolved: Called from the background thread as (slot, address, coordinate)
            slots: Limit to these slots; defaults to every unresolved slot
            on_failed: Called from the background thread as (slot, address) when
                resolution fails; the destination keeps its sentinel coordinate

        Returns:
            Number of resolutions started
        """
        if self.resolver is None:
            return 0

        if slots is None:
            slots = [d.slot for d in self.get_all() if not d.is_resolved]

        started = 0
        for slot in slots:
            destination = self._destinations.get(slot)
            if destination is None or destination.is_resolved:
                continue
            self._run_in_background(self._make_resolution(slot, destination.address_text, on_resolved, on_failed),
                                    f"Geocode-{slot}")
            started += 1
        return started

    def _make_resolution(self, slot: int, address: str,
                         on_resolved: Callable[[int, str, Coordinate], None],
                         on_failed: Optional[Callable[[int, str], None]]) -> Callable[[], None]:
        def resolve():
            try:
                coordinate = self.resolver.resolve(address)
            except Exception as e:
                logger.error(f"Address resolution failed for slot {slot}: {e}", exc_info=True)
                if on_failed:
                    on_failed(slot, address)
                return
            if coordinate is None or coordinate.is_sentinel():
                logger.warning(f"Could not resolve address for slot {slot}: '{address}'")
                if on_failed:
                    on_failed(slot, address)
                return
            on_resolved(slot, address, coordinate)
        return resolve
