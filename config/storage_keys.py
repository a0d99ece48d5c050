"""Persisted key names for destination slots"""

SLOT_COUNT = 3

# Address text per slot
ADDRESS_KEYS = ("address1", "address2", "address3")

# Resolved coordinates per slot
LAT_KEYS = ("address1Lat", "address2Lat", "address3Lat")
LON_KEYS = ("address1Lon", "address2Lon", "address3Lon")

# User-chosen labels per slot
LABEL_KEYS = ("label1", "label2", "label3")

HAS_SETUP_ADDRESSES = "hasSetupAddresses"


def _check_slot(slot: int) -> int:
    if not 0 <= slot < SLOT_COUNT:
        raise ValueError(f"slot must be 0..{SLOT_COUNT - 1}, got {slot}")
    return slot


def address_key(slot: int) -> str:
    return ADDRESS_KEYS[_check_slot(slot)]


def lat_key(slot: int) -> str:
    return LAT_KEYS[_check_slot(slot)]


def lon_key(slot: int) -> str:
    return LON_KEYS[_check_slot(slot)]


def label_key(slot: int) -> str:
    return LABEL_KEYS[_check_slot(slot)]
