"""User-chosen labels for destination slots"""
from config import storage_keys
from navigation.core.interfaces import KeyValueStore

DEFAULT_LABELS = ("Home", "Work", "Other")


class AddressLabelStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    @staticmethod
    def default_label(slot: int) -> str:
        index = max(0, min(slot, len(DEFAULT_LABELS) - 1))
        return DEFAULT_LABELS[index]

    def load(self, slot: int) -> str:
        """Saved label for slot, or empty string"""
        return (self._store.get_string(storage_keys.label_key(slot)) or "").strip()

    def save(self, slot: int, label: str):
        self._store.set_string(storage_keys.label_key(slot), (label or "").strip())

    def label_for_slot(self, slot: int) -> str:
        """Saved label, falling back to the default one"""
        return self.load(slot) or self.default_label(slot)
