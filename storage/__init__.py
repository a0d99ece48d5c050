"""Destination persistence"""
from .key_value_store import InMemoryKeyValueStore, JsonFileKeyValueStore, StorageError
from .label_store import AddressLabelStore

__all__ = ['InMemoryKeyValueStore', 'JsonFileKeyValueStore', 'StorageError', 'AddressLabelStore']
