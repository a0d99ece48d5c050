"""Snapshot sinks"""
from .snapshot_store import SnapshotStore
from .live_activity import LiveActivityFeed
from .webhook_sink import WebhookSink

__all__ = ['SnapshotStore', 'LiveActivityFeed', 'WebhookSink']
