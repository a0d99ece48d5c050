"""Pushes snapshots to an HTTP endpoint"""
import logging
from typing import Optional

import requests

from navigation.core.data_types import PublishedSnapshot
from navigation.core.interfaces import SnapshotSink

logger = logging.getLogger(__name__)


class WebhookSink(SnapshotSink):
    """POSTs each snapshot as JSON; delivery is best effort"""

    def __init__(self, url: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self.failures = 0

    def publish(self, snapshot: PublishedSnapshot):
        try:
            response = self._session.post(self.url, json=snapshot.to_dict(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.failures += 1
            logger.warning(f"Snapshot webhook delivery failed: {e}")
            return
        logger.debug(f"Snapshot delivered to {self.url}")
