"""Shared in-memory departure cache."""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from .models import Departure

logger = logging.getLogger(__name__)


class DepartureCache:
    """
    Latest departures per stop, shared by all connections.

    A stop missing from the cache has never been fetched. Entries are only
    ever overwritten, never expired or cleared.
    """

    def __init__(self):
        self._departures_by_stop: Dict[str, List[Departure]] = {}
        self._lock = threading.Lock()

    def get(self, stop_id: str) -> Optional[List[Departure]]:
        """Return the cached departures for a stop, or None if never fetched."""
        with self._lock:
            departures = self._departures_by_stop.get(stop_id)
            return list(departures) if departures is not None else None

    def set(self, stop_id: str, departures: Iterable[Departure]) -> None:
        """Overwrite the departures for a stop."""
        departures = list(departures)
        with self._lock:
            self._departures_by_stop[stop_id] = departures
        logger.debug(f"Cached {len(departures)} departures for {stop_id}")

    def has(self, stop_id: str) -> bool:
        with self._lock:
            return stop_id in self._departures_by_stop

    def stop_ids(self) -> List[str]:
        with self._lock:
            return list(self._departures_by_stop)

    def __len__(self) -> int:
        with self._lock:
            return len(self._departures_by_stop)
