"""Per-connection stop subscriptions."""

import threading
from typing import Dict, Iterable, List, Optional


class SubscriptionRegistry:
    """Maps connection IDs to the ordered list of stop IDs they follow."""

    def __init__(self):
        self._stop_ids_by_connection: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def set(self, connection_id: str, stop_ids: Iterable[str]) -> None:
        """Replace the whole subscription of a connection."""
        stop_ids = list(stop_ids)
        with self._lock:
            self._stop_ids_by_connection[connection_id] = stop_ids

    def get(self, connection_id: str) -> Optional[List[str]]:
        """Return a copy of the connection's stop IDs, or None if not registered."""
        with self._lock:
            stop_ids = self._stop_ids_by_connection.get(connection_id)
            return list(stop_ids) if stop_ids is not None else None

    def remove(self, connection_id: str) -> None:
        with self._lock:
            self._stop_ids_by_connection.pop(connection_id, None)

    def all_subscribed_stop_ids(self) -> List[str]:
        """
        Flattened stop IDs across all connections.

        May contain duplicates when several connections follow the same stop.
        """
        with self._lock:
            return [
                stop_id
                for stop_ids in self._stop_ids_by_connection.values()
                for stop_id in stop_ids
            ]

    def connection_ids(self) -> List[str]:
        with self._lock:
            return list(self._stop_ids_by_connection)

    def __contains__(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._stop_ids_by_connection

    def __len__(self) -> int:
        with self._lock:
            return len(self._stop_ids_by_connection)
