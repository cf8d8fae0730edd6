"""Fetch orchestration and per-connection fan-out."""

import asyncio
import json
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Protocol

from websockets.exceptions import ConnectionClosed

from .departure_cache import DepartureCache
from .models import Departure
from .subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class Sender(Protocol):
    """Anything a snapshot can be pushed to (a WebSocket connection in production)."""

    async def send(self, message: str) -> None:
        ...


class DepartureGateway(Protocol):
    """Upstream source of raw departures (see GolemioClient)."""

    async def fetch(self, stop_ids: Iterable[str]):
        ...


class BroadcastEngine:
    """
    Keeps the departure cache fresh and pushes snapshots to connections.

    Each connection receives a JSON object keyed by the stops it subscribed
    to; stops that have never been fetched map to null.
    """

    def __init__(
        self,
        gateway: DepartureGateway,
        registry: Optional[SubscriptionRegistry] = None,
        cache: Optional[DepartureCache] = None,
    ):
        self.gateway = gateway
        self.registry = registry if registry is not None else SubscriptionRegistry()
        self.cache = cache if cache is not None else DepartureCache()
        self._senders: Dict[str, Sender] = {}

    def attach(self, connection_id: str, sender: Sender) -> None:
        self._senders[connection_id] = sender

    def detach(self, connection_id: str) -> None:
        self._senders.pop(connection_id, None)

    def has_sender(self, connection_id: str) -> bool:
        return connection_id in self._senders

    def _stop_ids_to_fetch(self, target_connection_id: Optional[str]) -> List[str]:
        if target_connection_id is None:
            stop_ids = self.registry.all_subscribed_stop_ids()
        else:
            stop_ids = [
                stop_id
                for stop_id in self.registry.get(target_connection_id) or []
                if not self.cache.has(stop_id)
            ]
        # dict.fromkeys keeps first-seen order while dropping duplicates
        return list(dict.fromkeys(stop_ids))

    async def refresh(self, target_connection_id: Optional[str] = None) -> None:
        """
        Fetch departures and push snapshots.

        Args:
            target_connection_id: If given, fetch only that connection's stops
                that are not cached yet and send to that connection only.
                Otherwise refetch every subscribed stop and send to everyone.
        """
        stop_ids = self._stop_ids_to_fetch(target_connection_id)
        updated = 0

        if stop_ids:
            try:
                board = await self.gateway.fetch(stop_ids)
                updated = self._store(board.departures)
            except Exception as e:
                logger.error(f"Failed to fetch departures for {len(stop_ids)} stop(s): {e}", exc_info=True)
                if target_connection_id is None:
                    return
        elif target_connection_id is None:
            logger.debug("No subscribed stops, skipping refresh")
            return

        if target_connection_id is None:
            if not updated:
                logger.debug("Refresh returned no departures, nothing to send")
                return
            await self._send_all()
        else:
            await self._send_to(target_connection_id)

    def _store(self, raw_departures: Iterable) -> int:
        """Normalize raw records and overwrite the cache per stop. Returns the stop count."""
        departures_by_stop: Dict[str, List[Departure]] = defaultdict(list)

        for raw in raw_departures:
            try:
                departure = Departure.from_raw(raw)
            except ValueError as e:
                logger.warning(f"Skipping departure record: {e}")
                continue
            departures_by_stop[departure.stop_id].append(departure)

        for stop_id, departures in departures_by_stop.items():
            departures.sort(key=lambda d: d.predicted_time)
            self.cache.set(stop_id, departures)

        return len(departures_by_stop)

    def snapshot_for(self, connection_id: str) -> Optional[Dict[str, Optional[List[dict]]]]:
        """
        Build the payload for one connection from the cache.

        Returns None if the connection is no longer subscribed.
        """
        stop_ids = self.registry.get(connection_id)
        if stop_ids is None:
            return None

        snapshot: Dict[str, Optional[List[dict]]] = {}
        for stop_id in stop_ids:
            departures = self.cache.get(stop_id)
            snapshot[stop_id] = [d.to_dict() for d in departures] if departures is not None else None
        return snapshot

    async def _send_to(self, connection_id: str) -> None:
        sender = self._senders.get(connection_id)
        snapshot = self.snapshot_for(connection_id)
        if sender is None or snapshot is None:
            logger.debug(f"Connection {connection_id} is gone, skipping send")
            return

        try:
            await sender.send(json.dumps(snapshot))
        except ConnectionClosed:
            logger.debug(f"Connection {connection_id} closed before send")
        except Exception as e:
            logger.warning(f"Failed to send departures to {connection_id}: {e}")

    async def _send_all(self) -> None:
        connection_ids = list(self._senders)
        await asyncio.gather(*(self._send_to(connection_id) for connection_id in connection_ids))
        logger.debug(f"Broadcast departures to {len(connection_ids)} connection(s)")
