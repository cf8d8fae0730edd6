"""Connection lifecycle: handshake, subscription updates and teardown."""

import asyncio
import logging
import uuid
from typing import List, Optional, Union

from .broadcaster import BroadcastEngine, Sender
from .config import STOP_IDS_HEADER
from .refresh_timer import RefreshTimer
from .schemas import parse_stop_ids_header, parse_subscribe_message

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Drives connections through CONNECTING -> OPEN -> CLOSED.

    The manager owns the refresh timer: it is started when a connection opens
    and stopped once no subscribed connection remains.
    """

    def __init__(
        self,
        engine: BroadcastEngine,
        interval: float,
        refresh_on_subscribe: bool = False,
        header_name: str = STOP_IDS_HEADER,
    ):
        """
        Args:
            engine: Broadcast engine holding the registry, cache and senders.
            interval: Seconds between periodic refreshes.
            refresh_on_subscribe: Also run a targeted refresh after a
                subscription update.
            header_name: Handshake header carrying the stop list.
        """
        self.engine = engine
        self.refresh_on_subscribe = refresh_on_subscribe
        self.header_name = header_name
        self.timer = RefreshTimer(engine.refresh, interval)

    @property
    def registry(self):
        return self.engine.registry

    def validate_handshake(self, raw_header: Optional[str]) -> List[str]:
        """
        Validate the stop list sent with the handshake. Touches no state.

        Raises:
            HandshakeError: If the header is missing or invalid.
        """
        return parse_stop_ids_header(raw_header, self.header_name)

    async def open(self, sender: Sender, stop_ids: List[str]) -> str:
        """
        Register a newly accepted connection and send it its first snapshot.

        Returns:
            The new connection ID.
        """
        connection_id = str(uuid.uuid4())
        self.registry.set(connection_id, stop_ids)
        self.engine.attach(connection_id, sender)
        logger.info(f"Connection {connection_id} opened with {len(stop_ids)} stop(s)")

        if not self.timer.is_running:
            self.timer.start()

        try:
            await self.engine.refresh(connection_id)
        except asyncio.CancelledError:
            self.close(connection_id)
            raise
        return connection_id

    async def handle_message(self, connection_id: str, message: Union[str, bytes]) -> None:
        """
        Apply a subscribe message from an open connection.

        Raises:
            MessageError: If the message is not a valid subscribe message. The
                registry is left unchanged.
        """
        stop_ids = parse_subscribe_message(message)
        if connection_id not in self.registry:
            logger.debug(f"Ignoring message from closed connection {connection_id}")
            return

        self.registry.set(connection_id, stop_ids)
        logger.info(f"Connection {connection_id} subscribed to {len(stop_ids)} stop(s)")

        if self.refresh_on_subscribe:
            await self.engine.refresh(connection_id)

    def close(self, connection_id: str) -> None:
        """Forget a connection; stops the timer when it was the last one."""
        self.engine.detach(connection_id)
        self.registry.remove(connection_id)
        logger.info(f"Connection {connection_id} closed")

        if len(self.registry) == 0 and self.timer.is_running:
            self.timer.stop()

    def shutdown(self) -> None:
        self.timer.stop()
