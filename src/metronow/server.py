"""WebSocket server exposing the departure board."""

import logging
from http import HTTPStatus
from typing import List, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from .broadcaster import BroadcastEngine, DepartureGateway
from .config import Settings
from .connections import ConnectionManager
from .errors import HandshakeError, MessageError
from .golemio_client import GolemioClient

logger = logging.getLogger(__name__)

# "Unexpected condition" close code used for protocol violations
CLOSE_UNEXPECTED_CONDITION = 1011
MAX_CLOSE_REASON_BYTES = 123


def _close_reason(message: str) -> str:
    encoded = message.encode("utf-8")
    if len(encoded) <= MAX_CLOSE_REASON_BYTES:
        return message
    return encoded[:MAX_CLOSE_REASON_BYTES].decode("utf-8", errors="ignore")


class DepartureServer:
    """Binds a ConnectionManager to a websockets server."""

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    def _stop_ids(self, headers: Headers) -> List[str]:
        values = headers.get_all(self.manager.header_name)
        if len(values) > 1:
            raise HandshakeError(
                "invalid_schema", f'"{self.manager.header_name}" header must be sent once'
            )
        return self.manager.validate_handshake(values[0] if values else None)

    def process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        """Reject the upgrade with 400 when the stop list header is invalid."""
        try:
            self._stop_ids(request.headers)
        except HandshakeError as e:
            logger.info(f"Rejected handshake from {connection.remote_address}: {e.message}")
            return connection.respond(HTTPStatus.BAD_REQUEST, e.message + "\n")
        return None

    async def handler(self, connection: ServerConnection) -> None:
        # Header was already validated in process_request
        stop_ids = self._stop_ids(connection.request.headers)
        connection_id = None
        try:
            connection_id = await self.manager.open(connection, stop_ids)
            async for message in connection:
                try:
                    await self.manager.handle_message(connection_id, message)
                except MessageError as e:
                    logger.info(f"Closing connection {connection_id}: {e.message}")
                    await connection.close(CLOSE_UNEXPECTED_CONDITION, _close_reason(e.message))
                    break
        except ConnectionClosed as e:
            logger.debug(f"Connection {connection_id} dropped: {e}")
        finally:
            if connection_id is not None:
                self.manager.close(connection_id)

    def serve(self, host: str, port: int):
        """Return the websockets server context manager."""
        return serve(self.handler, host, port, process_request=self.process_request)


def build_manager(settings: Settings, gateway: Optional[DepartureGateway] = None) -> ConnectionManager:
    """Wire up the gateway, broadcast engine and connection manager."""
    if gateway is None:
        gateway = GolemioClient(
            settings.api_key,
            base_url=settings.api_url,
            limit=settings.departure_limit,
            timeout=settings.request_timeout,
        )
    engine = BroadcastEngine(gateway)
    return ConnectionManager(
        engine,
        interval=settings.refresh_interval,
        refresh_on_subscribe=settings.refresh_on_subscribe,
    )


async def run(settings: Settings, gateway: Optional[DepartureGateway] = None) -> None:
    """Serve until cancelled."""
    manager = build_manager(settings, gateway)
    departure_server = DepartureServer(manager)
    try:
        async with departure_server.serve(settings.host, settings.port) as server:
            _log_listening(server)
            await server.serve_forever()
    finally:
        manager.shutdown()
        close = getattr(manager.engine.gateway, "close", None)
        if close is not None:
            close()


def _log_listening(server: Server) -> None:
    for sock in server.sockets:
        host, port = sock.getsockname()[:2]
        logger.info(f"Listening on {host}:{port}")
