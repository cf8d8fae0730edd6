"""metronow - Real-time departure board push service for Prague public transport."""

__version__ = "0.1.0"

from .models import Departure
from .errors import ConfigError, GatewayError, HandshakeError, MessageError, MetroNowError
from .config import Settings
from .subscriptions import SubscriptionRegistry
from .departure_cache import DepartureCache
from .golemio_client import GolemioClient
from .broadcaster import BroadcastEngine
from .refresh_timer import RefreshTimer
from .connections import ConnectionManager

__all__ = [
    "BroadcastEngine",
    "ConnectionManager",
    "DepartureCache",
    "GolemioClient",
    "RefreshTimer",
    "Settings",
    "SubscriptionRegistry",
    "Departure",
    "MetroNowError",
    "ConfigError",
    "GatewayError",
    "HandshakeError",
    "MessageError",
]
