"""Exception types raised by metronow."""


class MetroNowError(Exception):
    """Base class for all metronow errors."""


class ConfigError(MetroNowError):
    """Raised when the process configuration is missing or invalid."""


class GatewayError(MetroNowError):
    """Raised when a departure fetch from the upstream API fails as a whole."""


class ProtocolError(MetroNowError, ValueError):
    """
    Raised when client input does not match the expected shape.

    Attributes:
        kind: Machine-readable category ("missing", "invalid_json",
            "invalid_schema" or "invalid_frame").
        message: Human-readable description sent back to the client.
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class HandshakeError(ProtocolError):
    """Invalid stop list on the connection handshake."""


class MessageError(ProtocolError):
    """Invalid message received on an open connection."""
