"""Validation of client-supplied stop lists and messages."""

import json
from typing import Annotated, List, Optional, Type, Union

from pydantic import BaseModel, Field, StrictStr, TypeAdapter, ValidationError

from .errors import HandshakeError, MessageError, ProtocolError

StopID = Annotated[StrictStr, Field(min_length=1)]
StopIDs = Annotated[List[StopID], Field(min_length=1)]

_stop_ids_adapter = TypeAdapter(StopIDs)


class SubscribeMessage(BaseModel):
    """Replaces the full subscription list of a connection."""
    subscribe: StopIDs


def _describe(error: ValidationError) -> str:
    """Render the first validation error as "<location>: <message>"."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]


def _decode(raw: str, error_cls: Type[ProtocolError], what: str):
    try:
        return json.loads(raw)
    except ValueError as e:
        raise error_cls("invalid_json", f"{what} is not valid JSON: {e}") from e


def parse_stop_ids_header(raw: Optional[str], header_name: str = "X-Stop-IDs") -> List[str]:
    """
    Parse the handshake header carrying a JSON array of stop IDs.

    Args:
        raw: Header value, or None if the header was not sent.
        header_name: Header name used in error messages.

    Returns:
        The validated list of stop IDs, in the order given.

    Raises:
        HandshakeError: If the header is missing, not JSON, or not a non-empty
            list of non-empty strings.
    """
    if raw is None or not raw.strip():
        raise HandshakeError("missing", f'"{header_name}" header is missing')

    data = _decode(raw, HandshakeError, f'"{header_name}" header')
    try:
        return _stop_ids_adapter.validate_python(data)
    except ValidationError as e:
        raise HandshakeError("invalid_schema", f'"{header_name}" error: {_describe(e)}') from e


def parse_subscribe_message(raw: Union[str, bytes]) -> List[str]:
    """
    Parse a subscribe message sent on an open connection.

    Returns:
        The new stop list.

    Raises:
        MessageError: For binary frames, invalid JSON or a payload that is not
            {"subscribe": [...]}.
    """
    if not isinstance(raw, str):
        raise MessageError("invalid_frame", "Message has to be string")

    data = _decode(raw, MessageError, "Message")
    try:
        return SubscribeMessage.model_validate(data).subscribe
    except ValidationError as e:
        raise MessageError("invalid_schema", _describe(e)) from e
