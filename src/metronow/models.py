"""Data models for the departure board."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from the upstream API.

    Accepts a trailing "Z" and returns a timezone-aware datetime (naive values
    are assumed to be UTC). Returns None for empty input.

    Raises:
        ValueError: If the value is not a valid timestamp.
    """
    if value is None:
        return None

    text = value.strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Departure:
    """Represents a single upcoming departure from a stop."""
    stop_id: str
    scheduled_time: datetime
    predicted_time: datetime  # Equal to scheduled_time when there is no prediction
    route_label: str  # Line short name, e.g. "A" or "136"
    headsign: str

    @classmethod
    def from_raw(cls, raw: Any) -> "Departure":
        """
        Normalize a raw upstream departure record.

        Args:
            raw: A RawDeparture from the Golemio client.

        Returns:
            Departure with trimmed text fields and parsed timestamps.

        Raises:
            ValueError: If the record has no stop reference or no usable
                scheduled time.
        """
        stop_id = (raw.stop.id or "").strip()
        if not stop_id:
            raise ValueError("departure has no stop reference")

        scheduled = parse_timestamp(raw.departure_timestamp.scheduled)
        if scheduled is None:
            raise ValueError(f"departure at {stop_id} has no scheduled time")

        predicted = parse_timestamp(raw.departure_timestamp.predicted) or scheduled

        return cls(
            stop_id=stop_id,
            scheduled_time=scheduled,
            predicted_time=predicted,
            route_label=(raw.route.short_name or "").strip(),
            headsign=(raw.trip.headsign or "").strip(),
        )

    def to_dict(self) -> Dict[str, str]:
        """Return the outbound JSON shape of this departure."""
        return {
            "stopID": self.stop_id,
            "scheduledTime": self.scheduled_time.isoformat(),
            "predictedTime": self.predicted_time.isoformat(),
            "routeLabel": self.route_label,
            "headsign": self.headsign,
        }
