"""Golemio PID departure-board fetcher."""

import asyncio
import logging
from typing import Iterable, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import DEFAULT_API_URL, DEFAULT_DEPARTURE_LIMIT, DEFAULT_REQUEST_TIMEOUT
from .errors import GatewayError

logger = logging.getLogger(__name__)

DEPARTURE_BOARDS_PATH = "/v2/pid/departureboards"


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawTimestamp(_RawModel):
    scheduled: Optional[str] = None
    predicted: Optional[str] = None


class RawStop(_RawModel):
    id: str


class RawRoute(_RawModel):
    short_name: Optional[str] = None


class RawTrip(_RawModel):
    headsign: Optional[str] = None


class RawDeparture(_RawModel):
    """A departure record as returned by the departure-board endpoint."""
    departure_timestamp: RawTimestamp
    stop: RawStop
    route: RawRoute = Field(default_factory=RawRoute)
    trip: RawTrip = Field(default_factory=RawTrip)


class DepartureBoard(_RawModel):
    """Departure-board response; other sections (stops, infotexts) are ignored."""
    departures: List[RawDeparture] = Field(default_factory=list)


class GolemioClient:
    """Fetches raw departures for a set of stops from the Golemio API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        limit: int = DEFAULT_DEPARTURE_LIMIT,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Golemio API token, sent as X-Access-Token.
            base_url: API root, without trailing slash.
            limit: Maximum number of departures requested per board.
            timeout: Request timeout in seconds.
            session: Optional pre-configured requests session.
        """
        self.base_url = base_url.rstrip("/")
        self.limit = limit
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "X-Access-Token": api_key,
            "Accept": "application/json",
        })

    def fetch_departures(self, stop_ids: Iterable[str]) -> DepartureBoard:
        """
        Fetch upcoming departures for the given stops.

        Stops the API knows nothing about are simply missing from the result.

        Args:
            stop_ids: GTFS stop IDs (e.g., "U1040Z101P").

        Returns:
            DepartureBoard with the raw departure records.

        Raises:
            GatewayError: If the request fails or the response has the wrong shape.
        """
        ids = sorted(set(stop_ids))
        if not ids:
            return DepartureBoard()

        url = f"{self.base_url}{DEPARTURE_BOARDS_PATH}"
        params = [("ids[]", stop_id) for stop_id in ids]
        params.append(("limit", str(self.limit)))

        logger.debug(f"Fetching departures for {len(ids)} stop(s)")
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise GatewayError(f"Departure request failed: {e}") from e
        except ValueError as e:
            raise GatewayError(f"Departure response is not valid JSON: {e}") from e

        try:
            board = DepartureBoard.model_validate(payload)
        except ValidationError as e:
            raise GatewayError(f"Unexpected departure response: {e.error_count()} error(s)") from e

        logger.debug(f"Received {len(board.departures)} departures")
        return board

    async def fetch(self, stop_ids: Iterable[str]) -> DepartureBoard:
        """Fetch departures without blocking the event loop."""
        return await asyncio.to_thread(self.fetch_departures, list(stop_ids))

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
