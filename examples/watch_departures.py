"""Example client: print live departures pushed by a metronow server."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidStatus

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def print_snapshot(snapshot: dict):
    """
    Display one pushed snapshot.

    Args:
        snapshot: {stop_id: [departure, ...] or None}
    """
    now = datetime.now(timezone.utc)
    print(f"\n{'='*70}")
    print(f"Updated: {now.astimezone().strftime('%H:%M:%S')}")
    print(f"{'='*70}")

    for stop_id, departures in snapshot.items():
        print(f"\n{stop_id}:")
        if departures is None:
            print("  No data yet")
            continue
        if not departures:
            print("  No departures")
            continue

        for departure in departures:
            predicted = datetime.fromisoformat(departure["predictedTime"])
            minutes_away = max(0, int((predicted - now).total_seconds() // 60))
            print(f"  {departure['routeLabel']:>4}: {minutes_away:2d} min → {departure['headsign']}")


async def watch(url: str, stop_ids: list, resubscribe: list):
    headers = {"X-Stop-IDs": json.dumps(stop_ids)}
    async with connect(url, additional_headers=headers) as websocket:
        first = True
        async for message in websocket:
            print_snapshot(json.loads(message))
            if first and resubscribe:
                await websocket.send(json.dumps({"subscribe": resubscribe}))
                print(f"\nSwitched to: {', '.join(resubscribe)}")
            first = False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Watch live departures for one or more stops.")
    parser.add_argument("stop_ids", nargs="+", help="GTFS stop IDs, e.g. U1040Z101P")
    parser.add_argument("--url", default="ws://localhost:3000", help="Server URL")
    parser.add_argument(
        "--resubscribe",
        nargs="+",
        default=[],
        metavar="STOP_ID",
        help="Stops to switch to after the first update",
    )
    args = parser.parse_args()

    try:
        asyncio.run(watch(args.url, args.stop_ids, args.resubscribe))
    except InvalidStatus as e:
        print(f"Error: server rejected connection ({e.response.status_code})")
        sys.exit(1)
    except ConnectionClosed as e:
        print(f"Connection closed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nGoodbye!")
