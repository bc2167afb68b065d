"""
ParkWatch CLI entrypoint.

This CLI is intended for quick checks against a ParkAPI server without a mobile
client. Classified API failures are printed to stderr and exit with status 2.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any

from parkwatch.config.settings import Settings, get_settings
from parkwatch.core.geo import Coordinate
from parkwatch.core.logging import configure_logging
from parkwatch.core.time import parse_api_timestamp
from parkwatch.ingestion.errors import ParkApiError
from parkwatch.ingestion.geocoder import ReverseGeocoder
from parkwatch.ingestion.parkapi_client import ParkApiClient
from parkwatch.selection.nearest import rank_by_distance


def _parse_when(value: str) -> datetime:
    """Accept `yyyy-MM-dd` or `yyyy-MM-ddTHH:mm:ss`."""
    if "T" not in value:
        value = f"{value}T00:00:00"
    return parse_api_timestamp(value)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def _cities(settings: Settings, args: argparse.Namespace) -> int:
    async with ParkApiClient(settings) as client:
        metadata = await client.fetch_metadata()
    if args.json:
        _print_json(metadata.model_dump(mode="json"))
        return 0
    print(f"API version: {metadata.api_version}")
    for name in metadata.supported_cities():
        print(f"  {name}")
    return 0


async def _snapshot(settings: Settings, args: argparse.Namespace) -> int:
    async with ParkApiClient(settings) as client:
        update = await client.update_snapshot_for_selected_city(args.city)
    snapshot = update.snapshot
    if args.json:
        _print_json(snapshot.model_dump(mode="json"))
        return 0
    print(f"{update.metadata.display_name(args.city) or args.city}: last updated {snapshot.last_updated.isoformat()}")
    for lot in snapshot.lots:
        print(f"  {lot.name:<40} {lot.free:>5}/{lot.total:<5} {lot.state.value}")
    return 0


async def _forecast(settings: Settings, args: argparse.Namespace) -> int:
    async with ParkApiClient(settings) as client:
        if args.week:
            series = await client.fetch_forecast_week(args.lot, _parse_when(args.week), region=args.region)
        elif args.day:
            series = await client.fetch_forecast_day(args.lot, _parse_when(args.day), region=args.region)
        else:
            series = await client.fetch_forecast(
                args.lot, _parse_when(args.from_), _parse_when(args.to), region=args.region
            )
    if args.json:
        _print_json(series.model_dump(mode="json"))
        return 0
    for ts, value in series.points():
        print(f"{ts.isoformat()}  {value}")
    return 0


async def _nearest(settings: Settings, args: argparse.Namespace) -> int:
    origin = Coordinate(lat=float(args.lat), lon=float(args.lon))
    async with ParkApiClient(settings) as client:
        metadata = await client.fetch_metadata()
    ranked = rank_by_distance(metadata.locatable_cities(), origin)
    if not ranked:
        print("No supported city has coordinates.", file=sys.stderr)
        return 1
    for city, distance_m in ranked[: int(args.limit)]:
        print(f"{city.name:<30} {distance_m / 1000:>8.1f} km  ({city.id})")
    return 0


async def _locality(settings: Settings, args: argparse.Namespace) -> int:
    geocoder = ReverseGeocoder(settings)
    try:
        name = await geocoder.resolve_locality(Coordinate(lat=float(args.lat), lon=float(args.lon)))
    finally:
        await geocoder.aclose()
    if name is None:
        print("Locality unknown.", file=sys.stderr)
        return 1
    print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ParkWatch CLI."""
    parser = argparse.ArgumentParser(prog="parkwatch")
    parser.add_argument("--staging", action="store_true", help="Use the staging API endpoint.")
    sub = parser.add_subparsers(dest="command", required=True)

    cities = sub.add_parser("cities", help="List supported cities (metadata request).")
    cities.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    cities.set_defaults(func=_cities)

    snap = sub.add_parser("snapshot", help="Fetch metadata, then the current lots of CITY.")
    snap.add_argument("city", help="City identifier, e.g. Dresden")
    snap.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    snap.set_defaults(func=_snapshot)

    fc = sub.add_parser("forecast", help="Fetch the occupancy forecast for a lot.")
    fc.add_argument("lot", help="Lot identifier")
    fc.add_argument("--region", type=str, default=None, help="Region path segment (default from config)")
    window = fc.add_mutually_exclusive_group(required=True)
    window.add_argument("--day", type=str, help="Calendar day containing this date/time")
    window.add_argument("--week", type=str, help="Seven days starting at this date/time")
    window.add_argument("--from", dest="from_", type=str, help="Start (requires --to)")
    fc.add_argument("--to", type=str, default=None)
    fc.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    fc.set_defaults(func=_forecast)

    near = sub.add_parser("nearest", help="Rank supported cities by distance from a coordinate.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--limit", type=int, default=5)
    near.set_defaults(func=_nearest)

    loc = sub.add_parser("locality", help="Reverse geocode a coordinate to a locality name.")
    loc.add_argument("--lat", required=True, type=float)
    loc.add_argument("--lon", required=True, type=float)
    loc.set_defaults(func=_locality)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m parkwatch.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "forecast" and args.from_ and not args.to:
        parser.error("--from requires --to")

    settings = get_settings()
    if args.staging:
        api = settings.api.model_copy(update={"use_staging": True})
        settings = settings.model_copy(update={"api": api})

    func: Any = getattr(args, "func")
    try:
        return int(asyncio.run(func(settings, args)))
    except ParkApiError as exc:
        print(f"error ({exc.kind.value}): {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
