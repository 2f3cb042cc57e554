"""Command-line interface for the TixBit client.

Commands:
  - tixbit search [query]   : search events (keyword, city, state, category, dates)
  - tixbit browse           : upcoming events near a location
  - tixbit listings <id>    : ticket listings for an event
  - tixbit checkout <id>    : checkout link for a listing
  - tixbit seatmap <id>     : venue sections grouped by level
  - tixbit url <slug>       : event page URL

Every data command accepts --json (raw output for agents).
TIXBIT_BASE_URL / TIXBIT_API_KEY / TIXBIT_TIMEOUT_MS override the defaults.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Iterable, List, Optional

from tixbit import __version__
from tixbit.client import TixBitClient
from tixbit.core.config import Settings
from tixbit.core.errors import TixBitError
from tixbit.core.logging import configure_logging
from tixbit.core.models import Event, Listing, SeatmapResult
from tixbit.core.seatmap import categorize_sections, describe_position, find_section

log = logging.getLogger(__name__)

_GROUP_ICONS = {
    "Floor": "🏀",
    "Lower Level (100s)": "⬇",
    "Upper Level (200s)": "⬆",
    "300 Level": "🔵",
    "400 Level": "🟣",
    "Field Level": "🏟",
    "Lower Level": "⬇",
    "Loge": "🪵",
    "Sky": "☁",
    "Terrace": "🌇",
    "Vista": "👀",
    "Suites": "🏢",
    "Standing Room": "🧍",
    "General / Special": "🎪",
    "Other": "📍",
}
_SECTIONS_PER_ROW = 8
_MAX_SUGGESTIONS = 20


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return n


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tixbit", description="Search events, browse listings, and buy tickets on TixBit"
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logs on stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    json_flag = argparse.ArgumentParser(add_help=False)
    json_flag.add_argument("--json", action="store_true", help="Output raw JSON (for agents)")

    ps = sub.add_parser("search", parents=[json_flag], help="Search for events")
    ps.add_argument("query", nargs="?", default=None)
    ps.add_argument("--city", help="Filter by city")
    ps.add_argument("--state", help="Filter by state (2-letter code)")
    ps.add_argument("--category", help="Category slug (e.g. nba-basketball)")
    ps.add_argument("--start-date", help="Events on or after this date (ISO)")
    ps.add_argument("--end-date", help="Events on or before this date (ISO)")
    ps.add_argument("--page", type=int, default=1, help="Page number")
    ps.add_argument("--size", type=int, default=10, help="Results per page")

    pb = sub.add_parser("browse", parents=[json_flag], help="Browse upcoming events near a location")
    pb.add_argument("--city", help="Preferred city")
    pb.add_argument("--state", help="Preferred state (2-letter code)")
    pb.add_argument("--lat", type=float, help="Latitude")
    pb.add_argument("--lng", type=float, help="Longitude")
    pb.add_argument("--category", default="ALL", choices=["SPORT", "CONCERT", "THEATER", "ALL"])
    pb.add_argument("--size", type=int, default=10, help="Number of results")

    pl = sub.add_parser("listings", parents=[json_flag], help="Ticket listings for an event")
    pl.add_argument("event_id")
    pl.add_argument("--size", type=int, default=20, help="Results per page")
    pl.add_argument("--page", type=int, default=1, help="Page number")
    pl.add_argument("--sort", default="asc", choices=["asc", "desc"], help="Price sort")

    pc = sub.add_parser("checkout", parents=[json_flag], help="Checkout link for a listing")
    pc.add_argument("listing_id")
    pc.add_argument("--quantity", type=_positive_int, required=True, help="Number of tickets")

    pm = sub.add_parser("seatmap", parents=[json_flag], help="Seating chart for an event's venue")
    pm.add_argument("event_id")
    pm.add_argument("--section", help="Highlight a section (case-insensitive)")

    pu = sub.add_parser("url", help="Event page URL for a slug or ID")
    pu.add_argument("slug")

    return p.parse_args(argv)

# ------------------------------ Output ---------------------------------

def _write(text: str = "") -> None:
    sys.stdout.write(text + "\n")

def _dump(data: Any) -> None:
    _write(json.dumps(data, indent=2, ensure_ascii=False))

def _format_event(e: Event) -> str:
    parts = [f"  {e.name}", f"  ID: {e.external_event_id}"]
    if e.date:
        parts.append(f"  Date: {e.date}")
    location = ", ".join(x for x in (e.venue_city, e.venue_state) if x)
    if location:
        parts.append(f"  Location: {location}")
    if e.venue_name:
        parts.append(f"  Venue: {e.venue_name}")
    if e.has_listings and e.inventory.min_price:
        parts.append(f"  From: ${e.inventory.min_price:.2f} ({e.inventory.total_available} available)")
    return "\n".join(parts) + "\n"

def _format_listing(l: Listing) -> str:
    parts = [f"  ${l.price:.2f} × {l.quantity} ticket(s)", f"  ID: {l.id}"]
    if l.section:
        parts.append(f"  Section: {l.section}" + (f" Row {l.row}" if l.row else ""))
    if l.delivery_method:
        parts.append(f"  Delivery: {l.delivery_method}")
    if l.quantities_list:
        parts.append(f"  Qty options: {', '.join(str(q) for q in l.quantities_list)}")
    return "\n".join(parts) + "\n"

def _write_all(lines: Iterable[str]) -> None:
    for line in lines:
        _write(line)

def _render_seatmap(result: SeatmapResult, highlight: Optional[str]) -> None:
    _write(f"\n🏟  {result.venue_name or ''}")
    _write(f"   {result.configuration_name or ''}")
    v = result.venue
    if v.address:
        _write(f"   {v.address}, {v.city or ''}, {v.region or ''}")
    if result.capacity:
        _write(f"   Capacity: {result.capacity:,}")
    _write()

    if not result.has_coordinates or not result.zones:
        _write("  No section-level seating data available for this venue.\n")
        return

    sections = [s for z in result.zones for s in z.sections]
    wanted = highlight.upper() if highlight else None
    for group, members in categorize_sections(sections).items():
        _write(f"  ── {_GROUP_ICONS.get(group, '')} {group} ──")
        names = [s.name for s in members]
        for i in range(0, len(names), _SECTIONS_PER_ROW):
            row = [
                f" ▸{n}◂ " if wanted and n.upper() == wanted else f" {n} "
                for n in names[i:i + _SECTIONS_PER_ROW]
            ]
            _write("    " + "  ".join(row))
        _write()

    if highlight:
        match = find_section(sections, highlight)
        if match:
            _write(f"  📍 Section {match.name}: {describe_position(match, sections)}\n")
        else:
            names = result.section_names
            more = "..." if len(names) > _MAX_SUGGESTIONS else ""
            _write(f'  ⚠  Section "{highlight}" not found in this venue.')
            _write(f"     Available: {', '.join(names[:_MAX_SUGGESTIONS])}{more}\n")

    _write(f"  Total sections: {len(result.section_names)}\n")

# ----------------------------- Commands --------------------------------

async def _search(client: TixBitClient, args: argparse.Namespace) -> int:
    result = await client.search_events(
        query=args.query, city=args.city, state=args.state, category=args.category,
        start_date=args.start_date, end_date=args.end_date, page=args.page, size=args.size,
    )
    if args.json:
        _dump(result.model_dump(mode="json"))
        return 0
    pg = result.pagination
    _write(f"\nFound {pg.total} event(s) — page {pg.page}/{pg.total_pages}\n")
    _write_all(_format_event(e) for e in result.events)
    return 0

async def _browse(client: TixBitClient, args: argparse.Namespace) -> int:
    result = await client.browse(
        latitude=args.lat, longitude=args.lng, city=args.city, state=args.state,
        size=args.size, category_event_type=args.category,
    )
    if args.json:
        _dump(result.model_dump(mode="json"))
        return 0
    _write(f"\n{len(result.events)} upcoming event(s) near {args.city or 'you'}\n")
    _write_all(_format_event(e) for e in result.events)
    return 0

async def _listings(client: TixBitClient, args: argparse.Namespace) -> int:
    result = await client.get_listings(
        args.event_id, size=args.size, page=args.page, order_by_direction=args.sort,
    )
    if args.json:
        _dump(result.model_dump(mode="json"))
        return 0
    _write(f"\n{len(result.listings)} listing(s) for event {args.event_id}\n")
    _write_all(_format_listing(l) for l in result.listings)
    return 0

async def _checkout(client: TixBitClient, args: argparse.Namespace) -> int:
    # contexte facultatif : le lien reste valable même si la recherche échoue
    listing: Optional[Listing] = None
    try:
        found = await client.get_listings(args.listing_id, size=1)
        listing = next((l for l in found.listings if l.id == args.listing_id), None)
    except TixBitError as e:
        log.info("Checkout: détail du listing indisponible (%s)", e)

    link = client.create_checkout_link(args.listing_id, args.quantity)
    if args.json:
        _dump({**link.model_dump(mode="json"),
               "listing": listing.model_dump(mode="json") if listing else None})
        return 0

    _write("\n🎟  Checkout Link\n")
    if listing:
        _write(f"   Listing: {listing.id}")
        if listing.section:
            _write(f"   Section: {listing.section}" + (f" Row {listing.row}" if listing.row else ""))
        _write(f"   Price: ${listing.price:.2f} × {link.quantity} = ${listing.price * link.quantity:.2f}")
    _write(f"   Quantity: {link.quantity}\n")
    _write(f"   {link.url}\n")
    _write("   Open the link above in your browser to complete checkout.\n")
    return 0

async def _seatmap(client: TixBitClient, args: argparse.Namespace) -> int:
    result = await client.get_seatmap(args.event_id)
    if args.json:
        _dump(result.model_dump(mode="json"))
        return 0
    if not result.success:
        sys.stderr.write("Seatmap not available for this event.\n")
        return 1
    _render_seatmap(result, args.section)
    return 0

_COMMANDS = {
    "search": _search,
    "browse": _browse,
    "listings": _listings,
    "checkout": _checkout,
    "seatmap": _seatmap,
}

# ------------------------------- Main ----------------------------------

def main(argv: Optional[List[str]] = None, *, client: Optional[TixBitClient] = None) -> int:
    args = _parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        client = client or TixBitClient(Settings.from_env())
        if args.cmd == "url":
            _write(client.event_url(args.slug))
            return 0
        return asyncio.run(_COMMANDS[args.cmd](client, args))
    except (TixBitError, ValueError) as e:
        log.debug("Commande %s en échec", args.cmd, exc_info=True)
        sys.stderr.write(f"Error: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
