# tixbit/core/normalize.py
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from tixbit.core.models import Event, Inventory, Listing

Number = Union[int, float]

# ex: "provider-36PB9ZN" -> "36PB9ZN"
_PREFIXED_ID_RE = re.compile(r"^[a-z]{5,}-([a-z0-9]{6,})$", re.IGNORECASE)

# ----------------------------- Coercions -------------------------------
# Fonctions totales : jamais d'exception, None (ou vide) si le type ne colle pas.

def as_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v else None

def as_number(v: Any) -> Optional[Number]:
    # bool est un int en Python : on l'exclut explicitement
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return v if math.isfinite(v) else None

def as_dict(v: Any) -> Dict[str, Any]:
    return dict(v) if isinstance(v, Mapping) else {}

def as_id(v: Any) -> Optional[str]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return str(v)
    return as_str(v)

def as_int_list(v: Any) -> List[int]:
    if not isinstance(v, (list, tuple)):
        return []
    out: List[int] = []
    for item in v:
        n = as_number(item)
        if n is not None and float(n).is_integer():
            out.append(int(n))
    return out

def _first_str(d: Mapping[str, Any], *keys: str) -> Optional[str]:
    for k in keys:
        s = as_str(d.get(k))
        if s is not None:
            return s
    return None

def _first_number(d: Mapping[str, Any], *keys: str) -> Optional[Number]:
    for k in keys:
        n = as_number(d.get(k))
        if n is not None:
            return n
    return None

def _non_negative(n: Optional[Number]) -> Number:
    return n if n is not None and n > 0 else 0

# ---------------------------- Identifiants -----------------------------

def normalize_event_id(value: str) -> str:
    """
    Retire le préfixe provider interne d'un identifiant d'événement.
    Idempotent : normalize_event_id(normalize_event_id(s)) == normalize_event_id(s).
    """
    if not value:
        return value
    s = value.strip()
    m = _PREFIXED_ID_RE.match(s)
    return m.group(1) if m else s

# ------------------------------- Dates ---------------------------------

def _epoch_ms_to_iso(ms: Number) -> Optional[str]:
    try:
        dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def resolve_date(e: Mapping[str, Any]) -> str:
    """
    L'API renvoie les dates sous plusieurs formes selon le générateur :
      1. chaîne           -> telle quelle
      2. epoch (ms)       -> ISO-8601 UTC
      3. {month,day,year} -> "June 1, 2025"
      4. date_ms (epoch)  -> ISO-8601 UTC
    """
    raw = e.get("date")
    if isinstance(raw, str):
        return raw
    n = as_number(raw)
    if n is not None:
        iso = _epoch_ms_to_iso(n)
        if iso:
            return iso
    if isinstance(raw, Mapping):
        month, day, year = (as_id(raw.get(k)) for k in ("month", "day", "year"))
        if month and day and year:
            return f"{month} {day}, {year}"
    n = as_number(e.get("date_ms"))
    if n is not None:
        return _epoch_ms_to_iso(n) or ""
    return ""

# ------------------------------ Events ---------------------------------

def _normalize_inventory(raw: Any) -> Inventory:
    inv = as_dict(raw)
    return Inventory(
        total_available=int(_non_negative(as_number(inv.get("total_available")))),
        min_price=_non_negative(as_number(inv.get("min_price"))),
        max_price=_non_negative(as_number(inv.get("max_price"))),
    )

def normalize_event(raw: Any) -> Event:
    e = as_dict(raw)
    event_id = normalize_event_id(
        _first_str(e, "external_event_id", "externalEventId") or as_id(e.get("id")) or ""
    )
    return Event(
        id=event_id,
        external_event_id=event_id,
        slug=_first_str(e, "slug") or event_id,
        name=_first_str(e, "name", "performer") or "",
        date=resolve_date(e),
        venue_name=_first_str(e, "venue_name", "venueName"),
        venue_city=_first_str(e, "venue_city", "venueCity"),
        venue_state=_first_str(e, "venue_state", "venueState"),
        image_url=_first_str(e, "image_url", "imageUrl"),
        category_name=_first_str(e, "category_name", "categoryName"),
        category_event_type=_first_str(e, "category_event_type", "categoryEventType"),
        has_listings=bool(e.get("has_listings", e.get("hasListings"))),
        inventory=_normalize_inventory(e.get("inventory")),
    )

# ----------------------------- Listings --------------------------------

def normalize_listing(raw: Any) -> Listing:
    outer = as_dict(raw)
    # deux formes possibles : plate, ou tout sous {"attributes": {...}}
    nested = outer.get("attributes")
    attrs = nested if isinstance(nested, Mapping) else outer

    quantity = _first_number(attrs, "quantity", "available_quantity")
    return Listing(
        id=as_id(outer.get("id")) or as_id(attrs.get("id")) or "",
        # price_per_ticket = prix unitaire frais inclus, en dollars
        price=_first_number(attrs, "price_per_ticket", "price") or 0,
        quantity=int(quantity) if quantity is not None else 0,
        quantities_list=as_int_list(attrs.get("quantities_list")),
        section=as_str(attrs.get("section")),
        row=as_str(attrs.get("row")),
        seat_numbers=as_str(attrs.get("seat_numbers")),
        listing_hash=as_str(attrs.get("listing_hash")) or "",
        notes=as_str(attrs.get("notes")),
        delivery_method=_first_str(attrs, "delivery_method", "delivery_type"),
        splits=as_int_list(attrs.get("splits")),
        raw=raw if isinstance(raw, dict) else outer,
    )
