# tixbit/client.py
from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote, urlencode

import httpx

from tixbit import __version__
from tixbit.core.config import Settings
from tixbit.core.errors import TixBitApiError, TixBitError, TixBitTransportError
from tixbit.core.models import (
    BrowseEventsResult,
    CheckoutLink,
    GetListingsResult,
    ListingsMeta,
    Pagination,
    SearchEventsResult,
    SeatmapResult,
    SeatmapVenue,
    SeatmapZone,
)
from tixbit.core.normalize import (
    as_dict,
    as_id,
    as_number,
    as_str,
    normalize_event,
    normalize_event_id,
    normalize_listing,
)
from tixbit.core.seatmap import parse_coordinates, resolve_url, section_names

log = logging.getLogger(__name__)

USER_AGENT = f"tixbit-python/{__version__}"
MIN_CHECKOUT_QUANTITY = 1
MAX_CHECKOUT_QUANTITY = 8

# ----------------------------- Utils -----------------------------------

def _query(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Les valeurs None / "" ne sont pas envoyées du tout."""
    return {k: v for k, v in params.items() if v is not None and v != ""}

def _count(v: Any, default: int) -> int:
    n = as_number(v)
    return int(n) if n is not None and n >= 0 else default

def _list(v: Any) -> List[Any]:
    return v if isinstance(v, list) else []


class TixBitClient:
    """
    Client HTTP de l'API publique TixBit.

    Aucun état partagé entre appels : chaque opération ouvre sa propre session
    httpx, on peut donc lancer plusieurs appels en parallèle sans verrou.
    Pas de retry : les erreurs transport / API remontent à l'appelant.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **overrides: Any,
    ) -> None:
        settings = settings or Settings()
        if overrides:
            settings = replace(settings, **overrides)
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.timeout = httpx.Timeout(settings.timeout_ms / 1000)
        self._transport = transport

    # --------------------------- HTTP layer ----------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _send(self, http: httpx.AsyncClient, url: str, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        started = time.monotonic()
        try:
            # httpx.Timeout ne borne que chaque étape (connect/read/write) :
            # wait_for borne la requête entière, corps compris
            r = await asyncio.wait_for(
                http.get(url, params=_query(params) if params else None),
                self.settings.timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise TixBitTransportError(f"Timeout après {self.settings.timeout_ms} ms: {url}", url) from e
        except httpx.RequestError as e:
            # réseau, décodage (gzip invalide), trop de redirections...
            raise TixBitTransportError(f"Échec de la requête: {e}", url) from e
        log.debug(
            "GET %s -> %s", r.url, r.status_code,
            extra={"url": str(r.url), "status": r.status_code,
                   "elapsed_ms": round((time.monotonic() - started) * 1000)},
        )
        return r

    async def _get_json(self, http: httpx.AsyncClient, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        r = await self._send(http, f"{self.base_url}{path}", params)
        url = str(r.url)
        if not r.is_success:
            text = r.text
            raise TixBitApiError(
                f"{r.status_code} {r.reason_phrase}: {text[:300]}",
                r.status_code, url, text,
            )
        try:
            payload = r.json()
        except ValueError:
            raise TixBitApiError(
                f"{r.status_code} réponse non-JSON: {r.text[:300]}",
                r.status_code, url, r.text,
            ) from None
        return as_dict(payload)

    # ----------------------------- Events ------------------------------

    async def search_events(
        self,
        query: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: Optional[int] = None,
        size: int = 25,
    ) -> SearchEventsResult:
        """Recherche par mot-clé, ville, état (code US), catégorie ou dates ISO."""
        async with self._session() as http:
            data = await self._get_json(http, "/api/events/search", {
                "q": query,
                "city": city,
                "state": state,
                "category": category,
                "startDate": start_date,
                "endDate": end_date,
                "page": page,
                "size": size,
            })

        events = [normalize_event(e) for e in _list(data.get("events"))]
        p = as_dict(data.get("pagination"))
        cur_page = _count(p.get("page"), page or 1)
        cur_size = _count(p.get("size"), size)
        total = _count(p.get("total"), len(events))
        total_pages = _count(
            p.get("totalPages"),
            math.ceil(total / cur_size) if cur_size else (1 if total else 0),
        )
        has_next = p.get("hasNext")
        has_prev = p.get("hasPrev")
        return SearchEventsResult(
            events=events,
            pagination=Pagination(
                page=cur_page,
                size=cur_size,
                total=total,
                total_pages=total_pages,
                has_next=has_next if isinstance(has_next, bool) else cur_page < total_pages,
                has_prev=has_prev if isinstance(has_prev, bool) else cur_page > 1,
            ),
        )

    async def browse(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        size: int = 18,
        category_event_type: Optional[str] = None,
    ) -> BrowseEventsResult:
        """Événements à venir autour d'une position (vue 'homepage')."""
        async with self._session() as http:
            data = await self._get_json(http, "/api/events", {
                "size": size,
                "context": "homepage",
                "recommendation": "upcoming",
                "nearLat": latitude,
                "nearLng": longitude,
                "preferCity": city,
                "preferState": state,
                "categoryEventType": category_event_type,
            })

        events = [normalize_event(e) for e in _list(data.get("events"))]
        return BrowseEventsResult(events=events, total=_count(data.get("total"), len(events)))

    # ---------------------------- Listings -----------------------------

    async def get_listings(
        self,
        event_id: str,
        size: int = 50,
        page: int = 1,
        order_by_direction: str = "asc",
    ) -> GetListingsResult:
        eid = normalize_event_id(event_id)
        async with self._session() as http:
            data = await self._get_json(http, f"/api/events/{quote(eid, safe='')}/listings", {
                "size": size,
                "page": page,
                "order_by_direction": order_by_direction,
            })

        listings = [normalize_listing(item) for item in _list(data.get("data"))]
        meta = as_dict(data.get("meta"))
        return GetListingsResult(
            listings=listings,
            meta=ListingsMeta(
                total=_count(meta.get("total"), len(listings)),
                page=_count(meta.get("page"), page),
                size=_count(meta.get("size"), size),
                cache_source=as_str(meta.get("cacheSource")),
            ),
        )

    # ----------------------------- Seatmap -----------------------------

    async def _fetch_coordinates(self, http: httpx.AsyncClient, url: str) -> List[SeatmapZone]:
        """
        Second appel, vers le document de coordonnées (polygones + labels).
        Statut hors 2xx -> [] ; erreur réseau, décodage ou timeout -> TixBitTransportError ;
        corps illisible -> ValueError.
        """
        r = await self._send(http, url)
        if not r.is_success:
            log.warning("Coordonnées seatmap indisponibles (%s)", r.status_code,
                        extra={"url": url, "status": r.status_code})
            return []
        return parse_coordinates(r.json())

    async def get_seatmap(self, event_id: str) -> SeatmapResult:
        """
        Plan de salle d'un événement : métadonnées + sections (quand la salle
        a des coordonnées).

        Échec partiel accepté : si le document de coordonnées ne peut pas être
        récupéré ou lu, le résultat revient quand même, avec zones = [] et
        has_coordinates inchangé. Les erreurs de l'appel principal remontent.
        """
        eid = normalize_event_id(event_id)
        async with self._session() as http:
            data = await self._get_json(http, f"/api/events/{quote(eid, safe='')}/seating-chart")

            has_coordinates = data.get("has_coordinates") is True
            # anciennes réponses : "coordinates", nouvelles : "coordinates_url"
            coordinates_url = resolve_url(
                self.base_url, as_str(data.get("coordinates_url")) or as_str(data.get("coordinates"))
            )

            zones: List[SeatmapZone] = []
            if has_coordinates and coordinates_url:
                try:
                    zones = await self._fetch_coordinates(http, coordinates_url)
                except (TixBitError, ValueError) as e:
                    log.warning("Coordonnées seatmap ignorées: %s", e,
                                extra={"url": coordinates_url, "event_id": eid})
                    zones = []

        venue = as_dict(data.get("venue_data") or data.get("venue"))
        capacity = as_number(data.get("capacity"))
        return SeatmapResult(
            success=data.get("success") is True,
            event_id=normalize_event_id(as_id(data.get("event_id")) or eid),
            venue_id=as_id(data.get("venue_id")),
            venue_name=as_str(data.get("venue_name")),
            configuration_id=as_id(data.get("configuration_id")),
            configuration_name=as_str(data.get("configuration_name")),
            background_image=resolve_url(self.base_url, as_str(data.get("background_image"))),
            coordinates_url=coordinates_url,
            has_coordinates=has_coordinates,
            capacity=int(capacity) if capacity is not None and capacity >= 0 else None,
            venue=SeatmapVenue(**{
                k: as_str(venue.get(k))
                for k in ("name", "address", "city", "region", "country", "time_zone")
            }),
            zones=zones,
            section_names=section_names(zones),
        )

    # ------------------------- Liens (sans réseau) ---------------------

    def create_checkout_link(self, listing_id: str, quantity: int) -> CheckoutLink:
        qty = max(MIN_CHECKOUT_QUANTITY, min(MAX_CHECKOUT_QUANTITY, int(quantity)))
        qs = urlencode({"listing": listing_id, "quantity": qty})
        return CheckoutLink(
            url=f"{self.base_url}/checkout/process?{qs}",
            listing_id=listing_id,
            quantity=qty,
        )

    def event_url(self, slug_or_id: str) -> str:
        # un chemin (contient "/") est considéré comme déjà qualifié
        if "/" in slug_or_id:
            return f"{self.base_url}/events/{slug_or_id}"
        return f"{self.base_url}/events/{normalize_event_id(slug_or_id)}"
