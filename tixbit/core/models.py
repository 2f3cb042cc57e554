# tixbit/core/models.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    # construits à neuf à chaque réponse, jamais modifiés ensuite
    model_config = ConfigDict(frozen=True)


# ------------------------------ Events ---------------------------------

class Inventory(_Frozen):
    total_available: int = 0
    min_price: float = 0.0              # dollars, pas centimes
    max_price: float = 0.0


class Event(_Frozen):
    """
    Événement normalisé, quelle que soit la forme renvoyée par l'API
    (snake_case, camelCase, dates en epoch / objet / chaîne...).
    `id` et `external_event_id` sont toujours égaux et sans préfixe provider.
    """
    id: str
    external_event_id: str
    slug: str
    name: str
    date: str                           # ISO, "June 1, 2025" ou "" selon la source
    venue_name: Optional[str] = None
    venue_city: Optional[str] = None
    venue_state: Optional[str] = None
    image_url: Optional[str] = None
    category_name: Optional[str] = None
    category_event_type: Optional[str] = None   # SPORT | CONCERT | THEATER ...
    has_listings: bool = False
    inventory: Inventory = Field(default_factory=Inventory)


class Pagination(_Frozen):
    page: int = 1
    size: int = 0
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False


class SearchEventsResult(_Frozen):
    events: List[Event]
    pagination: Pagination


class BrowseEventsResult(_Frozen):
    events: List[Event]
    total: int


# ----------------------------- Listings --------------------------------

class Listing(_Frozen):
    """Une offre de billets. `raw` garde l'enregistrement amont tel quel."""
    id: str
    price: float                        # prix par billet, frais inclus, en dollars
    quantity: int
    quantities_list: List[int] = Field(default_factory=list)
    section: Optional[str] = None
    row: Optional[str] = None
    seat_numbers: Optional[str] = None
    listing_hash: str = ""
    notes: Optional[str] = None
    delivery_method: Optional[str] = None
    splits: List[int] = Field(default_factory=list)
    raw: Dict[Any, Any] = Field(default_factory=dict)


class ListingsMeta(_Frozen):
    total: int
    page: int
    size: int
    cache_source: Optional[str] = None


class GetListingsResult(_Frozen):
    listings: List[Listing]
    meta: ListingsMeta


class CheckoutLink(_Frozen):
    url: str
    listing_id: str
    quantity: int


# ------------------------------ Seatmap --------------------------------

class SeatmapLabel(_Frozen):
    text: str
    x: float = 0.0
    y: float = 0.0
    size: Optional[float] = None
    angle: Optional[float] = None


class SeatmapSection(_Frozen):
    id: str
    name: str                           # ex: "101", "FLOOR3"
    x: float = 0.0                      # repère de la carte amont, non recentré
    y: float = 0.0
    labels: List[SeatmapLabel] = Field(default_factory=list)
    shape_path: Optional[str] = None    # path SVG brut, non parsé


class SeatmapZone(_Frozen):
    id: str
    name: str                           # ex: "Section", "Floor", "Suite"
    sections: List[SeatmapSection] = Field(default_factory=list)


class SeatmapVenue(_Frozen):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    time_zone: Optional[str] = None


class SeatmapResult(_Frozen):
    success: bool
    event_id: str
    venue_id: Optional[str] = None
    venue_name: Optional[str] = None
    configuration_id: Optional[str] = None
    configuration_name: Optional[str] = None
    background_image: Optional[str] = None      # URL absolue
    coordinates_url: Optional[str] = None       # URL absolue
    has_coordinates: bool = False
    capacity: Optional[int] = None
    venue: SeatmapVenue = Field(default_factory=SeatmapVenue)
    zones: List[SeatmapZone] = Field(default_factory=list)
    section_names: List[str] = Field(default_factory=list)
