# tixbit/__init__.py

__version__ = "0.3.1"

from .client import TixBitClient                       # façade async (httpx)
from .core.config import Settings
from .core.errors import TixBitApiError, TixBitError, TixBitTransportError
from .core.models import (
    BrowseEventsResult,
    CheckoutLink,
    Event,
    GetListingsResult,
    Listing,
    SearchEventsResult,
    SeatmapResult,
    SeatmapSection,
    SeatmapZone,
)
from .core.normalize import normalize_event, normalize_event_id, normalize_listing
from .core.seatmap import categorize_sections, describe_position

__all__ = [
    "TixBitClient",
    "Settings",
    "TixBitError",
    "TixBitApiError",
    "TixBitTransportError",
    "Event",
    "Listing",
    "SearchEventsResult",
    "BrowseEventsResult",
    "GetListingsResult",
    "CheckoutLink",
    "SeatmapResult",
    "SeatmapZone",
    "SeatmapSection",
    "normalize_event",
    "normalize_event_id",
    "normalize_listing",
    "categorize_sections",
    "describe_position",
]
