# tixbit/core/errors.py
from __future__ import annotations

from typing import Optional

BODY_EXCERPT_LIMIT = 300


class TixBitError(Exception):
    """Erreur de base du client TixBit."""

    status: Optional[int] = None

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class TixBitTransportError(TixBitError):
    """Timeout ou échec réseau : la requête n'a pas abouti, pas de statut HTTP."""


class TixBitApiError(TixBitError):
    """Réponse HTTP hors 2xx (ou corps illisible sur une requête principale)."""

    def __init__(self, message: str, status: int, url: str, body: str = "") -> None:
        super().__init__(message, url)
        self.status = status
        self.body = body[:BODY_EXCERPT_LIMIT]
