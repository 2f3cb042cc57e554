import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://tixbit.com"
DEFAULT_TIMEOUT_MS = 15000


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Lit TIXBIT_BASE_URL / TIXBIT_TIMEOUT_MS / TIXBIT_API_KEY (+ .env).
        Seule la CLI passe par ici : la lib ne lit jamais l'environnement.
        """
        load_dotenv()
        raw_timeout = os.getenv("TIXBIT_TIMEOUT_MS", "").strip()
        try:
            timeout_ms = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_MS
        except ValueError:
            raise ValueError(f"TIXBIT_TIMEOUT_MS invalide: {raw_timeout!r}") from None
        return cls(
            base_url=os.getenv("TIXBIT_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            timeout_ms=timeout_ms,
            api_key=os.getenv("TIXBIT_API_KEY", "").strip() or None,
        )
