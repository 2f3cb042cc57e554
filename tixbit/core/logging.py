import json, logging, sys
from datetime import datetime, timezone

# champs passés via `extra=` par le client (url, statut, durée...)
_EXTRA_KEYS = ("url", "status", "elapsed_ms", "event_id")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        p = {"ts": datetime.now(timezone.utc).isoformat(),
             "level": record.levelname, "logger": record.name, "msg": record.getMessage()}
        for k in _EXTRA_KEYS:
            v = getattr(record, k, None)
            if v is not None: p[k] = v
        if record.exc_info: p["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(p, ensure_ascii=False)


def configure_logging(level=logging.WARNING, stream=None, json_format=True):
    # stderr par défaut : stdout reste réservé aux sorties de la CLI (JSON pour les agents)
    h = logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(JsonFormatter() if json_format else logging.Formatter(_TEXT_FORMAT))
    root = logging.getLogger(); root.handlers.clear(); root.addHandler(h); root.setLevel(level)
    # httpx loggue chaque requête en INFO : on ne le laisse parler qu'en DEBUG
    logging.getLogger("httpx").setLevel(level if level <= logging.DEBUG else logging.WARNING)
    return h
