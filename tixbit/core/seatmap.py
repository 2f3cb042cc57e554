# tixbit/core/seatmap.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from tixbit.core.models import SeatmapLabel, SeatmapSection, SeatmapZone
from tixbit.core.normalize import as_id, as_number, as_str

# tolérance (unités de la carte) sous laquelle une section est "au centre"
POSITION_TOLERANCE = 50

# ------------------------------- URLs ----------------------------------

def resolve_url(base_url: str, value: Optional[str]) -> Optional[str]:
    """Les assets peuvent être relatifs (ex: /api/seatmap/assets?url=...)."""
    if not value:
        return None
    if urlparse(value).scheme in ("http", "https"):
        return value
    if not value.startswith("/"):
        value = "/" + value
    return base_url.rstrip("/") + value

# --------------------------- Coordonnées -------------------------------

def _parse_label(raw: Mapping[str, Any]) -> Optional[SeatmapLabel]:
    text = as_str(raw.get("text"))
    if text is None:
        return None
    return SeatmapLabel(
        text=text,
        x=as_number(raw.get("x")) or 0,
        y=as_number(raw.get("y")) or 0,
        size=as_number(raw.get("size")),
        angle=as_number(raw.get("angle")),
    )

def _pick_label(name: str, labels: Sequence[SeatmapLabel]) -> Optional[SeatmapLabel]:
    """Label dont le texte == nom de section (casse ignorée), sinon le premier."""
    wanted = name.casefold()
    for label in labels:
        if label.text.casefold() == wanted:
            return label
    return labels[0] if labels else None

def _parse_section(raw: Mapping[str, Any]) -> SeatmapSection:
    name = as_id(raw.get("name")) or ""
    raw_labels = raw.get("labels")
    labels = [
        lbl for lbl in (
            _parse_label(item) for item in (raw_labels if isinstance(raw_labels, list) else [])
            if isinstance(item, Mapping)
        ) if lbl is not None
    ]
    rep = _pick_label(name, labels)
    shape = raw.get("shape")
    path = shape.get("path") if isinstance(shape, Mapping) else None
    return SeatmapSection(
        id=as_id(raw.get("id")) or "",
        name=name,
        x=rep.x if rep else 0,
        y=rep.y if rep else 0,
        labels=labels,
        shape_path=path if isinstance(path, str) else None,
    )

def parse_coordinates(document: Any) -> List[SeatmapZone]:
    """
    Document de coordonnées -> zones/sections.
    Forme attendue : {zones: [{id, name, sections: [{id, name, labels, shape}]}]}
    Tout ce qui ne colle pas est ignoré, jamais d'exception.
    """
    zones = document.get("zones") if isinstance(document, Mapping) else None
    if not isinstance(zones, list):
        return []
    out: List[SeatmapZone] = []
    for zone in zones:
        if not isinstance(zone, Mapping):
            continue
        sections = zone.get("sections")
        out.append(SeatmapZone(
            id=as_id(zone.get("id")) or "",
            name=as_id(zone.get("name")) or "",
            sections=[
                _parse_section(s) for s in (sections if isinstance(sections, list) else [])
                if isinstance(s, Mapping)
            ],
        ))
    return out

def section_names(zones: Sequence[SeatmapZone]) -> List[str]:
    return [s.name for z in zones for s in z.sections]

# ---------------------------- Classement -------------------------------

# (regex, groupe) évalués dans l'ordre, premier match gagnant
_PREFIX_RULES = [
    (re.compile(r"^(FLOOR|FLR)\d"), "Floor"),
    (re.compile(r"^1\d{2}"), "Lower Level (100s)"),
    (re.compile(r"^2\d{2}"), "Upper Level (200s)"),
    (re.compile(r"^3\d{2}"), "300 Level"),
    (re.compile(r"^4\d{2}"), "400 Level"),
]
_SMALL_NUMBER_RE = re.compile(r"^\d{1,2}$")
_LETTER_RULES = [
    (re.compile(r"^L\d"), "Loge"),
    (re.compile(r"^S\d"), "Sky"),
    (re.compile(r"^T\d"), "Terrace"),
    (re.compile(r"^V\d"), "Vista"),
]
_SPECIAL_NAMES = {"DECK", "ROOF", "GA", "HAT"}

def _classify(name: str, has_lower_level: bool, has_small_numbers: bool) -> str:
    for rx, group in _PREFIX_RULES:
        if rx.match(name):
            return group
    # stades (baseball/football) : petits numéros au niveau du terrain,
    # salles (basket/hockey) : petits numéros = bas niveau.
    # TODO: heuristique non vérifiée sur les théâtres sans sections 100
    if has_small_numbers and _SMALL_NUMBER_RE.match(name):
        return "Field Level" if has_lower_level else "Lower Level"
    for rx, group in _LETTER_RULES:
        if rx.match(name):
            return group
    if name.startswith("STE") or "SUITE" in name:
        return "Suites"
    if "STANDING" in name or name in ("SRO", "UPPER"):
        return "Standing Room"
    if name in _SPECIAL_NAMES:
        return "General / Special"
    return "Other"

def categorize_sections(sections: Sequence[SeatmapSection]) -> Dict[str, List[SeatmapSection]]:
    """
    Regroupe les sections par niveau d'après les conventions de nommage
    (100s, 200s, FLOOR1, L3, SUITE5...). Aide à l'affichage, pas une taxonomie :
    une salle dont rien ne matche finit entièrement dans "Other".
    """
    names = [s.name.upper() for s in sections]
    has_lower_level = any(_PREFIX_RULES[1][0].match(n) for n in names)
    has_small_numbers = any(_SMALL_NUMBER_RE.match(n) for n in names)

    groups: Dict[str, List[SeatmapSection]] = {}
    for section, name in zip(sections, names):
        groups.setdefault(_classify(name, has_lower_level, has_small_numbers), []).append(section)
    return groups

# ----------------------------- Position --------------------------------

def describe_position(section: SeatmapSection, sections: Sequence[SeatmapSection]) -> str:
    if not sections:
        return "position unknown"

    cx = sum(s.x for s in sections) / len(sections)
    cy = sum(s.y for s in sections) / len(sections)
    dx = section.x - cx
    dy = section.y - cy

    # l'axe y de la carte descend : dy < 0 = plus près de la scène / du terrain
    horizontal = None if abs(dx) < POSITION_TOLERANCE else ("left side" if dx < 0 else "right side")
    vertical = None if abs(dy) < POSITION_TOLERANCE else ("near side" if dy < 0 else "far side")

    parts = [p for p in (vertical, horizontal) if p]
    return ", ".join(parts) if parts else "center of venue"

def find_section(sections: Sequence[SeatmapSection], name: str) -> Optional[SeatmapSection]:
    wanted = name.casefold()
    return next((s for s in sections if s.name.casefold() == wanted), None)
