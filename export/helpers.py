"""Gemeinsame Hilfsfunktionen für den Export."""

from datetime import date
from typing import Optional

from models.availability import AvailabilityWindow
from models.group import Group, GroupStatus

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    GroupStatus.FORMED.value:     "B3FFB3",
    GroupStatus.NEEDS_TIME.value: "FFF2B3",
    GroupStatus.REJECTED.value:   "FF9999",
    "unmatched":                  "F5F5F5",
    "conflict":                   "FFB3B3",
    "header":                     "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def format_window(window: Optional[AvailabilityWindow]) -> str:
    return str(window) if window is not None else "–"


def status_color(group: Group) -> str:
    return COLORS[group.status.value]


def group_flags(group: Group) -> str:
    """Kurzbezeichnung der Ausnahmen ('klein', 'Überlauf')."""
    flags = []
    if group.is_undersized:
        flags.append("klein")
    if group.is_overflow:
        flags.append("Überlauf")
    return ", ".join(flags)
