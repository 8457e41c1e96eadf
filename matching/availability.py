"""Mengenoperationen auf wöchentlichen Verfügbarkeitsfenstern.

Alle Intervalle sind halboffen [start, end). Ergebnisse sind immer vereinigt
(disjunkt, nicht aneinanderstoßend) und nach (Tag, Beginn) sortiert.
"""

from collections import defaultdict
from typing import Iterable, Optional, Sequence

from models.availability import AvailabilityWindow
from matching.errors import InvalidInputError


def windows_overlap(a: AvailabilityWindow, b: AvailabilityWindow) -> bool:
    """Gleicher Tag und echte Überschneidung (Anfang/Ende-Berührung zählt nicht)."""
    return a.day == b.day and a.start < b.end and b.start < a.end


def union(windows: Iterable[AvailabilityWindow]) -> list[AvailabilityWindow]:
    """Verschmilzt überlappende und aneinanderstoßende Fenster pro Tag."""
    by_day: dict[int, list[AvailabilityWindow]] = defaultdict(list)
    for w in windows:
        by_day[w.day].append(w)

    merged: list[AvailabilityWindow] = []
    for day in sorted(by_day):
        day_windows = sorted(by_day[day], key=lambda w: (w.start, w.end))
        cur_start, cur_end = day_windows[0].start, day_windows[0].end
        for w in day_windows[1:]:
            if w.start <= cur_end:
                cur_end = max(cur_end, w.end)
            else:
                merged.append(AvailabilityWindow(day=day, start=cur_start, end=cur_end))
                cur_start, cur_end = w.start, w.end
        merged.append(AvailabilityWindow(day=day, start=cur_start, end=cur_end))
    return merged


def intersect(
    a: Iterable[AvailabilityWindow], b: Iterable[AvailabilityWindow]
) -> list[AvailabilityWindow]:
    """Schnittmenge zweier Fensterlisten, Tag für Tag."""
    return intersect_merged(union(a), union(b))


def intersect_merged(
    left: Sequence[AvailabilityWindow], right: Sequence[AvailabilityWindow]
) -> list[AvailabilityWindow]:
    """Wie intersect(), erwartet aber bereits vereinigte, sortierte Listen."""
    result: list[AvailabilityWindow] = []
    i = j = 0
    # Zwei-Zeiger-Durchlauf über beide sortierten Listen
    while i < len(left) and j < len(right):
        x, y = left[i], right[j]
        if x.day < y.day:
            i += 1
            continue
        if y.day < x.day:
            j += 1
            continue
        start = max(x.start, y.start)
        end = min(x.end, y.end)
        if start < end:
            result.append(AvailabilityWindow(day=x.day, start=start, end=end))
        if x.end <= y.end:
            i += 1
        else:
            j += 1
    return result


def intersect_all(
    members: Sequence[Iterable[AvailabilityWindow]],
) -> list[AvailabilityWindow]:
    """Gemeinsame Zeit aller Mitglieder. Leere Mitgliederliste ist ein Fehler."""
    if len(members) == 0:
        raise InvalidInputError("intersect_all: keine Mitglieder übergeben")
    common = union(members[0])
    for windows in members[1:]:
        if not common:
            break
        common = intersect(common, windows)
    return common


def total_minutes(windows: Iterable[AvailabilityWindow]) -> int:
    """Gesamtdauer nach Vereinigung (Doppelungen zählen einmal)."""
    return sum(w.duration_minutes for w in union(windows))


def overlap_minutes(
    a: Iterable[AvailabilityWindow], b: Iterable[AvailabilityWindow]
) -> int:
    return overlap_minutes_merged(union(a), union(b))


def overlap_minutes_merged(
    left: Sequence[AvailabilityWindow], right: Sequence[AvailabilityWindow]
) -> int:
    """Gemeinsame Minuten bereits vereinigter Listen, ohne Fenster zu erzeugen."""
    total = 0
    i = j = 0
    while i < len(left) and j < len(right):
        x, y = left[i], right[j]
        if x.day != y.day:
            if x.day < y.day:
                i += 1
            else:
                j += 1
            continue
        start = max(x.start, y.start)
        end = min(x.end, y.end)
        if start < end:
            total += end - start
        if x.end <= y.end:
            i += 1
        else:
            j += 1
    return total


def choose_meeting_window(
    common: Sequence[AvailabilityWindow],
    duration_minutes: Optional[int] = None,
) -> Optional[AvailabilityWindow]:
    """Wählt den Termin aus der gemeinsamen Zeit.

    Längstes Fenster gewinnt, bei Gleichstand das früheste. Mit duration_minutes
    wird der Termin auf diese Länge ab Fensterbeginn gekürzt; kürzere Fenster
    scheiden aus.
    """
    candidates = [
        w for w in common
        if duration_minutes is None or w.duration_minutes >= duration_minutes
    ]
    if not candidates:
        return None
    best = min(candidates, key=lambda w: (-w.duration_minutes, w.day, w.start))
    if duration_minutes is None:
        return best
    return AvailabilityWindow(day=best.day, start=best.start, end=best.start + duration_minutes)
