"""Datenmodell für ein wöchentliches Verfügbarkeitsfenster (Pydantic v2)."""

import re

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_WINDOW_RE = re.compile(
    r"^\s*(?P<day>\w+)\s+(?P<start>\d{1,2}:\d{2})\s*-\s*(?P<end>\d{1,2}:\d{2})\s*$"
)


def parse_time(value: str) -> int:
    """Wandelt "HH:MM" in Minuten seit Mitternacht um ("24:00" erlaubt)."""
    m = _TIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM)")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if minutes >= 60 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Ungültige Uhrzeit: {value!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class AvailabilityWindow(BaseModel):
    """Ein wiederkehrendes Zeitfenster innerhalb einer Woche.

    Intervall ist halboffen: [start, end). Ein Fenster bis 14:00 und eines ab
    14:00 berühren sich, überlappen aber nicht.
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    model_config = ConfigDict(frozen=True)

    # Wochentag (0=Montag, ..., 6=Sonntag)
    day: int
    # Beginn in Minuten seit Mitternacht
    start: int
    # Ende in Minuten seit Mitternacht (exklusiv)
    end: int

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_clock(cls, v):
        if isinstance(v, str):
            return parse_time(v)
        return v

    @model_validator(mode="after")
    def _check_bounds(self):
        if not 0 <= self.day <= 6:
            raise ValueError(f"Wochentag {self.day} außerhalb 0-6")
        if self.start < 0 or self.end > MINUTES_PER_DAY:
            raise ValueError(
                f"Fenster {self.start}-{self.end} liegt nicht innerhalb eines Tages"
            )
        if self.start >= self.end:
            raise ValueError(
                f"Beginn ({format_time(self.start)}) muss vor Ende "
                f"({format_time(self.end)}) liegen"
            )
        return self

    @classmethod
    def parse(cls, text: str) -> "AvailabilityWindow":
        """Parst ein Fenster im Format "Mo 14:00-16:00" (Tag auch als Zahl 0-6)."""
        m = _WINDOW_RE.match(text)
        if not m:
            raise ValueError(f"Ungültiges Zeitfenster: {text!r} (erwartet z.B. 'Mo 14:00-16:00')")
        day_token = m.group("day")
        if day_token.isdigit():
            day = int(day_token)
        else:
            lookup = {name.lower(): i for i, name in enumerate(DAY_NAMES)}
            key = day_token[:2].lower()
            if key not in lookup:
                raise ValueError(f"Unbekannter Wochentag: {day_token!r}")
            day = lookup[key]
        return cls(day=day, start=m.group("start"), end=m.group("end"))

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        return DAY_NAMES[self.day]

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.day, self.start, self.end)

    def __str__(self) -> str:
        return f"{self.day_name} {format_time(self.start)}-{format_time(self.end)}"
