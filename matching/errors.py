"""Fehlerklassen des Matching-Engines.

Konfigurations- und Eingabefehler brechen den ganzen Lauf ab. Probleme einzelner
Personen oder Gruppen sind keine Exceptions, sondern Einträge im Ergebnis.
"""


class MatchingError(Exception):
    """Basisklasse aller Engine-Fehler."""


class InvalidConfigError(MatchingError):
    """Ungültige Gruppengrößen o.ä. – Abbruch vor jeder Verarbeitung."""


class InvalidInputError(MatchingError):
    """Fehlerhafter Datensatz (kein Kurs, ungültiges Zeitfenster, doppelte ID)."""


class MatchingTimeoutError(MatchingError, TimeoutError):
    """Zeitlimit überschritten – es gibt kein Teilergebnis."""
