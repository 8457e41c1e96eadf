"""Registry der bereits zugesagten Treffen pro Studierender/m.

Wird vom Aufrufer zwischen Läufen weitergereicht (z.B. als JSON-Datei).
Es gibt keine globale Instanz.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.availability import AvailabilityWindow


class CommittedSlot(BaseModel):
    """Ein eingetragenes Treffen einer Person."""

    model_config = ConfigDict(frozen=True)

    window: AvailabilityWindow
    group_id: Optional[str] = None
    course_id: Optional[str] = None


class ConflictRegistry(BaseModel):
    """student_id -> eingetragene Treffen."""

    slots: dict[str, list[CommittedSlot]] = {}

    def get(self, student_id: str) -> list[CommittedSlot]:
        return list(self.slots.get(student_id, []))

    def add(self, student_id: str, slot: CommittedSlot) -> None:
        self.slots.setdefault(student_id, []).append(slot)

    def copy_registry(self) -> "ConflictRegistry":
        """Unabhängige Kopie (Slots sind immutable, Listen werden kopiert)."""
        return ConflictRegistry(slots={sid: list(s) for sid, s in self.slots.items()})

    @property
    def total_slots(self) -> int:
        return sum(len(s) for s in self.slots.values())

    def __contains__(self, student_id: str) -> bool:
        return bool(self.slots.get(student_id))

    def __len__(self) -> int:
        return len(self.slots)

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "ConflictRegistry":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Registry nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
