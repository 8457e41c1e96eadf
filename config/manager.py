"""Konfigurationsmanager: Laden, Speichern und Szenarien.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import StudyGroupConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Lerngruppen-Matcher: Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "matching": (
        "Gruppenbildung",
        "Gruppengrößen gelten pro Kurs. deadline_seconds: null = kein Zeitlimit.",
    ),
    "scoring": (
        "Kompatibilität",
        "strategy: shared (gemeinsame Schwächen) oder complementary (ergänzende).",
    ),
    "fake_data": (
        "Testdaten",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "matching_config.yaml"
    SCENARIOS_DIR = Path("scenarios")

    def __init__(self, config_path: Optional[Path] = None,
                 scenarios_dir: Optional[Path] = None) -> None:
        if config_path is not None:
            self.DEFAULT_CONFIG = Path(config_path)
        if scenarios_dir is not None:
            self.SCENARIOS_DIR = Path(scenarios_dir)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> StudyGroupConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return StudyGroupConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> StudyGroupConfig:
        """Wie load(), liefert aber die Default-Config, wenn keine Datei existiert."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            from config.defaults import default_study_group_config
            return default_study_group_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: StudyGroupConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: StudyGroupConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        matching_map = CommentedMap(cm["matching"])
        matching_map.yaml_add_eol_comment("mind. 2", "min_group_size")
        cm["matching"] = matching_map

        return cm

    # ─── Szenarios ───

    def save_scenario(self, config: StudyGroupConfig, name: str,
                      description: str = "") -> Path:
        """Speichert eine Config als benanntes Szenario (überschreibt)."""
        self.SCENARIOS_DIR.mkdir(parents=True, exist_ok=True)
        path = self.SCENARIOS_DIR / f"{name}.yaml"
        self.save(config, path)
        # Beschreibung in separater Metadaten-Datei
        if description:
            meta_path = self.SCENARIOS_DIR / f"{name}.meta.yaml"
            with open(meta_path, "w", encoding="utf-8") as f:
                yaml.dump({"name": name, "description": description,
                           "created": date.today().isoformat()}, f)
        console.print(f"[green]✓[/green] Szenario '{name}' gespeichert.")
        return path

    def list_scenarios(self) -> list[dict]:
        """Listet alle gespeicherten Szenarien auf."""
        if not self.SCENARIOS_DIR.exists():
            return []
        scenarios = []
        for p in sorted(self.SCENARIOS_DIR.glob("*.yaml")):
            if p.stem.endswith(".meta"):
                continue
            meta_path = self.SCENARIOS_DIR / f"{p.stem}.meta.yaml"
            description = ""
            created = ""
            if meta_path.exists():
                with open(meta_path, "r", encoding="utf-8") as f:
                    meta = yaml.load(f)
                    description = meta.get("description", "")
                    created = meta.get("created", "")
            scenarios.append({
                "name": p.stem,
                "path": str(p),
                "description": description,
                "created": created,
            })
        return scenarios

    def load_scenario(self, name: str) -> StudyGroupConfig:
        """Lädt ein gespeichertes Szenario."""
        path = self.SCENARIOS_DIR / f"{name}.yaml"
        if not path.exists():
            raise FileNotFoundError(
                f"Szenario '{name}' nicht gefunden. "
                f"Verfügbar: {[s['name'] for s in self.list_scenarios()]}"
            )
        return self.load(path)
