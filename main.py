"""Lerngruppen-Matcher: Haupt-CLI.

Verwendung:
  python main.py config init              Default-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py generate                 Testdaten erzeugen (JSON)
  python main.py template                 Excel-Import-Vorlage erzeugen
  python main.py import <datei.xlsx>      Excel/CSV importieren
  python main.py validate                 Vorab-Check des Datensatzes
  python main.py match                    Lerngruppen bilden
  python main.py check                    Gespeichertes Ergebnis prüfen
  python main.py scenario save <name>     Szenario speichern
  python main.py scenario load <name>     Szenario laden
  python main.py scenario list            Szenarien auflisten
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfade
DEFAULT_POOL_JSON = Path("output/students.json")
DEFAULT_RESULT_JSON = Path("output/matching_result.json")
DEFAULT_REGISTRY_JSON = Path("output/registry.json")


def _load_config():
    """Lädt die Konfiguration (Default, wenn noch keine Datei existiert)."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_pool_or_abort(json_path: str):
    from models.student_pool import StudentPool
    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py generate[/bold] "
            "oder [bold]python main.py import[/bold]."
        )
        sys.exit(1)
    try:
        return StudentPool.load_json(p)
    except ValueError as e:
        console.print(f"[red bold]Datensatz ungültig:[/red bold] {e}")
        sys.exit(1)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
def config_init(force: bool):
    """Schreibt die Default-Konfiguration als YAML."""
    from config.manager import ConfigManager
    from config.defaults import default_study_group_config

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        return
    mgr.save(default_study_group_config())


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config()

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  {config.term}",
        title="Konfiguration",
        border_style="cyan",
    ))

    mc = config.matching
    table = Table(title="Gruppenbildung", box=box.ROUNDED)
    table.add_column("Parameter")
    table.add_column("Wert")
    table.add_row("Gruppengröße", f"{mc.min_group_size}-{mc.max_group_size}")
    table.add_row("Unterbesetzte Gruppen", "ja" if mc.allow_undersized_groups else "nein")
    table.add_row("Kleine Restgruppe", "ja" if mc.allow_undersized_leftover_group else "nein")
    table.add_row("Überlauf-Gruppe", "ja" if mc.allow_overflow_group else "nein")
    table.add_row("Zeitlimit", f"{mc.deadline_seconds}s" if mc.deadline_seconds else "keins")
    table.add_row("Termindauer",
                  f"{mc.meeting_duration_minutes} min" if mc.meeting_duration_minutes else "ganzes Fenster")
    table.add_row("Threads", str(mc.num_workers))
    console.print(table)

    sc = config.scoring
    console.print(
        f"[bold]Kompatibilität:[/bold] {sc.strategy.value} | "
        f"Grundwert: {sc.base_score} | Themen-Gewicht: {sc.topic_weight}"
    )


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--students", "num_students", type=int, default=None,
              help="Anzahl Studierende (überschreibt Config).")
@click.option("--courses", "num_courses", type=int, default=None,
              help="Anzahl Kurse (überschreibt Config).")
@click.option("--json-path", default=str(DEFAULT_POOL_JSON),
              help="Pfad für JSON-Export.")
def cmd_generate(seed: int, num_students, num_courses, json_path: str):
    """Erzeugt Testdaten (Studierende, Kurse, Verfügbarkeiten)."""
    mgr, config = _load_config()
    from data.fake_data import FakeStudentGenerator

    update = {}
    if num_students is not None:
        update["num_students"] = num_students
    if num_courses is not None:
        update["num_courses"] = num_courses
    if update:
        config = config.model_copy(update={"fake_data": config.fake_data.model_copy(update=update)})

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeStudentGenerator(config, seed=seed)
    pool = gen.generate()
    gen.print_summary(pool)
    console.print(f"\n[dim]{pool.summary()}[/dim]")

    out_path = Path(json_path)
    pool.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine Excel-Import-Vorlage."""
    from data.excel_import import generate_template

    out_path = Path(output)
    generate_template(out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]Kurse[/cyan]        – Kurs-ID und Name\n"
        "  [cyan]Studierende[/cyan]  – ID, Name, Kurse, Schwache Themen, Verfügbarkeit"
    )


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--json-path", default=str(DEFAULT_POOL_JSON),
              help="Pfad für den JSON-Datensatz.")
def cmd_import(datei: Path, json_path: str):
    """Importiert Studierende aus einer Excel- oder CSV-Datei."""
    mgr, config = _load_config()
    from data.excel_import import import_from_excel, ExcelImportError

    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        pool, report = import_from_excel(datei, config.matching)
    except ExcelImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    console.print("[green]✓[/green] Import erfolgreich!")
    console.print(f"\n{pool.summary()}")
    report.print_rich()

    out_path = Path(json_path)
    pool.save_json(out_path)
    console.print(f"[green]✓[/green] Daten gespeichert: {out_path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--json-path", default=str(DEFAULT_POOL_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_validate(json_path: str):
    """Führt einen Vorab-Check auf dem aktuellen Datensatz durch."""
    mgr, config = _load_config()
    pool = _load_pool_or_abort(json_path)

    console.print(f"\n{pool.summary()}\n")
    report = pool.validate_feasibility(config.matching)
    report.print_rich()

    sys.exit(0 if report.is_feasible else 1)


# ─── MATCH ────────────────────────────────────────────────────────────────────

@click.command("match")
@click.option("--json-path", default=str(DEFAULT_POOL_JSON),
              help="Datensatz (JSON).")
@click.option("--registry", "registry_path", default=str(DEFAULT_REGISTRY_JSON),
              help="Registry früherer Läufe (wird gelesen, falls vorhanden, und aktualisiert).")
@click.option("--fresh", is_flag=True, default=False,
              help="Vorhandene Registry ignorieren.")
@click.option("--output", "-o", default=str(DEFAULT_RESULT_JSON),
              help="Pfad für das Ergebnis (JSON).")
@click.option("--excel", "excel_path", default=None,
              help="Zusätzlich als Excel exportieren.")
@click.option("--report/--no-report", "show_report", default=True,
              help="Qualitätsbericht anzeigen.")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Fortschritt protokollieren.")
def cmd_match(json_path: str, registry_path: str, fresh: bool, output: str,
              excel_path, show_report: bool, verbose: bool):
    """Bildet Lerngruppen für alle Kurse."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO, format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    mgr, config = _load_config()
    pool = _load_pool_or_abort(json_path)

    from models.registry import ConflictRegistry
    from matching import MatchingError, make_scorer, run_matching
    from analysis.quality_report import QualityAnalyzer

    reg_path = Path(registry_path)
    registry = None
    if reg_path.exists() and not fresh:
        registry = ConflictRegistry.load_json(reg_path)
        console.print(
            f"[dim]Registry geladen: {len(registry)} Personen, "
            f"{registry.total_slots} Termine[/dim]"
        )

    try:
        result = run_matching(
            pool.students, config.matching, registry, scorer=make_scorer(config.scoring)
        )
    except MatchingError as e:
        console.print(f"[red bold]Matching abgebrochen:[/red bold] {e}")
        sys.exit(1)

    result.print_rich()

    out_path = Path(output)
    result.save_json(out_path)
    result.registry.save_json(reg_path)
    console.print(f"[green]✓[/green] Ergebnis gespeichert: {out_path}")
    console.print(f"[green]✓[/green] Registry gespeichert: {reg_path}")

    quality = QualityAnalyzer().analyze(result, pool.students)
    if show_report:
        quality.print_rich()

    if excel_path:
        from export.excel_export import ExcelExporter
        ExcelExporter(result, pool).export(Path(excel_path), quality_report=quality)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel_path}")


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.option("--json-path", default=str(DEFAULT_POOL_JSON),
              help="Datensatz (JSON).")
@click.option("--result", "result_path", default=str(DEFAULT_RESULT_JSON),
              help="Gespeichertes Ergebnis (JSON).")
def cmd_check(json_path: str, result_path: str):
    """Prüft ein gespeichertes Ergebnis auf Regelverletzungen."""
    from models.result import MatchingResult
    from analysis.result_validator import ResultValidator

    pool = _load_pool_or_abort(json_path)
    try:
        result = MatchingResult.load_json(Path(result_path))
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    report = ResultValidator().validate(result, pool.students)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── SCENARIO ─────────────────────────────────────────────────────────────────

@click.group("scenario")
def cmd_scenario():
    """Szenarien verwalten (speichern, laden, auflisten)."""


@cmd_scenario.command("save")
@click.argument("name")
@click.option("--description", "-d", default="", help="Beschreibung des Szenarios.")
def scenario_save(name: str, description: str):
    """Speichert die aktuelle Konfiguration als Szenario."""
    mgr, config = _load_config()
    mgr.save_scenario(config, name, description)


@cmd_scenario.command("load")
@click.argument("name")
def scenario_load(name: str):
    """Lädt ein gespeichertes Szenario als aktive Konfiguration."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_scenario(name)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    mgr.save(config)
    console.print(f"[green]✓[/green] Szenario '{name}' als aktive Config gesetzt.")


@cmd_scenario.command("list")
def scenario_list():
    """Listet alle gespeicherten Szenarien auf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    scenarios = mgr.list_scenarios()

    if not scenarios:
        console.print("[dim]Keine Szenarien vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Szenarien", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Erstellt")
    table.add_column("Beschreibung")
    for s in scenarios:
        table.add_row(s["name"], str(s.get("created", "")), s.get("description", ""))
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Lerngruppen-Matcher: bildet Lerngruppen pro Kurs.

    Starten Sie mit: python main.py generate && python main.py match
    """


cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_validate)
cli.add_command(cmd_match)
cli.add_command(cmd_check)
cli.add_command(cmd_scenario)


def main():
    """Einstiegspunkt."""
    cli()


if __name__ == "__main__":
    main()
