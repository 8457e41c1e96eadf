from config.schema import (
    FakeDataConfig,
    MatchingConfig,
    ScoringConfig,
    ScoringStrategy,
    StudyGroupConfig,
)

DEFAULT_MIN_GROUP_SIZE = 3
DEFAULT_MAX_GROUP_SIZE = 5


# Beispielkurse für Testdaten und Excel-Vorlage
SAMPLE_COURSES: dict[str, str] = {
    "SQA101": "Software-Qualitätssicherung",
    "MATH120": "Lineare Algebra",
    "CS210": "Algorithmen und Datenstrukturen",
    "CS230": "Datenbanksysteme",
    "STAT200": "Statistik I",
    "PHY110": "Experimentalphysik I",
    "ECO101": "Einführung in die VWL",
    "CS310": "Betriebssysteme",
}

# Typische schwache Themen je Kurs (Testdaten)
SAMPLE_TOPICS: dict[str, list[str]] = {
    "SQA101": ["testplanung", "mutationstests", "code-review", "metriken"],
    "MATH120": ["eigenwerte", "basiswechsel", "determinanten", "vektorräume"],
    "CS210": ["rekursion", "graphen", "dynamische-programmierung", "heaps"],
    "CS230": ["normalformen", "sql-joins", "transaktionen", "indizes"],
    "STAT200": ["hypothesentests", "regression", "verteilungen", "konfidenzintervalle"],
    "PHY110": ["mechanik", "schwingungen", "thermodynamik", "optik"],
    "ECO101": ["angebot-nachfrage", "elastizität", "marktformen", "bip"],
    "CS310": ["scheduling", "speicherverwaltung", "deadlocks", "dateisysteme"],
}

# Typische Lernzeiten (Start, Ende) für Testdaten
SAMPLE_TIME_BLOCKS: list[tuple[str, str]] = [
    ("08:00", "10:00"),
    ("10:00", "12:00"),
    ("12:00", "14:00"),
    ("14:00", "16:00"),
    ("16:00", "18:00"),
    ("18:00", "20:00"),
]


def default_matching_config() -> MatchingConfig:
    """Standard: Gruppen mit 3-5 Personen, keine Ausnahmen."""
    return MatchingConfig(
        min_group_size=DEFAULT_MIN_GROUP_SIZE,
        max_group_size=DEFAULT_MAX_GROUP_SIZE,
        allow_undersized_groups=False,
        allow_undersized_leftover_group=False,
        allow_overflow_group=False,
        deadline_seconds=None,
        meeting_duration_minutes=None,
        num_workers=1,
    )


def default_scoring_config() -> ScoringConfig:
    """Gemeinsame schwache Themen belohnen."""
    return ScoringConfig(strategy=ScoringStrategy.SHARED, base_score=1.0, topic_weight=1.0)


def default_study_group_config() -> StudyGroupConfig:
    return StudyGroupConfig(
        institution_name="Muster-Hochschule",
        term="WS 2026/27",
        matching=default_matching_config(),
        scoring=default_scoring_config(),
        fake_data=FakeDataConfig(),
    )
