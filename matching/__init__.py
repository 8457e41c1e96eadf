"""Matching-Modul (gierige Gruppenbildung + Konfliktprüfung)."""

from .errors import MatchingError, InvalidConfigError, InvalidInputError, MatchingTimeoutError
from .availability import union, intersect, intersect_all, windows_overlap
from .conflict_tracker import ConflictTracker, CommitOutcome, check_and_commit
from .scoring import CompatibilityScorer, SharedTopicScorer, ComplementaryTopicScorer, make_scorer
from .grouping import GroupingStrategy, GroupingOutcome
from .orchestrator import MatchingEngine, run_matching

__all__ = [
    "MatchingError",
    "InvalidConfigError",
    "InvalidInputError",
    "MatchingTimeoutError",
    "union",
    "intersect",
    "intersect_all",
    "windows_overlap",
    "ConflictTracker",
    "CommitOutcome",
    "check_and_commit",
    "CompatibilityScorer",
    "SharedTopicScorer",
    "ComplementaryTopicScorer",
    "make_scorer",
    "GroupingStrategy",
    "GroupingOutcome",
    "MatchingEngine",
    "run_matching",
]
