"""Tests für Kompatibilitäts-Scoring und Gruppenbildung pro Kurs."""

import random

import pytest

from config.schema import MatchingConfig, ScoringConfig, ScoringStrategy
from models.result import UnmatchedReason
from models.student import Student
from matching.availability import union
from matching.errors import MatchingTimeoutError
from matching.grouping import GroupingStrategy, target_group_size
from matching.scoring import (
    ComplementaryTopicScorer,
    SharedTopicScorer,
    build_compatibility_matrix,
    make_scorer,
)


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def make_student(sid: str, availability: str = "Mo 10:00-12:00",
                 topics: str = "", courses: str = "SQA101") -> Student:
    return Student(id=sid, courses=courses, difficult_topics=topics, availability=availability)


def make_pool(n: int, availability: str = "Mo 10:00-12:00") -> list[Student]:
    return [make_student(f"S{i}", availability) for i in range(1, n + 1)]


def partition(pool, min_size=3, max_size=4, scorer=None, **kwargs):
    config = MatchingConfig(min_group_size=min_size, max_group_size=max_size, **kwargs)
    return GroupingStrategy(config, scorer).partition("SQA101", pool)


# ─── SCORING ──────────────────────────────────────────────────────────────────

class TestScoring:
    def test_shared_topics(self):
        a = make_student("A", topics="rekursion, graphen")
        b = make_student("B", topics="rekursion")
        # (1 + 1 Treffer) * 2 Stunden
        assert SharedTopicScorer().score(a, b) == pytest.approx(4.0)

    def test_complementary_topics(self):
        a = make_student("A", topics="rekursion, graphen")
        b = make_student("B", topics="rekursion, testplanung")
        # Symmetrische Differenz: graphen, testplanung
        assert ComplementaryTopicScorer().score(a, b) == pytest.approx(6.0)

    def test_no_overlap_scores_zero(self):
        a = make_student("A", "Mo 10:00-12:00", topics="rekursion")
        b = make_student("B", "Di 10:00-12:00", topics="rekursion")
        assert SharedTopicScorer().score(a, b) == 0.0

    def test_weights(self):
        a = make_student("A", topics="x")
        b = make_student("B", topics="x")
        assert SharedTopicScorer(base_score=0.5, topic_weight=2.0).score(a, b) == pytest.approx(5.0)

    def test_make_scorer(self):
        assert isinstance(make_scorer(), SharedTopicScorer)
        scorer = make_scorer(ScoringConfig(strategy=ScoringStrategy.COMPLEMENTARY, topic_weight=3))
        assert isinstance(scorer, ComplementaryTopicScorer)
        assert scorer.topic_weight == 3
        assert scorer.name == "complementary"

    def test_matrix_is_symmetric(self):
        pool = make_pool(3)
        matrix = build_compatibility_matrix(pool, SharedTopicScorer())
        assert len(matrix) == 6
        assert matrix[("S1", "S2")] == matrix[("S2", "S1")]

    def test_matrix_checks_deadline_per_row(self):
        calls = []
        pool = make_pool(5)
        build_compatibility_matrix(pool, SharedTopicScorer(), check_deadline=lambda: calls.append(1))
        assert len(calls) == len(pool)

    def test_matrix_aborts_mid_build(self):
        calls = []

        def expires_after_two():
            calls.append(1)
            if len(calls) > 2:
                raise MatchingTimeoutError("abgelaufen")

        with pytest.raises(MatchingTimeoutError):
            build_compatibility_matrix(make_pool(50), SharedTopicScorer(), check_deadline=expires_after_two)
        assert len(calls) == 3

    def test_matrix_with_precomputed_windows(self):
        pool = [make_student("A", "Mo 10:00-11:00; Mo 11:00-12:00"), make_student("B")]
        windows = {s.id: union(s.availability) for s in pool}
        matrix = build_compatibility_matrix(pool, SharedTopicScorer(), windows)
        assert matrix[("A", "B")] == pytest.approx(SharedTopicScorer().score(pool[0], pool[1]))


# ─── ZIELGRÖSSE ───────────────────────────────────────────────────────────────

class TestTargetGroupSize:
    @pytest.mark.parametrize("remaining,min_size,max_size,expected", [
        (7, 3, 4, 4),
        (3, 3, 4, 3),
        (6, 3, 3, 3),
        (8, 3, 5, 4),
        (10, 4, 5, 5),
        (5, 4, 4, 4),
    ])
    def test_balanced_target(self, remaining, min_size, max_size, expected):
        assert target_group_size(remaining, min_size, max_size) == expected


# ─── RANDFÄLLE ────────────────────────────────────────────────────────────────

class TestEdgeCases:
    def test_empty_pool(self):
        outcome = partition([])
        assert outcome.groups == []
        assert outcome.unmatched == []

    def test_single_student(self):
        outcome = partition(make_pool(1))
        assert outcome.groups == []
        [u] = outcome.unmatched
        assert u.reason == UnmatchedReason.INSUFFICIENT_POOL

    def test_small_pool_not_allowed(self):
        outcome = partition(make_pool(2))
        assert outcome.groups == []
        assert {u.student_id for u in outcome.unmatched} == {"S1", "S2"}
        assert all(u.reason == UnmatchedReason.INSUFFICIENT_POOL for u in outcome.unmatched)

    def test_small_pool_undersized_allowed(self):
        outcome = partition(make_pool(2), allow_undersized_groups=True)
        [group] = outcome.groups
        assert group.is_undersized
        assert sorted(group.members) == ["S1", "S2"]
        assert outcome.unmatched == []

    def test_deadline_callback_aborts(self):
        def expired():
            raise MatchingTimeoutError("abgelaufen")

        strategy = GroupingStrategy(MatchingConfig(), check_deadline=expired)
        with pytest.raises(MatchingTimeoutError):
            strategy.partition("SQA101", make_pool(6))


# ─── GRUPPENBILDUNG ───────────────────────────────────────────────────────────

class TestPartition:
    def test_seven_split_four_and_three(self):
        outcome = partition(make_pool(7), min_size=3, max_size=4)
        assert [g.size for g in outcome.groups] == [4, 3]
        assert outcome.unmatched == []

    def test_ids_and_scores(self):
        outcome = partition(make_pool(6), min_size=3, max_size=3)
        assert [g.id for g in outcome.groups] == ["SQA101-G01", "SQA101-G02"]
        # 3 Paare à (1.0 * 2 Stunden)
        assert all(g.compatibility_score == 6.0 for g in outcome.groups)
        assert all(g.meeting_window is None for g in outcome.groups)

    def test_input_order_irrelevant(self):
        pool = make_pool(11)
        shuffled = list(pool)
        random.Random(3).shuffle(shuffled)
        a = partition(pool)
        b = partition(shuffled)
        assert [g.members for g in a.groups] == [g.members for g in b.groups]

    def test_shared_topics_group_together(self):
        pool = make_pool(3) + [
            make_student(f"S{i}", topics="rekursion") for i in (4, 5, 6)
        ]
        outcome = partition(pool, min_size=3, max_size=3)
        # Höchste Rest-Kompatibilität → S4 ist Keim der ersten Gruppe
        assert outcome.groups[0].members == ["S4", "S5", "S6"]
        assert outcome.groups[1].members == ["S1", "S2", "S3"]

    def test_complementary_mixes_topics(self):
        pool = [
            make_student("S1", topics="a"), make_student("S2", topics="a"),
            make_student("S3", topics="b"), make_student("S4", topics="b"),
        ]
        outcome = partition(pool, min_size=2, max_size=2, scorer=ComplementaryTopicScorer())
        for group in outcome.groups:
            topics = {next(iter(s.difficult_topics)) for s in pool if s.id in group.members}
            assert topics == {"a", "b"}

    def test_common_time_preferred(self):
        pool = [
            make_student("S1", "Mo 10:00-12:00"), make_student("S3", "Di 10:00-12:00"),
            make_student("S2", "Mo 10:00-12:00"), make_student("S4", "Di 10:00-12:00"),
        ]
        outcome = partition(pool, min_size=2, max_size=2)
        assert [g.members for g in outcome.groups] == [["S1", "S2"], ["S3", "S4"]]

    def test_no_common_time_still_forms_group(self):
        pool = [
            make_student("S1", "Mo 10:00-12:00"), make_student("S2", "Di 10:00-12:00"),
            make_student("S3", "Mi 10:00-12:00"), make_student("S4", "Do 10:00-12:00"),
        ]
        outcome = partition(pool, min_size=3, max_size=4)
        [group] = outcome.groups
        assert sorted(group.members) == ["S1", "S2", "S3", "S4"]
        assert outcome.unmatched == []

    def test_every_candidate_accounted_for(self):
        pool = [
            make_student(f"S{i:02d}", "Mo 10:00-12:00" if i % 3 else "Di 08:00-09:00")
            for i in range(1, 24)
        ]
        outcome = partition(pool, min_size=3, max_size=5)
        placed = [sid for g in outcome.groups for sid in g.members]
        unmatched = [u.student_id for u in outcome.unmatched]
        assert sorted(placed + unmatched) == sorted(s.id for s in pool)
        assert len(set(placed)) == len(placed)
        assert all(3 <= g.size <= 5 for g in outcome.groups)


# ─── RESTE ────────────────────────────────────────────────────────────────────

class TestLeftovers:
    def test_leftover_absorbed_then_unmatched(self):
        outcome = partition(make_pool(5), min_size=3, max_size=4)
        assert [g.size for g in outcome.groups] == [4]
        [u] = outcome.unmatched
        assert u.reason == UnmatchedReason.NO_COMPATIBLE_GROUP

    def test_overflow_group(self):
        outcome = partition(make_pool(5), min_size=3, max_size=4, allow_overflow_group=True)
        [group] = outcome.groups
        assert group.size == 5
        assert group.is_overflow
        assert outcome.unmatched == []

    def test_undersized_leftover_group(self):
        outcome = partition(make_pool(6), min_size=4, max_size=4,
                            allow_undersized_leftover_group=True)
        assert [g.size for g in outcome.groups] == [4, 2]
        assert outcome.groups[1].is_undersized
        assert not outcome.groups[0].is_undersized
        assert outcome.unmatched == []

    def test_small_course_option_keeps_leftovers_unmatched(self):
        outcome = partition(make_pool(6), min_size=4, max_size=4, allow_undersized_groups=True)
        assert [g.size for g in outcome.groups] == [4]
        assert not outcome.groups[0].is_undersized
        assert len(outcome.unmatched) == 2
        assert all(u.reason == UnmatchedReason.NO_COMPATIBLE_GROUP for u in outcome.unmatched)

    def test_single_leftover_never_forms_group(self):
        outcome = partition(make_pool(5), min_size=4, max_size=4,
                            allow_undersized_leftover_group=True)
        assert [g.size for g in outcome.groups] == [4]
        [u] = outcome.unmatched
        assert u.reason == UnmatchedReason.NO_COMPATIBLE_GROUP

    def test_leftover_without_common_time_stays_unmatched(self):
        pool = make_pool(3) + [make_student("S4", "Di 10:00-12:00")]
        outcome = partition(pool, min_size=3, max_size=4)
        [group] = outcome.groups
        assert group.members == ["S1", "S2", "S3"]
        [u] = outcome.unmatched
        assert u.student_id == "S4"
        assert u.reason == UnmatchedReason.NO_COMPATIBLE_GROUP
