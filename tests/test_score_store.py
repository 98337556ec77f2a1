from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from leaderboard_service.errors import NotFoundError, ValidationError

from memory_repositories import MemStore


class TestAppend(unittest.TestCase):
    def setUp(self):
        self.store = MemStore()
        self.store.lifecycle.create({"name": "Arcade", "unique_id": "arcade", "sorting_order": "DESC"})

    def test_append_creates_player_and_stamps_now(self):
        before = datetime.now(timezone.utc)
        submission = self.store.score_store.append("arcade", "Kai", 1200)

        self.assertIsNotNone(submission.id)
        self.assertEqual(submission.score, 1200.0)
        self.assertGreaterEqual(submission.timestamp, before)
        self.assertLess(submission.timestamp - before, timedelta(minutes=1))
        self.assertIsNotNone(self.store.players.fetch_by_name("Kai"))

    def test_players_are_shared_across_submissions(self):
        self.store.score_store.append("arcade", "Kai", 1)
        self.store.score_store.append("arcade", "Kai", 2)
        self.assertEqual(len(self.store.players.rows), 1)
        self.assertEqual(len(self.store.scores.rows), 2)

    def test_explicit_timestamp_normalized_to_utc(self):
        submission = self.store.score_store.append("arcade", "Kai", 5, "2025-05-05T12:00:00+02:00")
        self.assertEqual(submission.timestamp, datetime(2025, 5, 5, 10, 0, tzinfo=timezone.utc))

    def test_numeric_string_and_float_scores(self):
        self.assertEqual(self.store.score_store.append("arcade", "Kai", "12.5").score, 12.5)
        self.assertEqual(self.store.score_store.append("arcade", "Kai", 0).score, 0.0)

    def test_missing_fields(self):
        for name, score in (("", 10), (None, 10), ("Kai", None)):
            with self.assertRaises(ValidationError) as ctx:
                self.store.score_store.append("arcade", name, score)
            self.assertEqual(ctx.exception.message, "Missing player_name or score.")

    def test_non_numeric_score(self):
        for bad in ("abc", True, float("nan"), [1]):
            with self.assertRaises(ValidationError):
                self.store.score_store.append("arcade", "Kai", bad)
        self.assertEqual(self.store.scores.rows, [])

    def test_bad_timestamp(self):
        with self.assertRaises(ValidationError):
            self.store.score_store.append("arcade", "Kai", 1, "not-a-time")

    def test_validation_runs_before_lookup(self):
        with self.assertRaises(ValidationError):
            self.store.score_store.append("missing", "Kai", None)

    def test_unknown_competition(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.store.score_store.append("missing", "Kai", 3)
        self.assertEqual(ctx.exception.message, "Competition not found.")
        self.assertEqual(self.store.players.rows, {})


class TestPlayerScores(unittest.TestCase):
    def setUp(self):
        self.store = MemStore()
        self.store.lifecycle.create({"name": "Arcade", "unique_id": "arcade", "sorting_order": "DESC"})
        self.store.lifecycle.create({"name": "Other", "unique_id": "other", "sorting_order": "DESC"})
        self.store.score_store.append("arcade", "Kai", 1, "2025-01-01 10:00:00")
        self.store.score_store.append("arcade", "Kai", 3, "2025-01-03 10:00:00")
        self.store.score_store.append("arcade", "Kai", 2, "2025-01-02 10:00:00")
        self.store.score_store.append("other", "Lee", 9, "2025-01-01 10:00:00")

    def test_history_is_newest_first(self):
        competition, scores = self.store.score_store.player_scores("arcade", "Kai")
        self.assertEqual(competition.unique_id, "arcade")
        self.assertEqual([s.score for s in scores], [3, 2, 1])

    def test_player_without_scores_here(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.store.score_store.player_scores("arcade", "Lee")
        self.assertEqual(ctx.exception.message, "Player not found in this competition")

    def test_unknown_player(self):
        with self.assertRaises(NotFoundError):
            self.store.score_store.player_scores("arcade", "Nobody")

    def test_delete_all_only_touches_one_competition(self):
        competition = self.store.lifecycle.get("arcade")
        self.assertEqual(self.store.score_store.delete_all(competition), 3)
        self.assertEqual(len(self.store.scores.rows), 1)


if __name__ == "__main__":
    unittest.main()
