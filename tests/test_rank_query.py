from __future__ import annotations

import unittest

from leaderboard_service.errors import NotFoundError, ValidationError

from memory_repositories import MemStore


def _seed(store: MemStore, unique_id: str, sorting_order: str, scores: list[tuple[str, float, str]]) -> None:
    store.lifecycle.bulk_import({"competitions": [{
        "name": unique_id, "unique_id": unique_id, "sorting_order": sorting_order,
        "scores": [{"player_name": n, "score": s, "timestamp": t} for n, s, t in scores],
    }]})


class TestGetRank(unittest.TestCase):
    def setUp(self):
        self.store = MemStore()

    def test_second_place(self):
        _seed(self.store, "rank-comp", "DESC", [
            ("Leader", 100, "2025-01-01 10:00:00"),
            ("Challenger", 50, "2025-01-01 10:00:00"),
        ])
        standing = self.store.rank_query.get_rank("rank-comp", "Challenger")
        self.assertEqual(standing.rank, 2)
        self.assertEqual(standing.score, 50)

    def test_equal_scores_share_a_rank(self):
        _seed(self.store, "tied", "DESC", [
            ("Top", 100, "2025-01-01 10:00:00"),
            ("Early", 90, "2025-01-01 09:00:00"),
            ("Late", 90, "2025-01-01 11:00:00"),
            ("Bottom", 10, "2025-01-01 10:00:00"),
        ])
        self.assertEqual(self.store.rank_query.get_rank("tied", "Early").rank, 2)
        self.assertEqual(self.store.rank_query.get_rank("tied", "Late").rank, 2)
        # one distinct better score group (100) plus one (90)
        self.assertEqual(self.store.rank_query.get_rank("tied", "Bottom").rank, 3)

    def test_rank_uses_latest_submission(self):
        _seed(self.store, "latest", "DESC", [
            ("A", 500, "2025-01-01 09:00:00"),
            ("B", 100, "2025-01-01 10:00:00"),
            ("A", 1, "2025-01-01 11:00:00"),
        ])
        self.assertEqual(self.store.rank_query.get_rank("latest", "B").rank, 1)
        self.assertEqual(self.store.rank_query.get_rank("latest", "A").rank, 2)

    def test_ascending_competition(self):
        _seed(self.store, "golf", "ASC", [
            ("Par", 72, "2025-01-01 10:00:00"),
            ("Birdie", 70, "2025-01-01 10:00:00"),
        ])
        self.assertEqual(self.store.rank_query.get_rank("golf", "Birdie").rank, 1)
        self.assertEqual(self.store.rank_query.get_rank("golf", "Par").rank, 2)

    def test_unknown_player(self):
        _seed(self.store, "rank-comp", "DESC", [("Leader", 100, "2025-01-01 10:00:00")])
        with self.assertRaises(NotFoundError) as ctx:
            self.store.rank_query.get_rank("rank-comp", "Nobody")
        self.assertEqual(ctx.exception.message, "Player not found or has no score.")

    def test_unknown_competition(self):
        with self.assertRaises(NotFoundError):
            self.store.rank_query.get_rank("missing", "Leader")


class TestGetNeighbours(unittest.TestCase):
    def setUp(self):
        self.store = MemStore()
        _seed(self.store, "ladder", "DESC", [
            ("P1", 500, "2025-01-01 10:00:00"),
            ("P2", 400, "2025-01-01 10:00:00"),
            ("P3", 300, "2025-01-01 10:00:00"),
            ("P4", 200, "2025-01-01 10:00:00"),
            ("P5", 100, "2025-01-01 10:00:00"),
        ])

    def test_middle_player_sees_closest_on_both_sides(self):
        result = self.store.rank_query.get_neighbours("ladder", "P3")
        self.assertEqual(result.score, 300)
        self.assertEqual([e.player_name for e in result.above], ["P2", "P1"])
        self.assertEqual([e.player_name for e in result.below], ["P4", "P5"])

    def test_count_limits_each_side(self):
        result = self.store.rank_query.get_neighbours("ladder", "P3", k=1)
        self.assertEqual([e.player_name for e in result.above], ["P2"])
        self.assertEqual([e.player_name for e in result.below], ["P4"])

    def test_above_is_closest_not_top(self):
        result = self.store.rank_query.get_neighbours("ladder", "P5", k=2)
        self.assertEqual([e.player_name for e in result.above], ["P4", "P3"])
        self.assertEqual(result.below, [])

    def test_top_player_has_nobody_above(self):
        result = self.store.rank_query.get_neighbours("ladder", "P1")
        self.assertEqual(result.above, [])
        self.assertEqual([e.player_name for e in result.below], ["P2", "P3"])

    def test_equal_scores_are_neither_above_nor_below(self):
        self.store.score_store.append("ladder", "P3-twin", 300, "2025-01-01 11:00:00")
        result = self.store.rank_query.get_neighbours("ladder", "P3")
        names = [e.player_name for e in result.above + result.below]
        self.assertNotIn("P3-twin", names)

    def test_ascending_direction(self):
        _seed(self.store, "speedrun", "ASC", [
            ("Fast", 10, "2025-01-01 10:00:00"),
            ("Mid", 20, "2025-01-01 10:00:00"),
            ("Slow", 30, "2025-01-01 10:00:00"),
        ])
        result = self.store.rank_query.get_neighbours("speedrun", "Mid")
        self.assertEqual([e.player_name for e in result.above], ["Fast"])
        self.assertEqual([e.player_name for e in result.below], ["Slow"])

    def test_unknown_player_message(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.store.rank_query.get_neighbours("ladder", "Ghost")
        self.assertEqual(ctx.exception.message, "Player Ghost not found in this competition.")

    def test_invalid_count(self):
        with self.assertRaises(ValidationError):
            self.store.rank_query.get_neighbours("ladder", "P3", k=0)


if __name__ == "__main__":
    unittest.main()
