"""Tests for next-anchor candidate search."""

import concurrent.futures
import math

import pytest


class TestCandidateAnchors:
    """Tests for candidate enumeration."""

    def test_scan_order(self):
        from threadart.planner.search import candidate_anchors

        assert candidate_anchors(0, 8, 1) == [2, 3, 4, 5, 6]
        assert candidate_anchors(6, 8, 1) == [0, 1, 2, 3, 4]

    def test_zero_gap_excludes_only_current(self):
        from threadart.planner.search import candidate_anchors

        assert candidate_anchors(3, 5, 0) == [4, 0, 1, 2]

    @pytest.mark.parametrize("anchor_count,gap", [(8, 0), (8, 1), (8, 3), (13, 2), (30, 5)])
    def test_gap_exclusion_holds(self, anchor_count, gap):
        """Test every candidate is strictly farther than the gap from current."""
        from threadart.planner.search import candidate_anchors, circular_distance

        for current in range(anchor_count):
            candidates = candidate_anchors(current, anchor_count, gap)

            assert len(candidates) == anchor_count - 2 * gap - 1
            assert len(set(candidates)) == len(candidates)
            assert all(circular_distance(current, c, anchor_count) > gap for c in candidates)

    def test_gap_too_large(self):
        """Test that a gap covering the whole ring leaves nothing."""
        from threadart.planner.search import candidate_anchors

        assert candidate_anchors(0, 8, 4) == []
        assert candidate_anchors(0, 8, 10) == []
        assert candidate_anchors(0, 1, 0) == []


class TestCircularDistance:
    def test_wraps(self):
        from threadart.planner.search import circular_distance

        assert circular_distance(0, 7, 8) == 1
        assert circular_distance(2, 6, 8) == 4
        assert circular_distance(5, 5, 8) == 0


class TestPickBest:
    """Tests for choosing the winning candidate."""

    def test_minimum_wins(self):
        from threadart.planner.search import pick_best

        assert pick_best([(1, 5.0), (2, 3.0), (3, 4.0)]) == (2, 3.0)

    def test_first_wins_ties(self):
        from threadart.planner.search import pick_best

        assert pick_best([(4, 2.0), (5, 1.0), (6, 1.0)]) == (5, 1.0)

    def test_degenerate_skipped(self):
        """Test that lines scoring -inf never win."""
        from threadart.planner.search import pick_best

        assert pick_best([(1, -math.inf), (2, 10.0)]) == (2, 10.0)

    def test_all_degenerate(self):
        from threadart.planner.search import pick_best

        assert pick_best([(1, -math.inf), (2, -math.inf)]) is None
        assert pick_best([]) is None

    def test_nan_raises(self):
        from threadart.planner.errors import PlannerError
        from threadart.planner.search import pick_best

        with pytest.raises(PlannerError):
            pick_best([(1, 1.0), (2, math.nan)])


class TestFindNextAnchor:
    """Tests for the full search."""

    def test_sequential(self):
        from threadart.planner.search import find_next_anchor

        scores = {2: 9.0, 3: 1.0, 4: 7.0, 5: 1.0, 6: 3.0}

        best = find_next_anchor(lambda cur, cand: scores[cand], 0, 8, 1)

        assert best == (3, 1.0)

    def test_no_candidates(self):
        from threadart.planner.search import find_next_anchor

        calls = []
        best = find_next_anchor(lambda cur, cand: calls.append(cand) or 0.0, 0, 8, 4)

        assert best is None
        assert calls == []

    def test_executor_matches_sequential(self):
        """Test that chunked parallel scoring keeps scan-order tie-breaking."""
        from threadart.planner.search import find_next_anchor

        def score(cur, cand):
            # several ties at the minimum; first in scan order must win
            return float((cand * 7) % 5)

        sequential = find_next_anchor(score, 11, 40, 3)
        with concurrent.futures.ThreadPoolExecutor(max_workers=4) as executor:
            parallel = find_next_anchor(score, 11, 40, 3, executor=executor, chunk_size=3)

        assert parallel == sequential
        assert sequential == (15, 0.0)
