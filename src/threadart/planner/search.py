"""
Candidate search for the next anchor.

From the current anchor, the 2*gap + 1 anchors centred on it are excluded
and every other anchor is scored. The lowest score wins; ties go to the
candidate found first in scan order, which starts just past the excluded
arc and wraps around the ring.
"""

import math

from threadart.planner.errors import PlannerError


def candidate_anchors(current, anchor_count, gap):
    """
    Eligible next anchors in scan order.

    Returns an empty list when the gap leaves no candidates.
    """
    search_size = anchor_count - 2 * gap - 1
    return [(current + i + gap + 1) % anchor_count for i in range(max(search_size, 0))]


def circular_distance(a, b, anchor_count):
    """Number of ring steps between two anchors, the short way round."""
    d = abs(a - b) % anchor_count
    return min(d, anchor_count - d)


def pick_best(scored):
    """
    Choose the minimum-score candidate.

    Args:
        scored: iterable of (anchor, score) in scan order

    Returns:
        (anchor, score), or None if every candidate is degenerate (-inf)
        or there are none

    Raises PlannerError on a NaN score.
    """
    best = None
    for anchor, score in scored:
        if math.isnan(score):
            raise PlannerError(f"NaN penalty for candidate anchor {anchor}")
        if score == float("-inf"):
            continue
        if best is None or score < best[1]:
            best = (anchor, score)
    return best


def _score_chunk(score_fn, current, chunk):
    return [(anchor, score_fn(current, anchor)) for anchor in chunk]


def find_next_anchor(score_fn, current, anchor_count, gap, executor=None, chunk_size=64):
    """
    Score all eligible candidates and return the best.

    Args:
        score_fn: callable(current, candidate) -> penalty
        current: current anchor index
        anchor_count: size of the anchor ring
        gap: anchors excluded on each side of current
        executor: optional concurrent.futures executor; candidates are
            scored in chunks and merged back in scan order
        chunk_size: candidates per submitted task

    Returns:
        (anchor, score) or None
    """
    candidates = candidate_anchors(current, anchor_count, gap)
    if not candidates:
        return None

    if executor is None or len(candidates) <= chunk_size:
        return pick_best(_score_chunk(score_fn, current, candidates))

    chunks = [candidates[i:i + chunk_size] for i in range(0, len(candidates), chunk_size)]
    results = executor.map(lambda chunk: _score_chunk(score_fn, current, chunk), chunks)

    scored = []
    for chunk_result in results:
        scored.extend(chunk_result)
    return pick_best(scored)
