"""
Greedy thread planner.

Starting from an anchor, repeatedly picks the eligible anchor whose line
best pays down the residual darkness, commits that line and moves on,
until the termination strategy is satisfied.
"""

import concurrent.futures
from contextlib import nullcontext

from threadart.planner.errors import ConfigurationError, PlannerError, PlanningExhaustedError
from threadart.planner.residual import MAX_INTENSITY, ResidualBuffer
from threadart.planner.search import find_next_anchor
from threadart.tracer import get_tracer


class ThreadPlanner:
    """
    Plans the anchor order for one image.

    The anchors and rasterizer are shared with the caller and must not
    change during the run; the residual buffer is owned by the planner.
    A planner performs exactly one run.

    Args:
        line_weight: opacity of one thread pass, in [0, 1)
        anchors: sequence of (x, y) anchor positions in image space
        anchor_gap_count: anchors to skip on each side of the current one
        lightness_penalty: weight of overshoot into already-light pixels
        rasterizer: Rasterizer (or any callable(x0, y0, x1, y1)) returning
            ((x, y), weight) samples
        image_width: width of the source image
        image_height: height of the source image
        image: uint8 grayscale pixels, (height, width) or flat row-major
        workers: threads used to score candidates within a step
    """

    def __init__(self, line_weight, anchors, anchor_gap_count, lightness_penalty,
                 rasterizer, image_width, image_height, image, workers=1):
        if not 0.0 <= line_weight < 1.0:
            raise ConfigurationError(f"line weight needs to be in the range [0, 1), got {line_weight}")
        if anchor_gap_count < 0:
            raise ConfigurationError(f"anchor gap count must be non-negative, got {anchor_gap_count}")
        if lightness_penalty < 0:
            raise ConfigurationError(f"lightness penalty must be non-negative, got {lightness_penalty}")
        if len(anchors) == 0:
            raise ConfigurationError("at least one anchor is required")
        if workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {workers}")

        self.line_weight = MAX_INTENSITY * line_weight
        self.anchors = anchors
        self.anchor_gap_count = anchor_gap_count
        self.lightness_penalty = lightness_penalty
        self.rasterizer = rasterizer
        self.image_width = image_width
        self.image_height = image_height
        self.workers = workers
        self.residual = ResidualBuffer(
            image, image_width, image_height, self.line_weight, lightness_penalty,
        )
        self._used = False

        if 2 * anchor_gap_count + 1 >= len(anchors):
            get_tracer().event(
                "Anchor gap leaves no candidates",
                level="WARN", anchors=len(anchors), gap=anchor_gap_count,
            )

    def get_moves(self, start_anchor, strategy, on_step=None):
        """
        Plan the anchor order.

        Args:
            start_anchor: index of the first anchor
            strategy: PlanningStrategy consulted before every step
            on_step: optional callable(step, info) called after each
                committed line

        Returns:
            list of anchor indices, starting with start_anchor

        Raises:
            ConfigurationError: start_anchor out of range
            PlanningExhaustedError: no eligible next anchor; carries the
                partial order
            PlannerError: planner already used
        """
        if not 0 <= start_anchor < len(self.anchors):
            raise ConfigurationError(
                f"start anchor {start_anchor} out of range for {len(self.anchors)} anchors"
            )
        if self._used:
            raise PlannerError("a ThreadPlanner performs a single planning run")
        self._used = True

        tracer = get_tracer()

        anchor = start_anchor
        anchor_order = [start_anchor]

        if self.workers > 1:
            pool = concurrent.futures.ThreadPoolExecutor(max_workers=self.workers)
        else:
            pool = nullcontext()

        with tracer.span("get_moves", module="planner",
                         start_anchor=start_anchor, strategy=type(strategy).__name__), pool as executor:
            while not strategy.completed(self, anchor_order):
                best = self.next_anchor(anchor, executor)
                if best is None:
                    tracer.event(f"No eligible anchor from {anchor}", level="ERROR",
                                 lines=len(anchor_order) - 1)
                    raise PlanningExhaustedError(anchor, anchor_order)

                next_anchor, score = best
                written = self.apply_line(anchor, next_anchor)
                anchor_order.append(next_anchor)

                step = len(anchor_order) - 1
                tracer.event(f"{anchor} -> {next_anchor}", level="DEBUG", score=score, pixels=written)
                tracer.progress(step, anchor=next_anchor, score=score)
                if on_step:
                    on_step(step, {
                        "from": anchor,
                        "to": next_anchor,
                        "score": score,
                        "pixels": written,
                    })

                anchor = next_anchor

            tracer.event(f"Planned {len(anchor_order) - 1} lines")

        return anchor_order

    def next_anchor(self, current, executor=None):
        """
        Find the best next anchor from current.

        Returns:
            (anchor, score) or None if no eligible candidate exists
        """
        return find_next_anchor(
            self.line_penalty, current, len(self.anchors), self.anchor_gap_count,
            executor=executor,
            chunk_size=max(1, len(self.anchors) // (4 * self.workers)),
        )

    def line_penalty(self, src_anchor, dst_anchor):
        """Mean penalty of the line between two anchors; -inf if degenerate."""
        return self.residual.score(self._rasterize(src_anchor, dst_anchor))

    def apply_line(self, src_anchor, dst_anchor):
        """Commit the line between two anchors into the residual buffer."""
        return self.residual.commit(self._rasterize(src_anchor, dst_anchor))

    def _rasterize(self, src_anchor, dst_anchor):
        src = self.anchors[src_anchor]
        dst = self.anchors[dst_anchor]
        return self.rasterizer(src[0], src[1], dst[0], dst[1])
