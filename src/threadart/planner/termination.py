"""
Termination strategies for the thread planner.

The planner asks its strategy whether it is done before every step,
including the first. Strategies may keep state between calls.
"""

from abc import ABC, abstractmethod

from threadart.planner.errors import ConfigurationError
from threadart.tracer import get_tracer


class PlanningStrategy(ABC):
    """Abstract interface deciding when a planning run is complete."""

    @abstractmethod
    def completed(self, planner, anchors):
        """
        Check whether planning should stop.

        Args:
            planner: the ThreadPlanner being run (read-only)
            anchors: anchor order accumulated so far

        Returns:
            True to stop, False to plan another line
        """
        pass


class CountTracker(PlanningStrategy):
    """Stop once a fixed number of lines has been planned."""

    def __init__(self, target):
        if target < 0:
            raise ConfigurationError(f"line count must be non-negative, got {target}")
        self.target = target

    def completed(self, planner, anchors):
        return len(anchors) > self.target


class LossTracker(PlanningStrategy):
    """
    Stop when the total residual drops below a target.

    The full-buffer loss scan is expensive, so it runs only every `wait`
    steps. After each scan the interval halves, down to `min_wait`. A run
    that exceeds `max_anchors` stops unconditionally.
    """

    def __init__(self, wait, target_loss, min_wait=20, max_anchors=3000):
        if wait < 0 or min_wait < 1:
            raise ConfigurationError(f"invalid loss check interval wait={wait} min_wait={min_wait}")
        self.wait = wait
        self.current = 0
        self.target_loss = target_loss
        self.min_wait = min_wait
        self.max_anchors = max_anchors
        self.last_loss = None

    def completed(self, planner, anchors):
        if len(anchors) > self.max_anchors:
            get_tracer().event("Anchor ceiling reached", level="WARN", anchors=len(anchors))
            return True

        if self.current >= self.wait:
            loss = planner.residual.loss()
            self.last_loss = loss
            get_tracer().event("Loss check", level="DEBUG", loss=loss, lines=len(anchors) - 1, wait=self.wait)

            if loss < self.target_loss:
                return True

            self.wait = max(self.wait // 2, self.min_wait)
            self.current = 0

        self.current += 1

        return False


def build_strategy(termination_config):
    """Create the strategy selected by a TerminationConfig."""
    mode = termination_config.mode
    if mode == "count":
        return CountTracker(termination_config.num_chords)
    if mode == "loss":
        return LossTracker(
            termination_config.wait,
            termination_config.target_loss,
            min_wait=termination_config.min_wait,
            max_anchors=termination_config.max_anchors,
        )
    raise ConfigurationError(f"Unknown termination mode '{mode}'. Valid options: count, loss")
