"""
Exceptions raised by the thread planner.
"""


class ConfigurationError(ValueError):
    """Invalid planner configuration, detected at construction."""


class PlannerError(RuntimeError):
    """Base class for failures during a planning run."""


class PlanningExhaustedError(PlannerError):
    """
    No eligible next anchor exists from the current anchor.

    The order accumulated before the failure is kept in partial_order so
    callers can inspect or salvage it.
    """

    def __init__(self, current_anchor, partial_order):
        self.current_anchor = current_anchor
        self.partial_order = list(partial_order)
        super().__init__(
            f"failed to obtain next anchor from {current_anchor} "
            f"after {len(self.partial_order) - 1} lines"
        )
