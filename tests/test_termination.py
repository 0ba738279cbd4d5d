"""Tests for planning termination strategies."""

from types import SimpleNamespace

import pytest


class FakeResidual:
    """Residual stand-in that replays a list of losses."""

    def __init__(self, losses):
        self.losses = list(losses)
        self.calls = 0

    def loss(self):
        self.calls += 1
        return self.losses.pop(0)


def fake_planner(losses):
    return SimpleNamespace(residual=FakeResidual(losses))


class TestCountTracker:
    """Tests for the fixed line count strategy."""

    def test_completes_after_target_lines(self):
        from threadart.planner.termination import CountTracker

        tracker = CountTracker(3)

        assert not tracker.completed(None, [0])
        assert not tracker.completed(None, [0, 1, 2])
        assert tracker.completed(None, [0, 1, 2, 3])

    def test_zero_completes_immediately(self):
        from threadart.planner.termination import CountTracker

        assert CountTracker(0).completed(None, [5])

    def test_negative_rejected(self):
        from threadart.planner.errors import ConfigurationError
        from threadart.planner.termination import CountTracker

        with pytest.raises(ConfigurationError):
            CountTracker(-1)


class TestLossTracker:
    """Tests for the loss target strategy."""

    def test_checks_only_after_wait(self):
        """Test that the loss is not computed before `wait` calls."""
        from threadart.planner.termination import LossTracker

        planner = fake_planner([100.0])
        tracker = LossTracker(wait=3, target_loss=50.0, min_wait=1)
        anchors = [0]

        for _ in range(3):
            assert not tracker.completed(planner, anchors)
        assert planner.residual.calls == 0

        assert not tracker.completed(planner, anchors)
        assert planner.residual.calls == 1
        assert tracker.last_loss == 100.0

    def test_stops_below_target(self):
        from threadart.planner.termination import LossTracker

        planner = fake_planner([10.0])
        tracker = LossTracker(wait=0, target_loss=50.0)

        assert tracker.completed(planner, [0])

    def test_wait_halves_down_to_min(self):
        from threadart.planner.termination import LossTracker

        planner = fake_planner([100.0] * 10)
        tracker = LossTracker(wait=16, target_loss=1.0, min_wait=5)
        tracker.current = 16

        tracker.completed(planner, [0])
        assert tracker.wait == 8

        tracker.current = 8
        tracker.completed(planner, [0])
        assert tracker.wait == 5

        tracker.current = 5
        tracker.completed(planner, [0])
        assert tracker.wait == 5

    def test_ceiling(self):
        """Test that exceeding max_anchors stops without a loss check."""
        from threadart.planner.termination import LossTracker

        planner = fake_planner([])
        tracker = LossTracker(wait=100, target_loss=0.0, max_anchors=4)

        assert not tracker.completed(planner, [0, 1, 2, 3])
        assert tracker.completed(planner, [0, 1, 2, 3, 4])
        assert planner.residual.calls == 0


class TestBuildStrategy:
    def test_modes(self):
        from threadart.config import TerminationConfig
        from threadart.planner.termination import CountTracker, LossTracker, build_strategy

        count = build_strategy(TerminationConfig(mode="count", num_chords=7))
        assert isinstance(count, CountTracker)
        assert count.target == 7

        loss = build_strategy(TerminationConfig(mode="loss", target_loss=12.5, wait=30))
        assert isinstance(loss, LossTracker)
        assert loss.target_loss == 12.5
        assert loss.wait == 30

    def test_unknown_mode(self):
        from threadart.config import TerminationConfig
        from threadart.planner.errors import ConfigurationError
        from threadart.planner.termination import build_strategy

        with pytest.raises(ConfigurationError):
            build_strategy(TerminationConfig(mode="forever"))
