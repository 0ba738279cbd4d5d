"""Tests for the tracer module."""

import json
import os

import numpy as np
import pytest


class TestSummarize:
    """Tests for object summarization."""

    def test_numpy_array_summary(self):
        """Test that residual-sized arrays are summarized with shape and type."""
        from threadart.tracer import summarize

        arr = np.zeros((120, 80), dtype=np.float64)
        summary = summarize(arr)

        assert "ndarray" in summary
        assert "120x80" in summary
        assert "float64" in summary

    def test_summary_capped_length(self):
        from threadart.tracer import summarize

        large_dict = {f"anchor_{i}": i for i in range(100)}
        summary = summarize(large_dict, max_len=50)

        assert len(summary) <= 50

    def test_anchor_pair_inline(self):
        """Test that a short numeric tuple is shown in full."""
        from threadart.tracer import summarize

        assert summarize((12.5, 40.0)) == "(12.5, 40.0)"

    def test_order_summary(self):
        from threadart.tracer import summarize

        summary = summarize([0, 17, 3, 22, 9, 14])

        assert "list" in summary
        assert "len=6" in summary

    def test_float_summary(self):
        from threadart.tracer import summarize

        assert summarize(123.456789) == "123.5"

    def test_none_summary(self):
        from threadart.tracer import summarize

        assert summarize(None) == "None"

    def test_pydantic_model_summary(self):
        from threadart.models import ImageMeta
        from threadart.tracer import summarize

        summary = summarize(ImageMeta(width=10, height=10))

        assert "ImageMeta" in summary


class TestTracerSpan:
    """Tests for tracer span functionality."""

    def test_span_nesting(self, capsys):
        """Test that nested spans and events all produce lines."""
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()

        with tracer.span("outer", module="test"):
            with tracer.span("inner", module="test"):
                tracer.event("inside")

        configure_tracer(enabled=False)

        lines = capsys.readouterr().err.strip().split("\n")
        assert len(lines) == 5
        assert "start" in lines[0]
        assert "inside" in lines[2]
        assert lines[2].index("test:inner") > lines[0].index("test:outer")
        assert "end ok" in lines[-1]

    def test_span_failure_logged(self, capsys):
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()

        with pytest.raises(RuntimeError):
            with tracer.span("planning", module="test"):
                raise RuntimeError("no anchors")

        configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "failed" in err
        assert "RuntimeError" in err

    def test_level_filtering(self, capsys):
        """Test that DEBUG events are dropped at INFO level."""
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()
        tracer.event("per-line detail", level="DEBUG")
        tracer.event("exhausted", level="WARN")
        configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "per-line detail" not in err
        assert "exhausted" in err

    def test_tracer_disabled_no_output(self, capsys):
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=False)
        tracer = get_tracer()

        with tracer.span("test", module="test"):
            tracer.event("should not appear")

        assert capsys.readouterr().err == ""

    def test_file_and_json_sink(self, temp_dir, capsys):
        from threadart.tracer import configure_tracer, get_tracer

        path = os.path.join(temp_dir, "trace.log")
        configure_tracer(enabled=True, level="INFO", file_path=path, json_output=True)
        get_tracer().event("Loss check", loss=12.0)
        configure_tracer(enabled=False)

        with open(path, encoding="utf-8") as f:
            lines = f.read().strip().split("\n")

        assert "Loss check" in lines[0]
        record = json.loads(lines[1])
        assert record["level"] == "INFO"
        assert record["meta"]["loss"] == "12"
        capsys.readouterr()


class TestTracerProgress:
    """Tests for throttled loop progress and span line counts."""

    def test_progress_cadence(self, capsys):
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO", progress_every=5)
        tracer = get_tracer()
        for step in range(1, 13):
            tracer.progress(step, total=12, anchor=step)
        configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "step 5/12" in err
        assert "step 10/12" in err
        assert "step 3/12" not in err
        assert err.count("step ") == 2

    def test_planner_reports_progress(self, capsys, black_image):
        from threadart.anchors import circle_anchors
        from threadart.planner.greedy import ThreadPlanner
        from threadart.planner.termination import CountTracker
        from threadart.raster.line_trace import GridRaytracer
        from threadart.tracer import configure_tracer

        planner = ThreadPlanner(0.2, circle_anchors(8, 10, 10, 4), 1, 1.0, GridRaytracer(),
                                10, 10, black_image)
        configure_tracer(enabled=True, level="INFO", progress_every=2)
        planner.get_moves(0, CountTracker(4))
        configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "planner:get_moves  step 2" in err
        assert "planner:get_moves  step 4" in err
        assert "Planned 4 lines" in err

    def test_span_reports_line_count(self, capsys):
        from threadart.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()
        with tracer.span("export", module="pipeline"):
            tracer.event("Saved JSON")
            tracer.event("Saved SVG")
            tracer.event("hidden", level="DEBUG")
        configure_tracer(enabled=False)

        last = capsys.readouterr().err.strip().split("\n")[-1]
        assert "end ok" in last
        assert last.endswith("lines=2")

    def test_unknown_level_rejected(self):
        from threadart.tracer import configure_tracer

        with pytest.raises(ValueError):
            configure_tracer(enabled=True, level="VERBOSE")
        configure_tracer(enabled=False)


class TestTraceDecorator:
    """Tests for the @trace decorator."""

    def test_decorator_runs_function(self):
        from threadart.tracer import configure_tracer, trace

        configure_tracer(enabled=False)

        @trace(label="test_func")
        def my_func(x):
            return x * 2

        assert my_func(5) == 10

    def test_decorator_enabled(self, capsys):
        from threadart.tracer import configure_tracer, trace

        configure_tracer(enabled=True, level="INFO")

        @trace(label="build_ring", arg_names=["count"])
        def build_ring(count=0):
            return list(range(count))

        assert build_ring(count=3) == [0, 1, 2]
        configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "build_ring" in err
        assert "count=3" in err

    def test_decorator_with_exception(self):
        from threadart.tracer import configure_tracer, trace

        configure_tracer(enabled=False)

        @trace(label="failing_func")
        def failing_func():
            raise ValueError("test error")

        with pytest.raises(ValueError):
            failing_func()
