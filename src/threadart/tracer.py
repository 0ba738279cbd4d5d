"""
Runtime tracing for threadart.

A planning run is a few long loops wrapped in short setup and export
stages. Spans time the stages; events mark what happened inside them;
progress lines report on the planner loop at a fixed cadence so a run of
thousands of lines stays readable at INFO level while every line is still
available at DEBUG.

Output goes to stderr, optionally mirrored to a file, as text or as JSON
records.
"""

import functools
import hashlib
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime

LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


class TracerConfig:
    """Runtime settings for the tracer."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self.progress_every = 100
        self._file_handle = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False,
                  progress_every=100):
        """Apply tracer settings, reopening the file sink if one is given."""
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown trace level '{level}'. Valid options: {', '.join(LEVELS)}")

        self.close()

        self.enabled = enabled
        self.level = level
        self.file_path = file_path
        self.json_output = json_output
        self.progress_every = max(1, int(progress_every))

        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close the file sink if open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


class _Span:
    """An open span on the tracer stack."""

    __slots__ = ("name", "module", "started", "lines")

    def __init__(self, name, module):
        self.name = name
        self.module = module
        self.started = time.perf_counter()
        self.lines = 0

    def elapsed_ms(self):
        return (time.perf_counter() - self.started) * 1000


class Tracer:
    """
    Nested logger for planning runs.

    Spans record start and end with elapsed time. Events and progress
    lines attach to the innermost open span, and each span reports how
    many lines it logged when it closes.
    """

    def __init__(self):
        self.config = TracerConfig()
        self._stack = []

    def _should_log(self, level):
        if not self.config.enabled:
            return False
        return LEVELS.get(level, 2) <= LEVELS[self.config.level]

    def _current(self):
        return self._stack[-1] if self._stack else None

    def _emit(self, level, module, func, message, meta=None):
        if not self._should_log(level):
            return

        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        depth = len(self._stack)
        location = f"{module}:{func}" if func else module

        lines = [f"{timestamp} {level:<5} {'  ' * depth}{location}  {message}"]
        if self.config.json_output:
            lines.append(json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            }))

        handle = self.config._file_handle
        for line in lines:
            print(line, file=sys.stderr)
            if handle:
                handle.write(line + "\n")
        if handle:
            handle.flush()

        current = self._current()
        if current is not None:
            current.lines += 1

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Trace a block of work.

        Logs a start line, then an end line with the elapsed milliseconds
        and the number of lines logged inside, or a failure line with the
        exception if the block raises.
        """
        if not self.config.enabled:
            yield
            return

        self._emit("INFO", module, name, f"start {_format_meta(meta)}".strip())
        span = _Span(name, module)
        self._stack.append(span)

        try:
            yield
        except Exception as e:
            self._stack.pop()
            self._emit("ERROR", module, name,
                       f"failed dt={span.elapsed_ms():.0f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise

        self._stack.pop()
        suffix = f" lines={span.lines}" if span.lines else ""
        self._emit("INFO", module, name, f"end ok dt={span.elapsed_ms():.0f}ms{suffix}")

    def event(self, message, level="INFO", **meta):
        """Log a one-off line inside the current span."""
        if not self._should_log(level):
            return

        current = self._current()
        module = current.module if current else ""
        func = current.name if current else ""

        self._emit(level, module, func, f"{message} {_format_meta(meta)}".strip(), meta)

    def progress(self, step, total=None, **meta):
        """
        Report loop progress every `progress_every` steps.

        Intended for the planner's per-line loop: step counts lines
        committed so far, total is the target when known.
        """
        if step % self.config.progress_every != 0:
            return
        label = f"step {step}/{total}" if total is not None else f"step {step}"
        self.event(label, **meta)


def _format_meta(meta):
    return " ".join(f"{k}={summarize(v)}" for k, v in meta.items())


def summarize(obj, max_len=200):
    """
    Render an object compactly for a log line.

    The result never exceeds max_len characters. Residual arrays, plan
    models, anchor lists and long strings get a short structural
    description instead of their full repr.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _summarize_impl(obj):
    if obj is None:
        return "None"

    if isinstance(obj, bool):
        return str(obj)

    if isinstance(obj, float):
        return f"{obj:.4g}"

    if isinstance(obj, int):
        return str(obj)

    type_name = type(obj).__name__

    import numpy as np
    if isinstance(obj, np.ndarray):
        shape_str = "x".join(str(s) for s in obj.shape)
        if obj.size and np.issubdtype(obj.dtype, np.number):
            return f"ndarray({obj.dtype},{shape_str},min={obj.min():.4g},max={obj.max():.4g})"
        return f"ndarray({obj.dtype},{shape_str})"

    if isinstance(obj, np.generic):
        return _summarize_impl(obj.item())

    from pydantic import BaseModel
    if isinstance(obj, BaseModel):
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    if isinstance(obj, str):
        if len(obj) > 50:
            h = hashlib.md5(obj.encode()).hexdigest()[:8]
            return f"str(len={len(obj)},h={h})"
        return repr(obj)

    if isinstance(obj, bytes):
        h = hashlib.md5(obj).hexdigest()[:8]
        return f"bytes(len={len(obj)},h={h})"

    if isinstance(obj, (list, tuple)):
        if len(obj) == 0:
            return f"{type_name}(len=0)"
        # anchor positions and short orders read better inline
        if len(obj) <= 4 and all(isinstance(v, (int, float)) for v in obj):
            return repr(obj)
        if all(isinstance(v, tuple) and len(v) == 2 for v in obj[:3]):
            return f"{type_name}(len={len(obj)},first={obj[0]!r})"
        return f"{type_name}(len={len(obj)},first={type(obj[0]).__name__})"

    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj.keys())[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"

    return f"<{type_name}>"


def trace(label=None, arg_names=None):
    """
    Decorator that wraps a function call in a span.

    arg_names selects keyword arguments to include in the start line.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            module = func.__module__.rsplit(".", 1)[-1] if func.__module__ else ""
            meta = {name: kwargs[name] for name in arg_names or () if name in kwargs}

            with _tracer.span(label or func.__name__, module=module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False,
                     progress_every=100):
    """Configure the global tracer."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
        progress_every=progress_every,
    )
