"""
Pydantic data models for threadart outputs.

A ThreadPlan is everything a renderer needs: the anchor positions, the
anchor order and the settings that produced it. IDs are content hashes so
identical inputs yield identical plans.
"""

import hashlib
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for validation checks."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class ImageMeta(BaseModel):
    """Metadata for the source image as planned (after any resize)."""
    width: int
    height: int
    source_path: str = ""
    digest: str = ""  # sha256 prefix of the planned pixels

    model_config = ConfigDict(extra="forbid")


class PlannerSettings(BaseModel):
    """Planner parameters recorded alongside a plan."""
    line_opacity: float = Field(..., ge=0.0, lt=1.0)
    anchor_gap_count: int = Field(..., ge=0)
    lightness_penalty: float = Field(..., ge=0.0)
    start_anchor: int = Field(..., ge=0)
    rasterizer: str = "grid"
    shape: str = "circle"
    termination: str = "count"

    model_config = ConfigDict(extra="forbid")


class PlanStep(BaseModel):
    """One committed line of a planning run."""
    index: int = Field(..., ge=1)
    from_anchor: int
    to_anchor: int
    score: float
    pixels: int = 0  # in-bounds pixels written

    model_config = ConfigDict(extra="forbid")


class CheckResult(BaseModel):
    """Result of a single validation check."""
    rule_id: str
    severity: Severity
    passed: bool
    message: str
    evidence: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ValidationReport(BaseModel):
    """Collection of validation check results."""
    checks: List[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_errors(self):
        return any(c.severity == Severity.ERROR and not c.passed for c in self.checks)

    @property
    def error_count(self):
        return sum(1 for c in self.checks if c.severity == Severity.ERROR and not c.passed)

    @property
    def warning_count(self):
        return sum(1 for c in self.checks if c.severity == Severity.WARN and not c.passed)


class ThreadPlan(BaseModel):
    """A planned sequence of anchor-to-anchor lines."""
    plan_id: str
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    image_meta: ImageMeta
    settings: PlannerSettings
    anchors: List[List[float]] = Field(default_factory=list)
    order: List[int] = Field(default_factory=list)
    steps: List[PlanStep] = Field(default_factory=list)
    initial_loss: Optional[float] = None
    final_loss: Optional[float] = None
    validation: ValidationReport = Field(default_factory=ValidationReport)

    model_config = ConfigDict(extra="forbid")

    @property
    def line_count(self):
        """Number of lines drawn (one fewer than the order length)."""
        return max(len(self.order) - 1, 0)

    def lines(self):
        """Consecutive (from, to) anchor pairs in drawing order."""
        return list(zip(self.order[:-1], self.order[1:]))


def generate_plan_id(image_meta, settings, anchors, round_digits=3):
    """
    Deterministic plan ID from the inputs that determine the plan.

    Anchor coordinates are rounded to avoid floating point noise.
    """
    rounded = [[round(x, round_digits), round(y, round_digits)] for x, y in anchors]
    data = f"{image_meta.digest}:{image_meta.width}x{image_meta.height}:{settings.model_dump_json()}:{rounded}"
    h = hashlib.sha256(data.encode()).hexdigest()[:12]
    return f"plan_{h}"
