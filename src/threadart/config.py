"""
Configuration management for threadart.

Loads YAML configuration with defaults for every planning and export
setting.
"""

import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class ImageConfig:
    """Source image preparation."""
    size: list = None  # [height, width] to resize to, None keeps the source size
    invert: bool = False


@dataclass
class AnchorConfig:
    """Anchor layout."""
    shape: str = "circle"  # "circle" or "rectangle"
    num_anchors: int = 288
    radius: int = None  # None uses the largest circle that fits


@dataclass
class PlannerConfig:
    """Greedy planner settings."""
    line_opacity: float = 0.2
    anchor_gap_count: int = 0
    lightness_penalty: float = 5.0
    start_anchor: int = 0
    rasterizer: str = "grid"  # "grid" or "antialiased"
    workers: int = 1


@dataclass
class TerminationConfig:
    """When to stop planning."""
    mode: str = "count"  # "count" or "loss"
    num_chords: int = 500
    target_loss: float = 0.0
    wait: int = 200
    min_wait: int = 20
    max_anchors: int = 3000


@dataclass
class RenderConfig:
    """Rendering of the planned lines."""
    width: int = 850
    height: int = 850
    stroke_width: float = 1.0
    stroke_color: str = "black"
    preview: bool = True


@dataclass
class TracingConfig:
    """Runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False
    progress_every: int = 100  # planner lines between INFO progress reports


@dataclass
class DebugConfig:
    """Debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


@dataclass
class ThreadArtConfig:
    """Complete configuration."""
    image: ImageConfig = field(default_factory=ImageConfig)
    anchors: AnchorConfig = field(default_factory=AnchorConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    termination: TerminationConfig = field(default_factory=TerminationConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


_SECTIONS = ("image", "anchors", "planner", "termination", "render", "tracing", "debug")


def load_config(config_path=None):
    """
    Load configuration from a YAML file.

    Missing sections and keys keep their defaults; unknown keys are
    ignored.
    """
    config = ThreadArtConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into the config dataclasses."""
    for section in _SECTIONS:
        values = yaml_data.get(section)
        if not values:
            continue
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save the default configuration to a YAML file for reference."""
    yaml_data = asdict(ThreadArtConfig())

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
