"""
Artifact saving for threadart.

Writes plan JSON, SVG documents, preview images and debug renders of the
residual buffer.
"""

import json
import os

import cv2
import numpy as np

from threadart.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def save_image(img, path, max_edge=None):
    """
    Save a grayscale or RGB image to disk.

    Optionally downscales so the longest edge is at most max_edge.
    """
    tracer = get_tracer()

    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (int(img.shape[1] * scale), int(img.shape[0] * scale))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)

    ensure_dir(os.path.dirname(path))
    cv2.imwrite(path, img)
    tracer.event(f"Saved image: {path}")


def save_json(data, path, indent=2):
    """Save a dict or pydantic model to JSON."""
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_svg(svg_content, path):
    """Save an svgwrite drawing (or SVG string) to file."""
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(svg_content, "tostring"):
        content = svg_content.tostring()
    else:
        content = str(svg_content)

    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    tracer.event(f"Saved SVG: {path}")


def residual_to_image(residual):
    """
    Map a residual array to a viewable uint8 image.

    Outstanding darkness renders dark, paid-off pixels render white and
    overshoot below zero is clipped to white.
    """
    clipped = np.clip(residual, 0.0, 255.0)
    return (255.0 - clipped).astype(np.uint8)


class DebugArtifactWriter:
    """
    Writes debug artifacts for one run under <out_dir>/debug.

    Every method is a no-op when disabled.
    """

    def __init__(self, out_dir, enabled=True, max_edge=1600):
        self.debug_dir = os.path.join(out_dir, "debug")
        self.enabled = enabled
        self.max_edge = max_edge

    def save_image(self, img, filename):
        if not self.enabled:
            return
        save_image(img, os.path.join(self.debug_dir, filename), max_edge=self.max_edge)

    def save_residual(self, residual, filename):
        """Save a residual buffer snapshot as an image."""
        if not self.enabled:
            return
        self.save_image(residual_to_image(residual), filename)

    def save_json(self, data, filename):
        if not self.enabled:
            return
        save_json(data, os.path.join(self.debug_dir, filename))
