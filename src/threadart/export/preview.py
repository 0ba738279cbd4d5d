"""
Raster preview of a thread plan.

Threads are stacked as partially transparent layers on a white canvas,
which approximates what the physical piece will look like.
"""

import cv2
import numpy as np

from threadart.export.svg_emit import plan_segments
from threadart.tracer import get_tracer, trace


def draw_line_mask_roi(h, w, x1, y1, x2, y2, thickness=1, pad=2):
    """
    Draw an anti-aliased line into a small float mask around the segment.

    Returns:
        (row_slice, col_slice, mask) with mask values in [0, 1], or None if
        the segment misses the canvas
    """
    x_min = max(0, min(x1, x2) - thickness - pad)
    x_max = min(w - 1, max(x1, x2) + thickness + pad)
    y_min = max(0, min(y1, y2) - thickness - pad)
    y_max = min(h - 1, max(y1, y2) + thickness + pad)
    if x_min > x_max or y_min > y_max:
        return None

    roi = np.zeros((y_max - y_min + 1, x_max - x_min + 1), np.float32)
    cv2.line(roi, (x1 - x_min, y1 - y_min), (x2 - x_min, y2 - y_min),
             color=1.0, thickness=max(1, int(thickness)), lineType=cv2.LINE_AA)
    return slice(y_min, y_max + 1), slice(x_min, x_max + 1), roi


@trace(label="render_preview")
def render_preview(plan, width, height, opacity=None, thickness=1):
    """
    Render the plan to a grayscale uint8 image.

    Each line attenuates the light passing through it:
    canvas *= (1 - opacity * coverage).
    """
    tracer = get_tracer()

    if opacity is None:
        opacity = plan.settings.line_opacity

    light = np.ones((height, width), np.float32)

    segments = plan_segments(plan, width, height)
    for x1, y1, x2, y2 in segments:
        drawn = draw_line_mask_roi(
            height, width,
            int(round(x1)), int(round(y1)), int(round(x2)), int(round(y2)),
            thickness=thickness,
        )
        if drawn is None:
            continue
        rows, cols, mask = drawn
        light[rows, cols] *= 1.0 - opacity * mask

    tracer.event(f"Preview rendered with {len(segments)} lines")

    return (np.clip(light, 0.0, 1.0) * 255.0).astype(np.uint8)
