"""
Anchor layouts.

Anchors are the fixed points threads run between: evenly spaced around a
circle centred in the image, or walked along the image border.
"""

import math

from threadart.planner.errors import ConfigurationError
from threadart.tracer import get_tracer, trace


def clamp_radius(radius, width, height):
    """
    Clamp a circle radius to the largest one that fits the image.

    A radius of None means "as large as possible".
    """
    largest = min(width // 2, height // 2)
    if radius is None:
        return largest
    if radius < 0:
        raise ConfigurationError(f"radius must be non-negative, got {radius}")
    return min(radius, largest)


def circle_anchors(count, width, height, radius):
    """
    Evenly spaced anchors on a circle around the image centre.

    Anchor 0 sits at angle 0 (to the right of the centre); indices
    increase with angle.

    Returns:
        tuple of (x, y) float positions
    """
    x_mid = width / 2
    y_mid = height / 2

    anchors = []
    for anchor in range(count):
        angle = anchor * 2.0 * math.pi / count
        anchors.append((x_mid + radius * math.cos(angle), y_mid + radius * math.sin(angle)))
    return tuple(anchors)


def rectangle_anchors(count, width, height):
    """
    Anchors evenly spaced along the image border.

    Starts at the top-left corner and walks clockwise: top edge left to
    right, right edge downwards, bottom edge right to left, left edge
    upwards.

    Returns:
        tuple of (x, y) float positions
    """
    if count <= 0:
        return ()

    perimeter = 2 * width + 2 * height
    spacing = perimeter / count

    anchors = [(0.0, 0.0)]
    travelled = 0.0
    for _ in range(1, count):
        travelled += spacing

        if travelled < width:
            anchors.append((travelled, 0.0))
        elif travelled < width + height:
            anchors.append((float(width), travelled - width))
        elif travelled < 2 * width + height:
            anchors.append((2 * width + height - travelled, float(height)))
        else:
            anchors.append((0.0, perimeter - travelled))

    return tuple(anchors)


@trace(label="build_anchors")
def build_anchors(anchor_config, width, height):
    """
    Create the anchor ring described by an AnchorConfig.

    Raises ConfigurationError for unknown shapes or non-positive counts.
    """
    tracer = get_tracer()

    if anchor_config.num_anchors <= 0:
        raise ConfigurationError(f"num_anchors must be positive, got {anchor_config.num_anchors}")

    shape = anchor_config.shape
    if shape == "circle":
        radius = clamp_radius(anchor_config.radius, width, height)
        anchors = circle_anchors(anchor_config.num_anchors, width, height, radius)
        tracer.event(f"Circle layout: {len(anchors)} anchors, radius={radius}")
    elif shape == "rectangle":
        anchors = rectangle_anchors(anchor_config.num_anchors, width, height)
        tracer.event(f"Rectangle layout: {len(anchors)} anchors")
    else:
        raise ConfigurationError(f"Unknown anchor shape '{shape}'. Valid options: circle, rectangle")

    return anchors
