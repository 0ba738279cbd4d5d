"""
SVG emission for thread plans.

Re-derives line geometry from the anchor order and anchor positions and
writes one <line> per thread pass.
"""

import svgwrite

from threadart.tracer import get_tracer, trace


def fit_transform(src_width, src_height, dst_width, dst_height):
    """
    Uniform scale and offset mapping image space onto an output canvas.

    The image is scaled to fit and centred.

    Returns:
        (scale, offset_x, offset_y)
    """
    scale = min(dst_width / src_width, dst_height / src_height)
    offset_x = (dst_width - src_width * scale) / 2
    offset_y = (dst_height - src_height * scale) / 2
    return scale, offset_x, offset_y


def plan_segments(plan, dst_width, dst_height):
    """
    Line segments of a plan in output coordinates.

    Returns:
        list of (x1, y1, x2, y2) floats in drawing order
    """
    scale, ox, oy = fit_transform(
        plan.image_meta.width, plan.image_meta.height, dst_width, dst_height,
    )
    points = [(ox + x * scale, oy + y * scale) for x, y in plan.anchors]

    return [
        (points[a][0], points[a][1], points[b][0], points[b][1])
        for a, b in plan.lines()
    ]


@trace(label="emit_plan_svg")
def emit_plan_svg(plan, width, height, stroke_width=1.0, stroke_color="black", opacity=None):
    """
    Create an SVG document with every planned line.

    Args:
        plan: ThreadPlan
        width: output width in pixels
        height: output height in pixels
        stroke_width: thread width
        stroke_color: thread color
        opacity: per-line opacity, defaults to the plan's line opacity

    Returns:
        svgwrite.Drawing object
    """
    tracer = get_tracer()

    if opacity is None:
        opacity = plan.settings.line_opacity

    dwg = svgwrite.Drawing(size=(f"{width}px", f"{height}px"))
    dwg.viewbox(0, 0, width, height)
    dwg.add(dwg.rect(insert=(0, 0), size=(width, height), fill="white"))

    threads = dwg.g(id="threads", fill="none", stroke=stroke_color,
                    stroke_width=stroke_width, stroke_linecap="round")

    segments = plan_segments(plan, width, height)
    for x1, y1, x2, y2 in segments:
        threads.add(dwg.line(
            start=(round(x1, 3), round(y1, 3)),
            end=(round(x2, 3), round(y2, 3)),
            opacity=opacity,
        ))

    dwg.add(threads)

    tracer.event(f"SVG emitted with {len(segments)} lines")

    return dwg
