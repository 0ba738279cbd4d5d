"""
Pipeline orchestrator for threadart.

Loads an image, lays out anchors, runs the greedy planner and writes the
plan with its SVG, preview and validation report.
"""

import os

from threadart.anchors import build_anchors
from threadart.config import load_config
from threadart.export.preview import render_preview
from threadart.export.svg_emit import emit_plan_svg
from threadart.io.load_image import image_digest, load_grayscale, validate_image_input
from threadart.io.save_artifacts import DebugArtifactWriter, ensure_dir, save_image, save_json, save_svg
from threadart.models import ImageMeta, PlannerSettings, PlanStep, ThreadPlan, generate_plan_id
from threadart.planner.greedy import ThreadPlanner
from threadart.planner.termination import build_strategy
from threadart.raster.line_trace import get_rasterizer
from threadart.tracer import get_tracer, trace
from threadart.validate.report import generate_report
from threadart.validate.rules import run_validation


def _termination_label(termination):
    if termination.mode == "count":
        return f"count:{termination.num_chords}"
    return f"loss:{termination.target_loss}"


@trace(label="plan_image")
def plan_image(image, config, source_path="", on_step=None, debug_writer=None):
    """
    Plan thread art for an in-memory grayscale image.

    Args:
        image: (H, W) uint8 grayscale array
        config: ThreadArtConfig
        source_path: recorded in the plan metadata
        on_step: optional per-line progress callback(step, info)
        debug_writer: optional DebugArtifactWriter for residual snapshots

    Returns:
        ThreadPlan with validation results attached

    Raises ConfigurationError or PlanningExhaustedError from the planner.
    """
    tracer = get_tracer()

    height, width = image.shape[:2]
    planner_config = config.planner

    anchors = build_anchors(config.anchors, width, height)
    rasterizer = get_rasterizer(planner_config.rasterizer)

    planner = ThreadPlanner(
        planner_config.line_opacity,
        anchors,
        planner_config.anchor_gap_count,
        planner_config.lightness_penalty,
        rasterizer,
        width,
        height,
        image,
        workers=planner_config.workers,
    )
    initial_loss = planner.residual.loss()

    if debug_writer:
        debug_writer.save_residual(planner.residual.as_image(), "01_residual_initial.png")

    strategy = build_strategy(config.termination)
    steps = []

    def record_step(step, info):
        steps.append(PlanStep(
            index=step,
            from_anchor=info["from"],
            to_anchor=info["to"],
            score=info["score"],
            pixels=info["pixels"],
        ))
        if on_step:
            on_step(step, info)

    with tracer.span("greedy_planning", module="pipeline", anchors=len(anchors)):
        order = planner.get_moves(planner_config.start_anchor, strategy, on_step=record_step)

    final_loss = planner.residual.loss()

    if debug_writer:
        debug_writer.save_residual(planner.residual.as_image(), "02_residual_final.png")
        debug_writer.save_json({
            "lines": len(order) - 1,
            "initial_loss": initial_loss,
            "final_loss": final_loss,
        }, "planning_metrics.json")

    image_meta = ImageMeta(
        width=width,
        height=height,
        source_path=source_path,
        digest=image_digest(image),
    )
    settings = PlannerSettings(
        line_opacity=planner_config.line_opacity,
        anchor_gap_count=planner_config.anchor_gap_count,
        lightness_penalty=planner_config.lightness_penalty,
        start_anchor=planner_config.start_anchor,
        rasterizer=rasterizer.name,
        shape=config.anchors.shape,
        termination=_termination_label(config.termination),
    )

    plan = ThreadPlan(
        plan_id=generate_plan_id(image_meta, settings, anchors),
        image_meta=image_meta,
        settings=settings,
        anchors=[[x, y] for x, y in anchors],
        order=order,
        steps=steps,
        initial_loss=initial_loss,
        final_loss=final_loss,
    )
    plan.validation = run_validation(plan, config)

    tracer.event(f"Plan {plan.plan_id}: {plan.line_count} lines, loss {initial_loss:.0f} -> {final_loss:.0f}")

    return plan


@trace(label="run_pipeline")
def run_pipeline(input_path, out_dir, config=None, config_path=None, debug=False, on_step=None):
    """
    Run the full pipeline for one image.

    Writes to out_dir:
    - plan.json: the ThreadPlan
    - lines.svg: the planned threads
    - preview.png: simulated result (when render.preview is enabled)
    - validation_report.json / validation_summary.txt
    - debug/: residual snapshots (debug only)

    Returns:
        ThreadPlan
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    config.debug.enabled = debug or config.debug.enabled

    errors = validate_image_input(input_path)
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
        raise ValueError(f"Input validation failed: {errors}")

    ensure_dir(out_dir)

    image, metadata = load_grayscale(
        input_path, size=config.image.size, invert=config.image.invert,
    )

    debug_writer = DebugArtifactWriter(
        out_dir,
        enabled=True,
        max_edge=config.debug.max_edge_scale,
    ) if config.debug.enabled else None

    if debug_writer:
        debug_writer.save_image(image, "00_input_gray.png")

    plan = plan_image(
        image, config,
        source_path=metadata["source_path"],
        on_step=on_step,
        debug_writer=debug_writer,
    )

    render = config.render
    with tracer.span("export", module="pipeline"):
        save_json(plan, os.path.join(out_dir, "plan.json"))

        dwg = emit_plan_svg(
            plan, render.width, render.height,
            stroke_width=render.stroke_width,
            stroke_color=render.stroke_color,
        )
        save_svg(dwg, os.path.join(out_dir, "lines.svg"))

        if render.preview:
            preview = render_preview(plan, render.width, render.height)
            save_image(preview, os.path.join(out_dir, "preview.png"))

        generate_report(plan, out_dir)

    return plan


def load_plan(path):
    """Load a ThreadPlan previously written as plan.json."""
    with open(path, "r", encoding="utf-8") as f:
        return ThreadPlan.model_validate_json(f.read())
