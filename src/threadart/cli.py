"""
Command-line interface for threadart.

Provides commands for planning thread art from an image, re-rendering a
saved plan and writing a default configuration file.
"""

import argparse
import os
import sys

from threadart.config import load_config, save_default_config
from threadart.planner.errors import ConfigurationError, PlanningExhaustedError
from threadart.tracer import configure_tracer, get_tracer


def _add_tracing_args(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="threadart",
        description="threadart: plan anchor-to-anchor thread art from a grayscale image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Plan thread art for an image")
    run_parser.add_argument("--input", "-i", required=True, help="Input image file")
    run_parser.add_argument("--out", "-o", required=True, help="Output directory")
    run_parser.add_argument("--config", "-c", default=None, help="Path to YAML configuration file")
    run_parser.add_argument("--num-chords", "-n", type=int, default=None,
                            help="Number of lines to plan")
    run_parser.add_argument("--target-loss", type=float, default=None,
                            help="Stop when total residual falls below this (switches to loss mode)")
    run_parser.add_argument("--line-opacity", type=float, default=None,
                            help="Opacity of one thread pass, in [0, 1)")
    run_parser.add_argument("--num-anchors", "-a", type=int, default=None,
                            help="Number of anchors")
    run_parser.add_argument("--gap", "-g", type=int, default=None,
                            help="Anchors skipped on each side of the current anchor")
    run_parser.add_argument("--radius", "-r", type=int, default=None,
                            help="Circle radius in pixels, clamped to fit the image")
    run_parser.add_argument("--penalty", "-p", type=float, default=None,
                            help="Lightness penalty weight for overshoot")
    run_parser.add_argument("--start-anchor", type=int, default=None,
                            help="Anchor to start from")
    run_parser.add_argument("--shape", choices=["circle", "rectangle"], default=None,
                            help="Anchor layout")
    run_parser.add_argument("--rasterizer", choices=["grid", "antialiased"], default=None,
                            help="Line rasterization strategy")
    run_parser.add_argument("--size", type=int, nargs=2, default=None, metavar=("H", "W"),
                            help="Resize the input before planning")
    run_parser.add_argument("--workers", type=int, default=None,
                            help="Threads used to score candidates")
    run_parser.add_argument("--debug", action="store_true", help="Enable debug artifact generation")
    _add_tracing_args(run_parser)

    render_parser = subparsers.add_parser("render", help="Render an existing plan.json")
    render_parser.add_argument("--plan", required=True, help="Path to plan.json from a previous run")
    render_parser.add_argument("--out", "-o", required=True, help="Output directory")
    render_parser.add_argument("--width", type=int, default=850, help="Output width")
    render_parser.add_argument("--height", type=int, default=850, help="Output height")
    render_parser.add_argument("--stroke-width", type=float, default=1.0, help="Thread width")
    _add_tracing_args(render_parser)

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="threadart_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "render":
        return handle_render(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def apply_overrides(config, args):
    """Apply command-line overrides on top of a loaded configuration."""
    overrides = [
        (config.termination, "num_chords", args.num_chords),
        (config.planner, "line_opacity", args.line_opacity),
        (config.anchors, "num_anchors", args.num_anchors),
        (config.planner, "anchor_gap_count", args.gap),
        (config.anchors, "radius", args.radius),
        (config.planner, "lightness_penalty", args.penalty),
        (config.planner, "start_anchor", args.start_anchor),
        (config.anchors, "shape", args.shape),
        (config.planner, "rasterizer", args.rasterizer),
        (config.image, "size", args.size),
        (config.planner, "workers", args.workers),
    ]
    for section, key, value in overrides:
        if value is not None:
            setattr(section, key, value)

    if args.target_loss is not None:
        config.termination.mode = "loss"
        config.termination.target_loss = args.target_loss

    return config


def _configure_tracing(args, config=None):
    enabled = args.trace or bool(config and config.tracing.enabled)
    level = args.trace_level if args.trace else (config.tracing.level if config else "INFO")
    configure_tracer(
        enabled=enabled,
        level=level,
        file_path=args.trace_file or (config.tracing.file_path if config else None),
        json_output=args.trace_json or bool(config and config.tracing.json_output),
        progress_every=config.tracing.progress_every if config else 100,
    )


def handle_run(args):
    """Handle the run command."""
    config = apply_overrides(load_config(args.config), args)
    _configure_tracing(args, config)

    tracer = get_tracer()

    try:
        from threadart.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            plan = run_pipeline(
                input_path=args.input,
                out_dir=args.out,
                config=config,
                debug=args.debug,
            )

        print("\nPlanning completed successfully.")
        print(f"  Plan: {plan.plan_id}")
        print(f"  Anchors: {len(plan.anchors)}")
        print(f"  Lines planned: {plan.line_count}")
        print(f"  Validation errors: {plan.validation.error_count}")
        print(f"\nOutputs saved to: {args.out}/")
        print("  - plan.json")
        print("  - lines.svg")
        if config.render.preview:
            print("  - preview.png")
        print("  - validation_report.json")

        if plan.validation.has_errors:
            print("\n[!] Validation errors detected. Review validation_report.json")
            return 1

        return 0

    except PlanningExhaustedError as e:
        tracer.event(f"Planning failed: {e}", level="ERROR")
        print(f"\nError: {e}", file=sys.stderr)
        print(f"  Partial order: {len(e.partial_order)} anchors", file=sys.stderr)
        return 1

    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        tracer.event(f"Planning failed: {e}", level="ERROR")
        print(f"\nError: {e}", file=sys.stderr)
        return 1


def handle_render(args):
    """Handle the render command."""
    _configure_tracing(args)

    tracer = get_tracer()

    try:
        from threadart.export.preview import render_preview
        from threadart.export.svg_emit import emit_plan_svg
        from threadart.io.save_artifacts import ensure_dir, save_image, save_svg
        from threadart.pipeline import load_plan

        with tracer.span("cli_render", module="cli"):
            plan = load_plan(args.plan)
            ensure_dir(args.out)

            dwg = emit_plan_svg(plan, args.width, args.height, stroke_width=args.stroke_width)
            save_svg(dwg, os.path.join(args.out, "lines.svg"))
            save_image(render_preview(plan, args.width, args.height),
                       os.path.join(args.out, "preview.png"))

        print(f"Rendered {plan.line_count} lines to: {args.out}/")
        return 0

    except (OSError, ValueError) as e:
        tracer.event(f"Render failed: {e}", level="ERROR")
        print(f"\nError: {e}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
