"""
Validation report generation for threadart.
"""

import os

from threadart.io.save_artifacts import ensure_dir, save_json
from threadart.tracer import get_tracer, trace


@trace(label="generate_report")
def generate_report(plan, out_dir):
    """
    Write validation report files.

    Creates:
    - validation_report.json: full check results
    - validation_summary.txt: human-readable summary
    """
    tracer = get_tracer()

    report = plan.validation

    report_path = os.path.join(out_dir, "validation_report.json")
    save_json(report, report_path)

    failed = [c for c in report.checks if not c.passed]

    summary_lines = [
        "Thread Plan Validation Report",
        "=" * 40,
        "",
        f"Plan: {plan.plan_id}",
        f"Lines: {plan.line_count}",
        f"Total checks: {len(report.checks)}",
        f"Failed: {len(failed)}",
        "",
    ]

    summary_lines.append("ALL CHECKS:")
    summary_lines.append("-" * 40)
    for check in report.checks:
        summary_lines.append(format_check_result(check))

    summary_path = os.path.join(out_dir, "validation_summary.txt")
    ensure_dir(os.path.dirname(summary_path))
    with open(summary_path, "w", encoding="utf-8") as f:
        f.write("\n".join(summary_lines) + "\n")

    tracer.event(f"Report saved: {len(report.checks)} checks, {report.error_count} errors")

    return report_path, summary_path


def format_check_result(check):
    """Format a single check result for display."""
    status = "PASS" if check.passed else "FAIL"
    return f"[{status}][{check.severity.value.upper()}] {check.rule_id}: {check.message}"
