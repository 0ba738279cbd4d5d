"""
Validation rules for thread plans.

Checks a finished plan against the constraints the planner promises, so
a plan loaded from disk or produced by another tool can be trusted
before it is built.
"""

from threadart.models import CheckResult, Severity, ValidationReport
from threadart.planner.search import circular_distance
from threadart.tracer import get_tracer, trace


@trace(label="run_validation")
def run_validation(plan, config):
    """
    Run all validation checks on a plan.

    Returns ValidationReport with all check results.
    """
    tracer = get_tracer()

    checks = [
        check_anchor_range(plan),
        check_gap_exclusion(plan),
        check_line_count(plan, config),
        check_residual_coverage(plan),
    ]

    report = ValidationReport(checks=checks)

    tracer.event(f"Validation complete: {report.error_count} errors, {report.warning_count} warnings")

    return report


def check_anchor_range(plan):
    """Every anchor in the order must index the anchor list."""
    count = len(plan.anchors)
    bad = [a for a in plan.order if not 0 <= a < count]

    if bad:
        return CheckResult(
            rule_id="anchor_range",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(bad)} anchor indices outside [0, {count})",
            evidence={"invalid": bad[:5]},
        )

    return CheckResult(
        rule_id="anchor_range",
        severity=Severity.ERROR,
        passed=True,
        message="All anchor indices are valid",
    )


def check_gap_exclusion(plan):
    """No line may connect anchors within the forbidden neighborhood."""
    count = len(plan.anchors)
    gap = plan.settings.anchor_gap_count

    violations = [
        (a, b) for a, b in plan.lines()
        if 0 <= a < count and 0 <= b < count and circular_distance(a, b, count) <= gap
    ]

    if violations:
        return CheckResult(
            rule_id="gap_exclusion",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(violations)} lines connect anchors closer than gap {gap}",
            evidence={"violations": [list(v) for v in violations[:5]]},
        )

    return CheckResult(
        rule_id="gap_exclusion",
        severity=Severity.ERROR,
        passed=True,
        message=f"All lines respect anchor gap {gap}",
    )


def check_line_count(plan, config):
    """In count mode the plan must hold exactly the requested lines."""
    termination = config.termination

    if termination.mode != "count":
        return CheckResult(
            rule_id="line_count",
            severity=Severity.INFO,
            passed=True,
            message=f"Planned {plan.line_count} lines until loss target",
            evidence={"lines": plan.line_count},
        )

    expected = termination.num_chords
    if plan.line_count != expected:
        return CheckResult(
            rule_id="line_count",
            severity=Severity.ERROR,
            passed=False,
            message=f"Expected {expected} lines, plan has {plan.line_count}",
            evidence={"expected": expected, "actual": plan.line_count},
        )

    return CheckResult(
        rule_id="line_count",
        severity=Severity.ERROR,
        passed=True,
        message=f"Plan has the requested {expected} lines",
    )


def check_residual_coverage(plan):
    """Report how much of the initial darkness the plan paid off."""
    if not plan.initial_loss or plan.final_loss is None:
        return CheckResult(
            rule_id="residual_coverage",
            severity=Severity.INFO,
            passed=True,
            message="No residual recorded",
        )

    covered = 1.0 - plan.final_loss / plan.initial_loss

    return CheckResult(
        rule_id="residual_coverage",
        severity=Severity.INFO,
        passed=True,
        message=f"Residual reduced by {covered:.1%}",
        evidence={"initial_loss": plan.initial_loss, "final_loss": plan.final_loss},
    )
