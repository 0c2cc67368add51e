"""
Advisory drift plan.

Turns the latest judgment insights into at most three advisory adjustments per
dimension value (defaults, tradeoffs, confidence). Each one is gated by a
minimum sample size and is "watching" until the stronger apply threshold is
met. Nothing here changes a decision; the plan only tunes advisory weights.
"""

from typing import Any, Dict, List, Optional

from matchcore.core import gating
from matchcore.schemas.judgment import DriftAdjustment, JudgmentInsight, JudgmentMetric

DIMENSION_LABELS = {
    "firm": "Firm",
    "client": "Client",
    "role_type": "Role type",
}

HUMAN_OWNED = "Advisory only: decisions stay human-owned."


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value * 100:.1f}%"


def _value(metric: Optional[JudgmentMetric]) -> Dict[str, Any]:
    if metric is None or not isinstance(metric.value, dict):
        return {}
    return metric.value


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def top_confidence_band(metric: Optional[JudgmentMetric]) -> Optional[Dict[str, Any]]:
    """Band with the highest hire rate among bands that have any decisions."""
    bands = _value(metric).get("bands")
    if not isinstance(bands, dict):
        return None

    entries = [
        {"band": band, **stats}
        for band, stats in bands.items()
        if isinstance(stats, dict) and (_number(stats.get("total")) or 0) > 0
    ]
    if not entries:
        return None

    return max(entries, key=lambda entry: _number(entry.get("rate")) or 0)


def build_drift_plan(insights: List[JudgmentInsight]) -> List[DriftAdjustment]:
    """
    Build advisory adjustments from the latest insights.

    Args:
        insights: Latest-window insight per dimension value

    Returns:
        Adjustments sorted by segment label
    """
    adjustments = []

    for insight in insights:
        metrics = insight.metrics
        mix = _value(metrics.get("decision_mix"))
        hire_rate = _number(_value(metrics.get("hire_rate")).get("rate"))
        override_rate = _number(_value(metrics.get("override_rate")).get("rate"))
        lift = _value(metrics.get("override_success_delta"))
        delta = _number(lift.get("delta"))
        band = top_confidence_band(metrics.get("confidence_band_success"))

        total_decisions = int(_number(mix.get("total")) or 0)
        override_metric = metrics.get("override_success_delta")
        overrides_sample = override_metric.sample_size if override_metric else 0
        counts = mix.get("mix") if isinstance(mix.get("mix"), dict) else {}

        dimension = insight.dimension
        label = f"{DIMENSION_LABELS[dimension]}: {insight.dimension_value}"
        id_prefix = f"{dimension}:{insight.dimension_value}"

        if (
            hire_rate is not None
            and total_decisions >= gating.DEFAULTS_MIN_DECISIONS
            and hire_rate >= gating.DEFAULTS_MIN_HIRE_RATE
        ):
            applied = (
                total_decisions >= gating.DEFAULTS_APPLY_MIN_DECISIONS
                and hire_rate >= gating.DEFAULTS_APPLY_MIN_HIRE_RATE
            )
            adjustments.append(DriftAdjustment(
                id=f"{id_prefix}:defaults",
                dimension=dimension,
                segment=label,
                category="defaults",
                status="applied" if applied else "watching",
                change="Defaults now start closer to high-performing patterns",
                rationale=(
                    f"Recent {label.lower()} decisions deliver {format_percent(hire_rate)} success "
                    f"across {total_decisions} calls, so shortlist and weighting presets quietly bias toward that mix."
                ),
                signals=[
                    f"Decision mix: submit {counts.get('submit', 0)} · override {counts.get('override', 0)} · reject {counts.get('reject', 0)}",
                    f"Hire rate over decisions: {format_percent(hire_rate)}",
                ],
                guardrail=f"Capped at ±10% preset drift per window and logged for admin review. {HUMAN_OWNED}",
            ))

        if (
            delta is not None
            and overrides_sample >= gating.TRADEOFFS_MIN_OVERRIDES
            and delta > gating.TRADEOFFS_MIN_OVERRIDE_LIFT
        ):
            adjustments.append(DriftAdjustment(
                id=f"{id_prefix}:tradeoffs",
                dimension=dimension,
                segment=label,
                category="tradeoffs",
                status="applied" if overrides_sample >= gating.TRADEOFFS_APPLY_MIN_OVERRIDES else "watching",
                change="Tradeoff suggestions favor proven override patterns",
                rationale=(
                    f"Overrides outperform baseline by {format_percent(delta)} across {overrides_sample} overrides, "
                    f"so suggestion sliders lean into the override profile instead of generic guidance."
                ),
                signals=[
                    f"Overrides evaluated: {overrides_sample} ({format_percent(override_rate or 0)} of activity)",
                    f"Override hire rate: {format_percent(_number(lift.get('overrideHireRate')))} "
                    f"vs baseline {format_percent(_number(lift.get('baselineHireRate')))}",
                ],
                guardrail=f"Only nudges the recommendation weight; never auto-approves overrides. {HUMAN_OWNED}",
            ))

        band_rate = _number(band.get("rate")) if band else None
        band_total = int(_number(band.get("total")) or 0) if band else 0
        if (
            band_rate is not None
            and band_total >= gating.CONFIDENCE_MIN_BAND_TOTAL
            and band_rate >= gating.CONFIDENCE_MIN_BAND_RATE
        ):
            adjustments.append(DriftAdjustment(
                id=f"{id_prefix}:confidence",
                dimension=dimension,
                segment=label,
                category="confidence",
                status="applied" if band_total >= gating.CONFIDENCE_APPLY_MIN_BAND_TOTAL else "watching",
                change="Confidence expectations are recalibrated",
                rationale=(
                    f"{band['band']} band decisions are landing at {format_percent(band_rate)} success "
                    f"over {band_total} samples, so confidence prompts now anchor on that band by default."
                ),
                signals=[
                    f"{band['band']} band wins: {band.get('hires', 0)} / {band_total}",
                    "Next best band is held steady to avoid sudden jumps",
                ],
                guardrail=(
                    "No recruiter alerts fired; confidence bands shift only when stability thresholds are met. "
                    f"{HUMAN_OWNED}"
                ),
            ))

    return sorted(adjustments, key=lambda adjustment: adjustment.segment)
