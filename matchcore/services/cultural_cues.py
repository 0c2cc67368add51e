"""
Decision-culture cues.

Short advisory sentences for a specific client or role type, drawn from the
latest judgment insights. Each cue needs CUE_MIN_SAMPLE_SIZE decisions behind
it and at most CUE_MAX_COUNT cues are returned.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from matchcore.core import gating
from matchcore.schemas.judgment import DecisionCultureCue, JudgmentInsight, JudgmentMetric
from matchcore.services.judgment_insights import get_latest_judgment_insights
from matchcore.services.scoring import round_half_up


def normalize_context(value: Optional[str]) -> Optional[str]:
    """Trim, lowercase and hyphenate whitespace so "Data Engineer" matches "data-engineer"."""
    if value is None:
        return None
    return re.sub(r"\s+", "-", value.strip().lower())


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{round_half_up(value * 100)}%"


def format_window_label(start: datetime, end: datetime) -> str:
    return f"{start:%b} {start.day} to {end:%b} {end.day}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _override_success(metric: Optional[JudgmentMetric]) -> Optional[Dict[str, float]]:
    if metric is None or metric.sample_size < gating.CUE_MIN_SAMPLE_SIZE:
        return None
    data = metric.value
    fields = ("delta", "baselineHireRate", "overrideHireRate")
    if not all(_is_number(data.get(name)) for name in fields):
        return None
    return {name: data[name] for name in fields}


def _adjustment_share(metric: Optional[JudgmentMetric]) -> Optional[Dict[str, float]]:
    if metric is None:
        return None
    data = metric.value
    total = data.get("total") if _is_number(data.get("total")) else metric.sample_size
    if total < gating.CUE_MIN_SAMPLE_SIZE:
        return None
    mix = data.get("mix") if isinstance(data.get("mix"), dict) else {}
    adjustments = mix.get("confidence_adjustment")
    adjustments = adjustments if _is_number(adjustments) else 0
    return {"total": total, "share": adjustments / total}


def _dominant_band(metric: Optional[JudgmentMetric]) -> Optional[Dict[str, Any]]:
    if metric is None or metric.sample_size < gating.CUE_MIN_SAMPLE_SIZE:
        return None
    bands = metric.value.get("bands")
    if not isinstance(bands, dict):
        return None
    candidates = [
        {"band": band, "rate": stats["rate"], "total": stats.get("total") or 0}
        for band, stats in bands.items()
        if isinstance(stats, dict)
        and _is_number(stats.get("rate"))
        and (stats.get("total") or 0) >= gating.CUE_MIN_SAMPLE_SIZE
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda entry: entry["rate"])


def _select_contextual(
    insights: List[JudgmentInsight],
    client_id: Optional[str],
    role_type: Optional[str],
) -> List[JudgmentInsight]:
    client = normalize_context(client_id)
    role = normalize_context(role_type)

    matches = []
    for insight in insights:
        value = normalize_context(insight.dimension_value)
        if insight.dimension == "client" and client and value == client:
            matches.append(insight)
        elif insight.dimension == "role_type" and role and value == role:
            matches.append(insight)
    return matches


def build_decision_culture_cues(
    insights: List[JudgmentInsight],
    client_id: Optional[str] = None,
    role_type: Optional[str] = None,
) -> List[DecisionCultureCue]:
    """
    Build cues for the insights that match the given client or role type.

    Returns an empty list when no insight matches the context.
    """
    cues = []

    for insight in _select_contextual(insights, client_id, role_type):
        window_label = format_window_label(insight.window_start, insight.window_end)
        metrics = insight.metrics

        override = _override_success(metrics.get("override_success_delta"))
        if override and abs(override["delta"]) >= gating.CUE_MIN_OVERRIDE_LIFT:
            subject = "client" if insight.dimension == "client" else "role"
            cues.append(DecisionCultureCue(
                message=(
                    f"Most successful decisions for this {subject} accepted higher rate risk: overrides hired at "
                    f"{format_percent(override['overrideHireRate'])} vs {format_percent(override['baselineHireRate'])} baseline."
                ),
                scope=insight.dimension,
                sample_size=metrics["override_success_delta"].sample_size,
                window_label=window_label,
            ))

        mix = _adjustment_share(metrics.get("decision_mix"))
        if mix and mix["share"] >= gating.CUE_MIN_CONFIDENCE_ADJUSTMENT_SHARE:
            cues.append(DecisionCultureCue(
                message=(
                    "Top-performing recruiters usually spend more time calibrating intake for reqs like this "
                    f"({format_percent(mix['share'])} confidence adjustments captured)."
                ),
                scope=insight.dimension,
                sample_size=int(mix["total"]),
                window_label=window_label,
            ))

        band_metric = metrics.get("confidence_band_success")
        band = _dominant_band(band_metric)
        if band:
            cues.append(DecisionCultureCue(
                message=f"{band['band']} confidence bands delivered the best outcomes recently; reinforce calibration before deciding.",
                scope=insight.dimension,
                sample_size=int(max(band_metric.sample_size, band["total"])),
                window_label=window_label,
            ))

    return cues[:gating.CUE_MAX_COUNT]


def get_decision_culture_cues(
    db: Session,
    tenant_id: str,
    client_id: Optional[str] = None,
    role_type: Optional[str] = None,
) -> List[DecisionCultureCue]:
    insights = get_latest_judgment_insights(db, tenant_id)
    return build_decision_culture_cues(insights, client_id, role_type)
