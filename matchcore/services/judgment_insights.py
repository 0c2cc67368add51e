"""
Latest-window judgment insights.

Groups a tenant's aggregate rows by (dimension, value) and keeps only the
bundle from the latest window, keyed by metric name. DriftPlanner and
CulturalCueBuilder read these bundles.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Tuple
from sqlalchemy.orm import Session

from matchcore.crud import judgment as judgment_crud
from matchcore.models.judgment import AggregateDimension, JudgmentAggregate
from matchcore.schemas.judgment import JudgmentInsight, JudgmentMetric


def _dimension_key(dimension) -> str:
    return dimension.value if isinstance(dimension, AggregateDimension) else str(dimension)


def _window_rank(aggregate: JudgmentAggregate) -> Tuple[datetime, timedelta]:
    # Latest end first; on the same end the longest span wins.
    return aggregate.window_end, aggregate.window_end - aggregate.window_start


def build_latest_insights(aggregates: List[JudgmentAggregate]) -> List[JudgmentInsight]:
    """
    Reduce aggregate rows to one insight per (dimension, value).

    A window is the (window_start, window_end) pair. Only metrics from the
    winning window go into the bundle, so a short on-demand run that ends on
    the same day as the nightly window never mixes into it.
    """
    winners: Dict[Tuple[str, str], JudgmentAggregate] = {}
    for aggregate in aggregates:
        key = (_dimension_key(aggregate.dimension), aggregate.dimension_value)
        current = winners.get(key)
        if current is None or _window_rank(aggregate) > _window_rank(current):
            winners[key] = aggregate

    insights = {
        key: JudgmentInsight(
            dimension=key[0],
            dimension_value=key[1],
            window_start=winner.window_start,
            window_end=winner.window_end,
        )
        for key, winner in winners.items()
    }

    for aggregate in aggregates:
        key = (_dimension_key(aggregate.dimension), aggregate.dimension_value)
        winner = winners[key]
        if (aggregate.window_start, aggregate.window_end) != (winner.window_start, winner.window_end):
            continue
        insights[key].metrics[aggregate.metric] = JudgmentMetric.model_validate(aggregate)

    return list(insights.values())


def get_latest_judgment_insights(db: Session, tenant_id: str) -> List[JudgmentInsight]:
    """
    Load the latest aggregate bundle per dimension value for a tenant.

    Args:
        db: Database session
        tenant_id: Tenant to read

    Returns:
        List of JudgmentInsight, one per (dimension, value)
    """
    return build_latest_insights(judgment_crud.list_aggregates_for_tenant(db, tenant_id))
