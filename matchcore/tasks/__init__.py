"""
Celery tasks package.

- judgment_tasks: nightly judgment-memory aggregation
- match_quality_tasks: weekly MQI snapshot capture
"""

from matchcore.tasks import judgment_tasks, match_quality_tasks

__all__ = ["judgment_tasks", "match_quality_tasks"]
