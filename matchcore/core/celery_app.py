"""
Celery application configuration.

Redis is both the message broker and the result backend. Beat runs the
judgment aggregation nightly and the MQI snapshot capture every Monday.
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging
from matchcore.core.config import settings
from matchcore.core.logging_config import setup_logging as configure_logging

# Create Celery instance
celery_app = Celery(
    "match_core_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

# Configure Celery
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_track_started=True,
    task_time_limit=1800,  # Aggregation walks every tenant
    task_soft_time_limit=1500,

    # Result backend
    result_expires=3600,

    # Worker behavior
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,

    beat_schedule={
        "judgment-aggregation-nightly": {
            "task": "matchcore.tasks.judgment_tasks.run_judgment_aggregation_task",
            "schedule": crontab(hour=2, minute=0),
        },
        "mqi-snapshots-weekly": {
            "task": "matchcore.tasks.match_quality_tasks.capture_match_quality_snapshots_task",
            "schedule": crontab(hour=3, minute=0, day_of_week="mon"),
        },
    },
)

# Auto-discover tasks from matchcore.tasks
celery_app.autodiscover_tasks(["matchcore"])


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Workers log through the same JSON formatter as the API."""
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
