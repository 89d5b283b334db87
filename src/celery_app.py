"""Celery application configuration."""

from celery import Celery

from src.config import get_settings
from src.logging_config import configure_logging

settings = get_settings()
configure_logging()

app = Celery(
    "feed",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.image_cleanup"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    beat_schedule={
        "sweep-orphaned-images": {
            "task": "src.tasks.image_cleanup.sweep_images",
            "schedule": settings.image_sweep_interval_minutes * 60,
        },
    },
)
