import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("rentaride")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Trips not returned after the grace period - every 15 minutes
    "mark-overdue-trips": {
        "task": "bookings.mark_overdue_trips",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
    # Bookings never picked up - hourly
    "mark-not-picked": {
        "task": "bookings.mark_not_picked",
        "schedule": crontab(minute=5),
    },
}

app.conf.timezone = "Asia/Kolkata"
