"""
Celery configuration for the Ski Trip Planner backend.

Only configures Celery if CELERY_BROKER_URL is set in the environment.
Without a broker, tasks are called inline by the code that enqueues them.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# Only initialise Celery if a broker is configured
_broker = os.environ.get('CELERY_BROKER_URL', '')
if _broker:
    from celery import Celery
    from celery.schedules import crontab

    app = Celery('ski_trip')
    app.config_from_object('django.conf:settings', namespace='CELERY')
    app.autodiscover_tasks()

    # Periodic tasks
    app.conf.beat_schedule = {
        'expire-stale-invitations': {
            'task': 'apps.invitations.tasks.expire_stale_invitations',
            'schedule': crontab(hour=3, minute=0),  # Daily at 03:00
        },
    }
else:
    app = None
