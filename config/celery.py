"""
Digital Prizes Celery Configuration
Queue routing for notification delivery and periodic award maintenance.
"""

import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('prizes')
app.config_from_object('django.conf:settings', namespace='CELERY')

# Queue definitions
app.conf.task_default_queue = 'default'

app.conf.task_routes = {
    'awards.*': {'queue': 'default'},
    'notifications.*': {'queue': 'notifications'},
}

app.conf.task_queues = {
    'default': {
        'exchange': 'default',
        'routing_key': 'default',
    },
    'notifications': {
        'exchange': 'notifications',
        'routing_key': 'notifications',
    },
}

app.autodiscover_tasks()

# Celery Beat Schedule
from celery.schedules import crontab

app.conf.beat_schedule = {
    # Move past-expiry awards to Expired every hour
    'expire-stale-awards': {
        'task': 'awards.tasks.task_expire_stale_awards',
        'schedule': crontab(minute=5),
    },
    # Re-dispatch failed prize notifications
    'retry-failed-messages': {
        'task': 'notifications.tasks.task_retry_failed_messages',
        'schedule': crontab(minute='*/10'),
    },
}
