"""
Celery tasks for the awards app.

- task_expire_stale_awards: hourly sweep moving past-expiry awards to expired.
"""

import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='awards.tasks.task_expire_stale_awards', bind=True, max_retries=0, ignore_result=True)
def task_expire_stale_awards(self):
    from awards.award_service import expire_stale_awards

    count = expire_stale_awards()
    logger.info(f'task_expire_stale_awards: {count} award(s) expired')
    return count
