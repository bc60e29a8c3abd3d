"""
Celery tasks for notification delivery:
- Periodic re-dispatch of failed prize notifications and confirmations
"""

import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='notifications.tasks.task_retry_failed_messages', ignore_result=True)
def task_retry_failed_messages():
    """Retry failed messages and sync the notification status of their awards."""
    from awards.models import PrizeAward
    from notifications.dispatcher import retry_failed_messages
    from notifications.models import SmsMessage

    retried = retry_failed_messages()
    sent = [m for m in retried if m.status == SmsMessage.STATUS_SENT]

    award_ids = [
        m.related_entity_id for m in sent
        if m.related_entity_type == 'prize_award' and m.related_entity_id
    ]
    if award_ids:
        PrizeAward.objects.filter(pk__in=award_ids).update(
            notification_status=PrizeAward.NOTIFICATION_SENT
        )

    if retried:
        logger.info(f'task_retry_failed_messages: retried={len(retried)}, sent={len(sent)}')
    return {'retried': len(retried), 'sent': len(sent)}
