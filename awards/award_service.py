"""
Award lifecycle service.

Awards move awarded -> redeemed | cancelled | expired and never back.
Stock is reserved through prizes.allocator.decrement in the same
transaction that writes the award row, so a lost race leaves no award.
Notification failures are recorded on the award and never undo it.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.phone import normalize_phone, mask_phone
from accounts.services import get_or_create_user
from awards.models import PrizeAward
from competitions.services import get_competition
from notifications.dispatcher import send_prize_notification
from notifications.models import SmsMessage
from prizes.allocator import pick_next, decrement
from prizes.models import Prize

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('audit')

# A bulk item retries with the next prize this many times after losing a race
_MAX_PICK_ATTEMPTS = 3


def award_prize(prize_id, phone, *, actor_id=None, competition_id=None, notification_channel='sms',
                send_notification=True, expiry_days=None, external_reference='',
                method=PrizeAward.METHOD_MANUAL, first_name=None, last_name=None, email=None):
    """
    Award one unit of a prize to a phone number.

    Returns:
        PrizeAward, or None when the prize is missing, inactive, expired or out of stock
    Raises:
        ValueError: blank phone or unknown competition (nothing is written)
    """
    phone = normalize_phone(phone)
    if not phone:
        raise ValueError('phone is required')

    prize = Prize.objects.filter(pk=prize_id).first()
    if prize is None:
        logger.warning(f'award_prize: prize={prize_id} not found')
        return None
    if not prize.is_allocatable:
        logger.info(f'award_prize: prize={prize_id} not allocatable '
                    f'(active={prize.is_active}, remaining={prize.remaining_quantity})')
        return None

    competition = None
    if competition_id is not None:
        competition = get_competition(competition_id)
        if competition is None:
            raise ValueError(f'Competition {competition_id} does not exist')

    user = get_or_create_user(phone, first_name, last_name, email)

    if expiry_days is not None:
        expiry_date = timezone.now() + timedelta(days=expiry_days)
    else:
        expiry_date = prize.expiry_date

    with transaction.atomic():
        if not decrement(prize.pk):
            logger.info(f'award_prize: lost stock race on prize={prize.pk} for {mask_phone(phone)}')
            return None
        award = PrizeAward.objects.create(
            prize=prize,
            external_user=user,
            phone=phone,
            competition=competition,
            awarded_by=str(actor_id) if actor_id is not None else '',
            method=method,
            notification_channel=notification_channel or 'sms',
            notification_status=(
                PrizeAward.NOTIFICATION_PENDING if send_notification
                else PrizeAward.NOTIFICATION_NOT_REQUIRED
            ),
            expiry_date=expiry_date,
            external_reference=external_reference or '',
        )

    audit_logger.info(
        f'prize_awarded award={award.pk} prize={prize.pk} phone={mask_phone(phone)} '
        f'method={method} actor={actor_id}'
    )

    if send_notification:
        _notify(award)
    return award


def bulk_award(pool_id, phones, *, type_id=None, actor_id=None, competition_id=None,
               notification_channel='sms', send_notification=True, expiry_days=None):
    """
    Award the next available prize in a pool to each phone in turn.
    Items fail independently; the batch never aborts part-way.

    Returns:
        dict: {'total_requested', 'success_count', 'fail_count',
               'results': [{'phone', 'success', 'award_id', 'error'}]}
    """
    if len(phones) > settings.BULK_AWARD_MAX_PHONES:
        raise ValueError(f'At most {settings.BULK_AWARD_MAX_PHONES} phones per bulk award')
    if competition_id is not None and get_competition(competition_id) is None:
        raise ValueError(f'Competition {competition_id} does not exist')

    results = []
    for phone in phones:
        try:
            result = _award_next(
                pool_id, phone,
                type_id=type_id,
                actor_id=actor_id,
                competition_id=competition_id,
                notification_channel=notification_channel,
                send_notification=send_notification,
                expiry_days=expiry_days,
            )
        except Exception as e:
            logger.exception(f'bulk_award: item failed for {mask_phone(phone)}')
            result = {'phone': phone, 'success': False, 'award_id': None, 'error': str(e)}
        results.append(result)

    success_count = sum(1 for r in results if r['success'])
    logger.info(f'bulk_award: pool={pool_id} requested={len(phones)} awarded={success_count}')
    audit_logger.info(
        f'bulk_award pool={pool_id} requested={len(phones)} awarded={success_count} actor={actor_id}'
    )
    return {
        'total_requested': len(phones),
        'success_count': success_count,
        'fail_count': len(results) - success_count,
        'results': results,
    }


def _award_next(pool_id, phone, **kwargs):
    type_id = kwargs.pop('type_id')
    for _ in range(_MAX_PICK_ATTEMPTS):
        prize = pick_next(pool_id, type_id)
        if prize is None:
            return {'phone': phone, 'success': False, 'award_id': None,
                    'error': 'No available prizes in the pool.'}
        award = award_prize(prize.pk, phone, method=PrizeAward.METHOD_BULK, **kwargs)
        if award is not None:
            return {'phone': phone, 'success': True, 'award_id': award.pk, 'error': None}
    return {'phone': phone, 'success': False, 'award_id': None, 'error': 'Failed to award prize.'}


def cancel_award(award_id, reason='', *, actor_id=None):
    """Cancel an award that is still in the awarded state. Returns False otherwise."""
    now = timezone.now()
    updated = PrizeAward.objects.filter(
        pk=award_id, status=PrizeAward.STATUS_AWARDED,
    ).update(
        status=PrizeAward.STATUS_CANCELLED,
        cancelled_at=now,
        cancelled_by=str(actor_id) if actor_id is not None else '',
        cancel_reason=reason or '',
        updated_at=now,
    )
    if not updated:
        logger.info(f'cancel_award: award={award_id} missing or not in awarded state')
        return False

    audit_logger.info(f'award_cancelled award={award_id} actor={actor_id} reason={reason!r}')
    return True


def resend_notification(award_id, channel=None, *, actor_id=None):
    """Re-send the award notification. Award status is left alone."""
    award = PrizeAward.objects.select_related('prize').filter(pk=award_id).first()
    if award is None:
        return False

    if channel:
        award.notification_channel = channel
        award.save(update_fields=['notification_channel', 'updated_at'])
    _notify(award)

    audit_logger.info(
        f'notification_resent award={award.pk} channel={award.notification_channel} '
        f'status={award.notification_status} actor={actor_id}'
    )
    return True


def expire_stale_awards():
    """Move awarded rows past their expiry date to expired. Returns the count."""
    now = timezone.now()
    count = PrizeAward.objects.filter(
        status=PrizeAward.STATUS_AWARDED,
        expiry_date__isnull=False,
        expiry_date__lt=now,
    ).update(status=PrizeAward.STATUS_EXPIRED, updated_at=now)
    if count:
        logger.info(f'expire_stale_awards: expired {count} award(s)')
    return count


def get_award(award_id):
    return PrizeAward.objects.select_related('prize', 'prize__prize_type').filter(pk=award_id).first()


def get_awards_for_phone(phone):
    return PrizeAward.objects.select_related('prize', 'prize__prize_type').filter(
        phone=normalize_phone(phone)
    ).order_by('-awarded_at', '-id')


def _notify(award):
    """Send the award notification. The award stands whatever happens here."""
    try:
        message = send_prize_notification(award)
    except Exception:
        logger.exception(f'_notify: prize notification for award={award.pk} could not be recorded')
        message = None

    if message is not None and message.status == SmsMessage.STATUS_SENT:
        award.notification_status = PrizeAward.NOTIFICATION_SENT
    else:
        award.notification_status = PrizeAward.NOTIFICATION_FAILED
    award.save(update_fields=['notification_status', 'updated_at'])
    return message
