"""
Notification dispatcher.

Every send creates an SmsMessage row first, then hands the text to the
transport. A transport failure is recorded on the row and never raised:
callers read message.status to learn the outcome.
"""

import logging

from django.conf import settings
from django.utils import timezone

from accounts.phone import mask_phone
from notifications import transport
from notifications.models import SmsMessage

logger = logging.getLogger(__name__)


def send_sms(phone, body, message_type, related_entity_type='', related_entity_id='', channel='sms'):
    """Record and dispatch one message. Returns the SmsMessage."""
    message = SmsMessage.objects.create(
        phone=phone,
        body=body,
        message_type=message_type,
        channel=channel or SmsMessage.CHANNEL_SMS,
        related_entity_type=related_entity_type,
        related_entity_id=str(related_entity_id) if related_entity_id is not None else '',
    )
    deliver(message)
    return message


def deliver(message):
    """Push an existing SmsMessage through the transport. Returns True when accepted."""
    try:
        reference = transport.dispatch(message.phone, message.body, channel=message.channel)
    except transport.TransportError as e:
        logger.error(f'{message.message_type} to {mask_phone(message.phone)} failed: {e}')
        return _mark_failed(message, e)
    except Exception as e:
        logger.exception(f'{message.message_type} to {mask_phone(message.phone)} crashed in transport')
        return _mark_failed(message, e)

    message.status = SmsMessage.STATUS_SENT
    message.sent_at = timezone.now()
    message.provider_reference = (reference or '')[:100]
    message.failure_reason = ''
    message.save(update_fields=['status', 'sent_at', 'provider_reference', 'failure_reason'])
    return True


def _mark_failed(message, error):
    message.status = SmsMessage.STATUS_FAILED
    message.failure_reason = (str(error) or error.__class__.__name__)[:500]
    message.save(update_fields=['status', 'failure_reason'])
    return False


def send_otp_sms(phone, code, otp_id=None):
    body = (
        f'Your verification code is: {code}. '
        f'This code expires in {settings.OTP_EXPIRY_MINUTES} minutes.'
    )
    return send_sms(phone, body, SmsMessage.TYPE_OTP, 'otp', otp_id)


def send_prize_notification(award):
    """Tell the winner what they won, where to redeem it and until when."""
    body = f'Congratulations! You have won: {award.prize.name}.'
    if settings.REDEMPTION_BASE_URL:
        body += f' Redeem at: {settings.REDEMPTION_BASE_URL}'
    if award.expiry_date:
        body += f' Expires: {award.expiry_date.strftime("%d %b %Y")}'
    return send_sms(
        award.phone, body, SmsMessage.TYPE_PRIZE_NOTIFICATION,
        'prize_award', award.pk, channel=award.notification_channel,
    )


def send_redemption_confirmation(redemption):
    award = redemption.award
    body = (
        f"Your prize '{award.prize.name}' has been successfully redeemed. "
        f'Reference: {redemption.redemption_code}'
    )
    return send_sms(
        award.phone, body, SmsMessage.TYPE_REDEMPTION_CONFIRMATION,
        'prize_redemption', redemption.pk, channel=award.notification_channel,
    )


def retry_failed_messages(limit=100):
    """
    Re-dispatch failed messages that still have retries left.
    OTP messages are skipped: a stale code is useless and a new one is a request away.

    Returns:
        list of SmsMessage that were retried
    """
    candidates = list(
        SmsMessage.objects.filter(
            status=SmsMessage.STATUS_FAILED,
            retry_count__lt=settings.SMS_MAX_RETRIES,
        ).exclude(
            message_type=SmsMessage.TYPE_OTP
        ).order_by('created_at')[:limit]
    )
    for message in candidates:
        message.retry_count += 1
        message.save(update_fields=['retry_count'])
        deliver(message)
    return candidates
