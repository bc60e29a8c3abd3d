"""
OTP Service - issues and verifies one-time codes scoped by (phone, purpose)
"""

import hmac
import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from accounts.phone import normalize_phone, mask_phone
from notifications.dispatcher import send_otp_sms
from notifications.models import SmsMessage
from otp.models import OneTimePassword

logger = logging.getLogger(__name__)


def send_otp(phone, purpose=OneTimePassword.PURPOSE_REDEMPTION, related_id=None, ip_address=None):
    """
    Generate and send an OTP, invalidating earlier unused codes for the same purpose.

    Args:
        phone: Phone number (e.g., '0821234567' or '+27821234567')
        purpose: One of OneTimePassword.PURPOSE_CHOICES
        related_id: Optional id of the record the code authorises
        ip_address: Request IP, stored for audit

    Returns:
        dict: {'success': bool, 'message': str, 'expires_in_seconds': int}
              plus 'rate_limited': True when the hourly cap was hit
    """
    phone = normalize_phone(phone)
    expiry_minutes = settings.OTP_EXPIRY_MINUTES
    max_per_hour = settings.OTP_MAX_PER_HOUR
    now = timezone.now()

    # Rate limiting
    recent_count = OneTimePassword.objects.filter(
        phone=phone,
        created_at__gte=now - timedelta(hours=1),
    ).count()
    if recent_count >= max_per_hour:
        logger.warning(f'OTP rate limit hit: {mask_phone(phone)} sent {recent_count} in last hour (max={max_per_hour})')
        return {
            'success': False,
            'message': 'Too many OTP requests. Please try again later.',
            'expires_in_seconds': 0,
            'rate_limited': True,
        }

    # Invalidate previous unused OTPs for this purpose only
    invalidated = OneTimePassword.objects.filter(
        phone=phone, purpose=purpose, is_used=False,
    ).update(is_used=True, used_at=now)
    if invalidated:
        logger.info(f'Invalidated {invalidated} earlier {purpose} OTP(s) for {mask_phone(phone)}')

    otp = OneTimePassword.objects.create(
        phone=phone,
        code=OneTimePassword.generate_code(),
        purpose=purpose,
        related_entity_id=str(related_id) if related_id is not None else '',
        expires_at=now + timedelta(minutes=expiry_minutes),
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        ip_address=ip_address or None,
    )

    message = send_otp_sms(phone, otp.code, otp.pk)
    if message.status != SmsMessage.STATUS_SENT:
        logger.error(f'OTP send FAILED: {mask_phone(phone)} purpose={purpose}')
        return {'success': False, 'message': 'Failed to send OTP. Please try again.', 'expires_in_seconds': 0}

    logger.info(f'OTP sent successfully: {mask_phone(phone)} purpose={purpose}')
    return {
        'success': True,
        'message': 'OTP sent successfully.',
        'expires_in_seconds': expiry_minutes * 60,
    }


def verify_otp(phone, code, purpose=OneTimePassword.PURPOSE_REDEMPTION, related_id=None):
    """
    Verify an OTP code. A successful verification consumes the code.

    Returns:
        dict: {'is_valid': bool, 'message': str}
              plus 'remaining_attempts' on a wrong code and 'otp_id' on success
    """
    phone = normalize_phone(phone)
    code = (code or '').strip()

    qs = OneTimePassword.objects.filter(phone=phone, purpose=purpose, is_used=False)
    if related_id is not None:
        qs = qs.filter(related_entity_id=str(related_id))
    otp = qs.order_by('-created_at', '-id').first()

    if otp is None:
        return {'is_valid': False, 'message': 'No valid OTP found. Please request a new OTP.'}

    if otp.attempts_exhausted:
        return _exhausted(otp, phone)

    if otp.is_expired:
        return {'is_valid': False, 'message': 'OTP has expired. Please request a new OTP.'}

    # Every guess, right or wrong, spends an attempt before the compare
    claimed = OneTimePassword.objects.filter(
        pk=otp.pk, is_used=False, attempt_count__lt=F('max_attempts'),
    ).update(attempt_count=F('attempt_count') + 1)
    otp.refresh_from_db(fields=['attempt_count', 'is_used'])
    if not claimed:
        if otp.is_used:
            return {'is_valid': False, 'message': 'No valid OTP found. Please request a new OTP.'}
        return _exhausted(otp, phone)

    if not hmac.compare_digest(otp.code.lower().encode(), code.lower().encode()):
        remaining = max(otp.max_attempts - otp.attempt_count, 0)
        logger.info(f'OTP mismatch: {mask_phone(phone)} otp={otp.pk} remaining={remaining}')
        return {'is_valid': False, 'message': 'Invalid OTP code.', 'remaining_attempts': remaining}

    # Only one concurrent verifier can flip is_used
    if not _consume(otp, within_attempts=True):
        return {'is_valid': False, 'message': 'No valid OTP found. Please request a new OTP.'}

    logger.info(f'OTP verified: {mask_phone(phone)} otp={otp.pk}')
    return {'is_valid': True, 'message': 'OTP verified successfully.', 'otp_id': otp.pk}


def _exhausted(otp, phone):
    _consume(otp)
    logger.warning(f'OTP attempts exhausted: {mask_phone(phone)} otp={otp.pk}')
    return {
        'is_valid': False,
        'message': 'Maximum attempts exceeded. Please request a new OTP.',
        'remaining_attempts': 0,
    }


def _consume(otp, within_attempts=False):
    qs = OneTimePassword.objects.filter(pk=otp.pk, is_used=False)
    if within_attempts:
        qs = qs.filter(attempt_count__lte=F('max_attempts'))
    updated = qs.update(is_used=True, used_at=timezone.now())
    return updated == 1
