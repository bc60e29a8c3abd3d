"""
Two-step prize redemption.

initiate_redemption lists what a phone can redeem and sends a redemption OTP.
complete_redemption verifies that OTP, then checks ownership, status and
expiry, in that order, before flipping the award to redeemed.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.phone import normalize_phone, mask_phone, same_phone
from awards.models import PrizeAward
from notifications.dispatcher import send_redemption_confirmation
from otp.models import OneTimePassword
from otp.otp_service import send_otp, verify_otp
from redemptions.models import PrizeRedemption

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('audit')


def get_redeemable_awards(phone):
    """Awarded, unexpired awards for a phone, newest first."""
    phone = normalize_phone(phone)
    return PrizeAward.objects.select_related('prize', 'prize__prize_type').filter(
        phone__iexact=phone,
        status=PrizeAward.STATUS_AWARDED,
    ).filter(
        Q(expiry_date__isnull=True) | Q(expiry_date__gte=timezone.now())
    ).order_by('-awarded_at', '-id')


def redeemable_summary(award):
    prize = award.prize
    return {
        'prize_award_id': award.pk,
        'prize_name': prize.name,
        'prize_type': prize.prize_type.name,
        'monetary_value': str(prize.monetary_value) if prize.monetary_value is not None else None,
        'awarded_at': award.awarded_at.isoformat(),
        'expiry_date': award.expiry_date.isoformat() if award.expiry_date else None,
    }


def initiate_redemption(phone, award_id=None, ip_address=None):
    """
    Step 1: list redeemable prizes and send a verification code.

    Returns:
        dict: {'requires_otp': bool, 'message': str, 'redeemable_prizes': list}
              plus 'error_code' when the request cannot proceed
    """
    phone = normalize_phone(phone)
    awards = list(get_redeemable_awards(phone))

    if not awards:
        return {
            'requires_otp': False,
            'message': 'No prizes available for redemption.',
            'redeemable_prizes': [],
        }

    if award_id is not None:
        awards = [a for a in awards if a.pk == int(award_id)]
        if not awards:
            return {
                'requires_otp': False,
                'message': 'The specified prize is not available for redemption.',
                'redeemable_prizes': [],
                'error_code': 'not_available',
            }

    result = send_otp(phone, OneTimePassword.PURPOSE_REDEMPTION, related_id=award_id, ip_address=ip_address)
    if not result['success']:
        if result.get('rate_limited'):
            return {
                'requires_otp': True,
                'message': result['message'],
                'redeemable_prizes': [],
                'error_code': 'otp_rate_limited',
            }
        return {
            'requires_otp': True,
            'message': 'Failed to send verification code. Please try again.',
            'redeemable_prizes': [],
            'error_code': 'otp_send_failed',
        }

    logger.info(f'Redemption initiated: {mask_phone(phone)} candidates={len(awards)}')
    return {
        'requires_otp': True,
        'message': f'Verification code sent to {mask_phone(phone)}',
        'redeemable_prizes': [redeemable_summary(a) for a in awards],
        'expires_in_seconds': result['expires_in_seconds'],
    }


def complete_redemption(phone, otp_code, award_id, channel='web_portal', notes='', ip_address=None):
    """
    Step 2: verify the OTP and redeem one award.

    Returns:
        dict: {'success': bool, 'message': str, ...}
              success adds redemption_id, redemption_code and confirmation;
              failure adds error_code (otp_invalid, not_found, not_owner,
              invalid_status, expired)
    """
    phone = normalize_phone(phone)

    verification = verify_otp(phone, otp_code, OneTimePassword.PURPOSE_REDEMPTION)
    if not verification['is_valid']:
        failure = _failure(verification['message'], 'otp_invalid')
        if 'remaining_attempts' in verification:
            failure['remaining_attempts'] = verification['remaining_attempts']
        return failure

    award = PrizeAward.objects.select_related('prize').filter(pk=award_id).first()
    if award is None:
        return _failure('Prize not found.', 'not_found')

    if not same_phone(award.phone, phone):
        logger.warning(f'Redemption ownership mismatch: award={award.pk} caller={mask_phone(phone)}')
        return _failure('This prize does not belong to you.', 'not_owner')

    if award.status != PrizeAward.STATUS_AWARDED:
        return _status_failure(award)

    if award.is_expired:
        return _failure('This prize has expired.', 'expired')

    now = timezone.now()
    with transaction.atomic():
        flipped = PrizeAward.objects.filter(
            pk=award.pk, status=PrizeAward.STATUS_AWARDED,
        ).update(status=PrizeAward.STATUS_REDEEMED, updated_at=now)
        if not flipped:
            award.refresh_from_db(fields=['status'])
            return _status_failure(award)

        redemption = PrizeRedemption.objects.create(
            award=award,
            redeemed_at=now,
            channel=channel,
            from_ip=ip_address or None,
            notes=notes or '',
        )
    award.status = PrizeAward.STATUS_REDEEMED

    try:
        send_redemption_confirmation(redemption)
    except Exception:
        logger.exception(f'Redemption confirmation for redemption={redemption.pk} could not be recorded')
    audit_logger.info(
        f'prize_redeemed award={award.pk} redemption={redemption.pk} '
        f'code={redemption.redemption_code} phone={mask_phone(phone)} channel={channel}'
    )

    return {
        'success': True,
        'message': 'Prize redeemed successfully!',
        'redemption_id': redemption.pk,
        'redemption_code': redemption.redemption_code,
        'confirmation': {
            'prize_name': award.prize.name,
            'monetary_value': str(award.prize.monetary_value) if award.prize.monetary_value is not None else None,
            'redeemed_at': redemption.redeemed_at.isoformat(),
            'external_reference': award.external_reference,
        },
    }


def get_redemption(award_id):
    return PrizeRedemption.objects.select_related('award', 'award__prize').filter(award_id=award_id).first()


def _status_failure(award):
    return _failure(
        f'Prize cannot be redeemed. Current status: {award.get_status_display()}',
        'invalid_status',
    )


def _failure(message, error_code):
    return {'success': False, 'message': message, 'error_code': error_code}
