from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from awards.models import PrizeAward
from notifications.models import SmsMessage
from notifications.transport import TransportError
from otp.models import OneTimePassword
from otp.otp_service import send_otp
from redemptions import redemption_service
from redemptions.models import PrizeRedemption

pytestmark = pytest.mark.django_db

PHONE = '+27821234567'
OTHER_PHONE = '+27829876543'


def test_initiate_without_awards_sends_nothing():
    result = redemption_service.initiate_redemption(PHONE)

    assert result == {
        'requires_otp': False,
        'message': 'No prizes available for redemption.',
        'redeemable_prizes': [],
    }
    assert OneTimePassword.objects.count() == 0


def test_initiate_lists_prizes_and_sends_otp(make_award):
    older = make_award(awarded_at=timezone.now() - timedelta(days=2))
    newer = make_award()

    result = redemption_service.initiate_redemption('0821234567', ip_address='10.1.1.1')

    assert result['requires_otp'] is True
    assert result['message'] == 'Verification code sent to +27***4567'
    assert [p['prize_award_id'] for p in result['redeemable_prizes']] == [newer.pk, older.pk]
    first = result['redeemable_prizes'][0]
    assert first['prize_name'] == 'R50 Grocery Voucher'
    assert first['prize_type'] == 'Voucher Code'
    assert first['monetary_value'] == '50.00'
    assert OneTimePassword.objects.filter(
        phone=PHONE, purpose=OneTimePassword.PURPOSE_REDEMPTION, is_used=False,
    ).count() == 1


def test_initiate_excludes_expired_and_terminal_awards(make_award, expired_at):
    make_award(expiry_date=expired_at)
    make_award(status=PrizeAward.STATUS_REDEEMED)
    make_award(status=PrizeAward.STATUS_CANCELLED)

    result = redemption_service.initiate_redemption(PHONE)

    assert result['requires_otp'] is False
    assert result['message'] == 'No prizes available for redemption.'


def test_initiate_for_specific_award(make_award):
    wanted = make_award()
    make_award()

    result = redemption_service.initiate_redemption(PHONE, award_id=wanted.pk)

    assert [p['prize_award_id'] for p in result['redeemable_prizes']] == [wanted.pk]


def test_initiate_for_unavailable_award(make_award):
    make_award()
    someone_elses = make_award(phone=OTHER_PHONE)

    result = redemption_service.initiate_redemption(PHONE, award_id=someone_elses.pk)

    assert result['requires_otp'] is False
    assert result['message'] == 'The specified prize is not available for redemption.'
    assert result['error_code'] == 'not_available'
    assert OneTimePassword.objects.count() == 0


def test_initiate_otp_send_failure(make_award):
    make_award()
    with mock.patch('notifications.transport.dispatch', side_effect=TransportError('down')):
        result = redemption_service.initiate_redemption(PHONE)

    assert result['requires_otp'] is True
    assert result['message'] == 'Failed to send verification code. Please try again.'
    assert result['redeemable_prizes'] == []
    assert result['error_code'] == 'otp_send_failed'


def test_complete_redeems_award(make_award, latest_code):
    award = make_award(external_reference='EXT-9')
    redemption_service.initiate_redemption(PHONE)

    result = redemption_service.complete_redemption(
        PHONE, latest_code(PHONE), award.pk, channel='kiosk', notes='front desk', ip_address='10.1.1.1',
    )

    assert result['success'] is True
    assert result['message'] == 'Prize redeemed successfully!'
    assert result['redemption_code'].startswith('RDM-')
    assert len(result['redemption_code']) == 12
    assert result['confirmation']['prize_name'] == 'R50 Grocery Voucher'
    assert result['confirmation']['monetary_value'] == '50.00'
    assert result['confirmation']['external_reference'] == 'EXT-9'

    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_REDEEMED
    redemption = PrizeRedemption.objects.get(award=award)
    assert redemption.pk == result['redemption_id']
    assert redemption.channel == 'kiosk'
    assert redemption.from_ip == '10.1.1.1'
    assert redemption.notes == 'front desk'

    confirmation = SmsMessage.objects.get(message_type=SmsMessage.TYPE_REDEMPTION_CONFIRMATION)
    assert redemption.redemption_code in confirmation.body
    assert redemption_service.get_redemption(award.pk) == redemption


def test_complete_twice_fails_without_second_redemption(make_award, latest_code):
    award = make_award()
    redemption_service.initiate_redemption(PHONE)
    assert redemption_service.complete_redemption(PHONE, latest_code(PHONE), award.pk)['success'] is True

    send_otp(PHONE, OneTimePassword.PURPOSE_REDEMPTION)
    result = redemption_service.complete_redemption(PHONE, latest_code(PHONE), award.pk)

    assert result['success'] is False
    assert result['message'] == 'Prize cannot be redeemed. Current status: Redeemed'
    assert result['error_code'] == 'invalid_status'
    assert PrizeRedemption.objects.filter(award=award).count() == 1


def test_complete_rejects_other_owner_even_with_valid_otp(make_award, latest_code):
    award = make_award(phone=PHONE)
    send_otp(OTHER_PHONE, OneTimePassword.PURPOSE_REDEMPTION)

    result = redemption_service.complete_redemption(OTHER_PHONE, latest_code(OTHER_PHONE), award.pk)

    assert result['success'] is False
    assert result['message'] == 'This prize does not belong to you.'
    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_AWARDED


def test_complete_rejects_expired_award(make_award, latest_code, expired_at):
    award = make_award()
    redemption_service.initiate_redemption(PHONE)
    PrizeAward.objects.filter(pk=award.pk).update(expiry_date=expired_at)

    result = redemption_service.complete_redemption(PHONE, latest_code(PHONE), award.pk)

    assert result['success'] is False
    assert result['message'] == 'This prize has expired.'
    assert PrizeRedemption.objects.count() == 0


def test_complete_with_wrong_code(make_award):
    award = make_award()
    redemption_service.initiate_redemption(PHONE)

    result = redemption_service.complete_redemption(PHONE, 'xxxxxx', award.pk)

    assert result['success'] is False
    assert result['message'] == 'Invalid OTP code.'
    assert result['error_code'] == 'otp_invalid'
    assert result['remaining_attempts'] == 2


def test_complete_without_otp(make_award):
    award = make_award()

    result = redemption_service.complete_redemption(PHONE, '123456', award.pk)

    assert result['error_code'] == 'otp_invalid'
    assert result['message'] == 'No valid OTP found. Please request a new OTP.'


def test_complete_unknown_award(latest_code):
    send_otp(PHONE, OneTimePassword.PURPOSE_REDEMPTION)

    result = redemption_service.complete_redemption(PHONE, latest_code(PHONE), 999999)

    assert result == {'success': False, 'message': 'Prize not found.', 'error_code': 'not_found'}


def test_complete_cancelled_award(make_award, latest_code):
    award = make_award(status=PrizeAward.STATUS_CANCELLED)
    send_otp(PHONE, OneTimePassword.PURPOSE_REDEMPTION)

    result = redemption_service.complete_redemption(PHONE, latest_code(PHONE), award.pk)

    assert result['message'] == 'Prize cannot be redeemed. Current status: Cancelled'
