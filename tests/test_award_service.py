import threading
from datetime import timedelta
from unittest import mock

import pytest
from django.db import connections
from django.utils import timezone

from accounts.models import ExternalUser
from awards import award_service
from awards.models import PrizeAward
from awards.tasks import task_expire_stale_awards
from competitions.models import Competition
from notifications.models import SmsMessage
from notifications.transport import TransportError

pytestmark = pytest.mark.django_db

PHONE = '+27821234567'


def test_award_prize_reserves_stock_and_notifies(prize, admin_user):
    award = award_service.award_prize(prize.pk, '0821234567', actor_id=admin_user.pk, external_reference='EXT-1')

    assert award is not None
    assert award.phone == PHONE
    assert award.status == PrizeAward.STATUS_AWARDED
    assert award.method == PrizeAward.METHOD_MANUAL
    assert award.awarded_by == str(admin_user.pk)
    assert award.external_reference == 'EXT-1'
    assert award.notification_status == PrizeAward.NOTIFICATION_SENT
    assert award.external_user == ExternalUser.objects.get(phone=PHONE)

    prize.refresh_from_db()
    assert prize.remaining_quantity == 9
    assert SmsMessage.objects.filter(message_type=SmsMessage.TYPE_PRIZE_NOTIFICATION).count() == 1


def test_award_unknown_prize_returns_none():
    assert award_service.award_prize(424242, PHONE) is None
    assert PrizeAward.objects.count() == 0


@pytest.mark.parametrize('overrides', [
    {'remaining': 0},
    {'is_active': False},
    {'expiry_date': timezone.now() - timedelta(days=1)},
])
def test_award_unallocatable_prize_returns_none(make_prize, overrides):
    prize = make_prize(quantity=5, **overrides)

    assert award_service.award_prize(prize.pk, PHONE) is None
    assert PrizeAward.objects.count() == 0


def test_expiry_days_overrides_prize_expiry(make_prize):
    prize_expiry = timezone.now() + timedelta(days=90)
    prize = make_prize(quantity=5, expiry_date=prize_expiry)

    with_override = award_service.award_prize(prize.pk, PHONE, expiry_days=7, send_notification=False)
    without = award_service.award_prize(prize.pk, PHONE, send_notification=False)

    delta = with_override.expiry_date - timezone.now()
    assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)
    assert without.expiry_date == prize_expiry


def test_award_without_notification(prize):
    award = award_service.award_prize(prize.pk, PHONE, send_notification=False)

    assert award.notification_status == PrizeAward.NOTIFICATION_NOT_REQUIRED
    assert SmsMessage.objects.count() == 0


def test_notification_failure_keeps_award(prize):
    with mock.patch('notifications.transport.dispatch', side_effect=TransportError('down')):
        award = award_service.award_prize(prize.pk, PHONE)

    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_AWARDED
    assert award.notification_status == PrizeAward.NOTIFICATION_FAILED
    prize.refresh_from_db()
    assert prize.remaining_quantity == 9


def test_unknown_competition_is_rejected_before_any_write(prize):
    with pytest.raises(ValueError):
        award_service.award_prize(prize.pk, PHONE, competition_id=999)

    prize.refresh_from_db()
    assert prize.remaining_quantity == 10
    assert PrizeAward.objects.count() == 0
    assert ExternalUser.objects.count() == 0


def test_award_links_competition(prize):
    competition = Competition.objects.create(
        name='Winter', start_date=timezone.now() - timedelta(days=1), end_date=timezone.now() + timedelta(days=30),
    )
    award = award_service.award_prize(prize.pk, PHONE, competition_id=competition.pk, send_notification=False)
    assert award.competition == competition
    assert competition.is_currently_active


def test_bulk_award_reports_partial_failure(make_prize, pool):
    make_prize(quantity=2)

    result = award_service.bulk_award(pool.pk, ['111', '222', '333'])

    assert result['total_requested'] == 3
    assert result['success_count'] == 2
    assert result['fail_count'] == 1
    assert [r['success'] for r in result['results']] == [True, True, False]
    assert result['results'][2]['error'] == 'No available prizes in the pool.'
    assert result['results'][2]['award_id'] is None
    assert PrizeAward.objects.filter(method=PrizeAward.METHOD_BULK).count() == 2


def test_bulk_award_moves_to_next_prize_when_first_runs_out(make_prize, pool):
    first = make_prize(quantity=1, name='First')
    second = make_prize(quantity=2, name='Second')

    result = award_service.bulk_award(pool.pk, ['111', '222', '333'], send_notification=False)

    assert result['success_count'] == 3
    prizes = [PrizeAward.objects.get(pk=r['award_id']).prize for r in result['results']]
    assert prizes == [first, second, second]


def test_bulk_award_reports_committed_award_when_notification_crashes(make_prize, pool):
    prize = make_prize(quantity=1)

    with mock.patch('notifications.transport.dispatch', side_effect=RuntimeError('boom')):
        result = award_service.bulk_award(pool.pk, ['0821111111'])

    assert result['success_count'] == 1
    assert result['fail_count'] == 0
    award = PrizeAward.objects.get()
    assert result['results'][0]['award_id'] == award.pk
    assert award.notification_status == PrizeAward.NOTIFICATION_FAILED
    prize.refresh_from_db()
    assert prize.remaining_quantity == 0


def test_award_stands_when_notification_cannot_be_recorded(prize):
    with mock.patch('awards.award_service.send_prize_notification', side_effect=RuntimeError('db hiccup')):
        award = award_service.award_prize(prize.pk, PHONE)

    assert award is not None
    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_AWARDED
    assert award.notification_status == PrizeAward.NOTIFICATION_FAILED


def test_bulk_award_isolates_bad_items(make_prize, pool):
    make_prize(quantity=5)

    result = award_service.bulk_award(pool.pk, ['111', '', '333'], send_notification=False)

    assert result['success_count'] == 2
    assert result['results'][1] == {'phone': '', 'success': False, 'award_id': None, 'error': 'phone is required'}


def test_bulk_award_batch_limit(pool, settings):
    settings.BULK_AWARD_MAX_PHONES = 2
    with pytest.raises(ValueError):
        award_service.bulk_award(pool.pk, ['111', '222', '333'])
    assert PrizeAward.objects.count() == 0


def test_cancel_twice(prize, admin_user):
    award = award_service.award_prize(prize.pk, PHONE, send_notification=False)

    assert award_service.cancel_award(award.pk, 'duplicate entry', actor_id=admin_user.pk) is True
    assert award_service.cancel_award(award.pk, 'again', actor_id=admin_user.pk) is False

    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_CANCELLED
    assert award.cancel_reason == 'duplicate entry'
    assert award.cancelled_by == str(admin_user.pk)
    assert award.cancelled_at is not None


def test_cancel_terminal_or_missing_award(make_award):
    redeemed = make_award(status=PrizeAward.STATUS_REDEEMED)

    assert award_service.cancel_award(redeemed.pk, 'nope') is False
    assert award_service.cancel_award(999999, 'nope') is False
    redeemed.refresh_from_db()
    assert redeemed.status == PrizeAward.STATUS_REDEEMED


def test_resend_notification_updates_status_and_channel(prize):
    with mock.patch('notifications.transport.dispatch', side_effect=TransportError('down')):
        award = award_service.award_prize(prize.pk, PHONE)
    assert award.notification_status == PrizeAward.NOTIFICATION_FAILED

    assert award_service.resend_notification(award.pk) is True
    award.refresh_from_db()
    assert award.notification_status == PrizeAward.NOTIFICATION_SENT
    assert award.status == PrizeAward.STATUS_AWARDED

    # WhatsApp is not configured in tests, so the resend is recorded as failed
    assert award_service.resend_notification(award.pk, channel='whatsapp') is True
    award.refresh_from_db()
    assert award.notification_channel == 'whatsapp'
    assert award.notification_status == PrizeAward.NOTIFICATION_FAILED


def test_resend_notification_missing_award():
    assert award_service.resend_notification(999999) is False


def test_resend_does_not_touch_redeemed_status(make_award):
    award = make_award(status=PrizeAward.STATUS_REDEEMED)

    assert award_service.resend_notification(award.pk) is True
    award.refresh_from_db()
    assert award.status == PrizeAward.STATUS_REDEEMED


def test_expire_stale_awards(make_award, expired_at):
    stale = make_award(expiry_date=expired_at)
    fresh = make_award(expiry_date=timezone.now() + timedelta(days=1))
    open_ended = make_award()
    redeemed = make_award(expiry_date=expired_at, status=PrizeAward.STATUS_REDEEMED)

    assert task_expire_stale_awards.apply().get() == 1

    statuses = {a.pk: a.status for a in PrizeAward.objects.all()}
    assert statuses[stale.pk] == PrizeAward.STATUS_EXPIRED
    assert statuses[fresh.pk] == PrizeAward.STATUS_AWARDED
    assert statuses[open_ended.pk] == PrizeAward.STATUS_AWARDED
    assert statuses[redeemed.pk] == PrizeAward.STATUS_REDEEMED


def test_get_awards_for_phone(make_award):
    mine = make_award(phone=PHONE)
    make_award(phone='+27829999999')

    assert list(award_service.get_awards_for_phone('0821234567')) == [mine]
    assert award_service.get_award(mine.pk) == mine
    assert award_service.get_award(999999) is None


@pytest.mark.django_db(transaction=True)
def test_concurrent_awards_for_last_unit(make_prize):
    prize = make_prize(quantity=1)
    results = {}
    barrier = threading.Barrier(2)

    def worker(phone):
        try:
            barrier.wait()
            results[phone] = award_service.award_prize(prize.pk, phone)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker, args=(p,)) for p in ('111', '222')]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [award for award in results.values() if award is not None]
    assert len(winners) == 1
    assert PrizeAward.objects.count() == 1
    prize.refresh_from_db()
    assert prize.remaining_quantity == 0
