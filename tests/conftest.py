from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from awards.models import PrizeAward
from otp.models import OneTimePassword
from prizes.models import PrizeType, PrizePool, Prize


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def prize_type(db):
    return PrizeType.objects.create(code='voucher_code', name='Voucher Code')


@pytest.fixture
def pool(db):
    return PrizePool.objects.create(name='Winter Promo')


@pytest.fixture
def make_prize(pool, prize_type):
    def _make(quantity=10, remaining=None, **kwargs):
        fields = {
            'pool': pool,
            'prize_type': prize_type,
            'name': 'R50 Grocery Voucher',
            'monetary_value': Decimal('50.00'),
            'total_quantity': quantity,
            'remaining_quantity': quantity if remaining is None else remaining,
        }
        fields.update(kwargs)
        return Prize.objects.create(**fields)
    return _make


@pytest.fixture
def prize(make_prize):
    return make_prize(quantity=10)


@pytest.fixture
def make_award(prize):
    """Award row written directly, bypassing stock and notification."""
    def _make(phone='+27821234567', **kwargs):
        fields = {
            'prize': prize,
            'phone': phone,
            'notification_status': PrizeAward.NOTIFICATION_NOT_REQUIRED,
        }
        fields.update(kwargs)
        return PrizeAward.objects.create(**fields)
    return _make


@pytest.fixture
def expired_at():
    return timezone.now() - timedelta(days=1)


@pytest.fixture
def latest_code():
    def _code(phone, purpose=OneTimePassword.PURPOSE_REDEMPTION):
        otp = OneTimePassword.objects.filter(phone=phone, purpose=purpose).order_by('-id').first()
        return otp.code
    return _code


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(
        username='staff', password='staff-pass-123', is_staff=True,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
