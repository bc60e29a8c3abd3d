import pytest

from accounts.models import ExternalUser
from accounts.phone import normalize_phone, mask_phone, same_phone
from accounts.services import get_or_create_user


@pytest.mark.parametrize('raw, expected', [
    ('0821234567', '+27821234567'),
    ('821234567', '+27821234567'),
    ('82 123 4567', '+27821234567'),
    ('27821234567', '+27821234567'),
    ('+27 82 123 4567', '+27821234567'),
    ('0027821234567', '+27821234567'),
    ('+233241234567', '+233241234567'),
    ('', ''),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_mask_phone_keeps_first_three_and_last_four():
    assert mask_phone('+27821234321') == '+27***4321'


def test_mask_phone_leaves_short_values_alone():
    assert mask_phone('1234') == '1234'
    assert mask_phone('') == ''
    assert mask_phone(None) is None


def test_same_phone_ignores_formatting():
    assert same_phone('0821234567', '+27 82 123 4567')
    assert not same_phone('0821234567', '0821234568')


@pytest.mark.django_db
def test_get_or_create_user_reuses_existing_record():
    first = get_or_create_user('0821234567', first_name='Thandi')
    second = get_or_create_user('+27821234567', last_name='Nkosi', first_name='Other')

    assert first.pk == second.pk
    assert ExternalUser.objects.count() == 1
    second.refresh_from_db()
    assert second.first_name == 'Thandi'
    assert second.last_name == 'Nkosi'


def test_national_number_follows_configured_country(settings):
    settings.DEFAULT_COUNTRY_CODE = '233'
    assert normalize_phone('241234567') == '+233241234567'
    assert normalize_phone('0241234567') == '+233241234567'
