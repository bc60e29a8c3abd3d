"""
Phone number helpers shared by the OTP, award and redemption flows.
"""

from django.conf import settings


def normalize_phone(phone):
    """
    Normalize phone to canonical format: +<country code><number>
    Accepts: 0821234567, 821234567, 27821234567, +27821234567, +27 82 123 4567, 0027821234567
    """
    cleaned = (phone or '').strip()
    for ch in (' ', '-', '(', ')'):
        cleaned = cleaned.replace(ch, '')
    if not cleaned:
        return ''
    if cleaned.startswith('+'):
        return cleaned
    if cleaned.startswith('00'):
        return '+' + cleaned[2:]
    national_length = settings.NATIONAL_NUMBER_LENGTH
    if cleaned.startswith('0') and len(cleaned) == national_length + 1:
        return f'+{settings.DEFAULT_COUNTRY_CODE}{cleaned[1:]}'
    if len(cleaned) == national_length and cleaned.isdigit():
        return f'+{settings.DEFAULT_COUNTRY_CODE}{cleaned}'
    return '+' + cleaned


def mask_phone(phone):
    """+27821234321 -> +27***4321. Short values are returned unchanged."""
    if not phone or len(phone) <= 4:
        return phone
    return f'{phone[:3]}***{phone[-4:]}'


def same_phone(a, b):
    return normalize_phone(a).lower() == normalize_phone(b).lower()
