"""
Outbound message transports.

dispatch() returns the provider's message reference or raises TransportError.
SMS goes through the provider named by settings.SMS_PROVIDER; WhatsApp goes
straight to the Meta Cloud API.
"""

import uuid
import logging

import requests
from django.conf import settings

from accounts.phone import mask_phone

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a provider could not accept the message."""


def dispatch(phone, body, channel='sms'):
    if channel == 'whatsapp':
        return _send_via_whatsapp(phone, body)

    provider = settings.SMS_PROVIDER
    handler = _SMS_PROVIDERS.get(provider)
    if not handler:
        raise TransportError(f'Unknown SMS provider: {provider}')
    return handler(phone, body)


def _send_via_console(phone, body):
    """Development transport: log the message and hand back a synthetic reference."""
    reference = f'SMS-{uuid.uuid4().hex}'[:20]
    logger.info(f'[console sms] to={mask_phone(phone)} ref={reference} body={body}')
    return reference


def _send_via_twilio(phone, body):
    """Send SMS via Twilio using env-configured credentials."""
    account_sid = settings.TWILIO_ACCOUNT_SID
    auth_token = settings.TWILIO_AUTH_TOKEN
    from_number = settings.TWILIO_PHONE_NUMBER

    if not account_sid or not auth_token or not from_number:
        logger.error('Twilio credentials not configured: sid=%s, token=%s, from=%s',
                     bool(account_sid), bool(auth_token), bool(from_number))
        raise TransportError('Twilio credentials not configured')

    from twilio.base.exceptions import TwilioException
    from twilio.http.http_client import TwilioHttpClient
    from twilio.rest import Client

    try:
        client = Client(
            account_sid, auth_token,
            http_client=TwilioHttpClient(timeout=settings.SMS_TIMEOUT_SECONDS),
        )
        message = client.messages.create(body=body, from_=from_number, to=phone)
    except (TwilioException, requests.RequestException) as e:
        logger.warning(f'Twilio SMS failed to {mask_phone(phone)}: {e}')
        raise TransportError(f'Twilio: {e}') from e

    logger.info(f'Twilio SMS sent: SID={message.sid}, status={message.status}, to={mask_phone(phone)}')
    return message.sid


def _send_via_whatsapp(phone, body):
    """Send a plain text WhatsApp message through the Cloud API."""
    access_token = settings.WHATSAPP_ACCESS_TOKEN
    phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID

    if not access_token or not phone_number_id:
        logger.error('WhatsApp credentials not configured: token=%s, phone_id=%s',
                     bool(access_token), bool(phone_number_id))
        raise TransportError('WhatsApp credentials not configured')

    url = f'https://graph.facebook.com/{settings.WHATSAPP_API_VERSION}/{phone_number_id}/messages'
    headers = {
        'Authorization': f'Bearer {access_token}',
        'Content-Type': 'application/json',
    }
    payload = {
        'messaging_product': 'whatsapp',
        'recipient_type': 'individual',
        'to': phone.lstrip('+'),
        'type': 'text',
        'text': {'body': body},
    }

    try:
        resp = requests.post(url, json=payload, headers=headers, timeout=settings.SMS_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        logger.warning(f'WhatsApp request error to {mask_phone(phone)}: {e}')
        raise TransportError(f'WhatsApp: {e}') from e

    if resp.status_code not in (200, 201):
        logger.warning(f'WhatsApp send failed: {resp.status_code} {resp.text[:300]}')
        raise TransportError(f'WhatsApp API returned {resp.status_code}')

    messages = _safe_json(resp).get('messages') or [{}]
    reference = messages[0].get('id', '')
    logger.info(f'WhatsApp message sent to {mask_phone(phone)}, id={reference}')
    return reference


def _safe_json(resp):
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


_SMS_PROVIDERS = {
    'console': _send_via_console,
    'twilio': _send_via_twilio,
}
