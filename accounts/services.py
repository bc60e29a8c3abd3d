"""
Directory lookups for external users.
"""

import logging

from accounts.models import ExternalUser
from accounts.phone import normalize_phone, mask_phone

logger = logging.getLogger(__name__)


def get_or_create_user(phone, first_name=None, last_name=None, email=None):
    """
    Return the ExternalUser for this phone, creating it on first sight.
    Blank profile fields on an existing user are filled from the arguments.
    """
    phone = normalize_phone(phone)
    profile = {
        'first_name': first_name or '',
        'last_name': last_name or '',
        'email': email or '',
    }
    user, created = ExternalUser.objects.get_or_create(phone=phone, defaults=profile)
    if created:
        logger.info(f'External user created: {mask_phone(phone)}')
        return user

    changed = [field for field, value in profile.items() if value and not getattr(user, field)]
    if changed:
        for field in changed:
            setattr(user, field, profile[field])
        user.save(update_fields=changed + ['updated_at'])
    return user
