import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone


def _default_max_attempts():
    return settings.OTP_MAX_ATTEMPTS


class OneTimePassword(models.Model):
    """
    Short-lived numeric code scoped to (phone, purpose).
    Issuing a new code marks every earlier unused code for the same pair as used.
    """
    PURPOSE_REDEMPTION = 'redemption'
    PURPOSE_REGISTRATION = 'registration'
    PURPOSE_LOGIN = 'login'
    PURPOSE_VERIFICATION = 'verification'
    PURPOSE_CHOICES = [
        (PURPOSE_REDEMPTION, 'Redemption'),
        (PURPOSE_REGISTRATION, 'Registration'),
        (PURPOSE_LOGIN, 'Login'),
        (PURPOSE_VERIFICATION, 'Verification'),
    ]

    phone = models.CharField(max_length=20, db_index=True)
    code = models.CharField(max_length=10)
    purpose = models.CharField(max_length=20, choices=PURPOSE_CHOICES, default=PURPOSE_REDEMPTION)
    related_entity_id = models.CharField(max_length=64, blank=True, default='',
                                         help_text='Optional id of the record this code authorises')
    expires_at = models.DateTimeField()
    is_used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)
    attempt_count = models.PositiveSmallIntegerField(default=0)
    max_attempts = models.PositiveSmallIntegerField(default=_default_max_attempts)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'One-Time Password'
        indexes = [
            models.Index(fields=['phone', 'purpose', 'is_used'], name='otp_phone_purpose_used_idx'),
        ]

    def __str__(self):
        return f'OTP for {self.phone} ({self.purpose})'

    @property
    def is_expired(self):
        return timezone.now() > self.expires_at

    @property
    def attempts_exhausted(self):
        return self.attempt_count >= self.max_attempts

    @property
    def is_valid(self):
        return not self.is_used and not self.is_expired and not self.attempts_exhausted

    @classmethod
    def generate_code(cls, length=None):
        """Zero-padded numeric code from the OS CSPRNG."""
        length = length or settings.OTP_CODE_LENGTH
        return f'{secrets.randbelow(10 ** length):0{length}d}'
