import secrets
import string

from django.db import models
from django.utils import timezone


def generate_redemption_code():
    """Redemption reference like RDM-7KQ2X9PA."""
    chars = string.ascii_uppercase + string.digits
    return 'RDM-' + ''.join(secrets.choice(chars) for _ in range(8))


class PrizeRedemption(models.Model):
    """Proof that an award was claimed. Written once per award, never edited."""
    CHANNEL_CHOICES = [
        ('web_portal', 'Web Portal'),
        ('kiosk', 'Kiosk'),
        ('api', 'API'),
        ('pos', 'POS'),
    ]
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_COMPLETED, 'Completed'),
    ]

    award = models.OneToOneField('awards.PrizeAward', on_delete=models.PROTECT, related_name='redemption')
    redemption_code = models.CharField(max_length=20, unique=True)
    redeemed_at = models.DateTimeField(default=timezone.now)
    channel = models.CharField(max_length=15, choices=CHANNEL_CHOICES, default='web_portal')
    from_ip = models.GenericIPAddressField(null=True, blank=True)
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=STATUS_COMPLETED)
    notes = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['-redeemed_at']

    def __str__(self):
        return f'{self.redemption_code} (award {self.award_id})'

    def save(self, *args, **kwargs):
        if not self.redemption_code:
            for _ in range(10):
                code = generate_redemption_code()
                if not PrizeRedemption.objects.filter(redemption_code=code).exists():
                    self.redemption_code = code
                    break
        super().save(*args, **kwargs)
