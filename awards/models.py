from django.db import models
from django.utils import timezone


class PrizeAward(models.Model):
    """
    A unit of prize stock assigned to a phone number.
    Status only moves forward: awarded -> redeemed | cancelled | expired.
    """
    STATUS_AWARDED = 'awarded'
    STATUS_REDEEMED = 'redeemed'
    STATUS_EXPIRED = 'expired'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_AWARDED, 'Awarded'),
        (STATUS_REDEEMED, 'Redeemed'),
        (STATUS_EXPIRED, 'Expired'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    METHOD_MANUAL = 'manual'
    METHOD_BULK = 'bulk'
    METHOD_AUTO = 'auto'
    METHOD_CHOICES = [
        (METHOD_MANUAL, 'Manual'),
        (METHOD_BULK, 'Bulk'),
        (METHOD_AUTO, 'Auto'),
    ]

    NOTIFICATION_PENDING = 'pending'
    NOTIFICATION_SENT = 'sent'
    NOTIFICATION_FAILED = 'failed'
    NOTIFICATION_NOT_REQUIRED = 'not_required'
    NOTIFICATION_STATUS_CHOICES = [
        (NOTIFICATION_PENDING, 'Pending'),
        (NOTIFICATION_SENT, 'Sent'),
        (NOTIFICATION_FAILED, 'Failed'),
        (NOTIFICATION_NOT_REQUIRED, 'Not Required'),
    ]

    CHANNEL_CHOICES = [
        ('sms', 'SMS'),
        ('whatsapp', 'WhatsApp'),
    ]

    prize = models.ForeignKey('prizes.Prize', on_delete=models.PROTECT, related_name='awards')
    external_user = models.ForeignKey(
        'accounts.ExternalUser', on_delete=models.SET_NULL, null=True, blank=True, related_name='awards'
    )
    phone = models.CharField(max_length=20, help_text='Winning cell number; owns the award')
    competition = models.ForeignKey(
        'competitions.Competition', on_delete=models.SET_NULL, null=True, blank=True, related_name='awards'
    )
    awarded_at = models.DateTimeField(default=timezone.now)
    awarded_by = models.CharField(max_length=150, blank=True, default='',
                                  help_text='Id of the staff user who made the award')
    method = models.CharField(max_length=10, choices=METHOD_CHOICES, default=METHOD_MANUAL)
    notification_channel = models.CharField(max_length=10, choices=CHANNEL_CHOICES, blank=True, default='sms')
    notification_status = models.CharField(max_length=15, choices=NOTIFICATION_STATUS_CHOICES,
                                           default=NOTIFICATION_PENDING)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_AWARDED, db_index=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    external_reference = models.CharField(max_length=100, blank=True, default='')
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=150, blank=True, default='')
    cancel_reason = models.TextField(blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-awarded_at']
        indexes = [
            models.Index(fields=['phone', 'status'], name='award_phone_status_idx'),
        ]

    def __str__(self):
        return f'{self.prize_id} -> {self.phone} ({self.status})'

    @property
    def is_expired(self):
        return self.expiry_date is not None and timezone.now() > self.expiry_date

    @property
    def is_redeemable(self):
        return self.status == self.STATUS_AWARDED and not self.is_expired
