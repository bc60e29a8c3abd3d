from django.db import models


class SmsMessage(models.Model):
    """
    One row per outbound message. Status moves pending -> sent | failed;
    failed rows may be re-dispatched, which bumps retry_count.
    """
    TYPE_OTP = 'otp'
    TYPE_PRIZE_NOTIFICATION = 'prize_notification'
    TYPE_REDEMPTION_CONFIRMATION = 'redemption_confirmation'
    TYPE_REMINDER = 'reminder'
    TYPE_CHOICES = [
        (TYPE_OTP, 'OTP'),
        (TYPE_PRIZE_NOTIFICATION, 'Prize Notification'),
        (TYPE_REDEMPTION_CONFIRMATION, 'Redemption Confirmation'),
        (TYPE_REMINDER, 'Reminder'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_SENT = 'sent'
    STATUS_DELIVERED = 'delivered'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SENT, 'Sent'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_FAILED, 'Failed'),
    ]

    CHANNEL_SMS = 'sms'
    CHANNEL_WHATSAPP = 'whatsapp'
    CHANNEL_CHOICES = [
        (CHANNEL_SMS, 'SMS'),
        (CHANNEL_WHATSAPP, 'WhatsApp'),
    ]

    phone = models.CharField(max_length=20, db_index=True)
    body = models.TextField()
    message_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    channel = models.CharField(max_length=10, choices=CHANNEL_CHOICES, default=CHANNEL_SMS)
    related_entity_type = models.CharField(max_length=50, blank=True, default='',
                                           help_text='e.g. prize_award, prize_redemption, otp')
    related_entity_id = models.CharField(max_length=64, blank=True, default='')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    provider_reference = models.CharField(max_length=100, blank=True, default='')
    failure_reason = models.TextField(blank=True, default='')
    retry_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'SMS Message'
        verbose_name_plural = 'SMS Messages'
        indexes = [
            models.Index(fields=['status', 'message_type'], name='sms_status_type_idx'),
            models.Index(fields=['related_entity_type', 'related_entity_id'], name='sms_related_entity_idx'),
        ]

    def __str__(self):
        return f'{self.get_message_type_display()} to {self.phone} ({self.status})'
