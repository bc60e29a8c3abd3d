from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class PrizeType(models.Model):
    """Kind of digital prize and how it is fulfilled."""
    CODE_CHOICES = [
        ('voucher_code', 'Voucher Code'),
        ('qr_code', 'QR Code'),
        ('url_link', 'URL Link'),
        ('discount_code', 'Discount Code'),
        ('wallet_credit', 'Wallet Credit'),
        ('physical', 'Physical'),
    ]

    code = models.CharField(max_length=20, choices=CODE_CHOICES, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class PrizePool(models.Model):
    """Group of prizes awarded together, optionally tied to a competition."""
    competition = models.ForeignKey(
        'competitions.Competition', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='prize_pools'
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Prize(models.Model):
    """
    A stock line in a pool. remaining_quantity only ever changes through
    prizes.allocator.decrement, which is a conditional UPDATE.
    """
    pool = models.ForeignKey(PrizePool, on_delete=models.CASCADE, related_name='prizes')
    prize_type = models.ForeignKey(PrizeType, on_delete=models.PROTECT, related_name='prizes')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    monetary_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True,
                                         help_text='Face value shown to the winner; informational only')
    total_quantity = models.PositiveIntegerField()
    remaining_quantity = models.PositiveIntegerField()
    expiry_date = models.DateTimeField(null=True, blank=True,
                                       help_text='No new awards after this moment')
    image_url = models.URLField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['pool', 'is_active'], name='prize_pool_active_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(remaining_quantity__lte=F('total_quantity')),
                name='prize_remaining_lte_total',
            ),
        ]

    def __str__(self):
        return f'{self.name} ({self.remaining_quantity}/{self.total_quantity})'

    @property
    def is_expired(self):
        return self.expiry_date is not None and timezone.now() > self.expiry_date

    @property
    def is_allocatable(self):
        return self.is_active and self.remaining_quantity > 0 and not self.is_expired
