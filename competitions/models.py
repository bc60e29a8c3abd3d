from django.db import models
from django.utils import timezone


class Competition(models.Model):
    """Promotional competition that prize pools and awards may belong to."""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-start_date']

    def __str__(self):
        return self.name

    @property
    def is_currently_active(self):
        now = timezone.now()
        return self.is_active and self.start_date <= now <= self.end_date
