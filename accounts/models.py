from django.db import models


class ExternalUser(models.Model):
    """
    Competition entrant or prize winner, identified by cell number.
    Created on first award; not a login identity.
    """
    phone = models.CharField(max_length=20, unique=True,
                             help_text='Normalized cell number, e.g. +27821234567')
    first_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'External User'
        verbose_name_plural = 'External Users'

    def __str__(self):
        return self.get_full_name() or self.phone

    def get_full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()
