from django.contrib import admin
from otp.models import OneTimePassword


@admin.register(OneTimePassword)
class OneTimePasswordAdmin(admin.ModelAdmin):
    list_display = ['phone', 'purpose', 'is_used', 'attempt_count', 'max_attempts', 'expires_at', 'created_at']
    list_filter = ['purpose', 'is_used']
    search_fields = ['phone']
    exclude = ['code']
    readonly_fields = ['created_at', 'used_at', 'attempt_count']
