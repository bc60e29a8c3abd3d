from django.contrib import admin
from notifications.models import SmsMessage


@admin.register(SmsMessage)
class SmsMessageAdmin(admin.ModelAdmin):
    list_display = ['phone', 'message_type', 'channel', 'status', 'retry_count', 'created_at', 'sent_at']
    list_filter = ['message_type', 'channel', 'status']
    search_fields = ['phone', 'provider_reference', 'related_entity_id']
    readonly_fields = ['created_at', 'sent_at', 'delivered_at', 'provider_reference', 'failure_reason']
