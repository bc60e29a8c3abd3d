from django.contrib import admin
from awards.models import PrizeAward


@admin.register(PrizeAward)
class PrizeAwardAdmin(admin.ModelAdmin):
    list_display = ['id', 'prize', 'phone', 'status', 'method', 'notification_status',
                    'awarded_at', 'expiry_date']
    list_filter = ['status', 'method', 'notification_status', 'notification_channel']
    search_fields = ['phone', 'external_reference', 'prize__name']
    raw_id_fields = ['prize', 'external_user', 'competition']
    readonly_fields = ['phone', 'status', 'awarded_at', 'awarded_by',
                      'cancelled_at', 'cancelled_by', 'cancel_reason', 'updated_at']
