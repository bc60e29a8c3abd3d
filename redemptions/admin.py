from django.contrib import admin
from redemptions.models import PrizeRedemption


@admin.register(PrizeRedemption)
class PrizeRedemptionAdmin(admin.ModelAdmin):
    list_display = ['redemption_code', 'award', 'channel', 'status', 'redeemed_at']
    list_filter = ['channel', 'status']
    search_fields = ['redemption_code', 'award__phone']
    readonly_fields = ['award', 'redemption_code', 'redeemed_at', 'channel', 'from_ip', 'status', 'notes']

    def has_add_permission(self, request):
        # Redemptions are only created by the redemption flow
        return False

    def has_delete_permission(self, request, obj=None):
        return False
