from django.contrib import admin
from prizes.models import PrizeType, PrizePool, Prize


@admin.register(PrizeType)
class PrizeTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'is_active']
    list_filter = ['is_active']


@admin.register(PrizePool)
class PrizePoolAdmin(admin.ModelAdmin):
    list_display = ['name', 'competition', 'is_active', 'created_at']
    list_filter = ['is_active', 'competition']
    search_fields = ['name']
    readonly_fields = ['created_at']


@admin.register(Prize)
class PrizeAdmin(admin.ModelAdmin):
    list_display = ['name', 'pool', 'prize_type', 'monetary_value', 'remaining_quantity',
                    'total_quantity', 'expiry_date', 'is_active']
    list_filter = ['is_active', 'prize_type', 'pool']
    search_fields = ['name']
    readonly_fields = ['remaining_quantity', 'created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        # Stock is set once at creation; afterwards only the allocator moves it
        if obj is None:
            return ['created_at', 'updated_at']
        return self.readonly_fields
