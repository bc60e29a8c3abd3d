from django.contrib import admin
from accounts.models import ExternalUser


@admin.register(ExternalUser)
class ExternalUserAdmin(admin.ModelAdmin):
    list_display = ['phone', 'first_name', 'last_name', 'email', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['phone', 'first_name', 'last_name', 'email']
    readonly_fields = ['created_at', 'updated_at']
