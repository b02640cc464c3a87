"""
Django Admin configuration for LifeSweeper models.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import StoredRecord


@admin.register(StoredRecord)
class StoredRecordAdmin(admin.ModelAdmin):
    """Admin configuration for the StoredRecord model."""
    
    list_display = ('key', 'value', 'updated_at')
    search_fields = ('key',)
    readonly_fields = ('updated_at',)
    ordering = ('key',)
    
    fieldsets = (
        (None, {
            'fields': ('key',)
        }),
        (_('Payload'), {
            'fields': ('value',)
        }),
        (_('Timestamps'), {
            'fields': ('updated_at',),
            'classes': ('collapse',)
        }),
    )
