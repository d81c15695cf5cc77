from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(ModelAdmin):
    list_display = ('name', 'category', 'quantity', 'unit_value', 'condition', 'location', 'custodian')
    list_filter = ('category', 'condition')
    search_fields = ('name', 'description', 'location')
    autocomplete_fields = ('custodian',)
    readonly_fields = ('created_at', 'updated_at')
