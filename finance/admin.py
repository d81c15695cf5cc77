from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ModelAdmin):
    list_display = ('reference', 'date', 'kind', 'category', 'amount', 'student', 'confirmation_status', 'recorded_by')
    list_filter = ('kind', 'category', 'confirmation_status', 'date')
    search_fields = ('reference', 'description', 'student__first_name', 'student__last_name')
    readonly_fields = ('reference', 'recorded_by', 'confirmed_by', 'confirmed_at', 'created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        if not obj.recorded_by_id:
            obj.recorded_by = request.user
        super().save_model(request, obj, form, change)
