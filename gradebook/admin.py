from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import AssessmentRecord


@admin.register(AssessmentRecord)
class AssessmentRecordAdmin(ModelAdmin):
    list_display = (
        'student', 'subject', 'term', 'as1', 'as2', 'as3', 'at',
        'systematic_average', 'term_average',
    )
    list_filter = ('term', 'subject')
    search_fields = ('student__first_name', 'student__last_name', 'student__admission_number')
    readonly_fields = ('systematic_average', 'term_average', 'recorded_by', 'created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        if not obj.recorded_by_id:
            obj.recorded_by = request.user
        super().save_model(request, obj, form, change)
