from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import AcademicYear, Term


@admin.register(AcademicYear)
class AcademicYearAdmin(ModelAdmin):
    list_display = ('name', 'start_date', 'end_date', 'is_current')
    list_filter = ('is_current',)


@admin.register(Term)
class TermAdmin(ModelAdmin):
    list_display = ('name', 'academic_year', 'term_number', 'is_current', 'grades_locked')
    list_filter = ('academic_year', 'is_current', 'grades_locked')
    readonly_fields = ('grades_locked_at', 'grades_locked_by')
