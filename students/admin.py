from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Enrollment, Student


@admin.register(Student)
class StudentAdmin(ModelAdmin):
    list_display = ('admission_number', 'first_name', 'last_name', 'gender', 'current_class', 'status')
    list_filter = ('status', 'gender', 'current_class')
    search_fields = ('admission_number', 'first_name', 'last_name', 'guardian_name')


@admin.register(Enrollment)
class EnrollmentAdmin(ModelAdmin):
    list_display = ('student', 'academic_year', 'class_assigned', 'status', 'decided_by', 'decided_at')
    list_filter = ('academic_year', 'status')
    search_fields = ('student__first_name', 'student__last_name', 'student__admission_number')
    readonly_fields = ('decided_by', 'decided_at')
