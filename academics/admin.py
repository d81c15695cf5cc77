from django.contrib import admin

from unfold.admin import ModelAdmin, TabularInline

from .models import Class, ClassSubject, Subject


class ClassSubjectInline(TabularInline):
    model = ClassSubject
    extra = 0


@admin.register(Class)
class ClassAdmin(ModelAdmin):
    list_display = ('name', 'academic_year', 'grade_level', 'class_teacher', 'capacity', 'is_active')
    list_filter = ('academic_year', 'grade_level', 'is_active')
    inlines = [ClassSubjectInline]


@admin.register(Subject)
class SubjectAdmin(ModelAdmin):
    list_display = ('name', 'code', 'grade_level', 'is_active')
    search_fields = ('name', 'code')
