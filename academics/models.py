from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Class(models.Model):
    """
    Represents a class/classroom grouping of students for one academic year.

    Name format: grade level and section, e.g. 10-A, 12-B.
    """
    academic_year = models.ForeignKey(
        'core.AcademicYear',
        on_delete=models.CASCADE,
        related_name='classes'
    )
    grade_level = models.PositiveSmallIntegerField(
        help_text="7, 8, ... 12"
    )
    section = models.CharField(
        max_length=5,
        help_text="A, B, C, etc."
    )

    # Auto-generated class name
    name = models.CharField(
        max_length=20,
        editable=False,
        help_text="Auto-generated: 10-A, 12-B"
    )

    capacity = models.PositiveIntegerField(
        default=35,
        help_text="Maximum number of students"
    )

    class_teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='directed_classes',
        help_text="The class director responsible for this class."
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['academic_year', 'grade_level', 'section']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        unique_together = ['academic_year', 'grade_level', 'section']
        indexes = [
            models.Index(fields=['grade_level', 'is_active'], name='class_level_active_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.section = self.section.strip().upper()
        self.name = self.generate_name()
        super().save(*args, **kwargs)

    def clean(self):
        from gradebook import config

        if self.grade_level is not None and self.grade_level not in config.GRADE_LEVELS:
            raise ValidationError({'grade_level': f'Grade level {self.grade_level} is not offered.'})

    def generate_name(self):
        return f"{self.grade_level}-{self.section}"

    @property
    def level_display(self):
        """Human-readable level name."""
        return f"{self.grade_level}ª Classe"

    @property
    def is_exam_bearing(self):
        """True when this grade level ends in a national exam."""
        from gradebook import config
        return self.grade_level in config.EXAM_GRADE_LEVELS

    @property
    def student_count(self):
        return self.students.filter(status='active').count()

    @property
    def is_full(self):
        return self.student_count >= self.capacity


class Subject(models.Model):
    """
    Represents a subject taught at the school.
    """
    name = models.CharField(
        max_length=100,
        help_text="e.g., Matemática, Língua Portuguesa"
    )
    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="e.g., MAT, LP"
    )
    grade_level = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Leave blank for subjects taught at every level"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"

    def __str__(self):
        return self.name


class ClassSubject(models.Model):
    """
    Links a Class to a Subject and assigns a specific teacher.
    Only the assigned teacher (or an admin) may enter scores for it.
    """
    class_assigned = models.ForeignKey(
        Class,
        on_delete=models.CASCADE,
        related_name='subjects'
    )
    subject = models.ForeignKey(
        Subject,
        on_delete=models.CASCADE,
        related_name='class_allocations'
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subject_assignments'
    )

    class Meta:
        unique_together = ['class_assigned', 'subject']
        verbose_name = "Subject Allocation"
        verbose_name_plural = "Subject Allocations"

    def __str__(self):
        return f"{self.subject.name} - {self.class_assigned.name}"
