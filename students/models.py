from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _


class Student(models.Model):
    """
    Represents a student enrolled in the school.
    """
    class Gender(models.TextChoices):
        MALE = 'M', _('Male')
        FEMALE = 'F', _('Female')

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        TRANSFERRED = 'transferred', _('Transferred')
        CANCELLED = 'cancelled', _('Cancelled')
        GRADUATED = 'graduated', _('Graduated')

    # Personal Information
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    other_names = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=1, choices=Gender.choices)

    # Contact Information
    address = models.TextField(blank=True)
    email = models.EmailField(blank=True)

    # Guardian Information
    guardian_name = models.CharField(max_length=200)
    guardian_phone = models.CharField(max_length=20)
    guardian_email = models.EmailField(blank=True)

    # Admission Details
    admission_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Unique student ID/admission number"
    )
    admission_date = models.DateField()

    current_class = models.ForeignKey(
        'academics.Class',
        on_delete=models.PROTECT,
        related_name='students',
        null=True,
        blank=True
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    # Optional User Account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']
        verbose_name = "Student"
        verbose_name_plural = "Students"
        indexes = [
            models.Index(fields=['status', 'current_class'], name='student_status_class_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    @property
    def full_name(self):
        """Return full name of student."""
        names = [self.first_name]
        if self.other_names:
            names.append(self.other_names)
        names.append(self.last_name)
        return ' '.join(names)

    @property
    def contact_email(self):
        """Address used for outbound e-mail: the guardian first, then the student."""
        if self.guardian_email:
            return self.guardian_email
        if self.email:
            return self.email
        if self.user_id:
            return self.user.email
        return ''

    def get_enrollment_history(self):
        """Return all enrollments ordered by academic year."""
        return self.enrollments.select_related(
            'academic_year', 'class_assigned'
        ).order_by('-academic_year__start_date')


class Enrollment(models.Model):
    """
    A request to enroll a student for an academic year.

    Requests start pending and are decided by the secretariat: approved
    (optionally with a class) or rejected, which is stored as cancelled.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        APPROVED = 'approved', _('Approved')
        CANCELLED = 'cancelled', _('Cancelled')

    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    academic_year = models.ForeignKey(
        'core.AcademicYear',
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    class_assigned = models.ForeignKey(
        'academics.Class',
        on_delete=models.PROTECT,
        related_name='enrollments',
        null=True,
        blank=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    remarks = models.TextField(blank=True, help_text="Notes about this enrollment")

    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_enrollments'
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-academic_year__start_date', 'student__last_name']
        unique_together = ['student', 'academic_year']
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        indexes = [
            models.Index(fields=['academic_year', 'status'], name='enrollment_year_status_idx'),
        ]

    def __str__(self):
        return f"{self.student.full_name} - {self.academic_year} ({self.get_status_display()})"

    def clean(self):
        if self.class_assigned_id and self.academic_year_id:
            if self.class_assigned.academic_year_id != self.academic_year_id:
                raise ValidationError({
                    'class_assigned': 'The class belongs to a different academic year.'
                })

    @property
    def is_pending(self):
        return self.status == self.Status.PENDING
