from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .calculations import (
    InvalidScore,
    compute_systematic_average,
    compute_term_average,
    to_score,
)


def validate_score(value):
    """Model/form validator for a raw score on the configured scale."""
    try:
        to_score(value)
    except InvalidScore as e:
        raise ValidationError(str(e))


class AssessmentRecord(models.Model):
    """
    One student's scores for one subject in one term.

    AS1-AS3 are the systematic assessments and AT the term exam. The
    systematic average (MAS) and the term average (MT) are derived from
    them on every save and are never edited directly.
    """
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='assessment_records'
    )
    subject = models.ForeignKey(
        'academics.Subject',
        on_delete=models.CASCADE,
        related_name='assessment_records'
    )
    term = models.ForeignKey(
        'core.Term',
        on_delete=models.CASCADE,
        related_name='assessment_records'
    )

    # Raw scores (0-20)
    as1 = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        validators=[validate_score], verbose_name='AS1'
    )
    as2 = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        validators=[validate_score], verbose_name='AS2'
    )
    as3 = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        validators=[validate_score], verbose_name='AS3'
    )
    at = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        validators=[validate_score], verbose_name='AT',
        help_text='Term exam score'
    )

    # Derived (computed on save)
    systematic_average = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        editable=False, verbose_name='MAS'
    )
    term_average = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        editable=False, verbose_name='MT'
    )

    remarks = models.CharField(max_length=500, blank=True)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assessment_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['term', 'subject', 'student']
        verbose_name = 'Assessment Record'
        verbose_name_plural = 'Assessment Records'
        unique_together = ['student', 'subject', 'term']
        indexes = [
            models.Index(fields=['subject', 'term'], name='record_subject_term_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.subject} ({self.term})"

    @property
    def academic_year(self):
        return self.term.academic_year

    @property
    def has_scores(self):
        return any(v is not None for v in (self.as1, self.as2, self.as3, self.at))

    def derive_averages(self):
        """Recompute MAS and MT from the raw scores."""
        self.systematic_average = compute_systematic_average(self.as1, self.as2, self.as3)
        self.term_average = compute_term_average(self.systematic_average, self.at)

    def clean(self):
        try:
            self.derive_averages()
        except InvalidScore as e:
            raise ValidationError(str(e))

    def save(self, *args, **kwargs):
        self.derive_averages()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'systematic_average', 'term_average'}
        super().save(*args, **kwargs)
