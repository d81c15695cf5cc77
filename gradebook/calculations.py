"""
Grade aggregation and academic status rules.

Scores use the 0-20 scale. A term's systematic assessments (AS1-AS3) are
averaged into the systematic average (MAS); the MAS and the term exam (AT)
are weighted into the term average (MT); the mean of the term averages is
the final average (MA) that decides the student's status for the year.

Every function here is pure: no database access, no side effects. Missing
scores are ``None`` and are never treated as zero. Results are ``Decimal``
rounded half-up to two places.

Weights, thresholds and the exam-bearing grade levels are read from
:mod:`gradebook.config`, so installations can override them in settings.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import models
from django.utils.translation import gettext_lazy as _

from . import config

TWO_PLACES = Decimal('0.01')


class GradeCalculationError(ValueError):
    """Base class for errors raised by the grade calculations."""


class InvalidScore(GradeCalculationError):
    """A score or average is not a number within the configured scale."""


class UnknownGradeLevel(GradeCalculationError):
    """The grade level is not one the school recognises."""


class AcademicStatus(models.TextChoices):
    APPROVED = 'approved', _('Approved')
    EXAM_REQUIRED = 'exam_required', _('Exam Required')
    FAILED = 'failed', _('Failed')
    PROGRESSES = 'progresses', _('Progresses')
    RETAINED = 'retained', _('Retained')


def quantize(value):
    """Round a Decimal half-up to two decimal places."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_score(value, label='score'):
    """
    Convert ``value`` to a Decimal on the configured scale.

    ``None`` passes through unchanged. Floats go through ``str`` so that
    10.33 stays 10.33 instead of its binary approximation.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidScore(f"{label} must be a number, got {value!r}")
    try:
        score = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidScore(f"{label} must be a number, got {value!r}") from None
    if not score.is_finite():
        raise InvalidScore(f"{label} must be a finite number, got {value!r}")
    if score < config.MIN_SCORE or score > config.MAX_SCORE:
        raise InvalidScore(
            f"{label} {score} is outside {config.MIN_SCORE}-{config.MAX_SCORE}"
        )
    return score


def compute_systematic_average(as1=None, as2=None, as3=None):
    """
    Mean of the systematic assessment scores that are present.

    Returns ``None`` when no score is present.

    >>> compute_systematic_average(10, None, 20)
    Decimal('15.00')
    """
    scores = [
        to_score(value, label=label)
        for label, value in (('AS1', as1), ('AS2', as2), ('AS3', as3))
        if value is not None
    ]
    if not scores:
        return None
    return quantize(sum(scores) / len(scores))


def compute_term_average(systematic_average=None, exam_score=None):
    """
    Weighted term average: MAS * SYSTEMATIC_WEIGHT + AT * EXAM_WEIGHT.

    When only one component is present it is used on its own, rounded to
    two places like every other result; with neither the result is ``None``.
    """
    systematic_average = to_score(systematic_average, label='MAS')
    exam_score = to_score(exam_score, label='AT')

    if systematic_average is None and exam_score is None:
        return None
    if exam_score is None:
        return quantize(systematic_average)
    if systematic_average is None:
        return quantize(exam_score)

    return quantize(
        systematic_average * Decimal(str(config.SYSTEMATIC_WEIGHT))
        + exam_score * Decimal(str(config.EXAM_WEIGHT))
    )


def compute_final_average(term_averages):
    """Mean of the present term averages, or ``None`` if there are none."""
    averages = [
        to_score(value, label='MT')
        for value in term_averages
        if value is not None
    ]
    if not averages:
        return None
    return quantize(sum(averages) / len(averages))


def check_grade_level(grade_level):
    """Raise UnknownGradeLevel unless ``grade_level`` is one the school recognises."""
    if isinstance(grade_level, bool) or not isinstance(grade_level, int):
        raise UnknownGradeLevel(f"Grade level must be an integer, got {grade_level!r}")
    if grade_level not in config.GRADE_LEVELS:
        raise UnknownGradeLevel(f"Grade level {grade_level} is not recognised")


def classify_status(final_average, grade_level, exam_grade_levels=None):
    """
    Annual status for a final average at a given grade level.

    Exam-bearing levels:  >= PASS_MARK approved, >= EXAM_MARK exam_required,
    otherwise failed. Other levels: approved, progresses, retained on the
    same thresholds. A value equal to a threshold belongs to the higher band.

    ``exam_grade_levels`` overrides ``config.EXAM_GRADE_LEVELS`` when given.
    """
    if final_average is None:
        raise InvalidScore("Final average is required to classify a status")
    average = to_score(final_average, label='Final average')

    check_grade_level(grade_level)

    if exam_grade_levels is None:
        exam_grade_levels = config.EXAM_GRADE_LEVELS
    exam_bearing = grade_level in exam_grade_levels

    if average >= config.PASS_MARK:
        return AcademicStatus.APPROVED
    if average >= config.EXAM_MARK:
        return AcademicStatus.EXAM_REQUIRED if exam_bearing else AcademicStatus.PROGRESSES
    return AcademicStatus.FAILED if exam_bearing else AcademicStatus.RETAINED


def status_result(final_average, grade_level, exam_grade_levels=None):
    """Final average, status and grade level as a plain dict."""
    return {
        'final_average': final_average,
        'status': classify_status(final_average, grade_level, exam_grade_levels),
        'grade_level': grade_level,
    }
