"""
Tests for the academics app.

Focuses on:
- Class name generation
- Grade level validation
- Exam-bearing levels
"""
from datetime import date

from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase, override_settings

from academics.models import Class, ClassSubject, Subject
from core.models import AcademicYear
from students.models import Student


class AcademicsTestCase(TestCase):
    """Base test case with common setup for academics tests."""

    def setUp(self):
        self.current_year = AcademicYear.objects.create(
            name='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
            is_current=True
        )


class ClassModelTests(AcademicsTestCase):

    def test_name_is_generated(self):
        klass = Class.objects.create(academic_year=self.current_year, grade_level=10, section=' b ')
        self.assertEqual(klass.name, '10-B')
        self.assertEqual(str(klass), '10-B')
        self.assertEqual(klass.level_display, '10ª Classe')

    def test_unique_per_year(self):
        Class.objects.create(academic_year=self.current_year, grade_level=10, section='A')
        with self.assertRaises(IntegrityError):
            Class.objects.create(academic_year=self.current_year, grade_level=10, section='A')

    def test_unknown_grade_level_rejected(self):
        klass = Class(academic_year=self.current_year, grade_level=14, section='A')
        with self.assertRaises(ValidationError):
            klass.full_clean()

    def test_exam_bearing(self):
        self.assertTrue(Class(grade_level=9).is_exam_bearing)
        self.assertTrue(Class(grade_level=12).is_exam_bearing)
        self.assertFalse(Class(grade_level=11).is_exam_bearing)

    @override_settings(GRADEBOOK_EXAM_GRADE_LEVELS=frozenset({11}))
    def test_exam_bearing_from_settings(self):
        self.assertTrue(Class(grade_level=11).is_exam_bearing)

    def test_student_count_and_capacity(self):
        klass = Class.objects.create(academic_year=self.current_year, grade_level=7, section='A', capacity=1)
        self.assertFalse(klass.is_full)
        Student.objects.create(
            first_name='Ana', last_name='Silva', date_of_birth=date(2012, 1, 1), gender='F',
            guardian_name='G', guardian_phone='9', admission_number='A1',
            admission_date=date(2024, 9, 1), current_class=klass,
        )
        self.assertEqual(klass.student_count, 1)
        self.assertTrue(klass.is_full)


class ClassSubjectTests(AcademicsTestCase):

    def test_allocation(self):
        klass = Class.objects.create(academic_year=self.current_year, grade_level=8, section='A')
        subject = Subject.objects.create(name='Matemática', code='MAT')
        allocation = ClassSubject.objects.create(class_assigned=klass, subject=subject)
        self.assertEqual(str(allocation), 'Matemática - 8-A')
        self.assertEqual(list(klass.subjects.all()), [allocation])
