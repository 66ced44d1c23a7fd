"""
accounts/services.py
────────────────────
Student directory: create, edit, remove and bulk-register students.

Every function takes the SchoolClass it works on; a student id from another
class behaves exactly like an unknown id.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from finances.errors import StudentNotFoundError

from .models import Student

logger = logging.getLogger(__name__)

STUDENT_FIELDS = ('roll_no', 'name', 'email', 'class_label', 'is_active')


def list_students(school_class, active_only=False):
    qs = Student.objects.filter(school_class=school_class)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by('roll_no')


def get_student(school_class, student_id):
    try:
        return Student.objects.get(pk=student_id, school_class=school_class)
    except (Student.DoesNotExist, ValueError, TypeError):
        raise StudentNotFoundError(student_id)


def create_student(school_class, *, roll_no, name, email, class_label=''):
    student = Student(
        school_class=school_class,
        roll_no=roll_no.strip(),
        name=name.strip(),
        email=email.strip(),
        class_label=class_label.strip(),
    )
    student.full_clean()
    student.save()
    logger.info('Student %s registered in %s', student.roll_no, school_class)
    return student


def bulk_create_students(school_class, rows):
    """
    Register many students at once (e.g. rows read from a spreadsheet).

    All rows are validated before anything is written; a single bad row or
    a roll number that repeats (within *rows* or against the class) rejects
    the whole batch with a ValidationError naming the offending rows.
    """
    students = []
    errors = []
    seen_rolls = set()

    for index, row in enumerate(rows, start=1):
        student = Student(
            school_class=school_class,
            roll_no=str(row.get('roll_no', '')).strip(),
            name=str(row.get('name', '')).strip(),
            email=str(row.get('email', '')).strip(),
            class_label=str(row.get('class_label', '')).strip(),
        )
        try:
            student.full_clean()
        except ValidationError as exc:
            errors.append(f"Row {index}: {'; '.join(exc.messages)}")
            continue
        if student.roll_no in seen_rolls:
            errors.append(f'Row {index}: roll number {student.roll_no} appears twice.')
            continue
        seen_rolls.add(student.roll_no)
        students.append(student)

    if errors:
        raise ValidationError(errors)

    with transaction.atomic():
        created = Student.objects.bulk_create(students)
    logger.info('Imported %d students into %s', len(created), school_class)
    return created


def update_student(school_class, student_id, **fields):
    """
    Edit a student.  Existing payments and distributions keep the name and
    roll number they were created with.
    """
    student = get_student(school_class, student_id)
    unknown = set(fields) - set(STUDENT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown student field(s): {', '.join(sorted(unknown))}")
    for name, value in fields.items():
        setattr(student, name, value.strip() if isinstance(value, str) else value)
    student.full_clean()
    student.save()
    return student


def delete_student(school_class, student_id):
    """Hard delete; history rows keep their snapshot and lose the link."""
    student = get_student(school_class, student_id)
    student.delete()
    logger.info('Student %s removed from %s', student.roll_no, school_class)
