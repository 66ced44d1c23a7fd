"""
accounts/models.py
──────────────────
Operators, tenancy and the student directory.

CustomUser  – extends AbstractUser with a role flag (Administrator vs.
              Representative).
SchoolClass – the scope every event, student and payment belongs to,
              e.g. "CSE-A 2026".
Student     – an enrolled student: roll number, name, email, class label.
              Students do not log in; they only receive emails.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Custom user model for FundEd operators.

    Roles
    -----
    ADMIN           – sees every class (usually also a superuser).
    REPRESENTATIVE  – the class representative who collects and verifies
                      payments for the class they manage.
    """

    class Role(models.TextChoices):
        ADMIN          = 'admin',          'Administrator'
        REPRESENTATIVE = 'representative', 'Class Representative'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.REPRESENTATIVE,
        verbose_name='Role',
        help_text='Representatives manage the fund of one class.',
    )

    @property
    def is_representative(self):
        return self.role == self.Role.REPRESENTATIVE

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.get_role_display()})"

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'


class SchoolClass(models.Model):
    """
    One class cohort, e.g. "CSE-A 2026".  This is the tenant boundary:
    every service call takes the SchoolClass it operates on.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text='Human-readable class name, e.g. "CSE-A 2026".',
    )
    representative = models.ForeignKey(
        CustomUser,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        limit_choices_to={'role': CustomUser.Role.REPRESENTATIVE},
        related_name='managed_classes',
        help_text='The representative responsible for this class.',
    )
    school_year = models.CharField(
        max_length=20,
        blank=True,
        help_text='Optional school year label, e.g. "2025/2026".',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'School Class'
        verbose_name_plural = 'School Classes'
        ordering = ['name']

    def __str__(self):
        return self.name


class Student(models.Model):
    """
    A student enrolled in a SchoolClass.

    Payments and print distributions copy the name and roll number at
    creation time, so deleting a Student only drops the identity; history
    rows keep their snapshot.
    """

    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name='students',
        help_text='The class this student belongs to.',
    )
    roll_no = models.CharField(
        max_length=30,
        verbose_name='Roll number',
        help_text='Unique within the class.',
    )
    name = models.CharField(max_length=200)
    email = models.EmailField()
    class_label = models.CharField(
        max_length=50,
        blank=True,
        help_text='Section / division label shown next to the student, e.g. "A".',
    )
    is_active = models.BooleanField(
        default=True,
        help_text='Uncheck to hide this student from new collections.',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Student'
        verbose_name_plural = 'Students'
        ordering = ['school_class', 'roll_no']
        constraints = [
            models.UniqueConstraint(
                fields=['school_class', 'roll_no'],
                name='unique_roll_no_per_class',
            ),
        ]

    def __str__(self):
        return f"{self.roll_no} – {self.name}"
