"""Integration tests for print distribution.

Run with: pytest funded/tests/test_prints.py -v
"""

import pytest

from accounts import services as students
from accounts.models import Student
from communications.models import NotificationLog, TemplateKind
from communications.textgen import locmem
from finances import services
from finances.errors import NotAPrintEventError, StudentNotFoundError
from finances.models import PaymentMethod, PrintDistribution


@pytest.fixture
def classmate(school_class):
    return Student.objects.create(
        school_class=school_class, roll_no='21CS002', name='Bala Iyer', email='bala@example.com',
    )


@pytest.mark.django_db
class TestEligibleStudents:
    """Tests for eligible_students."""

    def test_only_paid_students(self, school_class, student, classmate, print_event):
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        services.create_payment(school_class, classmate, print_event, PaymentMethod.CASH)

        assert list(services.eligible_students(school_class, print_event)) == [student]

    def test_approved_cash_payment_becomes_eligible(self, school_class, classmate, print_event):
        payment = services.create_payment(school_class, classmate, print_event, PaymentMethod.CASH)
        services.approve(school_class, payment.pk)
        assert list(services.eligible_students(school_class, print_event)) == [classmate]

    def test_distributed_students_drop_out(self, school_class, student, classmate, print_event):
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        services.create_payment(school_class, classmate, print_event, PaymentMethod.GATEWAY)
        services.distribute(school_class, student, print_event)

        assert list(services.eligible_students(school_class, print_event)) == [classmate]

    def test_ordered_by_roll_number(self, school_class, student, classmate, print_event):
        services.create_payment(school_class, classmate, print_event, PaymentMethod.GATEWAY)
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        rolls = [s.roll_no for s in services.eligible_students(school_class, print_event)]
        assert rolls == ['21CS001', '21CS002']


@pytest.mark.django_db
class TestDistribute:
    """Tests for distribute."""

    def test_records_snapshot_and_emails(self, school_class, student, print_event, mailoutbox,
                                         django_capture_on_commit_callbacks):
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        with django_capture_on_commit_callbacks(execute=True):
            distribution = services.distribute(school_class, student, print_event)

        assert distribution.student_name == 'Asha Rao'
        assert distribution.student_roll == '21CS001'
        assert distribution.distributed_at is not None
        assert len(mailoutbox) == 1
        assert 'print' in mailoutbox[0].subject
        assert NotificationLog.objects.get().notification_type == TemplateKind.PRINT_DISTRIBUTED

    def test_email_failure_keeps_distribution(self, school_class, student, print_event, mailoutbox,
                                              django_capture_on_commit_callbacks):
        """No generated text means no email, but the distribution is still recorded."""
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        locmem.reset('')
        with django_capture_on_commit_callbacks(execute=True):
            distribution = services.distribute(school_class, student, print_event)

        assert PrintDistribution.objects.filter(pk=distribution.pk).exists()
        assert mailoutbox == []
        log = NotificationLog.objects.get()
        assert log.notification_type == TemplateKind.PRINT_DISTRIBUTED
        assert not log.success
        assert log.error_message == 'Failed to generate email content.'
        assert log.school_class == school_class

    def test_normal_event_is_refused(self, school_class, student, event):
        with pytest.raises(NotAPrintEventError):
            services.distribute(school_class, student, event)
        assert not PrintDistribution.objects.exists()

    def test_other_class_student_is_refused(self, school_class, other_student, print_event):
        with pytest.raises(StudentNotFoundError):
            services.distribute(school_class, other_student, print_event)

    def test_distribute_twice_records_two_rows(self, school_class, student, print_event):
        """distribute() trusts the caller to have checked eligibility."""
        services.distribute(school_class, student, print_event)
        services.distribute(school_class, student, print_event)
        assert services.list_distributions(school_class, print_event).count() == 2

    def test_deleting_student_keeps_history(self, school_class, student, print_event):
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        services.distribute(school_class, student, print_event)
        students.delete_student(school_class, student.pk)

        distribution = PrintDistribution.objects.get()
        assert distribution.student is None
        assert distribution.student_roll == '21CS001'
