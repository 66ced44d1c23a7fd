"""Integration tests for the payment ledger.

Covers recording payments, initial status per method, snapshots and the
"submitted" email that follows a payment awaiting verification.
Run with: pytest funded/tests/test_ledger.py -v
"""

import re
from decimal import Decimal

import pytest

from communications.models import NotificationLog, TemplateKind
from finances import services
from finances.errors import (
    EventNotFoundError,
    PaymentMethodNotAcceptedError,
    PaymentNotFoundError,
    ProofNotAllowedError,
    StudentNotFoundError,
)
from finances.models import Payment, PaymentMethod


@pytest.mark.django_db
class TestCreatePayment:
    """Tests for create_payment."""

    @pytest.mark.parametrize('method, expected', [
        (PaymentMethod.GATEWAY, Payment.Status.PAID),
        (PaymentMethod.QR_CODE, Payment.Status.VERIFICATION_PENDING),
        (PaymentMethod.CASH,    Payment.Status.VERIFICATION_PENDING),
    ])
    def test_initial_status_depends_on_method(self, school_class, student, event, method, expected):
        """Gateway payments are Paid at once, the others wait for verification."""
        payment = services.create_payment(school_class, student, event, method)
        assert payment.status == expected
        assert payment.status_changed_at is not None

    def test_amount_and_snapshots_are_copied(self, school_class, student, event):
        """Amount is the event cost; student and event display fields are copied."""
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        assert payment.amount == Decimal('500.00')
        assert payment.student_name == 'Asha Rao'
        assert payment.student_roll == '21CS001'
        assert payment.student_email == 'asha@example.com'
        assert payment.event_name == 'Industrial Visit'

    def test_snapshot_survives_event_edit(self, school_class, student, event):
        """Changing the event cost later does not touch recorded payments."""
        payment = services.create_payment(school_class, student, event, PaymentMethod.GATEWAY)
        services.update_event(school_class, event.pk, cost='750', name='Renamed Visit')
        payment.refresh_from_db()
        assert payment.amount == Decimal('500.00')
        assert payment.event_name == 'Industrial Visit'

    def test_transaction_id_format(self, school_class, student, event):
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        assert re.fullmatch(r'TXN[A-Z0-9]{12}', payment.transaction_id)

    def test_method_not_accepted(self, school_class, student, print_event):
        """A QR payment for an event that only takes gateway and cash is refused."""
        with pytest.raises(PaymentMethodNotAcceptedError):
            services.create_payment(school_class, student, print_event, PaymentMethod.QR_CODE)
        assert not Payment.objects.exists()

    def test_proof_only_for_qr_code(self, school_class, student, event):
        with pytest.raises(ProofNotAllowedError):
            services.create_payment(school_class, student, event, PaymentMethod.CASH, proof=b'png')

    def test_qr_code_proof_is_stored(self, school_class, student, event):
        """The screenshot is written to the blob store and its URL kept on the payment."""
        payment = services.create_payment(
            school_class, student, event, PaymentMethod.QR_CODE, proof=b'\x89PNG fake',
        )
        assert payment.proof_url.startswith('/media/payment_proofs/')

    def test_student_from_other_class_is_refused(self, school_class, other_student, event):
        with pytest.raises(StudentNotFoundError):
            services.create_payment(school_class, other_student, event, PaymentMethod.CASH)

    def test_event_from_other_class_is_refused(self, school_class, student, other_event):
        with pytest.raises(EventNotFoundError):
            services.create_payment(school_class, student, other_event, PaymentMethod.CASH)


@pytest.mark.django_db
class TestSubmittedEmail:
    """Tests for the notification sent after a payment is recorded."""

    def test_cash_payment_sends_submitted_email(
        self, school_class, student, event, mailoutbox, django_capture_on_commit_callbacks,
    ):
        with django_capture_on_commit_callbacks(execute=True):
            payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['asha@example.com']
        assert 'submitted' in mailoutbox[0].subject
        log = NotificationLog.objects.get()
        assert log.notification_type == TemplateKind.PAYMENT_SUBMITTED
        assert log.payment == payment
        assert log.success

    def test_gateway_payment_sends_nothing(
        self, school_class, student, event, mailoutbox, django_capture_on_commit_callbacks,
    ):
        with django_capture_on_commit_callbacks(execute=True):
            services.create_payment(school_class, student, event, PaymentMethod.GATEWAY)
        assert mailoutbox == []

    def test_email_waits_for_commit(self, school_class, student, event, mailoutbox,
                                    django_capture_on_commit_callbacks):
        """Nothing is sent while the transaction is still open."""
        with django_capture_on_commit_callbacks() as callbacks:
            services.create_payment(school_class, student, event, PaymentMethod.CASH)
            assert mailoutbox == []
        assert len(callbacks) == 1


@pytest.mark.django_db
class TestQueries:
    """Tests for payment lookups."""

    def test_list_for_event_is_class_scoped(self, school_class, student, event, other_class, other_event,
                                            other_student):
        services.create_payment(school_class, student, event, PaymentMethod.CASH)
        services.create_payment(other_class, other_student, other_event, PaymentMethod.CASH)

        assert services.list_payments_for_event(school_class, event.pk).count() == 1
        assert services.list_payments_for_event(school_class, other_event.pk).count() == 0

    def test_list_for_student(self, school_class, student, event, print_event):
        services.create_payment(school_class, student, event, PaymentMethod.CASH)
        services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        assert services.list_payments_for_student(school_class, student.pk).count() == 2

    def test_get_payment_from_other_class(self, school_class, other_class, other_student, other_event):
        payment = services.create_payment(other_class, other_student, other_event, PaymentMethod.CASH)
        with pytest.raises(PaymentNotFoundError):
            services.get_payment(school_class, payment.pk)

    def test_get_payment_garbage_id(self, school_class):
        with pytest.raises(PaymentNotFoundError):
            services.get_payment(school_class, 'not-a-number')


@pytest.mark.django_db
class TestUpdatePaymentStatus:
    """Tests for the raw status overwrite."""

    def test_overwrites_without_checks(self, school_class, student, event, mailoutbox,
                                       django_capture_on_commit_callbacks):
        """Any status can be written, even out of a final one, and no email goes out."""
        payment = services.create_payment(school_class, student, event, PaymentMethod.GATEWAY)
        with django_capture_on_commit_callbacks(execute=True):
            services.update_payment_status(school_class, payment.pk, Payment.Status.PENDING)
        payment.refresh_from_db()
        assert payment.status == Payment.Status.PENDING
        assert mailoutbox == []

    def test_last_write_wins(self, school_class, student, event):
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        services.update_payment_status(school_class, payment.pk, Payment.Status.PAID)
        services.update_payment_status(school_class, payment.pk, Payment.Status.FAILED)
        payment.refresh_from_db()
        assert payment.status == Payment.Status.FAILED

    def test_unknown_status_rejected(self, school_class, student, event):
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        with pytest.raises(ValueError):
            services.update_payment_status(school_class, payment.pk, 'refunded')
