"""
finances/services/ledger.py
───────────────────────────
Payment ledger: record payments and read them back, scoped to one class.

A payment's amount is the event cost at the moment it was recorded; the
student and event display fields are copied onto the row at the same time.
"""

import logging

from django.db import transaction
from django.utils import timezone

from communications.models import TemplateKind
from communications.services import send_payment_email

from ..errors import PaymentMethodNotAcceptedError, ProofNotAllowedError
from ..models import Payment, PaymentMethod
from ..storage import PROOF_FOLDER, store_blob
from .utils import ensure_in_class, generate_transaction_id, get_class_payment, notify_on_commit

logger = logging.getLogger(__name__)

# Gateway confirmation is taken as final; QR transfers and cash need a human.
INITIAL_STATUS = {
    PaymentMethod.GATEWAY: Payment.Status.PAID,
    PaymentMethod.QR_CODE: Payment.Status.VERIFICATION_PENDING,
    PaymentMethod.CASH:    Payment.Status.VERIFICATION_PENDING,
}


def initial_status_for(method):
    return INITIAL_STATUS[PaymentMethod(method)]


def create_payment(school_class, student, event, method, *, proof=None):
    """
    Record a payment of *student* towards *event*.

    *proof* (bytes or an uploaded file) is only accepted for QR code payments
    and is stored in the blob store.  Payments that wait for verification send
    the student a "submitted" email once the row is committed.
    """
    method = PaymentMethod(method)
    ensure_in_class(school_class, student=student, event=event)
    if not event.accepts(method):
        raise PaymentMethodNotAcceptedError(method.label)
    if proof is not None and method != PaymentMethod.QR_CODE:
        raise ProofNotAllowedError(method.label)

    proof_url = ''
    if proof is not None:
        filename = getattr(proof, 'name', None) or 'screenshot.png'
        proof_url = store_blob(proof, filename, PROOF_FOLDER)

    now = timezone.now()
    status = initial_status_for(method)
    with transaction.atomic():
        payment = Payment.objects.create(
            school_class=school_class,
            student=student,
            student_name=student.name,
            student_roll=student.roll_no,
            student_email=student.email,
            event=event,
            event_name=event.name,
            amount=event.cost,
            method=method,
            transaction_id=generate_transaction_id(),
            proof_url=proof_url,
            status=status,
            status_changed_at=now,
            created_at=now,
        )
        if payment.awaiting_verification:
            notify_on_commit(send_payment_email, TemplateKind.PAYMENT_SUBMITTED, payment)

    logger.info(
        'Payment %s recorded: %s → "%s" %s via %s (%s)',
        payment.transaction_id, student.roll_no, event.name,
        payment.amount, method.label, payment.get_status_display(),
    )
    return payment


def get_payment(school_class, payment_id):
    return get_class_payment(school_class, payment_id)


def list_payments_for_event(school_class, event_id):
    return Payment.objects.filter(school_class=school_class, event_id=event_id)


def list_payments_for_student(school_class, student_id):
    return Payment.objects.filter(school_class=school_class, student_id=student_id)


def update_payment_status(school_class, payment_id, new_status):
    """
    Overwrite the status of a payment.

    This is a plain last-write-wins update: no check of the previous status
    and no notification.  Use workflow.approve / workflow.reject for operator
    verification.
    """
    new_status = Payment.Status(new_status)
    payment = get_class_payment(school_class, payment_id)
    Payment.objects.filter(pk=payment.pk).update(
        status=new_status,
        status_changed_at=timezone.now(),
    )
    logger.info('Payment %s status set to %s', payment.transaction_id, new_status.label)
