"""
finances/services/utils.py
──────────────────────────
Shared helpers used by the catalog, ledger, workflow and prints modules.
Nothing here imports from other service modules (no circular imports).
"""

import logging
import string

from django.db import transaction
from django.utils.crypto import get_random_string

from ..errors import EventNotFoundError, PaymentNotFoundError, StudentNotFoundError
from ..models import Event, Payment

logger = logging.getLogger(__name__)

TRANSACTION_ID_CHARS = string.ascii_uppercase + string.digits


def generate_transaction_id():
    """Opaque payment reference, e.g. 'TXN7Q2KD9ZP1M4B'."""
    return 'TXN' + get_random_string(12, allowed_chars=TRANSACTION_ID_CHARS)


# ── Scope guards ──────────────────────────────────────────────────────────────

def get_class_event(school_class, event_id):
    try:
        return Event.objects.get(pk=event_id, school_class=school_class)
    except (Event.DoesNotExist, ValueError, TypeError):
        raise EventNotFoundError(event_id)


def get_class_payment(school_class, payment_id):
    try:
        return Payment.objects.select_related('event', 'student').get(
            pk=payment_id, school_class=school_class,
        )
    except (Payment.DoesNotExist, ValueError, TypeError):
        raise PaymentNotFoundError(payment_id)


def ensure_in_class(school_class, student=None, event=None):
    """Refuse a student or event object that belongs to another class."""
    if student is not None and student.school_class_id != school_class.pk:
        raise StudentNotFoundError(student.pk)
    if event is not None and event.school_class_id != school_class.pk:
        raise EventNotFoundError(event.pk)


# ── Notifications ─────────────────────────────────────────────────────────────

def notify_on_commit(send_fn, *args):
    """
    Run *send_fn(*args)* once the surrounding transaction commits.

    The state change is already durable by then; a failed send is logged
    (and recorded in the NotificationLog by the dispatcher) but never undoes it.
    """
    def _dispatch():
        result = send_fn(*args)
        if not result.success:
            logger.warning('Notification failed: %s', result.message)

    transaction.on_commit(_dispatch, robust=True)
