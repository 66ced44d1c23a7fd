"""
finances/services/workflow.py
─────────────────────────────
Operator verification of QR code and cash payments.

    Verification Pending ──approve──▶ Paid    (student gets an approval email)
    Verification Pending ──reject───▶ Failed  (silent unless FUNDED_NOTIFY_ON_REJECT)

Paid and Failed are final for these actions.  The status write is a
conditional update on the expected previous status, so two operators
approving the same payment at once produce one transition and one email.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from communications.models import TemplateKind
from communications.services import send_payment_email

from ..errors import InvalidTransitionError
from ..models import Payment
from .utils import get_class_payment, notify_on_commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    action: str
    source: str
    target: str
    notification: str | None = None
    # Name of a boolean setting that must be True for the notification to go out
    notify_setting: str | None = None

    def should_notify(self):
        if self.notification is None:
            return False
        if self.notify_setting is None:
            return True
        return bool(getattr(settings, self.notify_setting, False))


APPROVE = Transition(
    action='approve',
    source=Payment.Status.VERIFICATION_PENDING,
    target=Payment.Status.PAID,
    notification=TemplateKind.PAYMENT_APPROVED,
)
REJECT = Transition(
    action='reject',
    source=Payment.Status.VERIFICATION_PENDING,
    target=Payment.Status.FAILED,
    notification=TemplateKind.PAYMENT_REJECTED,
    notify_setting='FUNDED_NOTIFY_ON_REJECT',
)

TRANSITIONS = {t.action: t for t in (APPROVE, REJECT)}


def available_actions(payment):
    """Names of the transitions the operator may apply to *payment* right now."""
    return [t.action for t in TRANSITIONS.values() if payment.status == t.source]


def apply_transition(school_class, payment_id, action):
    """
    Move a payment along *action* and queue its notification.

    Raises PaymentNotFoundError for unknown ids and InvalidTransitionError
    when the payment is not in the transition's source status (nothing is
    changed in that case).
    """
    transition = TRANSITIONS[action]
    payment = get_class_payment(school_class, payment_id)

    with transaction.atomic():
        updated = Payment.objects.filter(pk=payment.pk, status=transition.source).update(
            status=transition.target,
            status_changed_at=timezone.now(),
        )
        if not updated:
            payment.refresh_from_db(fields=['status'])
            raise InvalidTransitionError(payment.pk, payment.get_status_display(), action)

        payment.refresh_from_db(fields=['status', 'status_changed_at'])
        if transition.should_notify():
            notify_on_commit(send_payment_email, transition.notification, payment)

    logger.info(
        'Payment %s %s: %s → %s',
        payment.transaction_id, action,
        Payment.Status(transition.source).label, payment.get_status_display(),
    )
    return payment


def approve(school_class, payment_id):
    return apply_transition(school_class, payment_id, APPROVE.action)


def reject(school_class, payment_id):
    return apply_transition(school_class, payment_id, REJECT.action)
