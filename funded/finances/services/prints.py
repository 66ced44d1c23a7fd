"""
finances/services/prints.py
───────────────────────────
Print distribution for Print-category events.

Only students with a Paid payment and no earlier distribution for the event
are offered in eligible_students().  distribute() itself does not re-check
that: calling it twice for the same student records two rows.
"""

import logging

from django.db import transaction
from django.utils import timezone

from accounts.models import Student
from communications.services import send_print_distributed_email

from ..errors import NotAPrintEventError
from ..models import Payment, PrintDistribution
from .utils import ensure_in_class, notify_on_commit

logger = logging.getLogger(__name__)


def list_distributions(school_class, event):
    return PrintDistribution.objects.filter(school_class=school_class, event=event)


def eligible_students(school_class, event):
    """Students who paid for *event* and have not collected their print yet."""
    paid_ids = set(
        Payment.objects
        .filter(school_class=school_class, event=event, status=Payment.Status.PAID)
        .exclude(student__isnull=True)
        .values_list('student_id', flat=True)
    )
    distributed_ids = set(
        list_distributions(school_class, event)
        .exclude(student__isnull=True)
        .values_list('student_id', flat=True)
    )
    return (
        Student.objects
        .filter(school_class=school_class, pk__in=paid_ids - distributed_ids)
        .order_by('roll_no')
    )


def distribute(school_class, student, event):
    """
    Record that *student* received the print for *event* and email them
    once the row is committed.  A failed email leaves the row in place.
    """
    ensure_in_class(school_class, student=student, event=event)
    if not event.is_print:
        raise NotAPrintEventError(event.pk)

    with transaction.atomic():
        distribution = PrintDistribution.objects.create(
            school_class=school_class,
            student=student,
            student_name=student.name,
            student_roll=student.roll_no,
            event=event,
            distributed_at=timezone.now(),
        )
        notify_on_commit(send_print_distributed_email, distribution)

    logger.info('Print for "%s" distributed to %s', event.name, student.roll_no)
    return distribution
