"""
communications/services.py
──────────────────────────
The notification dispatcher: turns a template kind plus parameters into an
email body via text generation and hands it to the mail transport.

Called by finances services through transaction.on_commit, so a failed
email never undoes the payment or distribution that triggered it.

Functions
─────────
send(template_kind, params)
    Compose and send one email.  Returns SendResult(success, message).

send_payment_email(template_kind, payment)
    Shortcut for PaymentSubmitted / PaymentApproved / PaymentRejected.

send_print_distributed_email(distribution)
    Shortcut for PrintDistributed.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import escape

from .models import NotificationLog, TemplateKind
from .textgen import generate_text

logger = logging.getLogger(__name__)

SUBJECTS = {
    TemplateKind.PAYMENT_SUBMITTED: 'Your payment for "{event_name}" has been submitted',
    TemplateKind.PAYMENT_APPROVED:  'Your payment for "{event_name}" has been approved!',
    TemplateKind.PAYMENT_REJECTED:  'Your payment for "{event_name}" could not be verified',
    TemplateKind.PRINT_DISTRIBUTED: 'Your print for "{event_name}" has been distributed!',
}

REQUIRED_PARAMS = ('recipient_email', 'student_name', 'event_name')


@dataclass(frozen=True)
class SendResult:
    success: bool
    message: str


def _owning_class(params):
    for key in ('payment', 'event', 'student'):
        obj = params.get(key)
        if obj is not None:
            return obj.school_class
    return None


def _log(kind, params, subject, body, success=True, error=''):
    """Internal helper to persist a NotificationLog entry."""
    NotificationLog.objects.create(
        notification_type=kind,
        school_class=_owning_class(params),
        recipient=params.get('student'),
        recipient_email=params.get('recipient_email', ''),
        subject=subject,
        body_preview=body[:500],
        payment=params.get('payment'),
        event=params.get('event'),
        sent_at=timezone.now(),
        success=success,
        error_message=error,
    )


def send(template_kind, params):
    """
    Send one transactional email.

    *params* must contain recipient_email, student_name and event_name,
    otherwise the attempt is logged as failed and nothing is sent.  amount
    and method are used by the payment templates.  Optional student /
    payment / event objects are only used for the audit log.  An unknown
    template kind raises ValueError.

    No retry and no de-duplication: calling this twice sends two emails.
    """
    kind = TemplateKind(template_kind)
    missing = [key for key in REQUIRED_PARAMS if not params.get(key)]
    if missing:
        error = f"Missing notification parameter(s): {', '.join(missing)}"
        logger.warning('%s email not sent: %s', kind.label, error)
        _log(kind, params, '', '', success=False, error=error)
        return SendResult(False, error)

    context = {
        'student_name': params['student_name'],
        'event_name':   params['event_name'],
        'amount':       params.get('amount', ''),
        'method':       params.get('method', ''),
        'currency':     settings.FUNDED_CURRENCY,
    }
    prompt = render_to_string(f'communications/prompts/{kind.value}.txt', context)
    subject = SUBJECTS[kind].format(event_name=params['event_name'])
    to = params['recipient_email']

    body = (generate_text(prompt) or '').strip()
    if not body:
        error = 'Failed to generate email content.'
        logger.warning('%s email to %s not sent: %s', kind.label, to, error)
        _log(kind, params, subject, '', success=False, error=error)
        return SendResult(False, error)

    try:
        sent = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to],
            html_message=escape(body).replace('\n', '<br>'),
            fail_silently=False,
        )
    except Exception as exc:
        logger.error('Error sending %s email to %s: %s', kind.label, to, exc)
        _log(kind, params, subject, body, success=False, error=str(exc))
        return SendResult(False, str(exc) or 'Failed to send email.')

    if not sent:
        error = 'Failed to send email.'
        _log(kind, params, subject, body, success=False, error=error)
        return SendResult(False, error)

    logger.info('%s email sent to %s', kind.label, to)
    _log(kind, params, subject, body)
    return SendResult(True, f'Email successfully sent to {to}.')


# ── Shortcuts used by finances services ───────────────────────────────────────

def send_payment_email(template_kind, payment):
    """Notify the student of *payment* using the snapshot stored on it."""
    return send(template_kind, {
        'recipient_email': payment.student_email,
        'student_name':    payment.student_name,
        'event_name':      payment.event_name,
        'amount':          payment.amount,
        'method':          payment.get_method_display(),
        'student':         payment.student,
        'payment':         payment,
        'event':           payment.event,
    })


def send_print_distributed_email(distribution):
    """Tell a student their print for *distribution.event* was handed out."""
    student = distribution.student
    return send(TemplateKind.PRINT_DISTRIBUTED, {
        'recipient_email': student.email if student else '',
        'student_name':    distribution.student_name,
        'event_name':      distribution.event.name,
        'student':         student,
        'event':           distribution.event,
    })
