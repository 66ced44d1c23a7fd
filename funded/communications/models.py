"""
communications/models.py
─────────────────────────
Models for outbound communication tracking.

TemplateKind    – which transactional email is being sent.
NotificationLog – records every email attempt, successful or not, so the
                  representative can see whether a student was notified.
"""

from django.db import models
from django.utils import timezone


class TemplateKind(models.TextChoices):
    PAYMENT_SUBMITTED = 'payment_submitted', 'Payment Submitted'
    PAYMENT_APPROVED  = 'payment_approved',  'Payment Approved'
    PAYMENT_REJECTED  = 'payment_rejected',  'Payment Rejected'
    PRINT_DISTRIBUTED = 'print_distributed', 'Print Distributed'


class NotificationLog(models.Model):
    """
    Tracks outbound notification attempts made by the dispatcher.

    This gives the representative an audit trail:
    "Approval email sent to 21CS042 on Tuesday" or "…failed: SMTP timeout".
    """

    notification_type = models.CharField(
        max_length=30,
        choices=TemplateKind.choices,
    )
    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
        help_text='The class the notified payment, event or student belongs to.',
    )
    recipient = models.ForeignKey(
        'accounts.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications_received',
        help_text='The student who was notified (empty if since deleted).',
    )
    recipient_email = models.EmailField()
    subject = models.CharField(
        max_length=255,
        blank=True,
        help_text='Email subject line.',
    )
    body_preview = models.TextField(
        blank=True,
        help_text='First 500 characters of the message body (for the audit log).',
    )
    payment = models.ForeignKey(
        'finances.Payment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )
    event = models.ForeignKey(
        'finances.Event',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )
    sent_at = models.DateTimeField(default=timezone.now)
    success = models.BooleanField(
        default=True,
        help_text='False if content generation or the send attempt failed.',
    )
    error_message = models.TextField(
        blank=True,
        help_text='Error details if success=False.',
    )

    class Meta:
        ordering = ['-sent_at']
        verbose_name = 'Notification Log'
        verbose_name_plural = 'Notification Logs'

    def __str__(self):
        return (
            f"[{self.get_notification_type_display()}] "
            f"→ {self.recipient_email} "
            f"({self.sent_at.strftime('%Y-%m-%d %H:%M')})"
        )
