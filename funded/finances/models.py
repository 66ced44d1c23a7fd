"""
finances/models.py
──────────────────
The money engine.  Everything that is owed, paid or handed out lives here.

QrCode            – a payee QR image shown on events that accept QR payments.
Event             – what is owed, e.g. "Industrial Visit – 500 INR".
Payment           – one student's payment towards an Event; carries the
                    verification status.
PrintDistribution – a student received the physical print of a Print event.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class PaymentMethod(models.TextChoices):
    GATEWAY = 'gateway', 'Gateway'
    QR_CODE = 'qr_code', 'QR Code'
    CASH    = 'cash',    'Cash'


class QrCode(models.Model):
    """
    A payee QR code (GPay, PhonePe, …) the representative shows to students.
    The image either comes from an upload or is generated from a UPI id.
    """

    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        related_name='qr_codes',
    )
    name = models.CharField(
        max_length=100,
        help_text="Display name, e.g. 'GPay Business'.",
    )
    image_url = models.CharField(
        max_length=500,
        help_text='Where the QR image is served from.',
    )
    upi_id = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='UPI id',
        help_text="Payee address the QR encodes, e.g. 'classfund@okaxis'.",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['name']
        verbose_name = 'QR Code'
        verbose_name_plural = 'QR Codes'

    def __str__(self):
        return self.name


class Event(models.Model):
    """
    A fundable event created by the representative.  Each student is expected
    to pay `cost` using one of the accepted payment methods.
    """

    class Category(models.TextChoices):
        NORMAL = 'normal', 'Normal'
        PRINT  = 'print',  'Print'

    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        related_name='events',
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text='Amount each student pays.',
    )
    deadline = models.DateField()
    category = models.CharField(
        max_length=10,
        choices=Category.choices,
        default=Category.NORMAL,
        help_text='Print events unlock print distribution for paid students.',
    )
    payment_methods = models.JSONField(
        default=list,
        help_text='Accepted payment methods, e.g. ["gateway", "cash"].',
    )
    qr_code = models.ForeignKey(
        QrCode,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='events',
        help_text='Required when QR code payments are accepted.',
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Event'
        verbose_name_plural = 'Events'

    def __str__(self):
        return f"{self.name} – {self.cost}"

    def clean(self):
        errors = {}
        if isinstance(self.cost, Decimal) and self.cost <= 0:
            errors['cost'] = 'Cost must be greater than zero.'

        methods = self.payment_methods
        if not isinstance(methods, list) or not methods:
            errors['payment_methods'] = 'Select at least one payment method.'
        else:
            unknown = [m for m in methods if m not in PaymentMethod.values]
            if unknown:
                errors['payment_methods'] = f"Unknown payment method(s): {', '.join(map(str, unknown))}."
            elif len(set(methods)) != len(methods):
                errors['payment_methods'] = 'Payment methods must not repeat.'
            elif PaymentMethod.QR_CODE in methods and self.qr_code_id is None:
                errors['qr_code'] = 'A QR code is required when QR code payments are accepted.'

        if (
            self.qr_code_id is not None
            and self.school_class_id is not None
            and self.qr_code.school_class_id != self.school_class_id
        ):
            errors['qr_code'] = 'The QR code belongs to another class.'

        if errors:
            raise ValidationError(errors)

    def accepts(self, method):
        return method in self.payment_methods

    @property
    def is_print(self):
        return self.category == self.Category.PRINT

    @property
    def total_collected(self):
        """Sum of all Paid payments for this event."""
        return (
            self.payments.filter(status=Payment.Status.PAID)
            .aggregate(models.Sum('amount'))['amount__sum'] or 0
        )

    @property
    def total_pending(self):
        """Sum of payments still waiting for money or for verification."""
        return (
            self.payments.filter(status__in=Payment.OPEN_STATUSES)
            .aggregate(models.Sum('amount'))['amount__sum'] or 0
        )


class Payment(models.Model):
    """
    One payment made by a student towards an Event.

    `amount`, the student snapshot and `event_name` are copied at creation
    and never updated afterwards, even if the event or student changes.
    """

    class Status(models.TextChoices):
        PENDING              = 'pending',              'Pending'
        VERIFICATION_PENDING = 'verification_pending', 'Verification Pending'
        PAID                 = 'paid',                 'Paid'
        FAILED               = 'failed',               'Failed'

    OPEN_STATUSES = (Status.PENDING, Status.VERIFICATION_PENDING)

    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        related_name='payments',
    )
    student = models.ForeignKey(
        'accounts.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments',
    )
    student_name = models.CharField(max_length=200)
    student_roll = models.CharField(max_length=30)
    student_email = models.EmailField(blank=True)
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name='payments',
    )
    event_name = models.CharField(max_length=200)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
    )
    transaction_id = models.CharField(
        max_length=40,
        unique=True,
        help_text='Reference generated when the payment is recorded.',
    )
    proof_url = models.CharField(
        max_length=500,
        blank=True,
        help_text='Screenshot proving a QR code transfer.',
    )
    status = models.CharField(
        max_length=30,
        choices=Status.choices,
        default=Status.PENDING,
    )
    status_changed_at = models.DateTimeField(null=True, blank=True)
    fraud_flagged = models.BooleanField(
        null=True,
        blank=True,
        help_text='Result of the last fraud screening; empty when never screened.',
    )
    fraud_explanation = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, verbose_name='Payment date')

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        indexes = [
            models.Index(fields=['event', 'status'], name='payment_event_status_idx'),
            models.Index(fields=['student'], name='payment_student_idx'),
        ]

    def __str__(self):
        return (
            f"{self.student_name} → {self.event_name} "
            f"({self.amount}, {self.get_status_display()})"
        )

    @property
    def awaiting_verification(self):
        return self.status == self.Status.VERIFICATION_PENDING


class PrintDistribution(models.Model):
    """
    Append-only record that a student collected the print of a Print event.
    Nothing at this level stops a second row for the same (student, event).
    """

    school_class = models.ForeignKey(
        'accounts.SchoolClass',
        on_delete=models.CASCADE,
        related_name='print_distributions',
    )
    student = models.ForeignKey(
        'accounts.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='print_distributions',
    )
    student_name = models.CharField(max_length=200)
    student_roll = models.CharField(max_length=30)
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name='print_distributions',
    )
    distributed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-distributed_at']
        verbose_name = 'Print Distribution'
        verbose_name_plural = 'Print Distributions'

    def __str__(self):
        return f"{self.student_name} ({self.student_roll}) – {self.event}"
