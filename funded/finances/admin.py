"""
finances/admin.py
─────────────────
Operator dashboard for QrCode, Event, Payment and PrintDistribution.

Payments are never typed in here: they are read-only and move only through
the Approve / Reject actions, which go through the workflow services so the
same transition rules and student emails apply.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from accounts.admin import ClassScopedAdminMixin

from . import fraud, services
from .errors import DomainError
from .forms import EventForm, QrCodeForm
from .models import Event, Payment, PaymentMethod, PrintDistribution, QrCode
from .qr import qr_png_base64
from .services.catalog import store_qr_image


@admin.register(QrCode)
class QrCodeAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    form            = QrCodeForm
    list_display    = ('name', 'upi_id', 'school_class', 'created_at')
    search_fields   = ('name', 'upi_id')
    readonly_fields = ('preview', 'created_at')

    @admin.display(description='Image')
    def preview(self, obj):
        if not obj.image_url:
            return '—'
        return format_html('<img src="{}" alt="{}" style="max-width:200px">', obj.image_url, obj.name)

    def save_model(self, request, obj, form, change):
        image = form.cleaned_data.get('image')
        upi_changed = change and 'upi_id' in form.changed_data and obj.upi_id
        if image or upi_changed or not obj.image_url:
            obj.image_url = store_qr_image(obj.name, obj.upi_id, image)
        super().save_model(request, obj, form, change)

    def get_deleted_objects(self, objs, request):
        deleted, model_count, perms_needed, protected = super().get_deleted_objects(objs, request)
        qr_only = [
            event for event in Event.objects.filter(qr_code__in=objs)
            if set(event.payment_methods) <= {PaymentMethod.QR_CODE}
        ]
        protected = list(protected) + [
            f'Event: {event.name} (accepts only QR code payments)' for event in qr_only
        ]
        return deleted, model_count, perms_needed, protected

    def delete_model(self, request, obj):
        services.delete_qr_code(obj.school_class, obj.pk)

    def delete_queryset(self, request, queryset):
        for qr_code in queryset.select_related('school_class'):
            services.delete_qr_code(qr_code.school_class, qr_code.pk)


@admin.register(Event)
class EventAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    form            = EventForm
    list_display    = ('name', 'category', 'cost', 'deadline', 'school_class',
                       'total_collected', 'total_pending')
    list_filter     = ('category', 'deadline')
    search_fields   = ('name', 'description')
    readonly_fields = ('created_at', 'updated_at', 'total_collected', 'total_pending', 'payment_qr')

    fieldsets = (
        (None, {
            'fields': ('school_class', 'name', 'description', 'cost', 'deadline', 'category'),
        }),
        ('Payment Methods', {
            'fields': ('payment_methods', 'qr_code', 'payment_qr'),
        }),
        ('Collection', {
            'fields': ('total_collected', 'total_pending'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_fieldsets(self, request, obj=None):
        if request.user.is_superuser:
            return self.fieldsets
        return tuple(
            (title, {**opts, 'fields': tuple(f for f in opts['fields'] if f != self.scope_field)})
            for title, opts in self.fieldsets
        )

    @admin.display(description='Collected')
    def total_collected(self, obj):
        return obj.total_collected

    @admin.display(description='Pending')
    def total_pending(self, obj):
        return obj.total_pending

    @admin.display(description='Payment QR')
    def payment_qr(self, obj):
        """QR with the event amount filled in, when the payee has a UPI id."""
        qr_code = obj.qr_code if obj.pk else None
        if qr_code is None:
            return '—'
        if qr_code.upi_id:
            png = qr_png_base64(qr_code.upi_id, qr_code.name, obj.cost, obj.name)
            return format_html('<img src="data:image/png;base64,{}" alt="UPI QR">', png)
        return format_html('<img src="{}" alt="{}" style="max-width:200px">', qr_code.image_url, qr_code.name)


@admin.register(Payment)
class PaymentAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    list_display  = ('transaction_id', 'student_roll', 'student_name', 'event_name', 'amount',
                     'method', 'status', 'fraud_flagged', 'created_at')
    list_filter   = ('status', 'method', 'fraud_flagged', ('event', admin.RelatedOnlyFieldListFilter))
    search_fields = ('transaction_id', 'student_roll', 'student_name', 'event_name')
    actions       = ('approve_selected', 'reject_selected', 'screen_selected', 'distribute_prints')

    fieldsets = (
        (None, {
            'fields': ('transaction_id', 'event', 'event_name', 'amount', 'method', 'status',
                       'status_changed_at', 'created_at'),
        }),
        ('Student', {
            'fields': ('student', 'student_roll', 'student_name', 'student_email'),
        }),
        ('Proof', {
            'fields': ('proof',),
        }),
        ('Fraud Screening', {
            'fields': ('fraud_flagged', 'fraud_explanation'),
        }),
    )
    readonly_fields = (
        'transaction_id', 'event', 'event_name', 'amount', 'method', 'status',
        'status_changed_at', 'created_at', 'student', 'student_roll', 'student_name',
        'student_email', 'proof', 'fraud_flagged', 'fraud_explanation',
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description='Screenshot')
    def proof(self, obj):
        if not obj.proof_url:
            return '—'
        return format_html('<a href="{0}" target="_blank"><img src="{0}" style="max-width:300px"></a>',
                           obj.proof_url)

    # ── Actions ──────────────────────────────────────────────────────────────

    def _run(self, request, queryset, fn, done_message):
        done = 0
        for payment in queryset.select_related('school_class'):
            try:
                fn(payment.school_class, payment.pk)
            except DomainError as exc:
                self.message_user(request, f'{payment.transaction_id}: {exc.message}', messages.ERROR)
            else:
                done += 1
        if done:
            self.message_user(request, done_message.format(count=done), messages.SUCCESS)

    @admin.action(description='Approve selected payments')
    def approve_selected(self, request, queryset):
        self._run(request, queryset, services.approve, '{count} payment(s) approved.')

    @admin.action(description='Reject selected payments')
    def reject_selected(self, request, queryset):
        self._run(request, queryset, services.reject, '{count} payment(s) rejected.')

    @admin.action(description='Run fraud screening')
    def screen_selected(self, request, queryset):
        flagged = 0
        for payment in queryset.select_related('school_class'):
            try:
                assessment = fraud.screen_payment(payment.school_class, payment.pk)
            except DomainError as exc:
                self.message_user(request, f'{payment.transaction_id}: {exc.message}', messages.ERROR)
                continue
            if assessment.is_fraudulent:
                flagged += 1
                self.message_user(
                    request,
                    f'{payment.transaction_id} looks suspicious: {assessment.explanation}',
                    messages.WARNING,
                )
        if not flagged:
            self.message_user(request, 'No selected payment was flagged.', messages.INFO)

    @admin.action(description='Distribute prints to selected students')
    def distribute_prints(self, request, queryset):
        done = 0
        for payment in queryset.select_related('school_class', 'event', 'student'):
            event = payment.event
            eligible = (
                payment.status == Payment.Status.PAID
                and event.is_print
                and payment.student is not None
                and services.eligible_students(payment.school_class, event)
                            .filter(pk=payment.student_id).exists()
            )
            if not eligible:
                self.message_user(
                    request,
                    f'{payment.transaction_id}: skipped, not a paid and undistributed print.',
                    messages.WARNING,
                )
                continue
            services.distribute(payment.school_class, payment.student, event)
            done += 1
        if done:
            self.message_user(request, f'{done} print(s) distributed.', messages.SUCCESS)


@admin.register(PrintDistribution)
class PrintDistributionAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    list_display    = ('student_roll', 'student_name', 'event', 'distributed_at')
    list_filter     = (('event', admin.RelatedOnlyFieldListFilter),)
    search_fields   = ('student_roll', 'student_name', 'event__name')
    readonly_fields = ('school_class', 'student', 'student_name', 'student_roll', 'event', 'distributed_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
