"""
communications/admin.py
────────────────────────
Admin for NotificationLog (read-only audit trail).
"""

from django.contrib import admin

from accounts.admin import ClassScopedAdminMixin

from .models import NotificationLog


@admin.register(NotificationLog)
class NotificationLogAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    list_display  = ('notification_type', 'recipient_email', 'recipient', 'event', 'school_class',
                     'sent_at', 'success')
    list_filter   = ('notification_type', 'success', 'sent_at')
    search_fields = ('recipient_email', 'recipient__roll_no', 'recipient__name', 'subject')
    readonly_fields = (
        'notification_type', 'recipient', 'recipient_email', 'payment', 'event',
        'subject', 'body_preview', 'success', 'error_message', 'sent_at',
    )

    fieldsets = (
        (None, {
            'fields': ('recipient', 'recipient_email', 'notification_type', 'payment', 'event'),
        }),
        ('Content', {
            'fields': ('subject', 'body_preview'),
        }),
        ('Result', {
            'fields': ('success', 'error_message', 'sent_at'),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
