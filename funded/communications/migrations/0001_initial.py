import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('finances', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_type', models.CharField(
                    choices=[
                        ('payment_submitted', 'Payment Submitted'),
                        ('payment_approved', 'Payment Approved'),
                        ('payment_rejected', 'Payment Rejected'),
                        ('print_distributed', 'Print Distributed'),
                    ],
                    max_length=30,
                )),
                ('recipient_email', models.EmailField(max_length=254)),
                ('subject', models.CharField(blank=True, help_text='Email subject line.', max_length=255)),
                ('body_preview', models.TextField(
                    blank=True,
                    help_text='First 500 characters of the message body (for the audit log).',
                )),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('success', models.BooleanField(
                    default=True,
                    help_text='False if content generation or the send attempt failed.',
                )),
                ('error_message', models.TextField(blank=True, help_text='Error details if success=False.')),
                ('event', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='notifications',
                    to='finances.event',
                )),
                ('payment', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='notifications',
                    to='finances.payment',
                )),
                ('school_class', models.ForeignKey(
                    blank=True,
                    help_text='The class the notified payment, event or student belongs to.',
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notifications',
                    to='accounts.schoolclass',
                )),
                ('recipient', models.ForeignKey(
                    blank=True,
                    help_text='The student who was notified (empty if since deleted).',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='notifications_received',
                    to='accounts.student',
                )),
            ],
            options={
                'verbose_name': 'Notification Log',
                'verbose_name_plural': 'Notification Logs',
                'ordering': ['-sent_at'],
            },
        ),
    ]
