import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='QrCode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text="Display name, e.g. 'GPay Business'.", max_length=100)),
                ('image_url', models.CharField(help_text='Where the QR image is served from.', max_length=500)),
                ('upi_id', models.CharField(
                    blank=True,
                    help_text="Payee address the QR encodes, e.g. 'classfund@okaxis'.",
                    max_length=100,
                    verbose_name='UPI id',
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='qr_codes',
                    to='accounts.schoolclass',
                )),
            ],
            options={
                'verbose_name': 'QR Code',
                'verbose_name_plural': 'QR Codes',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('cost', models.DecimalField(decimal_places=2, help_text='Amount each student pays.', max_digits=10)),
                ('deadline', models.DateField()),
                ('category', models.CharField(
                    choices=[('normal', 'Normal'), ('print', 'Print')],
                    default='normal',
                    help_text='Print events unlock print distribution for paid students.',
                    max_length=10,
                )),
                ('payment_methods', models.JSONField(
                    default=list,
                    help_text='Accepted payment methods, e.g. ["gateway", "cash"].',
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('qr_code', models.ForeignKey(
                    blank=True,
                    help_text='Required when QR code payments are accepted.',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='events',
                    to='finances.qrcode',
                )),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='events',
                    to='accounts.schoolclass',
                )),
            ],
            options={
                'verbose_name': 'Event',
                'verbose_name_plural': 'Events',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('student_name', models.CharField(max_length=200)),
                ('student_roll', models.CharField(max_length=30)),
                ('student_email', models.EmailField(blank=True, max_length=254)),
                ('event_name', models.CharField(max_length=200)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('method', models.CharField(
                    choices=[('gateway', 'Gateway'), ('qr_code', 'QR Code'), ('cash', 'Cash')],
                    max_length=20,
                )),
                ('transaction_id', models.CharField(
                    help_text='Reference generated when the payment is recorded.',
                    max_length=40,
                    unique=True,
                )),
                ('proof_url', models.CharField(
                    blank=True,
                    help_text='Screenshot proving a QR code transfer.',
                    max_length=500,
                )),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('verification_pending', 'Verification Pending'),
                        ('paid', 'Paid'),
                        ('failed', 'Failed'),
                    ],
                    default='pending',
                    max_length=30,
                )),
                ('status_changed_at', models.DateTimeField(blank=True, null=True)),
                ('fraud_flagged', models.BooleanField(
                    blank=True,
                    help_text='Result of the last fraud screening; empty when never screened.',
                    null=True,
                )),
                ('fraud_explanation', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Payment date')),
                ('event', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='payments',
                    to='finances.event',
                )),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='payments',
                    to='accounts.schoolclass',
                )),
                ('student', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='payments',
                    to='accounts.student',
                )),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['event', 'status'], name='payment_event_status_idx'),
                    models.Index(fields=['student'], name='payment_student_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PrintDistribution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('student_name', models.CharField(max_length=200)),
                ('student_roll', models.CharField(max_length=30)),
                ('distributed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('event', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='print_distributions',
                    to='finances.event',
                )),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='print_distributions',
                    to='accounts.schoolclass',
                )),
                ('student', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='print_distributions',
                    to='accounts.student',
                )),
            ],
            options={
                'verbose_name': 'Print Distribution',
                'verbose_name_plural': 'Print Distributions',
                'ordering': ['-distributed_at'],
            },
        ),
    ]
