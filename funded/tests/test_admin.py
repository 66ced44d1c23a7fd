"""Tests for the operator admin: class scoping and payment actions.

Run with: pytest funded/tests/test_admin.py -v
"""

import pytest
from django.contrib import admin
from django.contrib.messages import get_messages
from django.contrib.messages.storage.fallback import FallbackStorage
from django.test import RequestFactory

from accounts import services as students
from accounts.models import CustomUser, Student
from communications.models import NotificationLog
from communications.textgen import locmem
from finances import services
from finances.models import Event, Payment, PaymentMethod, PrintDistribution, QrCode


def make_request(user):
    request = RequestFactory().post('/')
    request.user = user
    request.session = {}
    request._messages = FallbackStorage(request)
    return request


def messages_of(request):
    return [str(m) for m in get_messages(request)]


@pytest.fixture
def superuser(db):
    return CustomUser.objects.create_superuser(
        username='root', password='pass', role=CustomUser.Role.ADMIN,
    )


@pytest.fixture
def payment_admin():
    return admin.site._registry[Payment]


@pytest.mark.django_db
class TestScoping:
    """Representatives only see rows of the class they manage."""

    def test_representative_sees_own_class(self, representative, event, other_event):
        event_admin = admin.site._registry[Event]
        request = make_request(representative)
        assert list(event_admin.get_queryset(request)) == [event]

    def test_superuser_sees_everything(self, superuser, event, other_event):
        event_admin = admin.site._registry[Event]
        request = make_request(superuser)
        assert set(event_admin.get_queryset(request)) == {event, other_event}

    def test_representative_without_class_sees_nothing(self, db, event):
        loner = CustomUser.objects.create_user(username='loner', password='pass', is_staff=True)
        student_admin = admin.site._registry[Student]
        request = make_request(loner)
        assert not student_admin.get_queryset(request).exists()
        assert not student_admin.has_add_permission(request)

    def test_class_field_hidden_from_representative(self, representative):
        student_admin = admin.site._registry[Student]
        assert 'school_class' not in student_admin.get_fields(make_request(representative))

    def test_class_filled_in_on_save(self, representative, school_class):
        student_admin = admin.site._registry[Student]
        student = Student(roll_no='21CS050', name='New', email='new@example.com')
        student_admin.save_model(make_request(representative), student, form=None, change=False)
        assert student.school_class == school_class

    def test_payments_are_read_only(self, representative, payment_admin):
        request = make_request(representative)
        assert not payment_admin.has_add_permission(request)
        assert not payment_admin.has_delete_permission(request)

    def test_admin_role_is_not_scoped_to_a_class(self, school_class, event):
        """Only representatives are given a class to manage."""
        office = CustomUser.objects.create_user(
            username='office', password='pass', is_staff=True, role=CustomUser.Role.ADMIN,
        )
        school_class.representative = office
        school_class.save()

        request = make_request(office)
        event_admin = admin.site._registry[Event]
        assert not event_admin.get_queryset(request).exists()
        assert not event_admin.has_add_permission(request)

    def test_notification_log_outlives_student(self, representative, school_class, student, event,
                                               other_class, other_student, other_event,
                                               django_capture_on_commit_callbacks):
        """Logs stay visible to the class after the notified student is deleted."""
        with django_capture_on_commit_callbacks(execute=True):
            services.create_payment(school_class, student, event, PaymentMethod.CASH)
            services.create_payment(other_class, other_student, other_event, PaymentMethod.CASH)
        students.delete_student(school_class, student.pk)

        log_admin = admin.site._registry[NotificationLog]
        logs = list(log_admin.get_queryset(make_request(representative)))
        assert len(logs) == 1
        assert logs[0].recipient is None
        assert logs[0].school_class == school_class


@pytest.mark.django_db
class TestForms:
    """Validation and saving through the class-scoped admin forms."""

    def test_duplicate_roll_is_a_form_error(self, representative, student):
        form_class = admin.site._registry[Student].get_form(make_request(representative))
        form = form_class(data={
            'roll_no': '21CS001', 'name': 'Copy', 'email': 'copy@example.com', 'is_active': True,
        })

        assert not form.is_valid()
        assert Student.objects.count() == 1

    def test_new_roll_gets_the_class(self, representative, school_class, student):
        form_class = admin.site._registry[Student].get_form(make_request(representative))
        form = form_class(data={
            'roll_no': '21CS002', 'name': 'Bala', 'email': 'bala@example.com', 'is_active': True,
        })

        assert form.is_valid(), form.errors
        assert form.save().school_class == school_class

    def test_changed_upi_id_regenerates_image(self, representative, qr_code):
        request = make_request(representative)
        qr_admin = admin.site._registry[QrCode]
        form = qr_admin.get_form(request, qr_code)(
            data={'name': 'GPay', 'upi_id': 'new@ybl'}, instance=qr_code,
        )
        assert form.is_valid(), form.errors

        qr_admin.save_model(request, form.save(commit=False), form, change=True)

        qr_code.refresh_from_db()
        assert qr_code.upi_id == 'new@ybl'
        assert qr_code.image_url != '/media/qr_codes/gpay.png'
        assert qr_code.image_url.startswith('/media/qr_codes/')

    def test_rename_keeps_image(self, representative, qr_code):
        request = make_request(representative)
        qr_admin = admin.site._registry[QrCode]
        form = qr_admin.get_form(request, qr_code)(
            data={'name': 'Google Pay', 'upi_id': 'classfund@okaxis'}, instance=qr_code,
        )
        assert form.is_valid(), form.errors

        qr_admin.save_model(request, form.save(commit=False), form, change=True)

        qr_code.refresh_from_db()
        assert qr_code.name == 'Google Pay'
        assert qr_code.image_url == '/media/qr_codes/gpay.png'


@pytest.mark.django_db
class TestPaymentActions:
    """Tests for the admin actions on Payment."""

    def test_approve_selected(self, representative, school_class, student, event, payment_admin):
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        request = make_request(representative)

        payment_admin.approve_selected(request, Payment.objects.filter(pk=payment.pk))

        payment.refresh_from_db()
        assert payment.status == Payment.Status.PAID
        assert messages_of(request) == ['1 payment(s) approved.']

    def test_reject_final_payment_reports_error(self, representative, school_class, student, event,
                                                payment_admin):
        payment = services.create_payment(school_class, student, event, PaymentMethod.GATEWAY)
        request = make_request(representative)

        payment_admin.reject_selected(request, Payment.objects.filter(pk=payment.pk))

        payment.refresh_from_db()
        assert payment.status == Payment.Status.PAID
        assert messages_of(request) == [
            f'{payment.transaction_id}: Cannot reject a payment with status "Paid"',
        ]

    def test_distribute_prints_skips_ineligible(self, representative, school_class, student, print_event,
                                                payment_admin):
        paid = services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        classmate = Student.objects.create(
            school_class=school_class, roll_no='21CS002', name='Bala', email='bala@example.com',
        )
        pending = services.create_payment(school_class, classmate, print_event, PaymentMethod.CASH)
        request = make_request(representative)

        payment_admin.distribute_prints(request, Payment.objects.filter(pk__in=[paid.pk, pending.pk]))

        assert PrintDistribution.objects.get().student == student
        messages = messages_of(request)
        assert f'{pending.transaction_id}: skipped, not a paid and undistributed print.' in messages
        assert '1 print(s) distributed.' in messages

    def test_distribute_prints_not_twice(self, representative, school_class, student, print_event,
                                         payment_admin):
        paid = services.create_payment(school_class, student, print_event, PaymentMethod.GATEWAY)
        services.distribute(school_class, student, print_event)

        payment_admin.distribute_prints(make_request(representative), Payment.objects.filter(pk=paid.pk))

        assert PrintDistribution.objects.count() == 1

    def test_screen_selected(self, representative, school_class, student, event, payment_admin):
        payment = services.create_payment(school_class, student, event, PaymentMethod.CASH)
        locmem.reset('{"isFraudulent": true, "fraudExplanation": "Reused screenshot"}')
        request = make_request(representative)

        payment_admin.screen_selected(request, Payment.objects.filter(pk=payment.pk))

        payment.refresh_from_db()
        assert payment.fraud_flagged is True
        assert messages_of(request) == [f'{payment.transaction_id} looks suspicious: Reused screenshot']


@pytest.mark.django_db
class TestQrCodeDelete:
    """Deleting a QR code from the admin."""

    def test_delete_drops_qr_method(self, representative, event, qr_code):
        admin.site._registry[QrCode].delete_model(make_request(representative), qr_code)

        event.refresh_from_db()
        assert event.qr_code is None
        assert PaymentMethod.QR_CODE not in event.payment_methods

    def test_qr_only_event_is_protected(self, representative, school_class, qr_code):
        services.create_event(
            school_class, name='Hackathon', cost='500', deadline='2026-12-01',
            methods=[PaymentMethod.QR_CODE], qr_code=qr_code,
        )
        request = make_request(representative)

        *_, protected = admin.site._registry[QrCode].get_deleted_objects([qr_code], request)

        assert protected == ['Event: Hackathon (accepts only QR code payments)']
