"""Pytest configuration and shared fixtures."""

import datetime
from decimal import Decimal

import pytest

from accounts.models import CustomUser, SchoolClass, Student
from communications.textgen import locmem
from finances.models import Event, PaymentMethod, QrCode


@pytest.fixture(autouse=True)
def funded_settings(settings, tmp_path):
    """Offline text generation, throwaway media and plain static storage."""
    settings.FUNDED_TEXT_BACKEND = 'communications.textgen.locmem.TextBackend'
    settings.FUNDED_NOTIFY_ON_REJECT = False
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.STORAGES = {
        'default':     {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
        'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    }
    locmem.reset()
    yield settings
    locmem.reset()


@pytest.fixture
def representative(db):
    return CustomUser.objects.create_user(
        username='rep', password='pass', is_staff=True,
        role=CustomUser.Role.REPRESENTATIVE,
    )


@pytest.fixture
def school_class(db, representative):
    return SchoolClass.objects.create(name='CSE-A 2026', representative=representative)


@pytest.fixture
def other_class(db):
    return SchoolClass.objects.create(name='ECE-B 2026')


@pytest.fixture
def student(school_class):
    return Student.objects.create(
        school_class=school_class, roll_no='21CS001', name='Asha Rao', email='asha@example.com',
    )


@pytest.fixture
def other_student(other_class):
    return Student.objects.create(
        school_class=other_class, roll_no='21EC001', name='Ravi Kumar', email='ravi@example.com',
    )


@pytest.fixture
def qr_code(school_class):
    return QrCode.objects.create(
        school_class=school_class, name='GPay', image_url='/media/qr_codes/gpay.png',
        upi_id='classfund@okaxis',
    )


@pytest.fixture
def event(school_class, qr_code):
    """A Normal event accepting every payment method."""
    return Event.objects.create(
        school_class=school_class,
        name='Industrial Visit',
        cost=Decimal('500.00'),
        deadline=datetime.date(2026, 12, 1),
        payment_methods=[PaymentMethod.GATEWAY, PaymentMethod.QR_CODE, PaymentMethod.CASH],
        qr_code=qr_code,
    )


@pytest.fixture
def print_event(school_class):
    return Event.objects.create(
        school_class=school_class,
        name='Lab Record Print',
        cost=Decimal('120.00'),
        deadline=datetime.date(2026, 11, 15),
        category=Event.Category.PRINT,
        payment_methods=[PaymentMethod.GATEWAY, PaymentMethod.CASH],
    )


@pytest.fixture
def other_event(other_class):
    return Event.objects.create(
        school_class=other_class,
        name='Farewell',
        cost=Decimal('300.00'),
        deadline=datetime.date(2026, 12, 20),
        payment_methods=[PaymentMethod.CASH],
    )
