"""
finances/services/catalog.py
────────────────────────────
Event catalog and QR code management for one SchoolClass.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction

from ..errors import QrCodeNotFoundError
from ..models import Event, PaymentMethod, QrCode
from ..qr import generate_upi_qr
from ..storage import QR_FOLDER, store_blob
from .utils import get_class_event

logger = logging.getLogger(__name__)

EVENT_FIELDS = ('name', 'description', 'cost', 'deadline', 'category', 'payment_methods', 'qr_code')


def _to_decimal(value):
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({'cost': 'Enter a number.'})


# ── QR codes ──────────────────────────────────────────────────────────────────

def list_qr_codes(school_class):
    return QrCode.objects.filter(school_class=school_class)


def get_qr_code(school_class, qr_code_id):
    try:
        return QrCode.objects.get(pk=qr_code_id, school_class=school_class)
    except (QrCode.DoesNotExist, ValueError, TypeError):
        raise QrCodeNotFoundError(qr_code_id)


def store_qr_image(name, upi_id='', image=None):
    """
    Put a QR image in the blob store and return its URL.  Without *image*
    the PNG is generated from *upi_id*.
    """
    if image is None:
        image = generate_upi_qr(upi_id, payee_name=name)
        filename = f'{upi_id}.png'
    else:
        filename = getattr(image, 'name', None) or f'{name}.png'
    return store_blob(image, filename, QR_FOLDER)


def create_qr_code(school_class, *, name, image=None, upi_id=''):
    """
    Register a payee QR code.  Either upload *image* (bytes or a file) or
    give a *upi_id* and the image is generated.
    """
    upi_id = upi_id.strip()
    if image is None and not upi_id:
        raise ValidationError('Upload a QR image or enter a UPI id.')

    qr_code = QrCode(school_class=school_class, name=name.strip(), upi_id=upi_id)
    qr_code.full_clean(exclude=['image_url'])
    qr_code.image_url = store_qr_image(qr_code.name, upi_id, image)
    qr_code.save()
    logger.info('QR code "%s" added to %s', qr_code.name, school_class)
    return qr_code


def delete_qr_code(school_class, qr_code_id):
    """
    Events that used this QR code stop accepting QR code payments and keep
    their other payment methods.  Refused while an event accepts nothing
    else.
    """
    qr_code = get_qr_code(school_class, qr_code_id)
    with transaction.atomic():
        for event in qr_code.events.select_for_update():
            methods = [m for m in event.payment_methods if m != PaymentMethod.QR_CODE]
            if not methods:
                raise ValidationError(
                    f'"{event.name}" only accepts QR code payments; change its payment methods first.'
                )
            event.payment_methods = methods
            event.qr_code = None
            event.save(update_fields=['payment_methods', 'qr_code', 'updated_at'])
        qr_code.delete()
    logger.info('QR code "%s" deleted from %s', qr_code.name, school_class)


# ── Events ────────────────────────────────────────────────────────────────────

def list_events(school_class):
    return Event.objects.filter(school_class=school_class).order_by('-created_at')


def get_event(school_class, event_id):
    return get_class_event(school_class, event_id)


def create_event(
    school_class, *, name, cost, deadline, methods,
    description='', category=Event.Category.NORMAL, qr_code=None,
):
    event = Event(
        school_class=school_class,
        name=name.strip(),
        description=description,
        cost=_to_decimal(cost),
        deadline=deadline,
        category=category,
        payment_methods=list(methods),
        qr_code=qr_code,
    )
    event.full_clean()
    event.save()
    logger.info('Event "%s" created in %s (cost %s)', event.name, school_class, event.cost)
    return event


def update_event(school_class, event_id, **fields):
    """
    Edit an event.  Payments already recorded keep the amount and event name
    they were created with.
    """
    event = get_class_event(school_class, event_id)
    unknown = set(fields) - set(EVENT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown event field(s): {', '.join(sorted(unknown))}")
    if 'cost' in fields:
        fields['cost'] = _to_decimal(fields['cost'])
    if 'payment_methods' in fields:
        fields['payment_methods'] = list(fields['payment_methods'])
    for name, value in fields.items():
        setattr(event, name, value)
    event.full_clean()
    event.save()
    return event


def delete_event(school_class, event_id):
    """Removes the event together with its payments and distributions."""
    event = get_class_event(school_class, event_id)
    event.delete()
    logger.info('Event "%s" deleted from %s', event.name, school_class)
