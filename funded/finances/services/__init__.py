"""
finances/services/
──────────────────
Split into sub-modules for clarity:
  utils.py    – shared helpers (scope guards, transaction ids, on-commit notify)
  catalog.py  – events and QR codes
  ledger.py   – recording and reading payments
  workflow.py – approve / reject verification
  prints.py   – print distribution for Print events
"""
from .catalog import (
    create_event,
    create_qr_code,
    delete_event,
    delete_qr_code,
    get_event,
    get_qr_code,
    list_events,
    list_qr_codes,
    update_event,
)
from .ledger import (
    create_payment,
    get_payment,
    initial_status_for,
    list_payments_for_event,
    list_payments_for_student,
    update_payment_status,
)
from .prints import distribute, eligible_students, list_distributions
from .workflow import approve, available_actions, reject

__all__ = [
    # catalog
    'create_event',
    'update_event',
    'delete_event',
    'get_event',
    'list_events',
    'create_qr_code',
    'delete_qr_code',
    'get_qr_code',
    'list_qr_codes',
    # ledger
    'create_payment',
    'get_payment',
    'initial_status_for',
    'list_payments_for_event',
    'list_payments_for_student',
    'update_payment_status',
    # workflow
    'approve',
    'reject',
    'available_actions',
    # prints
    'eligible_students',
    'distribute',
    'list_distributions',
]
