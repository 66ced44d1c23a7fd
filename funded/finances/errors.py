"""
finances/errors.py
──────────────────
Domain errors raised by the service layer.

Each error carries a stable code and a message that is safe to show to an
operator.  The admin turns them into flash messages; nothing is retried.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND        = 'EVENT_NOT_FOUND'
    STUDENT_NOT_FOUND      = 'STUDENT_NOT_FOUND'
    PAYMENT_NOT_FOUND      = 'PAYMENT_NOT_FOUND'
    QR_CODE_NOT_FOUND      = 'QR_CODE_NOT_FOUND'
    INVALID_TRANSITION     = 'INVALID_TRANSITION'
    METHOD_NOT_ACCEPTED    = 'METHOD_NOT_ACCEPTED'
    PROOF_NOT_ALLOWED      = 'PROOF_NOT_ALLOWED'
    NOT_A_PRINT_EVENT      = 'NOT_A_PRINT_EVENT'
    FRAUD_DETECTION_FAILED = 'FRAUD_DETECTION_FAILED'


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event does not exist in the given class."""

    def __init__(self, event_id) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message='Event not found')
        self.event_id = event_id


class StudentNotFoundError(DomainError):
    """Raised when a student does not exist in the given class."""

    def __init__(self, student_id) -> None:
        super().__init__(code=ErrorCode.STUDENT_NOT_FOUND, message='Student not found')
        self.student_id = student_id


class PaymentNotFoundError(DomainError):
    """Raised when a payment does not exist in the given class."""

    def __init__(self, payment_id) -> None:
        super().__init__(code=ErrorCode.PAYMENT_NOT_FOUND, message='Payment not found')
        self.payment_id = payment_id


class QrCodeNotFoundError(DomainError):
    """Raised when a QR code does not exist in the given class."""

    def __init__(self, qr_code_id) -> None:
        super().__init__(code=ErrorCode.QR_CODE_NOT_FOUND, message='QR code not found')
        self.qr_code_id = qr_code_id


class InvalidTransitionError(DomainError):
    """Raised when approve/reject is applied to a payment that is not awaiting verification."""

    def __init__(self, payment_id, current_status: str, action: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f'Cannot {action} a payment with status "{current_status}"',
        )
        self.payment_id = payment_id
        self.current_status = current_status


class PaymentMethodNotAcceptedError(DomainError):
    """Raised when a payment uses a method the event does not accept."""

    def __init__(self, method: str) -> None:
        super().__init__(
            code=ErrorCode.METHOD_NOT_ACCEPTED,
            message=f'This event does not accept "{method}" payments',
        )
        self.method = method


class ProofNotAllowedError(DomainError):
    """Raised when a proof-of-payment file is attached to a non-QR payment."""

    def __init__(self, method: str) -> None:
        super().__init__(
            code=ErrorCode.PROOF_NOT_ALLOWED,
            message='Proof of payment can only be attached to QR code payments',
        )
        self.method = method


class NotAPrintEventError(DomainError):
    """Raised when prints are distributed for a Normal event."""

    def __init__(self, event_id) -> None:
        super().__init__(
            code=ErrorCode.NOT_A_PRINT_EVENT,
            message='Prints can only be distributed for Print events',
        )
        self.event_id = event_id


class FraudDetectionError(DomainError):
    """Raised when the fraud screening model returns nothing usable."""

    def __init__(self, detail: str = 'An unexpected error occurred.') -> None:
        super().__init__(code=ErrorCode.FRAUD_DETECTION_FAILED, message=detail)
