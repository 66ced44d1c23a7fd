"""
finances/fraud.py
─────────────────
Ask the text-generation model whether a payment looks fraudulent.

This is advisory: the verdict is stored on the payment for the
representative to read before approving, it never changes the status.
"""

import base64
import json
import logging
from dataclasses import dataclass

from django.conf import settings
from django.template.loader import render_to_string

from communications.textgen import generate_text

from .errors import FraudDetectionError
from .models import Payment
from .services.utils import get_class_payment
from .storage import read_blob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FraudAssessment:
    is_fraudulent: bool
    explanation: str


def to_data_uri(content: bytes, content_type: str = 'image/png') -> str:
    """Encode raw image bytes as 'data:<mime>;base64,<payload>'."""
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def parse_assessment(text: str) -> FraudAssessment:
    """Turn the model's JSON reply into a FraudAssessment."""
    cleaned = text.strip()
    # Models sometimes wrap JSON in a ```json fence
    if cleaned.startswith('```'):
        cleaned = cleaned.strip('`')
        if cleaned.lower().startswith('json'):
            cleaned = cleaned[4:]
    try:
        data = json.loads(cleaned)
    except ValueError:
        raise FraudDetectionError('The model did not return valid JSON.')

    if not isinstance(data, dict) or not isinstance(data.get('isFraudulent'), bool):
        raise FraudDetectionError('The model reply is missing "isFraudulent".')
    return FraudAssessment(
        is_fraudulent=data['isFraudulent'],
        explanation=str(data.get('fraudExplanation', '')).strip(),
    )


def detect_fraud(payment_data, student_info, event_details, screenshot_data_uri=None):
    """
    Screen one payment.  Raises FraudDetectionError when the model returns
    nothing or something that is not the expected JSON object.
    """
    prompt = render_to_string('finances/prompts/fraud_detection.txt', {
        'payment_data':   payment_data,
        'student_info':   student_info,
        'event_details':  event_details,
        'has_screenshot': bool(screenshot_data_uri),
    })
    text = generate_text(prompt, media=screenshot_data_uri, json_output=True)
    if not text:
        raise FraudDetectionError('The model returned no answer.')
    return parse_assessment(text)


def describe_payment(payment):
    """The three plain-text descriptions the fraud prompt expects."""
    currency = settings.FUNDED_CURRENCY
    payment_data = (
        f'Transaction ID: {payment.transaction_id}, '
        f'Amount: {payment.amount} {currency}, '
        f'Method: {payment.get_method_display()}, '
        f'Submitted: {payment.created_at.isoformat()}'
    )
    if payment.proof_url:
        payment_data += f', Proof: {payment.proof_url}'
    student_info = (
        f'Roll No: {payment.student_roll}, '
        f'Name: {payment.student_name}, '
        f'Email: {payment.student_email}'
    )
    event = payment.event
    event_details = (
        f'Name: {event.name}, '
        f'Cost: {event.cost} {currency}, '
        f'Deadline: {event.deadline.isoformat()}'
    )
    return payment_data, student_info, event_details


def screen_payment(school_class, payment_id, screenshot=None, content_type='image/png'):
    """
    Run detect_fraud for a stored payment and save the verdict on it.

    *screenshot* is optional raw image bytes; when omitted, the uploaded
    proof of a QR code payment is read back from the blob store.
    """
    payment = get_class_payment(school_class, payment_id)
    if screenshot is None and payment.proof_url:
        blob = read_blob(payment.proof_url)
        if blob is not None:
            screenshot, content_type = blob
    data_uri = to_data_uri(screenshot, content_type) if screenshot else None

    assessment = detect_fraud(*describe_payment(payment), screenshot_data_uri=data_uri)

    Payment.objects.filter(pk=payment.pk).update(
        fraud_flagged=assessment.is_fraudulent,
        fraud_explanation=assessment.explanation,
    )
    if assessment.is_fraudulent:
        logger.warning('Payment %s flagged as possibly fraudulent', payment.transaction_id)
    return assessment
