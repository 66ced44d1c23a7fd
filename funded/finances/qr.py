"""
finances/qr.py
──────────────
UPI QR code helpers.

Representatives who do not have a QR image from their payment app can give a
UPI id instead; the image is generated here and put in the blob store.
"""

import base64
import io
from urllib.parse import urlencode

import qrcode


def build_upi_uri(upi_id: str, payee_name: str = '', amount=None, note: str = '') -> str:
    """Return the `upi://pay?...` URI that payment apps understand."""
    params = {'pa': upi_id.strip()}
    if payee_name:
        params['pn'] = payee_name[:50]
    if amount is not None:
        params['am'] = f'{amount:.2f}' if not isinstance(amount, str) else amount
        params['cu'] = 'INR'
    if note:
        params['tn'] = note[:80]
    return 'upi://pay?' + urlencode(params)


def generate_upi_qr(
    upi_id: str,
    payee_name: str = '',
    amount=None,
    note: str = '',
    box_size: int = 7,
) -> bytes:
    """Build a UPI payment QR code and return it as PNG bytes."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=4,
    )
    qr.add_data(build_upi_uri(upi_id, payee_name, amount, note))
    qr.make(fit=True)

    img = qr.make_image(fill_color='#1a1a2e', back_color='white')
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


def qr_png_base64(upi_id: str, payee_name: str = '', amount=None, note: str = '') -> str:
    """Same image as generate_upi_qr, base64-encoded for inline <img> tags."""
    png = generate_upi_qr(upi_id, payee_name, amount, note)
    return base64.b64encode(png).decode('utf-8')
