"""
finances/storage.py
───────────────────
Blob store for proof-of-payment screenshots and QR images.

Files go through Django's `default_storage`, so switching to S3 or another
backend is a settings change.  Callers only ever keep the returned URL.
"""

import logging
import mimetypes
from urllib.parse import unquote

from django.conf import settings
from django.core.files.base import ContentFile, File
from django.core.files.storage import default_storage
from django.utils.crypto import get_random_string

logger = logging.getLogger(__name__)

PROOF_FOLDER = 'payment_proofs'
QR_FOLDER    = 'qr_codes'


def store_blob(content, filename: str, folder: str) -> str:
    """
    Save *content* (bytes or a Django File / UploadedFile) under *folder* and
    return the URL it can be retrieved from.
    """
    if isinstance(content, (bytes, bytearray)):
        content = ContentFile(bytes(content))
    elif not isinstance(content, File):
        content = File(content)

    safe_name = default_storage.get_valid_name(filename or 'upload')
    name = default_storage.save(f'{folder}/{get_random_string(8)}-{safe_name}', content)
    url = default_storage.url(name)
    logger.info('Stored %s (%s bytes) at %s', name, content.size, url)
    return url


def read_blob(url: str):
    """
    Return (bytes, content_type) for a URL produced by store_blob, or None
    when the URL does not point into the configured storage.
    """
    media_url = settings.MEDIA_URL
    if not url or not url.startswith(media_url):
        return None
    name = unquote(url[len(media_url):])
    if not default_storage.exists(name):
        logger.warning('Blob %s referenced but missing from storage', name)
        return None
    with default_storage.open(name, 'rb') as fh:
        content = fh.read()
    content_type = mimetypes.guess_type(name)[0] or 'application/octet-stream'
    return content, content_type
