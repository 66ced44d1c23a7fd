"""
communications/textgen/gemini.py
────────────────────────────────
Google Gemini backend, talking to the public `generateContent` REST endpoint.
"""

import logging

import requests
from django.conf import settings

from . import BaseTextBackend

logger = logging.getLogger(__name__)


class TextBackend(BaseTextBackend):
    BASE_URL = 'https://generativelanguage.googleapis.com/v1beta'

    def __init__(self, api_key=None, model=None, timeout=None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model   = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.GEMINI_TIMEOUT

    # -----------------------------
    # Request body
    # -----------------------------
    def build_payload(self, prompt, media=None, json_output=False):
        parts = [{'text': prompt}]
        if media:
            mime_type, data = parse_data_uri(media)
            parts.append({'inline_data': {'mime_type': mime_type, 'data': data}})

        payload = {'contents': [{'role': 'user', 'parts': parts}]}
        if json_output:
            payload['generationConfig'] = {'responseMimeType': 'application/json'}
        return payload

    # -----------------------------
    # Generate
    # -----------------------------
    def generate(self, prompt, *, media=None, json_output=False):
        if not self.api_key:
            logger.error('GEMINI_API_KEY is not configured; no text generated.')
            return ''

        url = f'{self.BASE_URL}/models/{self.model}:generateContent'
        try:
            response = requests.post(
                url,
                params={'key': self.api_key},
                json=self.build_payload(prompt, media, json_output),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error('Gemini request failed: %s', exc)
            return ''

        return extract_text(data)


def parse_data_uri(data_uri: str):
    """Split 'data:<mime>;base64,<payload>' into (mime, payload)."""
    header, _, payload = data_uri.partition(',')
    if not header.startswith('data:') or ';base64' not in header or not payload:
        raise ValueError('Expected a base64 data URI')
    return header[len('data:'):].split(';', 1)[0], payload


def extract_text(data: dict) -> str:
    """Concatenate the text parts of the first candidate, '' when there are none."""
    candidates = data.get('candidates') or []
    if not candidates:
        logger.warning('Gemini returned no candidates: %s', data.get('promptFeedback'))
        return ''
    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts).strip()
