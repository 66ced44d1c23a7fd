"""
communications/textgen/locmem.py
────────────────────────────────
In-memory backend for tests and offline development.

Prompts are appended to the module-level `prompts` list (like
django.core.mail.outbox) and the module-level `reply` is returned.
"""

from . import BaseTextBackend

DEFAULT_REPLY = 'Hello,\nThis is a generated message.\nSincerely, The FundEd Team'

prompts = []
reply = DEFAULT_REPLY


class TextBackend(BaseTextBackend):
    def generate(self, prompt, *, media=None, json_output=False):
        prompts.append({'prompt': prompt, 'media': media, 'json_output': json_output})
        return reply


def reset(new_reply=None):
    """Clear recorded prompts and set the canned reply (default when None)."""
    global reply
    prompts.clear()
    reply = DEFAULT_REPLY if new_reply is None else new_reply
