"""
communications/textgen/
───────────────────────
Pluggable text-generation backends, selected with FUNDED_TEXT_BACKEND the same
way Django selects an EMAIL_BACKEND.

Every backend implements

    generate(prompt, *, media=None, json_output=False) -> str

and returns '' when nothing could be generated.  `media` is an optional
data URI (e.g. a payment screenshot) sent along with the prompt.
"""

from django.conf import settings
from django.utils.module_loading import import_string


class BaseTextBackend:
    """Base class for text-generation backends."""

    def generate(self, prompt: str, *, media: str | None = None, json_output: bool = False) -> str:
        raise NotImplementedError('subclasses of BaseTextBackend must implement generate()')


def get_backend(backend: str | None = None, **kwargs) -> BaseTextBackend:
    """Instantiate the configured backend (or *backend*, a dotted path)."""
    klass = import_string(backend or settings.FUNDED_TEXT_BACKEND)
    return klass(**kwargs)


def generate_text(prompt: str, *, media: str | None = None, json_output: bool = False) -> str:
    """Shortcut: run *prompt* through the configured backend."""
    return get_backend().generate(prompt, media=media, json_output=json_output)
