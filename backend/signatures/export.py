"""
Signature Export - clipboard payloads and copy/save gates

A copy writes two representations: the rich HTML fragment and a plain-text
rendition for clients that paste as text. Writers are tried in order; the
copy only fails when every writer fails.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .models import ContactData, ImageState

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r'\s+')


class ExportError(Exception):
    """Raised when no export strategy could write the signature."""

    def __init__(self, message: str, failures: Sequence[Tuple[str, str]] = ()):
        super().__init__(message)
        self.failures = list(failures)


@dataclass(frozen=True)
class ExportPayload:
    html: str
    text: str

    def to_dict(self):
        return {"html": self.html, "text": self.text}


# A strategy receives the payload and raises on failure
ExportStrategy = Callable[[ExportPayload], None]


def build_export(html: str) -> ExportPayload:
    """
    Build the clipboard payload.

    The text form is the HTML with every whitespace run collapsed to a
    single space; tags are kept so a legacy paste still carries the markup.
    """
    html = html or ""
    text = _WHITESPACE_RUN.sub(" ", html).strip()
    return ExportPayload(html=html, text=text)


def _strategy_name(strategy: ExportStrategy) -> str:
    return getattr(strategy, "__name__", type(strategy).__name__)


def copy_with_fallback(payload: ExportPayload, strategies: List[ExportStrategy]) -> str:
    """
    Try each strategy in order and return the name of the first that
    succeeds. Raises ExportError when all of them fail.
    """
    failures: List[Tuple[str, str]] = []

    for strategy in strategies:
        name = _strategy_name(strategy)
        try:
            strategy(payload)
            if failures:
                logger.info(f"Signature exported with fallback writer {name}")
            return name
        except Exception as e:
            logger.warning(f"Export writer {name} failed: {e}")
            failures.append((name, str(e)))

    raise ExportError("Failed to copy signature with every available writer", failures)


# ==================== GATES ====================

def can_copy(data: ContactData) -> bool:
    """A signature can be copied once it has a name and an email."""
    return data.has_required_content()


def can_save(data: ContactData, image: ImageState) -> bool:
    """Saving additionally waits for any avatar upload to settle."""
    return can_copy(data) and not image.is_uploading
