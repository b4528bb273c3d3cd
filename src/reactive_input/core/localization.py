"""
Localized message lookup.

Validators need a string back for a handful of fixed keys. Hosts can pass any
``Callable[[str], str]``; QtLocalizer is the default and goes through Qt's
translation system before falling back to a configured catalog.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from PySide6.QtCore import QCoreApplication

from .config import DEFAULT_MESSAGES, TRANSLATION_CONTEXT

Localizer = Callable[[str], str]


class QtLocalizer:
    """Translate message keys with QCoreApplication.translate."""

    def __init__(self, messages: Mapping[str, str] | None = None, context: str = TRANSLATION_CONTEXT):
        self._messages = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)
        self._context = context

    def __call__(self, key: str) -> str:
        translated = QCoreApplication.translate(self._context, key)
        # translate() hands the source text back when no translator has it
        if translated and translated != key:
            return translated
        return self._messages.get(key, key)
