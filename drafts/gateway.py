"""
gateway.py — Draft persistence for the editing session.

save   — snapshot the document now, write it after a quiet period
         (debounced: a newer save cancels and reschedules the pending write).
load   — read a slot back; a missing, corrupt or schema-incompatible draft
         yields the built-in template, and a bad slot is deleted so it cannot
         block the next startup either.
clear  — drop any pending write and empty the slot (explicit reset).

Persistence failures are logged and swallowed: the session keeps working on
its in-memory document.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from storyboard.constants import DEFAULT_AUTOSAVE_DELAY_SEC
from storyboard.models import StoryboardDoc
from storyboard.template import template
from storyboard.validator import format_errors, validate_storyboard

from .autosave import Debouncer
from .draft_io import parse_draft, serialize_draft
from .store import DraftStore

logger = logging.getLogger(__name__)


class DraftGateway:
    def __init__(
        self,
        store: DraftStore,
        delay: float = DEFAULT_AUTOSAVE_DELAY_SEC,
        timer_factory: Callable = threading.Timer,
    ):
        self.store = store
        self._debouncer = Debouncer(delay, self._write, timer_factory=timer_factory)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def save(self, key: str, document: StoryboardDoc) -> None:
        """Schedule a debounced write of *document* to slot *key*.

        The document is serialized immediately, so later in-place edits by
        the caller do not leak into the scheduled write.
        """
        try:
            text = serialize_draft(document)
        except (TypeError, ValueError):
            logger.exception("Failed to serialize storyboard draft for key %r", key)
            return
        self._debouncer.trigger(key, text)

    def flush(self) -> bool:
        """Write the pending draft immediately. Returns False if none was pending."""
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def load(self, key: str) -> StoryboardDoc:
        """Return the stored draft for *key*, or the template.

        A draft that is not valid JSON or fails full validation is deleted.
        """
        try:
            text = self.store.read(key)
        except OSError:
            logger.exception("Failed to read storyboard draft %r; using template", key)
            return template()
        except UnicodeDecodeError as exc:
            logger.warning("Storyboard draft %r is not valid UTF-8: %s", key, exc)
            self._discard(key)
            return template()
        if text is None:
            return template()

        # JSONDecodeError and MalformedStoryboardError are ValueError subclasses.
        try:
            result = validate_storyboard(parse_draft(text))
        except ValueError as exc:
            logger.warning("Failed to load or parse storyboard draft %r: %s", key, exc)
            self._discard(key)
            return template()

        if not result.ok:
            logger.warning(
                "Could not validate storyboard draft %r. Discarding. %s",
                key, "; ".join(format_errors(result.errors)),
            )
            self._discard(key)
            return template()

        logger.info("Restored storyboard draft %r", key)
        return result.document

    def clear(self, key: str) -> None:
        """Cancel any pending write and delete slot *key*."""
        self._debouncer.cancel()
        self._discard(key)

    def _write(self, key: str, text: str) -> None:
        try:
            self.store.write(key, text)
        except OSError:
            logger.exception("Failed to save storyboard draft %r", key)
            return
        logger.debug("Saved storyboard draft %r (%d bytes)", key, len(text))

    def _discard(self, key: str) -> None:
        try:
            self.store.delete(key)
        except OSError:
            logger.exception("Failed to delete storyboard draft %r", key)
