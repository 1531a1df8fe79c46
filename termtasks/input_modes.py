"""Two-mode keyboard ownership: navigation vs. single-line text entry.

Only one handler is registered on the key source at a time. Entering text
entry swaps the navigation handler out; committing or cancelling swaps it back
and feeds the result to the callback stored in the pending prompt.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .keys import KeyEvent

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    NAVIGATION = "navigation"
    TEXT_ENTRY = "text-entry"


@dataclass
class TextEntry:
    label: str
    buffer: str
    on_submit: Callable[[Optional[str]], None]


class InputModeController:
    def __init__(
        self,
        source,
        render: Callable[[], None],
        dispatch: Optional[Callable[[KeyEvent], bool]] = None,
    ):
        self.source = source
        self.render = render
        self.dispatch = dispatch
        self.pending: Optional[TextEntry] = None

    @property
    def mode(self) -> Mode:
        return Mode.TEXT_ENTRY if self.pending is not None else Mode.NAVIGATION

    @property
    def input_text(self) -> Optional[str]:
        return self.pending.buffer if self.pending is not None else None

    @property
    def input_label(self) -> str:
        return self.pending.label if self.pending is not None else ""

    def enter_navigation(self) -> None:
        self.pending = None
        self.source.set_handler(self.handle_navigation_key)

    def begin_text_entry(self, label: str, initial: str, on_submit: Callable[[Optional[str]], None]) -> None:
        if self.pending is not None:
            logger.debug("replacing pending prompt %r", self.pending.label)
        self.pending = TextEntry(label, initial or "", on_submit)
        self.source.set_handler(self.handle_text_key)
        self.render()

    def cancel_pending(self) -> None:
        """Drop an unresolved prompt without calling its callback."""
        if self.pending is not None:
            logger.debug("discarding pending prompt %r", self.pending.label)
            self.enter_navigation()

    def handle_navigation_key(self, event: KeyEvent) -> None:
        if self.dispatch is None:
            return
        if self.dispatch(event):
            self.render()

    def handle_text_key(self, event: KeyEvent) -> None:
        entry = self.pending
        if entry is None:
            return
        if event.name == 'return':
            self._finish(entry.buffer.strip() or None)
        elif event.name == 'escape' or (event.name == 'c' and event.ctrl):
            self._finish(None)
        elif event.name == 'backspace':
            if entry.buffer:
                entry.buffer = entry.buffer[:-1]
                self.render()
        elif event.name == 'paste':
            text = event.sequence.replace('\r\n', ' ').replace('\n', ' ').replace('\r', ' ')
            if text:
                entry.buffer += text
                self.render()
        elif event.printable:
            entry.buffer += event.sequence
            self.render()

    def _finish(self, result: Optional[str]) -> None:
        entry = self.pending
        self.enter_navigation()
        if entry is not None:
            try:
                entry.on_submit(result)
            except Exception:
                logger.exception("Prompt %r callback failed", entry.label)
        self.render()
