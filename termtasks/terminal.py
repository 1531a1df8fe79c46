"""prompt_toolkit-backed screen and keyboard adapters."""
from __future__ import annotations

import asyncio
import logging
from contextlib import ExitStack
from typing import Callable, Dict, Iterable, List, Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.output import Output, create_output
from prompt_toolkit.styles import Style

from .keys import KeyEvent, key_event_from_press
from .render import BASE_THEME_STYLE, Clear, MoveTo, Op, Write

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 24
DEFAULT_COLUMNS = 80


def build_style(overrides: Optional[Dict[str, str]] = None) -> Style:
    style_dict = dict(BASE_THEME_STYLE)
    if overrides:
        for key, value in overrides.items():
            if isinstance(key, str) and isinstance(value, str):
                style_dict[key] = value
    return Style.from_dict(style_dict)


class Screen:
    def __init__(self, output: Optional[Output] = None, style: Optional[Style] = None):
        self.output = output or create_output()
        self.style = style or build_style()
        self._color_depth = self.output.get_default_color_depth()

    def _size(self):
        try:
            size = self.output.get_size()
        except Exception:
            logger.debug("terminal size unavailable", exc_info=True)
            return DEFAULT_ROWS, DEFAULT_COLUMNS
        rows = size.rows if size.rows and size.rows > 0 else DEFAULT_ROWS
        columns = size.columns if size.columns and size.columns > 0 else DEFAULT_COLUMNS
        return rows, columns

    def rows(self) -> int:
        return self._size()[0]

    def columns(self) -> int:
        return self._size()[1]

    def clear(self) -> None:
        self.output.erase_screen()
        self.output.cursor_goto(1, 1)

    def move_cursor_to(self, row: int, col: int) -> None:
        # VT100 positions are 1-based.
        self.output.cursor_goto(row + 1, col + 1)

    def write(self, text: str, style: str = "") -> None:
        if style:
            attrs = self.style.get_attrs_for_style_str(style)
            self.output.set_attributes(attrs, self._color_depth)
            self.output.write(text)
            self.output.reset_attributes()
        else:
            self.output.write(text)

    def apply(self, ops: Iterable[Op]) -> None:
        for op in ops:
            if isinstance(op, Clear):
                self.clear()
            elif isinstance(op, MoveTo):
                self.move_cursor_to(op.row, op.col)
            elif isinstance(op, Write):
                self.write(op.text, op.style)

    def enter_alternate_buffer(self) -> None:
        self.output.enter_alternate_screen()
        self.clear()

    def exit_alternate_buffer(self) -> None:
        self.output.quit_alternate_screen()

    def hide_cursor(self) -> None:
        self.output.hide_cursor()

    def show_cursor(self) -> None:
        self.output.show_cursor()

    def flush(self) -> None:
        self.output.flush()


class KeyboardSource:
    """Delivers key events from a prompt_toolkit Input to exactly one handler.

    The handler is looked up per key press, so ``set_handler`` takes effect on
    the very next key, including later keys of the same read batch.
    """

    def __init__(self, input: Optional[Input] = None, flush_timeout: float = 0.05):
        self.input = input or create_input()
        self.flush_timeout = flush_timeout
        self.on_close: Optional[Callable[[], None]] = None
        self._handler: Optional[Callable[[KeyEvent], None]] = None
        self._stack: Optional[ExitStack] = None
        self._flush_handle: Optional[asyncio.TimerHandle] = None

    @property
    def capturing(self) -> bool:
        return self._stack is not None

    def set_handler(self, handler: Optional[Callable[[KeyEvent], None]]) -> None:
        self._handler = handler

    def enable_raw_capture(self) -> None:
        if self._stack is not None:
            return
        stack = ExitStack()
        stack.enter_context(self.input.raw_mode())
        stack.enter_context(self.input.attach(self._on_input_ready))
        self._stack = stack

    def disable_raw_capture(self) -> None:
        if self._stack is None:
            return
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        stack, self._stack = self._stack, None
        stack.close()

    def deliver(self, presses: Iterable[KeyPress]) -> None:
        for press in presses:
            event = key_event_from_press(press)
            if event is None:
                continue
            handler = self._handler
            if handler is not None:
                handler(event)

    def _on_input_ready(self) -> None:
        keys: List[KeyPress] = self.input.read_keys()
        self.deliver(keys)
        if self.input.closed:
            logger.debug("keyboard input closed")
            if self.on_close is not None:
                self.on_close()
            return
        # A lone Escape stays buffered in the VT100 parser until flushed.
        if self._flush_handle is not None:
            self._flush_handle.cancel()
        loop = asyncio.get_running_loop()
        self._flush_handle = loop.call_later(self.flush_timeout, self._flush)

    def _flush(self) -> None:
        self._flush_handle = None
        if self._stack is not None:
            self.deliver(self.input.flush_keys())
