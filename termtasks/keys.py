"""Key events and the keybind table.

prompt_toolkit delivers ``KeyPress(key, data)`` objects where ``key`` is either
a ``Keys`` member or the typed character. They are normalised into
``KeyEvent(name, ctrl, meta, shift, sequence)`` so keybinds can be matched with
a plain table lookup on ``(name, ctrl, meta, shift)``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys


@dataclass(frozen=True)
class KeyEvent:
    name: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    sequence: str = ""

    @property
    def printable(self) -> bool:
        return bool(self.sequence) and not self.ctrl and not self.meta and self.sequence.isprintable()


@dataclass(frozen=True)
class KeyChord:
    name: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    def matches(self, event: KeyEvent) -> bool:
        return (event.name, event.ctrl, event.meta, event.shift) == (self.name, self.ctrl, self.meta, self.shift)


@dataclass(frozen=True)
class Keybind:
    key: str
    action: str
    chords: Tuple[KeyChord, ...]

    @property
    def label(self) -> str:
        return f"{self.key} {self.action}"

    def matches(self, event: KeyEvent) -> bool:
        return any(chord.matches(event) for chord in self.chords)


def _bind(key: str, action: str, *chords: KeyChord) -> Keybind:
    return Keybind(key=key, action=action, chords=tuple(chords))


KEYBINDS: Dict[str, Keybind] = {
    'QUIT': _bind('q', 'quit', KeyChord('q'), KeyChord('c', ctrl=True)),
    'MOVE_UP': _bind('↑/k', 'up', KeyChord('up'), KeyChord('k')),
    'MOVE_DOWN': _bind('↓/j', 'down', KeyChord('down'), KeyChord('j')),
    'TOGGLE': _bind('space', 'toggle', KeyChord('space')),
    'ADD': _bind('a', 'add', KeyChord('a')),
    'EDIT': _bind('e', 'edit', KeyChord('e')),
    'DELETE': _bind('d', 'delete', KeyChord('d')),
    'SORT': _bind('s', 'sort', KeyChord('s')),
    'ADD_PROJECT': _bind('p', 'new project', KeyChord('p')),
    'NEXT_PROJECT': _bind('tab', 'next project', KeyChord('tab')),
    'MOVE_TO_NEXT_PROJECT': _bind('m', 'move', KeyChord('m')),
    'TOGGLE_FOLD': _bind('f', 'fold', KeyChord('f')),
    'TOGGLE_FOLD_ALL': _bind('F', 'fold all', KeyChord('f', shift=True)),
}

# Help bar groups, left to right.
HELP_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ('ADD', 'TOGGLE'),
    ('MOVE_UP', 'MOVE_DOWN'),
    ('EDIT', 'DELETE'),
    ('ADD_PROJECT', 'NEXT_PROJECT', 'MOVE_TO_NEXT_PROJECT', 'TOGGLE_FOLD', 'TOGGLE_FOLD_ALL'),
    ('SORT', 'QUIT'),
)

_NAMED_KEYS: Dict[Keys, KeyEvent] = {
    Keys.ControlM: KeyEvent('return'),
    Keys.ControlJ: KeyEvent('return'),
    Keys.ControlH: KeyEvent('backspace'),
    Keys.ControlI: KeyEvent('tab'),
    Keys.BackTab: KeyEvent('tab', shift=True),
    Keys.Escape: KeyEvent('escape'),
    Keys.ControlAt: KeyEvent('space', ctrl=True),
    Keys.Up: KeyEvent('up'),
    Keys.Down: KeyEvent('down'),
    Keys.Left: KeyEvent('left'),
    Keys.Right: KeyEvent('right'),
    Keys.Home: KeyEvent('home'),
    Keys.End: KeyEvent('end'),
    Keys.Delete: KeyEvent('delete'),
    Keys.PageUp: KeyEvent('pageup'),
    Keys.PageDown: KeyEvent('pagedown'),
}

_IGNORED_KEYS = {Keys.Any, Keys.CPRResponse, Keys.Vt100MouseEvent, Keys.WindowsMouseEvent,
                 Keys.ScrollUp, Keys.ScrollDown, Keys.Ignore}


def key_event_from_press(press: KeyPress) -> Optional[KeyEvent]:
    """Translate a prompt_toolkit KeyPress; returns None for non-key input."""
    key = press.key
    data = press.data or ""
    if isinstance(key, Keys):
        if key in _IGNORED_KEYS:
            return None
        if key == Keys.BracketedPaste:
            return KeyEvent('paste', sequence=data)
        named = _NAMED_KEYS.get(key)
        if named is not None:
            return named
        value = key.value
        ctrl = shift = False
        if value.startswith('c-'):
            ctrl, value = True, value[2:]
        if value.startswith('s-'):
            shift, value = True, value[2:]
        return KeyEvent(value, ctrl=ctrl, shift=shift)
    ch = str(key)
    if ch == ' ':
        return KeyEvent('space', sequence=' ')
    if len(ch) == 1 and ch.isalpha():
        return KeyEvent(ch.lower(), shift=ch.isupper(), sequence=data or ch)
    return KeyEvent(ch, sequence=data or ch)
