"""Frame layout: workspace state -> ordered terminal writes.

``render_frame`` is pure. It returns a list of ``Clear`` / ``MoveTo`` /
``Write`` ops that a screen adapter replays; every line is placed with an
absolute cursor move so the footer stays anchored to the bottom rows whatever
the body above it holds.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from prompt_toolkit.utils import get_cwidth

from .keys import HELP_GROUPS, KEYBINDS
from .models import Task
from .views import ProjectView, StatusMessage, Workspace

Fragment = Tuple[str, str]
Line = List[Fragment]


# -----------------------------
# Write ops
# -----------------------------
@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class MoveTo:
    row: int
    col: int = 0


@dataclass(frozen=True)
class Write:
    text: str
    style: str = ""


Op = Union[Clear, MoveTo, Write]


# -----------------------------
# Theme
# -----------------------------
BASE_THEME_STYLE: Dict[str, str] = {
    'header.bar': '#6c6c6c',
    'header.bar.active': 'ansiblue',
    'header.title': 'dim',
    'header.title.active': 'bold',
    'header.fold': '#6c6c6c',
    'header.count': '',
    'header.count.done': 'ansibrightgreen',
    'progress.empty': '#6c6c6c',
    'progress.partial': '',
    'progress.full': 'ansibrightgreen',
    'task.cursor': 'ansibrightcyan',
    'task.checkbox': '',
    'task.checkbox.done': 'ansibrightgreen',
    'task.text': '',
    'task.text.selected': 'bold',
    'task.text.done': 'dim strike',
    'hint': '#6c6c6c',
    'hint.key': 'bold',
    'separator': '#6c6c6c',
    'status.success': 'ansibrightgreen',
    'status.info': 'ansiblue',
    'status.warning': 'ansiyellow',
    'status.text': '',
    'help': '',
    'help.key': 'bold',
    'help.sep': '#6c6c6c',
    'input.separator': '#6c6c6c',
    'input.label': '#6c6c6c bold',
    'input.prompt': '#6c6c6c',
    'input.text': '',
    'input.cursor': '',
    'input.placeholder': 'dim',
}

ICONS = {
    'CHECKBOX_COMPLETED': '◉',
    'CHECKBOX_INCOMPLETE': '◯',
    'CURSOR': '→',
    'EXPANDED': '▼',
    'COLLAPSED': '▶',
    'BAR': '▌',
    'PROGRESS_EMPTY': '○',
    'PROGRESS_PARTIAL': '◐',
    'PROGRESS_FULL': '●',
    'INPUT_CURSOR': '▎',
}

STATUS_ICONS = {'success': '✓', 'info': '›', 'warning': '!'}
INPUT_PLACEHOLDER = 'Type here...'


# -----------------------------
# Width helpers
# -----------------------------
def _char_width(ch: str) -> int:
    if unicodedata.combining(ch) or unicodedata.category(ch) == "Cf":
        return 0
    return max(0, get_cwidth(ch))


def display_width(text: str) -> int:
    return sum(_char_width(ch) for ch in text)


def _sanitize(s: Optional[str]) -> str:
    return (s or "").replace("\r\n", " ").replace("\n", " ").replace("\r", " ").replace("\t", " ")


def clip_fragments(fragments: Sequence[Fragment], width: int) -> Line:
    """Cut a line to ``width`` display cells; an ellipsis marks the cut."""
    if width <= 0:
        return []
    total = sum(display_width(text) for _, text in fragments)
    if total <= width:
        return list(fragments)
    budget = width - 1
    out: Line = []
    used = 0
    for style, text in fragments:
        kept: List[str] = []
        for ch in text:
            w = _char_width(ch)
            if used + w > budget:
                break
            kept.append(ch)
            used += w
        else:
            out.append((style, text))
            continue
        if kept:
            out.append((style, "".join(kept)))
        out.append((style, "…"))
        return out
    out.append(("", "…"))
    return out


# -----------------------------
# Formatters
# -----------------------------
def progress_icon(completed: int, total: int) -> Fragment:
    if total == 0 or completed == 0:
        return ('class:progress.empty', ICONS['PROGRESS_EMPTY'])
    if completed == total:
        return ('class:progress.full', ICONS['PROGRESS_FULL'])
    return ('class:progress.partial', ICONS['PROGRESS_PARTIAL'])


def format_header(view: ProjectView, is_active: bool) -> Line:
    completed, total = view.project.stats()
    suffix = '.active' if is_active else ''
    count_style = 'class:header.count.done' if total and completed == total else 'class:header.count'
    fold = ICONS['COLLAPSED'] if view.collapsed else ICONS['EXPANDED']
    return [
        ('', '  '),
        (f'class:header.bar{suffix}', ICONS['BAR']),
        (f'class:header.title{suffix}', f" {_sanitize(view.title)}"),
        ('', ' '),
        ('class:header.fold', fold),
        ('', '  '),
        progress_icon(completed, total),
        ('', ' '),
        (count_style, f"{completed}/{total}"),
        ('', ' tasks'),
    ]


def format_task(task: Task, is_selected: bool) -> Line:
    cursor = f" {ICONS['CURSOR']} " if is_selected else '   '
    if task.completed:
        checkbox = ('class:task.checkbox.done', ICONS['CHECKBOX_COMPLETED'])
        text_style = 'class:task.text.done'
    else:
        checkbox = ('class:task.checkbox', ICONS['CHECKBOX_INCOMPLETE'])
        text_style = 'class:task.text.selected' if is_selected else 'class:task.text'
    return [
        ('', '  '),
        ('class:task.cursor', cursor),
        ('', ' '),
        checkbox,
        ('', ' '),
        (text_style, _sanitize(task.description)),
    ]


def format_empty_state() -> Line:
    return [
        ('class:hint', '      No tasks yet. Press '),
        ('class:hint.key', KEYBINDS['ADD'].key),
        ('class:hint', ' to add one!'),
    ]


def format_separator(width: int) -> Line:
    return [('class:separator', '─' * max(0, width))]


def format_status(status: StatusMessage) -> Line:
    icon = STATUS_ICONS.get(status.kind, STATUS_ICONS['info'])
    return [
        ('', '  '),
        (f'class:status.{status.kind}', icon),
        ('', ' '),
        ('class:status.text', _sanitize(status.text)),
    ]


def format_help_bar(input_mode: bool) -> Line:
    if input_mode:
        return [
            ('', '  '),
            ('class:help.key', 'Enter'), ('class:help', ' save'),
            ('class:help.sep', '  │  '),
            ('class:help.key', 'Esc'), ('class:help', ' cancel'),
        ]
    frags: Line = [('', '  ')]
    for gi, group in enumerate(HELP_GROUPS):
        if gi:
            frags.append(('class:help.sep', '  │  '))
        for ki, name in enumerate(group):
            kb = KEYBINDS[name]
            if ki:
                frags.append(('class:help', '  '))
            frags.append(('class:help.key', kb.key))
            frags.append(('class:help', f" {kb.action}"))
    return frags


def format_input_separator(width: int, label: str = "") -> Line:
    if not label:
        return [('', '  '), ('class:input.separator', '─' * max(0, width - 4))]
    head = '── '
    rest = max(0, width - 4 - len(head) - display_width(label) - 1)
    return [
        ('', '  '),
        ('class:input.separator', head),
        ('class:input.label', label),
        ('class:input.separator', ' ' + '─' * rest),
    ]


def format_input_row(text: str, placeholder: str = INPUT_PLACEHOLDER) -> Line:
    frags: Line = [('', '  '), ('class:input.prompt', '›'), ('', ' ')]
    if text:
        frags.append(('class:input.text', _sanitize(text)))
        frags.append(('class:input.cursor', ICONS['INPUT_CURSOR']))
    else:
        frags.append(('class:input.placeholder', placeholder))
    return frags


# -----------------------------
# Layout
# -----------------------------
def scroll_window(total: int, max_visible: int, anchor: int) -> Tuple[int, int]:
    """Return [start, end) of a window of ``max_visible`` lines centred on ``anchor``."""
    if max_visible <= 0 or total <= 0:
        return 0, 0
    if total <= max_visible:
        return 0, total
    start = anchor - max_visible // 2
    start = max(0, min(start, total - max_visible))
    return start, start + max_visible


def build_body(workspace: Workspace, show_cursor: bool = True) -> Tuple[List[Line], int]:
    """Return the body lines and the index of the line the window follows."""
    lines: List[Line] = []
    anchor = 0
    for idx, view in enumerate(workspace.views):
        is_active = idx == workspace.active_index
        if lines:
            lines.append([])
        if is_active:
            anchor = len(lines)
        lines.append(format_header(view, is_active))
        if view.collapsed:
            continue
        if not view.tasks:
            if is_active:
                lines.append(format_empty_state())
            continue
        for ti, task in enumerate(view.tasks):
            selected = show_cursor and is_active and ti == view.selected_index
            if is_active and ti == view.selected_index:
                anchor = len(lines)
            lines.append(format_task(task, selected))
    return lines, anchor


def _emit(ops: List[Op], row: int, line: Line, width: int) -> None:
    ops.append(MoveTo(row, 0))
    for style, text in clip_fragments(line, width):
        if text:
            ops.append(Write(text, style))


# Footer rows given up first when the terminal is too short to hold them all.
FOOTER_DROP_ORDER = ('separator', 'input.separator', 'status', 'input', 'help')


def _footer(columns: int, status: Optional[StatusMessage], input_text: Optional[str], input_label: str, rows: int) -> List[Line]:
    text_entry = input_text is not None
    footer: List[Tuple[str, Line]] = []
    if text_entry:
        footer.append(('input.separator', format_input_separator(columns, input_label)))
        footer.append(('input', format_input_row(input_text or "")))
    footer.append(('separator', format_separator(columns)))
    if status is not None:
        footer.append(('status', format_status(status)))
    footer.append(('help', format_help_bar(text_entry)))
    for name in FOOTER_DROP_ORDER:
        if len(footer) <= rows:
            break
        footer = [item for item in footer if item[0] != name]
    return [line for _, line in footer]


def render_frame(
    workspace: Workspace,
    rows: int,
    columns: int,
    input_text: Optional[str] = None,
    input_label: str = "",
) -> List[Op]:
    text_entry = input_text is not None
    status = None if text_entry else workspace.status
    rows = max(rows, 1)
    columns = max(columns, 1)
    footer = _footer(columns, status, input_text, input_label, rows)
    body_rows = rows - len(footer)

    ops: List[Op] = [Clear()]
    lines, anchor = build_body(workspace, show_cursor=not text_entry)
    start, end = scroll_window(len(lines), body_rows, anchor)
    for offset, line in enumerate(lines[start:end]):
        _emit(ops, offset, line, columns)

    for offset, line in enumerate(footer):
        _emit(ops, body_rows + offset, line, columns)
    return ops


class Renderer:
    def __init__(self, screen):
        self.screen = screen

    def render(self, workspace: Workspace, input_text: Optional[str] = None, input_label: str = "") -> None:
        ops = render_frame(workspace, self.screen.rows(), self.screen.columns(), input_text, input_label)
        self.screen.apply(ops)
        self.screen.flush()
