from contextlib import contextmanager

from termtasks.keys import KeyEvent
from termtasks.models import Project, Task
from termtasks.render import Clear, MoveTo, Write
from termtasks.views import ProjectView, Workspace


def frame_text(ops, rows):
    """Flatten render ops into plain screen rows."""
    screen = [""] * max(rows, 0)
    row = None
    for op in ops:
        if isinstance(op, Clear):
            screen = [""] * max(rows, 0)
        elif isinstance(op, MoveTo):
            row = op.row
        elif isinstance(op, Write) and row is not None and 0 <= row < len(screen):
            screen[row] += op.text
    return screen


class FakeInput:
    """Minimal stand-in for a prompt_toolkit Input."""

    def __init__(self):
        self.queue = []
        self.buffered = []
        self.closed = False
        self.raw = False
        self.callback = None

    @contextmanager
    def raw_mode(self):
        self.raw = True
        try:
            yield
        finally:
            self.raw = False

    @contextmanager
    def attach(self, callback):
        self.callback = callback
        try:
            yield
        finally:
            self.callback = None

    def read_keys(self):
        keys, self.queue = self.queue, []
        return keys

    def flush_keys(self):
        keys, self.buffered = self.buffered, []
        return keys


class FakeScreen:
    """Records the calls a Screen would make and keeps the last frame."""

    def __init__(self, rows=24, columns=80):
        self._rows = rows
        self._columns = columns
        self.calls = []
        self.frames = []

    def rows(self):
        return self._rows

    def columns(self):
        return self._columns

    def apply(self, ops):
        self.frames.append(list(ops))

    def last_text(self):
        return frame_text(self.frames[-1], self._rows) if self.frames else []

    def __getattr__(self, name):
        if name in ('enter_alternate_buffer', 'exit_alternate_buffer', 'hide_cursor', 'show_cursor', 'flush'):
            return lambda: self.calls.append(name)
        raise AttributeError(name)


class FakeKeyboard:
    def __init__(self):
        self.handler = None
        self.handler_history = []
        self.on_close = None
        self.capturing = False
        self.calls = []

    def set_handler(self, handler):
        self.handler = handler
        self.handler_history.append(handler)

    def enable_raw_capture(self):
        self.capturing = True
        self.calls.append('enable')

    def disable_raw_capture(self):
        self.capturing = False
        self.calls.append('disable')

    def press(self, name, **kwargs):
        if self.handler is not None:
            self.handler(KeyEvent(name, **kwargs))

    def type(self, text):
        for ch in text:
            if ch == ' ':
                self.press('space', sequence=' ')
            elif ch.isalpha():
                self.press(ch.lower(), shift=ch.isupper(), sequence=ch)
            else:
                self.press(ch, sequence=ch)


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fired = True
            self.callback()


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]


class MemoryRepository:
    def __init__(self, fail_on=()):
        self.saved = {}
        self.fail_on = set(fail_on)

    def save(self, project_id, project):
        if project_id in self.fail_on:
            return False
        self.saved[project_id] = project.to_dict()
        return True


def make_project(title='Inbox', *tasks):
    """make_project('Work', 'a', ('b', True)) -> Project with tasks a (open) and b (done)."""
    items = []
    for t in tasks:
        if isinstance(t, tuple):
            items.append(Task(t[0], t[1]))
        else:
            items.append(Task(t))
    return Project(title=title, tasks=items)


def make_workspace(*projects, scheduler=None):
    views = []
    for project in projects or (make_project(),):
        views.append(ProjectView(project.title.lower(), project))
    return Workspace(views, scheduler=scheduler)


