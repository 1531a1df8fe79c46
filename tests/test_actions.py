import logging

import pytest

from termtasks.actions import ActionRegistry, slugify, unique_project_id
from termtasks.keys import KeyEvent

from helpers import make_project, make_workspace


class PromptRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, label, initial, on_submit):
        self.calls.append((label, initial, on_submit))

    def submit(self, text):
        self.calls[-1][2](text)


@pytest.fixture
def prompt():
    return PromptRecorder()


def _registry(workspace, prompt, quit_calls=None):
    quit_calls = quit_calls if quit_calls is not None else []
    return ActionRegistry(workspace, prompt=prompt, quit=lambda: quit_calls.append(True))


def test_unmatched_key_returns_false(prompt):
    ws = make_workspace(make_project('Inbox', 'a'))
    reg = _registry(ws, prompt)
    assert reg.find(KeyEvent('z', sequence='z')) is None
    assert reg.execute(KeyEvent('z', sequence='z')) is False


def test_first_match_wins_and_reports_rerender(prompt):
    ws = make_workspace(make_project('Inbox', 'a', 'b'))
    reg = _registry(ws, prompt)
    assert reg.execute(KeyEvent('j', sequence='j')) is True
    assert ws.active.selected_index == 1
    assert reg.execute(KeyEvent('up')) is True
    assert ws.active.selected_index == 0


def test_quit_needs_no_rerender(prompt):
    quit_calls = []
    reg = _registry(make_workspace(), prompt, quit_calls)
    assert reg.execute(KeyEvent('q', sequence='q')) is False
    assert reg.execute(KeyEvent('c', ctrl=True)) is False
    assert quit_calls == [True, True]


def test_failing_action_is_logged_and_still_rerenders(prompt, caplog):
    ws = make_workspace(make_project('Inbox', 'a'))

    def boom():
        raise RuntimeError('boom')

    ws.toggle_fold = boom
    reg = _registry(ws, prompt)
    with caplog.at_level(logging.ERROR, logger='termtasks'):
        assert reg.execute(KeyEvent('f', sequence='f')) is True
    assert 'Action toggle_fold failed' in caplog.text


def test_toggle_sets_status(prompt):
    ws = make_workspace(make_project('Inbox', 'a'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('space', sequence=' '))
    assert ws.status.text == 'Task completed'
    assert ws.status.kind == 'success'
    reg.execute(KeyEvent('space', sequence=' '))
    assert ws.status.text == 'Task reopened'


def test_toggle_and_delete_on_empty_project_set_no_status(prompt):
    ws = make_workspace(make_project('Inbox'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('space', sequence=' '))
    reg.execute(KeyEvent('d', sequence='d'))
    assert ws.status is None


def test_delete_sets_warning(prompt):
    ws = make_workspace(make_project('Inbox', 'a'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('d', sequence='d'))
    assert ws.active.tasks == []
    assert ws.status.text == 'Task deleted'
    assert ws.status.kind == 'warning'


def test_sort_sets_status(prompt):
    ws = make_workspace(make_project('Inbox', ('a', True), 'b'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('s', sequence='s'))
    assert [t.description for t in ws.active.tasks] == ['b', 'a']
    assert ws.status.text == 'Sorted by completion'


def test_add_goes_through_prompt(prompt):
    ws = make_workspace(make_project('Inbox'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('a', sequence='a'))
    label, initial, _ = prompt.calls[-1]
    assert (label, initial) == ('Add task', '')
    prompt.submit('Buy milk')
    assert [t.description for t in ws.active.tasks] == ['Buy milk']
    assert ws.status.text == 'Task added'


def test_add_cancelled_leaves_project_alone(prompt):
    ws = make_workspace(make_project('Inbox'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('a', sequence='a'))
    prompt.submit(None)
    assert ws.active.tasks == []
    assert ws.status is None


def test_edit_prefills_current_description(prompt):
    ws = make_workspace(make_project('Inbox', 'old text'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('e', sequence='e'))
    label, initial, _ = prompt.calls[-1]
    assert (label, initial) == ('Edit task', 'old text')
    prompt.submit('new text')
    assert ws.active.tasks[0].description == 'new text'
    assert ws.status.text == 'Task updated'


def test_edit_without_selection_does_not_prompt(prompt):
    ws = make_workspace(make_project('Inbox'))
    reg = _registry(ws, prompt)
    assert reg.execute(KeyEvent('e', sequence='e')) is True
    assert prompt.calls == []


def test_add_project_uses_unique_slug(prompt):
    ws = make_workspace(make_project('Inbox'))
    ws.add_project('side-work', make_project('Side work'), activate=False)
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('p', sequence='p'))
    prompt.submit('Side Work!')
    assert ws.project_ids() == ['inbox', 'side-work', 'side-work-2']
    assert ws.active.title == 'Side Work!'
    assert ws.status.text == 'Project "Side Work!" created'


def test_move_to_next_project_status(prompt):
    ws = make_workspace(make_project('Inbox', 'a'), make_project('Work'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('m', sequence='m'))
    assert ws.status.text == 'Moved to Work'
    assert [t.description for t in ws.views[1].tasks] == ['a']


def test_move_with_single_project_warns(prompt):
    ws = make_workspace(make_project('Inbox', 'a'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('m', sequence='m'))
    assert ws.status.text == 'Need another project to move tasks'
    assert ws.status.kind == 'warning'
    assert len(ws.active.tasks) == 1


def test_fold_keys(prompt):
    ws = make_workspace(make_project('A'), make_project('B'))
    reg = _registry(ws, prompt)
    reg.execute(KeyEvent('f', sequence='f'))
    assert [v.collapsed for v in ws.views] == [True, False]
    reg.execute(KeyEvent('f', shift=True, sequence='F'))
    assert [v.collapsed for v in ws.views] == [True, True]
    reg.execute(KeyEvent('tab'))
    assert ws.active_index == 1


@pytest.mark.parametrize('title, slug', [
    ('Work', 'work'),
    ('Side  Project 2', 'side-project-2'),
    ('***', 'project'),
])
def test_slugify(title, slug):
    assert slugify(title) == slug


def test_unique_project_id():
    assert unique_project_id('Work', ['inbox']) == 'work'
    assert unique_project_id('Work', ['work', 'work-2']) == 'work-3'
