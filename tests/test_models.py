from termtasks.models import Project, Task

from helpers import make_project


def test_out_of_range_mutations_are_noops():
    project = make_project('Inbox', 'a', 'b')
    assert project.remove_task(5) is None
    assert project.remove_task(-1) is None
    project.toggle_task(2)
    project.update_task(9, 'zzz')
    assert [t.to_dict() for t in project.tasks] == [
        {'description': 'a', 'completed': False},
        {'description': 'b', 'completed': False},
    ]


def test_sort_by_completion_is_stable_and_idempotent():
    project = make_project('Inbox', ('a', True), 'b', ('c', True), 'd', 'e')
    project.sort_by_completion()
    once = [(t.description, t.completed) for t in project.tasks]
    assert once == [('b', False), ('d', False), ('e', False), ('a', True), ('c', True)]
    project.sort_by_completion()
    assert [(t.description, t.completed) for t in project.tasks] == once


def test_stats_counts_completed_and_total():
    project = make_project('Inbox', ('a', True), 'b', ('c', True))
    assert project.stats() == (2, 3)
    assert Project('Empty').stats() == (0, 0)


def test_dict_round_trip_is_lossless():
    project = make_project('Work stuff', 'write report', ('ship ✓ release', True))
    data = project.to_dict()
    assert data == {
        'title': 'Work stuff',
        'tasks': [
            {'description': 'write report', 'completed': False},
            {'description': 'ship ✓ release', 'completed': True},
        ],
    }
    assert Project.from_dict(data) == project


def test_from_dict_tolerates_missing_fields():
    project = Project.from_dict({'tasks': [{'description': 'x'}, 'junk', {}]}, default_title='Inbox')
    assert project.title == 'Inbox'
    assert project.tasks == [Task('x', False), Task('', False)]
