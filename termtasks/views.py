"""View-state model: selection, folding and transient status on top of projects.

ProjectView owns one Project; Workspace owns an ordered list of ProjectViews
plus the active index. All operations are total: invalid positions and empty
lists turn calls into no-ops instead of errors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .models import Project, Task

logger = logging.getLogger(__name__)

STATUS_KINDS = ("success", "info", "warning")
DEFAULT_STATUS_TIMEOUT = 1.5

# (delay_seconds, callback) -> handle with .cancel(); asyncio's loop.call_later fits.
Scheduler = Callable[[float, Callable[[], None]], Any]


@dataclass(frozen=True)
class StatusMessage:
    text: str
    kind: str = "info"


class ProjectView:
    def __init__(self, project_id: str, project: Project):
        self.project_id = project_id
        self.project = project
        self.selected_index = 0
        self.collapsed = False
        self.status: Optional[StatusMessage] = None

    def __repr__(self) -> str:
        return f"ProjectView({self.project_id!r}, selected={self.selected_index}, collapsed={self.collapsed})"

    @property
    def title(self) -> str:
        return self.project.title

    @property
    def tasks(self) -> List[Task]:
        return self.project.tasks

    @property
    def selected_task(self) -> Optional[Task]:
        if 0 <= self.selected_index < len(self.project.tasks):
            return self.project.tasks[self.selected_index]
        return None

    def _clamp_selection(self) -> None:
        count = len(self.project.tasks)
        if count == 0:
            self.selected_index = 0
        else:
            self.selected_index = max(0, min(self.selected_index, count - 1))

    # navigation
    def move_up(self) -> None:
        if self.project.tasks:
            self.selected_index = max(0, self.selected_index - 1)

    def move_down(self) -> None:
        if self.project.tasks:
            self.selected_index = min(len(self.project.tasks) - 1, self.selected_index + 1)

    # task mutations
    def toggle_selected(self) -> Optional[Task]:
        task = self.selected_task
        if task is not None:
            self.project.toggle_task(self.selected_index)
        return task

    def add_task(self, description: str, completed: bool = False) -> Task:
        task = Task(description, completed)
        self.project.add_task(task)
        self.selected_index = len(self.project.tasks) - 1
        return task

    def update_selected(self, description: str) -> bool:
        text = (description or "").strip()
        if not text or self.selected_task is None:
            return False
        self.project.update_task(self.selected_index, text)
        return True

    def delete_selected(self) -> Optional[Task]:
        removed = self.project.remove_task(self.selected_index)
        self._clamp_selection()
        return removed

    def sort_by_completion(self) -> None:
        self.project.sort_by_completion()
        self.selected_index = 0

    # transient status
    def set_status(self, text: str, kind: str = "info") -> None:
        if kind not in STATUS_KINDS:
            kind = "info"
        self.status = StatusMessage(text, kind)

    def clear_status(self) -> None:
        self.status = None

    # folding
    def toggle_fold(self) -> None:
        self.collapsed = not self.collapsed

    def expand(self) -> None:
        self.collapsed = False

    def collapse(self) -> None:
        self.collapsed = True


class Workspace:
    """Ordered project views plus the active one.

    Status messages are workspace-wide: a new message replaces the previous one
    wherever it was shown, and a single clear-timer is kept. The timer is
    created through ``scheduler`` (``loop.call_later`` in the running app);
    without a scheduler messages stay until replaced or cleared.
    """

    def __init__(
        self,
        views: List[ProjectView],
        scheduler: Optional[Scheduler] = None,
        status_timeout: float = DEFAULT_STATUS_TIMEOUT,
        on_status_cleared: Optional[Callable[[], None]] = None,
    ):
        if not views:
            raise ValueError("Workspace needs at least one project")
        self.views: List[ProjectView] = list(views)
        self.active_index = 0
        self.scheduler = scheduler
        self.status_timeout = status_timeout
        self.on_status_cleared = on_status_cleared
        self._status_view: Optional[ProjectView] = None
        self._status_timer: Any = None

    @classmethod
    def from_projects(cls, projects: List[tuple], **kwargs) -> "Workspace":
        return cls([ProjectView(pid, project) for pid, project in projects], **kwargs)

    @property
    def active(self) -> ProjectView:
        return self.views[self.active_index]

    @property
    def status(self) -> Optional[StatusMessage]:
        return self.active.status

    def project_ids(self) -> List[str]:
        return [v.project_id for v in self.views]

    def add_project(self, project_id: str, project: Project, activate: bool = True) -> ProjectView:
        view = ProjectView(project_id, project)
        self.views.append(view)
        if activate:
            self.active_index = len(self.views) - 1
        return view

    def next_project(self) -> None:
        if len(self.views) > 1:
            self.active_index = (self.active_index + 1) % len(self.views)

    def next_view(self) -> ProjectView:
        return self.views[(self.active_index + 1) % len(self.views)]

    # delegation to the active project
    def move_up(self) -> None:
        self.active.move_up()

    def move_down(self) -> None:
        self.active.move_down()

    def toggle_selected(self) -> Optional[Task]:
        return self.active.toggle_selected()

    def add_task(self, description: str) -> Task:
        return self.active.add_task(description)

    def update_selected(self, description: str) -> bool:
        return self.active.update_selected(description)

    def delete_selected(self) -> Optional[Task]:
        return self.active.delete_selected()

    def sort_by_completion(self) -> None:
        self.active.sort_by_completion()

    @property
    def selected_task(self) -> Optional[Task]:
        return self.active.selected_task

    # cross-project operations
    def move_selected_task_to_next_project(self) -> bool:
        if len(self.views) < 2:
            return False
        source = self.active
        task = source.selected_task
        if task is None:
            return False
        source.delete_selected()
        self.next_view().add_task(task.description, task.completed)
        return True

    def toggle_fold(self) -> None:
        self.active.toggle_fold()

    def toggle_fold_all(self) -> None:
        any_expanded = any(not v.collapsed for v in self.views)
        for view in self.views:
            if any_expanded:
                view.collapse()
            else:
                view.expand()

    # status handling
    def set_status(self, text: str, kind: str = "info") -> None:
        self.cancel_status_timer()
        if self._status_view is not None and self._status_view is not self.active:
            self._status_view.clear_status()
        view = self.active
        view.set_status(text, kind)
        self._status_view = view
        if self.scheduler is not None:
            self._status_timer = self.scheduler(self.status_timeout, lambda: self._expire_status(view))

    def clear_status(self) -> None:
        self.cancel_status_timer()
        if self._status_view is not None:
            self._status_view.clear_status()
            self._status_view = None

    def cancel_status_timer(self) -> None:
        if self._status_timer is not None:
            self._status_timer.cancel()
            self._status_timer = None

    def _expire_status(self, view: ProjectView) -> None:
        self._status_timer = None
        if self._status_view is not view:
            return
        view.clear_status()
        self._status_view = None
        logger.debug("status cleared on %s", view.project_id)
        if self.on_status_cleared is not None:
            self.on_status_cleared()
