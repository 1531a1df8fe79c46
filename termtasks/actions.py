"""Navigation-mode actions: keybind -> workspace operation."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from .keys import KEYBINDS, KeyEvent, Keybind
from .models import Project
from .views import Workspace

logger = logging.getLogger(__name__)

# prompt(label, initial_text, on_submit); on_submit receives the trimmed text or None.
Prompt = Callable[[str, str, Callable[[Optional[str]], None]], None]


@dataclass(frozen=True)
class Action:
    name: str
    keybind: Keybind
    requires_rerender: bool
    operation: Callable[[], None]


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "project"


def unique_project_id(title: str, taken: List[str]) -> str:
    base = slugify(title)
    candidate = base
    n = 2
    while candidate in taken:
        candidate = f"{base}-{n}"
        n += 1
    return candidate


class ActionRegistry:
    def __init__(self, workspace: Workspace, prompt: Prompt, quit: Callable[[], None]):
        self.workspace = workspace
        self.prompt = prompt
        self.quit = quit
        self.actions: List[Action] = self._define_actions()

    def find(self, event: KeyEvent) -> Optional[Action]:
        for action in self.actions:
            if action.keybind.matches(event):
                return action
        return None

    def execute(self, event: KeyEvent) -> bool:
        """Run the first matching action; return whether the screen needs a redraw."""
        action = self.find(event)
        if action is None:
            return False
        try:
            action.operation()
        except Exception:
            logger.exception("Action %s failed", action.name)
        return action.requires_rerender

    def _define_actions(self) -> List[Action]:
        ws = self.workspace
        return [
            Action('quit', KEYBINDS['QUIT'], False, self.quit),
            Action('move_up', KEYBINDS['MOVE_UP'], True, ws.move_up),
            Action('move_down', KEYBINDS['MOVE_DOWN'], True, ws.move_down),
            Action('toggle', KEYBINDS['TOGGLE'], True, self._toggle),
            Action('delete', KEYBINDS['DELETE'], True, self._delete),
            Action('sort', KEYBINDS['SORT'], True, self._sort),
            Action('add', KEYBINDS['ADD'], True, self._add),
            Action('edit', KEYBINDS['EDIT'], True, self._edit),
            Action('add_project', KEYBINDS['ADD_PROJECT'], True, self._add_project),
            Action('next_project', KEYBINDS['NEXT_PROJECT'], True, ws.next_project),
            Action('move_to_next_project', KEYBINDS['MOVE_TO_NEXT_PROJECT'], True, self._move_to_next_project),
            Action('toggle_fold', KEYBINDS['TOGGLE_FOLD'], True, ws.toggle_fold),
            Action('toggle_fold_all', KEYBINDS['TOGGLE_FOLD_ALL'], True, ws.toggle_fold_all),
        ]

    def _toggle(self) -> None:
        task = self.workspace.toggle_selected()
        if task is None:
            return
        if task.completed:
            self.workspace.set_status("Task completed", "success")
        else:
            self.workspace.set_status("Task reopened", "info")

    def _delete(self) -> None:
        if self.workspace.delete_selected() is not None:
            self.workspace.set_status("Task deleted", "warning")

    def _sort(self) -> None:
        self.workspace.sort_by_completion()
        self.workspace.set_status("Sorted by completion", "info")

    def _add(self) -> None:
        def on_submit(text: Optional[str]) -> None:
            if text:
                self.workspace.add_task(text)
                self.workspace.set_status("Task added", "success")

        self.prompt("Add task", "", on_submit)

    def _edit(self) -> None:
        task = self.workspace.selected_task
        if task is None:
            return

        def on_submit(text: Optional[str]) -> None:
            if text and self.workspace.update_selected(text):
                self.workspace.set_status("Task updated", "success")

        self.prompt("Edit task", task.description, on_submit)

    def _add_project(self) -> None:
        def on_submit(text: Optional[str]) -> None:
            if not text:
                return
            project_id = unique_project_id(text, self.workspace.project_ids())
            self.workspace.add_project(project_id, Project(title=text))
            self.workspace.set_status(f'Project "{text}" created', "success")

        self.prompt("New project", "", on_submit)

    def _move_to_next_project(self) -> None:
        target = self.workspace.next_view()
        if self.workspace.move_selected_task_to_next_project():
            self.workspace.set_status(f"Moved to {target.title}", "info")
        elif len(self.workspace.views) < 2:
            self.workspace.set_status("Need another project to move tasks", "warning")
