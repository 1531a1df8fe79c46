"""Task and project data types shared by the UI, repository and CLI."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass
class Task:
    description: str
    completed: bool = False

    def toggle(self) -> None:
        self.completed = not self.completed

    def to_dict(self) -> Dict[str, object]:
        return {"description": self.description, "completed": self.completed}

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "Task":
        return cls(str(raw.get("description") or ""), bool(raw.get("completed", False)))


@dataclass
class Project:
    title: str
    tasks: List[Task] = field(default_factory=list)

    # Index-taking mutators silently ignore out-of-range positions.
    def _valid(self, index: int) -> bool:
        return 0 <= index < len(self.tasks)

    def add_task(self, task: Task) -> None:
        self.tasks.append(task)

    def remove_task(self, index: int) -> Optional[Task]:
        if not self._valid(index):
            return None
        return self.tasks.pop(index)

    def toggle_task(self, index: int) -> None:
        if self._valid(index):
            self.tasks[index].toggle()

    def update_task(self, index: int, description: str) -> None:
        if self._valid(index):
            self.tasks[index].description = description

    def sort_by_completion(self) -> None:
        # list.sort is stable, so each group keeps its relative order.
        self.tasks.sort(key=lambda t: int(t.completed))

    def stats(self) -> Tuple[int, int]:
        """Return (completed, total)."""
        return sum(1 for t in self.tasks if t.completed), len(self.tasks)

    def to_dict(self) -> Dict[str, object]:
        return {"title": self.title, "tasks": [t.to_dict() for t in self.tasks]}

    @classmethod
    def from_dict(cls, raw: Mapping[str, object], default_title: str = "") -> "Project":
        title = raw.get("title") or default_title
        tasks_raw = raw.get("tasks") or []
        tasks: List[Task] = []
        if isinstance(tasks_raw, list):
            for item in tasks_raw:
                if isinstance(item, Mapping):
                    tasks.append(Task.from_dict(item))
        return cls(title=str(title), tasks=tasks)
