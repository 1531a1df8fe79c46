"""JSON project storage: ``<base_dir>/<project_id>/project.json``."""
from __future__ import annotations

import json
import logging
import os
from typing import List

from .models import Project

logger = logging.getLogger(__name__)

PROJECT_FILE = "project.json"


def default_title(project_id: str) -> str:
    return project_id[:1].upper() + project_id[1:]


class ProjectRepository:
    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def _path(self, project_id: str) -> str:
        return os.path.join(self.base_dir, project_id, PROJECT_FILE)

    def exists(self, project_id: str) -> bool:
        return os.path.isfile(self._path(project_id))

    def list(self) -> List[str]:
        if not os.path.isdir(self.base_dir):
            return []
        ids = []
        for name in sorted(os.listdir(self.base_dir)):
            if os.path.isfile(os.path.join(self.base_dir, name, PROJECT_FILE)):
                ids.append(name)
        return ids

    def load(self, project_id: str) -> Project:
        """Load a project; a missing or unreadable file yields an empty one."""
        path = self._path(project_id)
        title = default_title(project_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return Project(title=title)
        except (OSError, ValueError):
            logger.warning("Unable to read project file %s", path, exc_info=True)
            return Project(title=title)
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed project file %s", path)
            return Project(title=title)
        return Project.from_dict(data, default_title=title)

    def save(self, project_id: str, project: Project) -> bool:
        path = self._path(project_id)
        tmp_path = path + ".tmp"
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(project.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError):
            logger.error("Failed to save project %s to %s", project_id, path, exc_info=True)
            return False
        return True

    def create(self, project_id: str, title: str) -> Project:
        project = Project(title=title)
        self.save(project_id, project)
        return project
