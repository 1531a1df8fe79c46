#!/usr/bin/env python3
# termtasks: terminal task lists grouped into projects
#
# Hotkeys (interactive)
#   ↑/k ↓/j  move selection
#   space    toggle done
#   a / e    add / edit task (Enter save, Esc cancel)
#   d        delete task
#   s        sort: open tasks first
#   p        new project
#   tab      next project
#   m        move task to the next project
#   f / F    fold project / fold all
#   q        save and quit
#
# Environment
# - TERMTASKS_CONFIG  path to a YAML config file
# - TERMTASKS_DIR     project storage directory

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from . import __version__
from .config import Config, ConfigError, LOG_LEVELS, load_config
from .models import Task
from .repository import ProjectRepository, default_title
from .views import Workspace

logger = logging.getLogger('termtasks')


def setup_logging(log_path: str, log_level: str = 'ERROR') -> logging.Logger:
    """Route the termtasks logger to a rotating file; the terminal stays clean."""
    root = logging.getLogger('termtasks')
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(logging.DEBUG)
    root.propagate = False
    directory = os.path.dirname(os.path.abspath(log_path))
    os.makedirs(directory, exist_ok=True)
    fh = RotatingFileHandler(log_path, maxBytes=2000000, backupCount=2, encoding='utf-8')
    fh.setLevel(getattr(logging, log_level.upper(), logging.ERROR))
    fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
    root.addHandler(fh)
    return root


def load_workspace(repo: ProjectRepository, default_project: str, status_timeout: float) -> Workspace:
    if not repo.exists(default_project):
        repo.create(default_project, default_title(default_project))
    ids = repo.list()
    if default_project in ids:
        ids.remove(default_project)
    ids.insert(0, default_project)
    return Workspace.from_projects([(pid, repo.load(pid)) for pid in ids], status_timeout=status_timeout)


# -----------------------------
# Commands
# -----------------------------
def cmd_interactive(cfg: Config, repo: ProjectRepository) -> int:
    from .session import SessionController
    from .terminal import KeyboardSource, Screen, build_style

    workspace = load_workspace(repo, cfg.default_project, cfg.status_timeout)
    session = SessionController(workspace, repo, Screen(style=build_style(cfg.style)), KeyboardSource())
    asyncio.run(session.run())
    if session.failed_saves:
        print(f"Failed to save: {', '.join(session.failed_saves)} (see {cfg.log_path})", file=sys.stderr)
        return 1
    return 0


def _print_project(repo: ProjectRepository, project_id: str, heading: bool) -> None:
    project = repo.load(project_id)
    if heading:
        print(f"## {project.title}")
    for task in project.tasks:
        prefix = '[x]' if task.completed else '[ ]'
        print(f"{prefix} {task.description}")


def cmd_list(cfg: Config, repo: ProjectRepository, project_id: Optional[str], show_all: bool) -> int:
    if show_all:
        ids = repo.list() or [cfg.default_project]
        for n, pid in enumerate(ids):
            if n:
                print()
            _print_project(repo, pid, heading=True)
        return 0
    _print_project(repo, project_id or cfg.default_project, heading=False)
    return 0


def cmd_add(cfg: Config, repo: ProjectRepository, project_id: Optional[str], words: List[str]) -> int:
    text = " ".join(words).strip()
    if not text:
        print("Nothing to add: task text is empty.", file=sys.stderr)
        return 2
    pid = project_id or cfg.default_project
    project = repo.load(pid)
    project.add_task(Task(text))
    if not repo.save(pid, project):
        print(f"Failed to save project {pid} (see {cfg.log_path})", file=sys.stderr)
        return 1
    return 0


def cmd_projects(repo: ProjectRepository) -> int:
    for pid in repo.list():
        print(pid)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="termtasks", description="Terminal task lists grouped into projects")
    ap.add_argument("--config", help="Path to YAML config")
    ap.add_argument("--data-dir", help="Directory holding project folders")
    ap.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="File log level (default ERROR)")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command")
    sub.add_parser("interactive", help="Run the full-screen editor (default)")
    p_list = sub.add_parser("list", help="Print tasks")
    p_list.add_argument("--project", help="Project id (default: the default project)")
    p_list.add_argument("--all", action="store_true", help="Print every project")
    p_add = sub.add_parser("add", help="Append a task")
    p_add.add_argument("--project", help="Project id (default: the default project)")
    p_add.add_argument("text", nargs="+", help="Task description")
    sub.add_parser("projects", help="List project ids")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    if args.data_dir:
        cfg.data_dir = args.data_dir
    if args.log_level:
        cfg.log_level = args.log_level
    setup_logging(cfg.log_path, cfg.log_level)
    repo = ProjectRepository(cfg.data_dir)
    command = args.command or "interactive"
    logger.debug("command=%s data_dir=%s", command, cfg.data_dir)
    if command == "list":
        return cmd_list(cfg, repo, args.project, args.all)
    if command == "add":
        return cmd_add(cfg, repo, args.project, args.text)
    if command == "projects":
        return cmd_projects(repo)
    return cmd_interactive(cfg, repo)


if __name__ == "__main__":
    sys.exit(main())
