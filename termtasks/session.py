"""Interactive session lifecycle."""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import List, Optional

from .actions import ActionRegistry
from .input_modes import InputModeController
from .render import Renderer
from .repository import ProjectRepository
from .views import Workspace

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    STOPPED = "stopped"


class SessionController:
    """Owns the screen and keyboard for one interactive run.

    ``run()`` enters the alternate screen, draws, starts key capture and then
    waits until the quit action fires (or the keyboard closes). Shutdown saves
    every project, releases the keyboard and restores the main screen.
    """

    def __init__(self, workspace: Workspace, repository: ProjectRepository, screen, keyboard):
        self.workspace = workspace
        self.repository = repository
        self.screen = screen
        self.keyboard = keyboard
        self.renderer = Renderer(screen)
        self.modes = InputModeController(keyboard, self.render)
        self.actions = ActionRegistry(workspace, prompt=self.modes.begin_text_entry, quit=self.request_quit)
        self.modes.dispatch = self.actions.execute
        self.state = SessionState.STOPPED
        self.failed_saves: List[str] = []
        self._quit: Optional[asyncio.Event] = None

    def _set_state(self, state: SessionState) -> None:
        logger.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def render(self) -> None:
        if self.state not in (SessionState.STARTING, SessionState.RUNNING):
            return
        self.renderer.render(self.workspace, self.modes.input_text, self.modes.input_label)

    def request_quit(self) -> None:
        # Keys still queued in the current read batch must not reach an action.
        self.keyboard.set_handler(None)
        if self._quit is not None:
            self._quit.set()

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self._quit = asyncio.Event()
        self.workspace.scheduler = loop.call_later
        self.workspace.on_status_cleared = self.render
        self.keyboard.on_close = self.request_quit

        self._set_state(SessionState.STARTING)
        self.screen.enter_alternate_buffer()
        self.screen.hide_cursor()
        try:
            self.render()
            self.keyboard.enable_raw_capture()
            self.modes.enter_navigation()
            self._set_state(SessionState.RUNNING)
            await self._quit.wait()
        finally:
            self._shutdown()

    def _shutdown(self) -> None:
        self._set_state(SessionState.SHUTTING_DOWN)
        self.modes.cancel_pending()
        self.keyboard.set_handler(None)
        self.workspace.cancel_status_timer()
        try:
            self.failed_saves = self.persist()
        finally:
            self.keyboard.disable_raw_capture()
            self.screen.show_cursor()
            self.screen.exit_alternate_buffer()
            self.screen.flush()
            self._set_state(SessionState.STOPPED)

    def persist(self) -> List[str]:
        """Save each project independently; return the ids that failed."""
        failed: List[str] = []
        for view in self.workspace.views:
            try:
                ok = self.repository.save(view.project_id, view.project)
            except Exception:
                logger.exception("Saving project %s failed", view.project_id)
                ok = False
            if not ok:
                failed.append(view.project_id)
        if failed:
            logger.error("Projects not saved: %s", ", ".join(failed))
        return failed
