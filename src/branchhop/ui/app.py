"""Interactive branch switching session."""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass

from branchhop.config import AppConfig
from branchhop.git.repository import BranchRepository
from branchhop.ui.input import InputController
from branchhop.ui.render import RenderOptions, project
from branchhop.ui.state import SelectionState
from branchhop.ui.surface import CursesSurface, DisplaySurface

logger = py_logging.getLogger(__name__)


@dataclass
class BranchSession:
    """Single control loop: render when flagged, then wait for input."""

    repository: BranchRepository
    surface: DisplaySurface
    config: AppConfig
    state: SelectionState | None = None

    def __post_init__(self) -> None:
        if self.state is None:
            self.state = SelectionState(branch_scope=self.config.scope)
        self.controller = InputController(
            self.state,
            self.repository,
            redraw_on_timeout=self.config.debug,
        )

    def render_options(self) -> RenderOptions:
        return RenderOptions(
            summary_length=self.config.summary_length,
            branch_name_length=self.config.branch_name_length,
            searching=self.controller.searching,
            debug=self.config.debug,
        )

    def render(self) -> None:
        state = self.state
        state.refresh(self.repository)
        state.renders += 1
        width, height = self.surface.size()
        self.surface.clear()
        self.surface.draw(project(state, width, height, self.render_options()))

    def step(self, needs_redraw: bool) -> tuple[bool, bool]:
        """Run one loop iteration; return ``(keep_running, needs_redraw)``."""
        if needs_redraw:
            self.render()
        event = self.surface.read_event(self.config.poll_timeout_seconds)
        outcome = self.controller.handle(event)
        return not outcome.quit, outcome.redraw

    def run(self) -> int:
        logger.debug("Branch session started scope=%s", self.state.branch_scope.value)
        running, needs_redraw = True, True
        while running:
            running, needs_redraw = self.step(needs_redraw)
        logger.debug("Branch session finished renders=%s", self.state.renders)
        return 0


def run_session(repository: BranchRepository, config: AppConfig) -> int:
    with CursesSurface() as surface:
        return BranchSession(repository=repository, surface=surface, config=config).run()
