"""
Session observer for front-ends.
Maps session snapshots onto the screen graph that should be active.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from FitTracker.core.session.manager import SessionManager
from FitTracker.core.session.models import Session, SessionStatus

logger = logging.getLogger(__name__)


class ScreenGraph(Enum):
    """Top-level screen graphs of a FitTracker front-end."""
    LOADING = "loading"
    AUTH = "auth"
    MAIN = "main"


def screen_graph_for(session: Session) -> ScreenGraph:
    """Which screen graph a session snapshot calls for."""
    if session.status is SessionStatus.AUTHENTICATED:
        return ScreenGraph.MAIN
    if session.status is SessionStatus.UNAUTHENTICATED:
        return ScreenGraph.AUTH
    return ScreenGraph.LOADING


class Navigator:
    """
    Keeps the active screen graph in step with the session.

    ``on_change`` fires only when the graph actually changes, so a profile
    update (MAIN -> MAIN) does not rebuild the main screens.
    """

    def __init__(self, session_manager: SessionManager,
                 on_change: Optional[Callable[[ScreenGraph], None]] = None):
        self._session_manager = session_manager
        self._on_change = on_change
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.current: Optional[ScreenGraph] = None
        self.history: List[ScreenGraph] = []

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._session_manager.subscribe(self._on_session)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_session(self, session: Session) -> None:
        graph = screen_graph_for(session)
        if graph is self.current:
            return
        logger.debug("Screen graph %s -> %s", self.current and self.current.value, graph.value)
        self.current = graph
        self.history.append(graph)
        if self._on_change is not None:
            self._on_change(graph)
