import logging
import threading
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from app.panels.kpis import KPIPanel
from app.panels.stats import StatsPanel
from app.panels.tasks import TaskPanel
from app.panels.users import UserPanel

logger = logging.getLogger(__name__)


class AdminWorkspace:
    """The four admin panels of one signed-in browser session."""

    def __init__(
        self,
        current_user_id: Optional[UUID] = None,
        expires_at: Optional[datetime] = None,
        on_account_deleted: Optional[Callable[[UUID], None]] = None,
    ):
        self.user_id = current_user_id
        self.expires_at = expires_at
        self.users = UserPanel(current_user_id=current_user_id, on_account_deleted=on_account_deleted)
        self.kpis = KPIPanel()
        self.tasks = TaskPanel()
        self.stats = StatsPanel()

    def panel(self, name: str):
        panels = {p.name: p for p in (self.users, self.kpis, self.tasks, self.stats)}
        return panels.get(name)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.utcnow())


class WorkspaceRegistry:
    """
    Workspaces keyed by session id (the token jti).

    An entry lives until sign-out, until its session expires (pruned by the
    housekeeping job), or until its account is deleted from the users panel.
    """

    def __init__(self):
        self._workspaces: dict[str, AdminWorkspace] = {}
        self._lock = threading.Lock()

    def get(
        self,
        session_id: str,
        user_id: Optional[UUID] = None,
        expires_at: Optional[datetime] = None,
    ) -> AdminWorkspace:
        with self._lock:
            workspace = self._workspaces.get(session_id)
            if workspace is None:
                workspace = AdminWorkspace(
                    current_user_id=user_id,
                    expires_at=expires_at,
                    on_account_deleted=self.discard_user,
                )
                self._workspaces[session_id] = workspace
                logger.debug(f"Admin workspace opened for session {session_id}")
            return workspace

    def discard(self, session_id: str) -> None:
        with self._lock:
            if self._workspaces.pop(session_id, None) is not None:
                logger.debug(f"Admin workspace discarded for session {session_id}")

    def discard_user(self, user_id: UUID) -> int:
        """Drop every workspace opened by `user_id`. Returns how many were removed."""
        with self._lock:
            stale = [sid for sid, ws in self._workspaces.items() if ws.user_id == user_id]
            for session_id in stale:
                del self._workspaces[session_id]
        if stale:
            logger.info(f"Discarded {len(stale)} admin workspace(s) of deleted user {user_id}")
        return len(stale)

    def prune_expired(self, now: Optional[datetime] = None) -> int:
        """Drop workspaces whose session has expired. Returns how many were removed."""
        now = now or datetime.utcnow()
        with self._lock:
            stale = [sid for sid, ws in self._workspaces.items() if ws.is_expired(now)]
            for session_id in stale:
                del self._workspaces[session_id]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._workspaces.clear()

    def __len__(self) -> int:
        return len(self._workspaces)


workspace_registry = WorkspaceRegistry()
