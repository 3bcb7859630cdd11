"""
Backend Gateway Interface
=========================

The three capability groups the front ends rely on:

- auth: sign in / sign out / current session / session change notifications
- rows: list, insert, update and delete rows of the projects table
- blobs: upload, remove and public URL of objects in the images bucket

Calls are single-shot: no retries, caching or batching. Failures propagate
to the caller as GatewayError subclasses.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import Project, Session, UploadFile

logger = logging.getLogger(__name__)


class BackendGateway(ABC):
    """Contract shared by the Supabase and in-memory gateways"""

    def __init__(self):
        self._session = None
        self._listeners = []

    # ===== Auth =====

    def get_session(self) -> Optional[Session]:
        """Current session, or None. An expired session is dropped."""
        if self._session is not None and self._session.is_expired():
            logger.info("Session expired")
            self._set_session(None)
        return self._session

    def restore_session(self, session: Optional[Session]):
        """Re-attach a session persisted by a previous request"""
        if session is not None and session.is_expired():
            session = None
        self._set_session(session)

    def on_session_change(self, callback: Callable[[Optional[Session]], None]) -> Callable[[], None]:
        """Register callback(session) for session changes; returns an unsubscribe function"""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_session(self, session):
        changed = (self._session is None) != (session is None) or (
            session is not None and self._session is not None
            and session.access_token != self._session.access_token
        )
        self._session = session
        if changed:
            for callback in list(self._listeners):
                callback(session)

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Session:
        """Authenticate with email and password; raises AuthError"""

    @abstractmethod
    def sign_out(self):
        """End the session. The local session is always cleared."""

    # ===== Rows =====

    @abstractmethod
    def list_projects(self) -> List[Project]:
        """All projects, newest created_at first"""

    @abstractmethod
    def insert_project(self, fields: Dict[str, Any]) -> Project:
        """Insert a row; the backend assigns id and created_at"""

    @abstractmethod
    def update_project(self, project_id, fields: Dict[str, Any]) -> Project:
        """Apply a partial update and return the fresh row"""

    @abstractmethod
    def delete_project(self, project_id):
        """Delete a row"""

    # ===== Blobs =====

    @abstractmethod
    def upload(self, path: str, file: UploadFile):
        """Store file at path, overwriting any existing object"""

    @abstractmethod
    def remove(self, paths: Sequence[str]):
        """Remove objects; paths that do not exist are ignored"""

    @abstractmethod
    def public_url(self, path: Optional[str]) -> Optional[str]:
        """Viewable URL for a bucket path; absolute URLs pass through, empty gives None"""
