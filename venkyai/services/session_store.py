"""Holds the current session and overlay presentation state."""

import logging
from datetime import datetime
from typing import Optional

from ..models.session import Session, SessionStatus

logger = logging.getLogger(__name__)


class SessionStore:
    """Pure state container for the current session.

    Only the session controller and the event bus adapter write to it.
    """

    def __init__(self):
        self.current_session: Optional[Session] = None
        self.overlay_visible = True
        self.setup_open = False

    @property
    def status(self) -> Optional[SessionStatus]:
        if self.current_session is None:
            return None
        return self.current_session.status

    @property
    def is_active(self) -> bool:
        return self.current_session is not None and self.current_session.is_active

    def replace(self, session: Session) -> None:
        """Make ``session`` the current session, discarding the previous one."""
        previous = self.current_session
        if previous is not None and previous.id != session.id:
            logger.info(f"Replacing session {previous.id} ({previous.status.value}) with {session.id}")
        self.current_session = session

    def mark_active(self) -> None:
        if self.current_session is None:
            return
        if self.current_session.status is SessionStatus.ENDED:
            logger.warning(f"Session {self.current_session.id} already ended; not reactivating")
            return
        self.current_session.status = SessionStatus.ACTIVE

    def mark_ended(self, end_time: Optional[datetime] = None) -> Optional[Session]:
        """Mark the current session as ended and return it."""
        if self.current_session is None:
            return None
        self.current_session = self.current_session.ended(end_time)
        return self.current_session

    def set_overlay_visible(self, visible: bool) -> None:
        self.overlay_visible = visible
        logger.debug(f"Overlay visible: {visible}")

    def open_setup(self) -> None:
        self.setup_open = True

    def close_setup(self) -> None:
        self.setup_open = False
