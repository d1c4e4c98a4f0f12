"""Session-related data models."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class SessionPurpose(Enum):
    """What the session is assisting with."""
    MEETING = "meeting"
    INTERVIEW = "interview"
    SALES = "sales"
    CASUAL = "casual"

    @classmethod
    def parse(cls, value: Any) -> "SessionPurpose":
        """Parse a purpose name, falling back to MEETING for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEETING


class SessionStatus(Enum):
    """Lifecycle status of a session."""
    ACTIVE = "Active"
    PAUSED = "Paused"
    ENDED = "Ended"


@dataclass
class Session:
    """A bounded interval of assistance scoped to one conversation."""
    id: str
    title: str
    purpose: SessionPurpose = SessionPurpose.MEETING
    status: SessionStatus = SessionStatus.ACTIVE
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    def ended(self, end_time: Optional[datetime] = None) -> "Session":
        """Return a copy of this session marked as ended."""
        return replace(self,
                       status=SessionStatus.ENDED,
                       end_time=end_time or datetime.now())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """Build a session from a backend payload.

        Args:
            data: Mapping with at least ``id`` and ``title``

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Session payload must be a mapping, got {type(data).__name__}")

        session_id = data.get("id")
        title = data.get("title")
        if not session_id or title is None:
            raise ValueError("Session payload requires 'id' and 'title'")

        status = data.get("status", SessionStatus.ACTIVE.value)
        if not isinstance(status, SessionStatus):
            try:
                status = SessionStatus(status)
            except ValueError:
                raise ValueError(f"Unknown session status: {status!r}")

        return cls(
            id=str(session_id),
            title=str(title),
            purpose=SessionPurpose.parse(data.get("purpose", SessionPurpose.MEETING.value)),
            status=status,
            start_time=_parse_time(data.get("start_time")) or datetime.now(),
            end_time=_parse_time(data.get("end_time")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "purpose": self.purpose.value,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).replace("Z", "+00:00")
    # before Python 3.11 fromisoformat takes neither a Z suffix nor more than 6 fractional digits
    text = _EXTRA_FRACTION.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid timestamp: {value!r}")
