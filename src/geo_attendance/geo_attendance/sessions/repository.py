from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ReviewNotes, Session


class SessionRepository(Protocol):
    """Derived daily sessions, at most one per (user_id, date_key)."""

    def get(self, user_id: int, date_key: str) -> Optional[Session]:
        raise NotImplementedError

    def replace(self, session: Session) -> Session:
        """Delete every session stored under the key and insert this one, as one unit."""

        raise NotImplementedError

    def delete(self, user_id: int, date_key: str) -> bool:
        raise NotImplementedError

    def set_notes(self, user_id: int, date_key: str, notes: ReviewNotes) -> bool:
        raise NotImplementedError

    def list_range(self, *, start_key: str, end_key: str) -> Sequence[Session]:
        raise NotImplementedError
