"""In-memory session store for per-session conversation history."""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from models.conversation import Turn, ROLES, ASSISTANT
from config import MAX_HISTORY_TURNS

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Maps a session id to its ordered list of turns.

    History lives for the life of the process only. Mutations of one session
    are serialized by a per-session lock; different sessions never contend
    except for the brief registry lookup.
    """

    def __init__(self, max_turns: int = MAX_HISTORY_TURNS):
        """
        Initialize an empty store.

        Args:
            max_turns: Retention ceiling applied after every append
        """
        if max_turns < 2:
            raise ValueError("max_turns must be at least 2")

        self.max_turns = max_turns
        self._sessions: Dict[str, List[Turn]] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        logger.info(f"SessionStore initialized (max_turns={max_turns})")

    def append(self, session_id: str, role: str, content: str) -> None:
        """
        Append a turn, creating the session on first use.

        Args:
            session_id: Opaque session key
            role: "user" or "assistant"
            content: Message text, stored verbatim

        Raises:
            ValueError: If role is not a known role
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")

        with self._lock_for(session_id):
            with self._registry_lock:
                turns = self._sessions.setdefault(session_id, [])
            turns.append(Turn(role=role, content=content))
            self._trim(session_id, turns)

    def get(self, session_id: str) -> List[Turn]:
        """Return a copy of the session's turns, or [] if the session is unknown."""
        with self._registry_lock:
            turns = self._sessions.get(session_id)
            lock = self._locks.get(session_id)

        if turns is None or lock is None:
            return []

        with lock:
            return list(turns)

    def recent(self, session_id: str, n: int) -> List[Turn]:
        """Return the last ``n`` turns of a session, oldest first."""
        if n <= 0:
            return []
        return self.get(session_id)[-n:]

    def clear(self, session_id: str) -> None:
        """
        Remove a session's turns. Unknown sessions are ignored.

        Waits for any exchange holding the session's lock. The lock entry
        itself is kept so later requests for the id still serialize on it.
        """
        with self._registry_lock:
            lock = self._locks.get(session_id)
        if lock is None:
            return

        with lock:
            with self._registry_lock:
                removed = self._sessions.pop(session_id, None)

        if removed is not None:
            logger.info(f"Cleared session {session_id} ({len(removed)} turns)")

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """
        Hold a session's lock across several operations.

        Used to keep a whole user/assistant exchange contiguous when two
        clients share a session id. Re-entrant for the holding thread.
        """
        with self._lock_for(session_id):
            yield

    def session_count(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

    def _lock_for(self, session_id: str) -> threading.RLock:
        with self._registry_lock:
            lock: Optional[threading.RLock] = self._locks.get(session_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[session_id] = lock
            return lock

    def _trim(self, session_id: str, turns: List[Turn]) -> None:
        """
        Enforce the retention ceiling in place.

        Drops the oldest turns down to the ceiling, then any assistant turns
        left at the front so history never opens with an orphaned reply.
        """
        if len(turns) <= self.max_turns:
            return

        dropped = len(turns) - self.max_turns
        del turns[:dropped]

        while turns and turns[0].role == ASSISTANT:
            del turns[0]
            dropped += 1

        logger.debug(f"Trimmed {dropped} turns from session {session_id}")
