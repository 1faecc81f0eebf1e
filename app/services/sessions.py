import copy
import logging
import threading
from contextlib import contextmanager

from app.models import GameType
from app.services.errors import NoActiveSession, SessionAlreadyActive

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory home of every active multi-step game session.

    Keyed by ``(user_id, game_type)``; at most one session per key. ``create``
    and ``pop`` are atomic so two concurrent calls can never both see the same
    session. Sessions do not survive a restart.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._sessions: dict[tuple[int, GameType], object] = {}

    def get(self, user_id: int, game_type: GameType):
        with self._lock:
            return self._sessions.get((user_id, game_type))

    def create(self, user_id: int, game_type: GameType, session) -> None:
        with self._lock:
            key = (user_id, game_type)
            if key in self._sessions:
                raise SessionAlreadyActive(f"You already have an active {game_type.value} game")
            self._sessions[key] = session

    def pop(self, user_id: int, game_type: GameType):
        with self._lock:
            session = self._sessions.pop((user_id, game_type), None)
        if session is None:
            raise NoActiveSession(f"No active {game_type.value} game found")
        return session

    def discard(self, user_id: int, game_type: GameType) -> None:
        with self._lock:
            self._sessions.pop((user_id, game_type), None)

    def restore(self, user_id: int, game_type: GameType, session) -> None:
        with self._lock:
            if session is None:
                self._sessions.pop((user_id, game_type), None)
            else:
                self._sessions[(user_id, game_type)] = session

    @contextmanager
    def guard(self, user_id: int, game_type: GameType):
        """Put the slot back the way it was if the wrapped transition fails.

        Callers hold the user's lock, so nothing else can touch the slot while
        the transition runs.
        """
        before = copy.deepcopy(self.get(user_id, game_type))
        try:
            yield
        except Exception:
            self.restore(user_id, game_type, before)
            raise

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
