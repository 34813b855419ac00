"""Per-user drill session counters (correct, total, streak, max streak).

Sessions are best-effort UI state keyed by ``(user_id, collection_id)`` and
expire after ``QUIZ_SESSION_TTL_SECONDS`` of inactivity. The in-memory store
is local to one process and is lost on restart; configure ``REDIS_URL`` to
share sessions between instances. The attempt log stays the source of truth.
"""

import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, Set, Tuple

import redis

from lingodrill.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    correct: int = 0
    total: int = 0
    streak: int = 0
    max_streak: int = 0

    def apply(self, is_correct: bool) -> "SessionStats":
        if is_correct:
            streak = self.streak + 1
            return SessionStats(self.correct + 1, self.total + 1, streak, max(streak, self.max_streak))
        return SessionStats(self.correct, self.total + 1, 0, self.max_streak)


@dataclass
class _Session:
    stats: SessionStats = field(default_factory=SessionStats)
    answered: Set[str] = field(default_factory=set)
    touched_at: float = 0.0


class InMemoryQuizSessionStore:
    def __init__(self, ttl_seconds: int = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.QUIZ_SESSION_TTL_SECONDS
        self._clock = clock
        self._sessions: Dict[Tuple[str, str], _Session] = {}
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        stale = [key for key, s in self._sessions.items() if now - s.touched_at > self.ttl_seconds]
        for key in stale:
            del self._sessions[key]

    def _get(self, user_id, collection_id, create: bool = False):
        key = (str(user_id), str(collection_id))
        now = self._clock()
        session = self._sessions.get(key)
        if session and now - session.touched_at > self.ttl_seconds:
            del self._sessions[key]
            session = None
        if session is None and create:
            session = self._sessions[key] = _Session()
        if session is not None:
            session.touched_at = now
        return session

    def get_stats(self, user_id, collection_id) -> SessionStats:
        with self._lock:
            session = self._get(user_id, collection_id)
            return session.stats if session else SessionStats()

    def record_answer(self, user_id, collection_id, exercise_id, is_correct: bool) -> SessionStats:
        with self._lock:
            # writes sweep every idle session, not just this one
            self._evict_expired(self._clock())
            session = self._get(user_id, collection_id, create=True)
            session.stats = session.stats.apply(is_correct)
            session.answered.add(str(exercise_id))
            return session.stats

    def has_answered(self, user_id, collection_id, exercise_id) -> bool:
        with self._lock:
            session = self._get(user_id, collection_id)
            return bool(session) and str(exercise_id) in session.answered

    def reset(self, user_id, collection_id) -> None:
        with self._lock:
            self._sessions.pop((str(user_id), str(collection_id)), None)


class RedisQuizSessionStore:
    def __init__(self, client: redis.Redis, ttl_seconds: int = None):
        self.client = client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.QUIZ_SESSION_TTL_SECONDS

    @staticmethod
    def _keys(user_id, collection_id) -> Tuple[str, str]:
        base = f"quiz:{user_id}:{collection_id}"
        return f"{base}:stats", f"{base}:answered"

    @staticmethod
    def _parse(raw: dict) -> SessionStats:
        return SessionStats(**{name: int(raw.get(name, 0)) for name in ("correct", "total", "streak", "max_streak")})

    def get_stats(self, user_id, collection_id) -> SessionStats:
        stats_key, _ = self._keys(user_id, collection_id)
        return self._parse(self.client.hgetall(stats_key))

    def record_answer(self, user_id, collection_id, exercise_id, is_correct: bool) -> SessionStats:
        stats_key, answered_key = self._keys(user_id, collection_id)
        with self.client.pipeline() as pipe:
            while True:
                try:
                    pipe.watch(stats_key)
                    stats = self._parse(pipe.hgetall(stats_key)).apply(is_correct)
                    pipe.multi()
                    pipe.hset(stats_key, mapping=asdict(stats))
                    pipe.expire(stats_key, self.ttl_seconds)
                    pipe.sadd(answered_key, str(exercise_id))
                    pipe.expire(answered_key, self.ttl_seconds)
                    pipe.execute()
                    return stats
                except redis.WatchError:
                    logger.debug("Session %s changed concurrently, retrying", stats_key)

    def has_answered(self, user_id, collection_id, exercise_id) -> bool:
        _, answered_key = self._keys(user_id, collection_id)
        return bool(self.client.sismember(answered_key, str(exercise_id)))

    def reset(self, user_id, collection_id) -> None:
        self.client.delete(*self._keys(user_id, collection_id))


_store = None


def get_session_store():
    global _store
    if _store is None:
        if settings.REDIS_URL:
            client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
            _store = RedisQuizSessionStore(client)
            logger.info("Quiz sessions backed by redis")
        else:
            _store = InMemoryQuizSessionStore()
    return _store
