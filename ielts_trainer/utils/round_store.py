"""
Redis-backed store for practice round state
"""
import redis
import logging
import threading
import time
from collections import defaultdict
from typing import Dict, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError

from ielts_trainer.config import settings
from ielts_trainer.exceptions import StoreError
from ielts_trainer.schemas.practice import PracticeRound

logger = logging.getLogger(__name__)


class RoundStore:
    """
    Current round per user, plus a per-user round token counter

    Tokens only ever increase, so a response carrying an older token can be
    recognised as stale. The token counter therefore never expires: a counter
    that restarted at 1 would make an old client's token match a new round.
    Only the round itself has a TTL. Without Redis the state lives in this
    process only.
    """

    def __init__(self, redis_url: Optional[str] = None, ttl: int = 3600, redis_client=None):
        self.ttl = ttl
        self.redis_client = redis_client

        if self.redis_client is None and redis_url:
            try:
                client = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5
                )
                # Test connection
                client.ping()
                self.redis_client = client
                logger.info("Redis connection established")
            except (redis.RedisError, ValueError) as e:
                logger.warning(f"Redis connection failed: {str(e)}. Round state kept in process memory.")

        # In-process fallback: {user_id: (expires_at, payload)}
        self._rounds: Dict[str, Tuple[float, str]] = {}
        self._tokens: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    @staticmethod
    def _round_key(user_id: UUID) -> str:
        return f"practice:round:{user_id}"

    @staticmethod
    def _token_key(user_id: UUID) -> str:
        return f"practice:token:{user_id}"

    def next_token(self, user_id: UUID) -> int:
        """Reserve a new round token; it becomes the current one"""
        if not self.redis_client:
            with self._lock:
                self._tokens[str(user_id)] += 1
                return self._tokens[str(user_id)]

        try:
            return int(self.redis_client.incr(self._token_key(user_id)))
        except redis.RedisError as e:
            logger.error(f"Round token error: {str(e)}")
            raise StoreError(f"Could not reserve round token: {e}") from e

    def current_token(self, user_id: UUID) -> int:
        if not self.redis_client:
            return self._tokens.get(str(user_id), 0)

        try:
            value = self.redis_client.get(self._token_key(user_id))
        except redis.RedisError as e:
            logger.error(f"Round token error: {str(e)}")
            raise StoreError(f"Could not read round token: {e}") from e
        return int(value) if value else 0

    def get(self, user_id: UUID) -> Optional[PracticeRound]:
        """Load the user's current round, or None if absent or expired"""
        if not self.redis_client:
            entry = self._rounds.get(str(user_id))
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at < time.time():
                del self._rounds[str(user_id)]
                return None
        else:
            try:
                payload = self.redis_client.get(self._round_key(user_id))
            except redis.RedisError as e:
                logger.error(f"Round get error: {str(e)}")
                raise StoreError(f"Could not load round: {e}") from e
            if not payload:
                return None

        try:
            return PracticeRound.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable round state for {user_id}: {str(e)}")
            return None

    def save_if_current(self, user_id: UUID, round_: PracticeRound) -> bool:
        """
        Save the round only while its token is still the current one

        The token check and the write happen atomically. Returns False, and
        writes nothing, when a newer round has been started.
        """
        payload = round_.model_dump_json()

        if not self.redis_client:
            with self._lock:
                if self._tokens.get(str(user_id), 0) != round_.token:
                    return False
                self._rounds[str(user_id)] = (time.time() + self.ttl, payload)
                return True

        token_key = self._token_key(user_id)
        try:
            with self.redis_client.pipeline() as pipe:
                pipe.watch(token_key)
                current = pipe.get(token_key)
                if int(current or 0) != round_.token:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.setex(self._round_key(user_id), self.ttl, payload)
                pipe.execute()
        except redis.WatchError:
            # Token moved between WATCH and EXEC
            return False
        except redis.RedisError as e:
            logger.error(f"Round set error: {str(e)}")
            raise StoreError(f"Could not save round: {e}") from e

        logger.debug(f"Round saved: user={user_id}, token={round_.token} (TTL: {self.ttl}s)")
        return True

    def clear(self, user_id: UUID) -> None:
        if not self.redis_client:
            self._rounds.pop(str(user_id), None)
            return

        try:
            self.redis_client.delete(self._round_key(user_id))
        except redis.RedisError as e:
            logger.error(f"Round delete error: {str(e)}")


# Global instance
round_store = RoundStore(
    redis_url=settings.REDIS_URL,
    ttl=settings.ROUND_TTL_SECONDS
)


def get_round_store() -> RoundStore:
    return round_store
