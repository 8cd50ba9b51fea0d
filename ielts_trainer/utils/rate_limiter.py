"""
Rate limiting for sign-in link requests
"""
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional
import logging

from ielts_trainer.config import settings
from ielts_trainer.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window limiter keyed by arbitrary strings
    (client address, email address)
    Production with several workers: back this with Redis
    """

    def __init__(self, per_minute: int = 5, per_hour: int = 30):
        self.windows = ((60, per_minute), (3600, per_hour))
        # {key: deque of request timestamps}, newest on the right
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the longest window, and keys left empty"""
        cutoff = now - max(window for window, _ in self.windows)

        for key in list(self.history.keys()):
            stamps = self.history[key]
            while stamps and stamps[0] <= cutoff:
                stamps.popleft()

            # Remove empty entries
            if not stamps:
                del self.history[key]

    def check(self, *keys: str, now: Optional[float] = None) -> None:
        """
        Record one request against every key, or reject it

        Raises:
            RateLimitExceeded: any key is over a limit; nothing is recorded
        """
        now = time.time() if now is None else now
        self._cleanup_old_entries(now)

        for key in keys:
            stamps = self.history.get(key, ())
            for window, limit in self.windows:
                recent = sum(1 for ts in stamps if ts > now - window)
                if recent >= limit:
                    logger.warning(f"Sign-in link rate limit exceeded ({window}s window): {key}")
                    raise RateLimitExceeded(
                        f"Too many sign-in links requested. Limit: {limit} per {window // 60} minute(s)",
                        retry_after=window,
                    )

        for key in keys:
            self.history[key].append(now)

    def reset(self) -> None:
        self.history.clear()


# Global instance
rate_limiter = RateLimiter(
    per_minute=settings.LOGIN_LINKS_PER_MINUTE,
    per_hour=settings.LOGIN_LINKS_PER_HOUR
)
