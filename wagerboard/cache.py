import logging
import threading
from datetime import datetime, timezone
from typing import Optional, Tuple

from wagerboard.errors import UpstreamError
from wagerboard.leaderboard import LeaderboardEntry, rainbet_leaderboard
from wagerboard.periods import period_bounds
from wagerboard.rainbet import RainbetClient

logger = logging.getLogger(__name__)


class LeaderboardCache:
    """
    Single slot holding the latest current-period leaderboard.
    Writers publish a fully built tuple; readers get whichever tuple was
    last published, never a partial one.
    """

    def __init__(self):
        self._entries: Tuple[LeaderboardEntry, ...] = ()
        self._updated_at: Optional[datetime] = None
        self._lock = threading.Lock()

    def snapshot(self) -> Tuple[LeaderboardEntry, ...]:
        with self._lock:
            return self._entries

    @property
    def updated_at(self) -> Optional[datetime]:
        with self._lock:
            return self._updated_at

    def replace(self, entries) -> None:
        published = tuple(entries)
        with self._lock:
            self._entries = published
            self._updated_at = datetime.now(timezone.utc)


def refresh_current(cache: LeaderboardCache, client: RainbetClient, now: Optional[datetime] = None) -> bool:
    """
    Rebuild the current-period leaderboard into cache.
    On upstream failure the previous snapshot stays in place.
    """
    window = period_bounds(0, now=now)
    try:
        entries = client.fetch_window(window)
    except UpstreamError as exc:
        logger.error("Failed to fetch Rainbet data: %s", exc)
        return False

    cache.replace(rainbet_leaderboard(entries))
    logger.info(
        "Leaderboard for %s -> %s updated at %s",
        window.start_date,
        window.end_date,
        cache.updated_at.isoformat(),
    )
    return True
