import logging
import threading
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)


class IntervalTask:
    """
    Run func on a daemon thread every interval seconds until stop() is
    called. With immediate=True the first run happens on start().
    """

    def __init__(self, name: str, interval: float, func: Callable[[], object], immediate: bool = True):
        self.name = name
        self.interval = interval
        self.func = func
        self.immediate = immediate
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "IntervalTask":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info("Started %s (every %ss)", self.name, self.interval)
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        if not self.immediate and self._stop.wait(self.interval):
            return
        while not self._stop.is_set():
            try:
                self.func()
            except Exception:
                # The loop outlives any single failed run.
                logger.exception("%s run failed", self.name)
            if self._stop.wait(self.interval):
                break


def ping(url: str, session: requests.Session, timeout: float = 8) -> bool:
    """Hit our own public URL so the hosting platform sees traffic."""
    try:
        session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Self-ping failed: %s", exc)
        return False
    logger.info("Self-pinged %s", url)
    return True
