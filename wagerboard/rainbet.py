import logging
import math
from typing import Any, Dict, List, Optional

import requests

from wagerboard.errors import UpstreamShapeError, UpstreamTransportError
from wagerboard.periods import TimeWindow

logger = logging.getLogger(__name__)


def entry_username(entry: Dict[str, Any]) -> str:
    username = entry.get("username")
    return str(username) if username else ""


def entry_wagered(entry: Dict[str, Any]) -> float:
    """wagered_amount arrives as a numeric string; anything unparseable counts as 0."""
    try:
        amount = float(entry.get("wagered_amount") or 0)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


class RainbetClient:
    """
    Date-range affiliate query. The API works at day granularity, so only
    the calendar dates of the window are sent upstream.
    """

    def __init__(self, base_url: str, api_key: str, session: Optional[requests.Session] = None, timeout: float = 8):
        self.base_url = base_url
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_window(self, window: TimeWindow) -> List[Dict[str, Any]]:
        params = {
            "start_at": window.start_date,
            "end_at": window.end_date,
            "key": self.api_key,
        }
        logger.info("Fetching Rainbet affiliates %s -> %s", params["start_at"], params["end_at"])
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamTransportError(f"Rainbet request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamShapeError("Rainbet returned a non-JSON body") from exc

        affiliates = payload.get("affiliates") if isinstance(payload, dict) else None
        if not isinstance(affiliates, list):
            raise UpstreamShapeError("Rainbet response has no affiliates list")

        logger.info("Fetched %d Rainbet affiliate entries", len(affiliates))
        return affiliates
