import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from wagerboard.errors import PaginationAbort, UpstreamError, UpstreamShapeError, UpstreamTransportError
from wagerboard.periods import TimeWindow

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown"
DEFAULT_PAGE_SIZE = 50
# Safety bound against an upstream that never returns a short page.
DEFAULT_MAX_PAGES = 200

Accessor = Callable[[Dict[str, Any]], Any]


def _field(name: str) -> Accessor:
    return lambda row: row.get(name)


def _nested_username(row: Dict[str, Any]) -> Any:
    user = row.get("user")
    return user.get("username") if isinstance(user, dict) else None


def _user_string(row: Dict[str, Any]) -> Any:
    user = row.get("user")
    return user if isinstance(user, str) else None


# Rows come in several shapes; the first accessor yielding a value wins.
USERNAME_ACCESSORS: Sequence[Accessor] = (
    _field("name"),
    _field("username"),
    _field("userName"),
    _nested_username,
    _user_string,
)
WAGER_ACCESSORS: Sequence[Accessor] = tuple(
    _field(name) for name in ("wagered", "betAmount", "amount", "stake", "value")
)
DEPOSIT_ACCESSORS: Sequence[Accessor] = (_field("deposited"),)


def first_present(row: Any, accessors: Sequence[Accessor]) -> Any:
    if not isinstance(row, dict):
        return None
    for accessor in accessors:
        value = accessor(row)
        if value is not None:
            return value
    return None


def _to_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def record_username(row: Any) -> str:
    name = first_present(row, USERNAME_ACCESSORS)
    return UNKNOWN_USER if name is None else str(name)


def record_wager(row: Any) -> float:
    return _to_number(first_present(row, WAGER_ACCESSORS))


def record_deposit(row: Any) -> float:
    return _to_number(first_present(row, DEPOSIT_ACCESSORS))


class XfunClient:
    """Skip/take paginated affiliate query, authenticated with an x-apikey header."""

    def __init__(
        self,
        base_url: str,
        code: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 8,
    ):
        self.base_url = base_url
        self.code = code
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_page(self, window: TimeWindow, take: int = DEFAULT_PAGE_SIZE, skip: int = 0) -> List[Any]:
        params = {
            "code": self.code,
            "gt": window.start_ms,
            "lt": window.end_ms,
            "take": take,
            "skip": skip,
        }
        headers = {"x-apikey": self.api_key, "Content-Type": "application/json"}
        try:
            response = self.session.get(self.base_url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamTransportError(f"X.FUN request failed at skip={skip}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamShapeError("X.FUN returned a non-JSON body") from exc

        if isinstance(payload, list):
            return payload
        rows = payload.get("data") if isinstance(payload, dict) else None
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise UpstreamShapeError(f"X.FUN data field is {type(rows).__name__}, expected list")
        return rows

    def fetch_all(
        self,
        window: TimeWindow,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> List[Any]:
        """
        Walk pages from skip 0 until a short page or max_pages.
        One failed page aborts the whole walk; nothing partial is returned.
        """
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        rows: List[Any] = []
        for page in range(max_pages):
            try:
                chunk = self.fetch_page(window, take=page_size, skip=page * page_size)
            except UpstreamError as exc:
                raise PaginationAbort(page, exc) from exc
            rows.extend(chunk)
            if len(chunk) < page_size:
                break
        else:
            logger.warning("X.FUN pagination hit the %d page ceiling", max_pages)

        logger.info("Fetched %d X.FUN records", len(rows))
        return rows
