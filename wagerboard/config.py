import os
from datetime import datetime, timezone


def parse_instant(text: str) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.
    A trailing "Z" is accepted and naive values are read as UTC.
    """
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


RAINBET_API_URL = os.environ.get(
    "RAINBET_API_URL",
    "https://services.rainbet.com/v1/external/affiliates",
)
RAINBET_API_KEY = os.environ.get("RAINBET_API_KEY", "")

XFUN_API_URL = os.environ.get(
    "XFUN_API_URL",
    "https://api.x.fun/api/affiliate/external",
)
XFUN_CODE = os.environ.get("XFUN_CODE", "Kcaz")
XFUN_API_KEY = os.environ.get("XFUN_API_KEY", "")
# Fixed two-week competition window for the X.FUN leaderboard
XFUN_WINDOW_START = parse_instant(os.environ.get("XFUN_WINDOW_START", "2025-08-11T00:00:00Z"))
XFUN_WINDOW_END = parse_instant(os.environ.get("XFUN_WINDOW_END", "2025-08-25T00:00:00Z"))
XFUN_PAGE_SIZE = int(os.environ.get("XFUN_PAGE_SIZE", "50"))
XFUN_MAX_PAGES = int(os.environ.get("XFUN_MAX_PAGES", "200"))

UPSTREAM_TIMEOUT = float(os.environ.get("UPSTREAM_TIMEOUT", "8"))
REFRESH_INTERVAL = float(os.environ.get("REFRESH_INTERVAL", "300"))  # 5 minutes

# Keep-alive self-ping; disabled when the URL is empty.
SELF_PING_URL = os.environ.get("SELF_PING_URL", "")
SELF_PING_INTERVAL = float(os.environ.get("SELF_PING_INTERVAL", "270"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
PORT = int(os.environ.get("PORT", "3000"))
# Start the refresh and self-ping threads when server.py is imported.
BACKGROUND_JOBS = os.environ.get("BACKGROUND_JOBS", "1") == "1"
