"""Runtime settings read from the environment.

Algorithm thresholds are module constants in ``parsing`` and are not
configurable; only the outer surfaces are.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from parsing.links import NAV_WORDS

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
)


@dataclass(frozen=True)
class Settings:
    fetch_timeout: float = 20.0
    user_agent: str = DEFAULT_USER_AGENT
    nav_words: frozenset[str] = field(default_factory=lambda: NAV_WORDS)
    log_level: str = "INFO"


def _parse_nav_words(raw: str) -> frozenset[str]:
    return frozenset(w.strip().upper() for w in raw.split(",") if w.strip())


def load_settings() -> Settings:
    """Build ``Settings`` from ``TRANQUIL_*`` environment variables."""
    settings = Settings()
    timeout = os.getenv("TRANQUIL_FETCH_TIMEOUT")
    nav_words = os.getenv("TRANQUIL_NAV_WORDS")
    try:
        fetch_timeout = float(timeout) if timeout else settings.fetch_timeout
    except ValueError:
        fetch_timeout = settings.fetch_timeout
    return Settings(
        fetch_timeout=fetch_timeout,
        user_agent=os.getenv("TRANQUIL_USER_AGENT", settings.user_agent),
        nav_words=_parse_nav_words(nav_words) if nav_words else settings.nav_words,
        log_level=os.getenv("TRANQUIL_LOG_LEVEL", settings.log_level).upper(),
    )
