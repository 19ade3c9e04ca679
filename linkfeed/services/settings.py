"""Run settings resolved from environment variables.

- LINKFEED_DOMAIN: ``job`` (default) or ``show``
- LINKFEED_BASE_URL: public base URL used in feed metadata. When unset and
  GH_USER is present, defaults to ``https://<GH_USER>.github.io/<repo-slug>``.
- LINKFEED_RESULTS_DIR / LINKFEED_DOCS_DIR: state directories
- LINKFEED_MAX_ITEMS / LINKFEED_FEED_ITEMS: retention cap and feed size
- LINKFEED_SOURCE_TIMEOUT / LINKFEED_FETCH_TIMEOUT: seconds per source / per page fetch
- LINKFEED_LOG_LEVEL: logging level name
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .domains import DomainProfile, get_domain


DEFAULT_MAX_ITEMS = 500
DEFAULT_FEED_ITEMS = 50


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    domain: DomainProfile
    base_url: str
    results_dir: str = "results"
    docs_dir: str = "docs"
    max_items: int = DEFAULT_MAX_ITEMS
    feed_items: int = DEFAULT_FEED_ITEMS
    source_timeout: float = 90.0
    fetch_timeout: float = 20.0
    log_level: str = "INFO"

    @property
    def dataset_path(self) -> str:
        return os.path.join(self.docs_dir, self.domain.dataset_filename)

    @property
    def rss_path(self) -> str:
        return os.path.join(self.docs_dir, "rss.xml")

    @property
    def html_path(self) -> str:
        return os.path.join(self.docs_dir, "index.html")


def default_base_url(domain: DomainProfile) -> str:
    base = os.getenv("LINKFEED_BASE_URL")
    if base and base.strip():
        return base.strip().rstrip("/")
    gh_user = os.getenv("GH_USER")
    if gh_user and gh_user.strip():
        return f"https://{gh_user.strip()}.github.io/{domain.repo_slug}"
    return "http://localhost:3000"


def load_settings(
    *,
    domain: Optional[str] = None,
    results_dir: Optional[str] = None,
    docs_dir: Optional[str] = None,
) -> Settings:
    """Build settings from the environment; explicit arguments win."""
    profile = get_domain(domain or os.getenv("LINKFEED_DOMAIN"))
    max_items = _env_int("LINKFEED_MAX_ITEMS", DEFAULT_MAX_ITEMS)
    feed_items = _env_int("LINKFEED_FEED_ITEMS", DEFAULT_FEED_ITEMS)
    if max_items < 1 or feed_items < 1:
        raise ValueError("LINKFEED_MAX_ITEMS and LINKFEED_FEED_ITEMS must be positive")
    return Settings(
        domain=profile,
        base_url=default_base_url(profile),
        results_dir=results_dir or os.getenv("LINKFEED_RESULTS_DIR") or "results",
        docs_dir=docs_dir or os.getenv("LINKFEED_DOCS_DIR") or "docs",
        max_items=max_items,
        feed_items=feed_items,
        source_timeout=_env_float("LINKFEED_SOURCE_TIMEOUT", 90.0),
        fetch_timeout=_env_float("LINKFEED_FETCH_TIMEOUT", 20.0),
        log_level=(os.getenv("LINKFEED_LOG_LEVEL") or "INFO").upper(),
    )
