from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class FetchError(RuntimeError):
    """Raised when a listing page cannot be fetched."""


class ConfigError(RuntimeError):
    """Raised when a run is missing required configuration."""


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def iso_now(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix.

    Every timestamp the pipeline writes has this exact shape so that plain
    string comparison orders records chronologically.
    """
    dt = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


_FRACTION_RE = re.compile(r"(?<=:\d{2})\.(\d+)")


def parse_iso(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], text)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class Source:
    name: str
    url: str
    selector: str = "a"


STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"


@dataclass
class CrawlOutcome:
    """Result of one source's fetch-and-extract run.

    ``empty`` means the page or the model legitimately produced nothing,
    ``failed`` means an error degraded the source to an empty result. Both
    leave ``[]`` in the result file.
    """

    source: str
    status: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED

    @classmethod
    def ok(cls, source: str, records: List[Dict[str, Any]]) -> "CrawlOutcome":
        if not records:
            return cls(source=source, status=STATUS_EMPTY, reason="no records extracted")
        return cls(source=source, status=STATUS_OK, records=list(records))

    @classmethod
    def empty(cls, source: str, reason: str) -> "CrawlOutcome":
        return cls(source=source, status=STATUS_EMPTY, reason=reason)

    @classmethod
    def failure(cls, source: str, reason: str) -> "CrawlOutcome":
        return cls(source=source, status=STATUS_FAILED, reason=reason)
