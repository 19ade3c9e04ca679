"""Merge per-source results into the published dataset and republish it.

One pass per run:

1. load the previously published dataset (missing or broken -> empty)
2. clamp any future ``date`` to now
3. read every ``results/*.json`` file (a broken file contributes nothing)
4. dedupe by ``url``; newly seen records get the run timestamp as ``date``
5. sort by ``date`` descending and keep the newest ``max_items``
6. write the dataset, ``rss.xml`` and ``index.html``

``build_feed`` never raises: each step logs its own failures and records
them on the returned ``BuildReport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .crawl.base import iso_now, parse_iso
from .crawl.pipeline import list_result_files, read_json_list, write_json_atomic, write_text_atomic
from .publisher import render_html, render_rss
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


@dataclass
class BuildReport:
    total: int = 0
    new: int = 0
    repaired: int = 0
    skipped_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    written: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _record_url(rec: Record) -> str:
    url = rec.get("url")
    return url.strip() if isinstance(url, str) else ""


def load_dataset(path: str) -> List[Record]:
    try:
        data = read_json_list(path)
    except FileNotFoundError:
        logger.info("No previous dataset at %s; starting empty", path)
        return []
    except Exception as exc:
        logger.warning("Previous dataset %s unreadable (%s); starting empty", path, exc)
        return []
    return [r for r in data if isinstance(r, dict)]


def repair_future_dates(records: Iterable[Record], now: datetime) -> int:
    """Clamp every ``date`` later than ``now`` to ``now``. Returns the count."""
    stamp = iso_now(now)
    repaired = 0
    for rec in records:
        when = parse_iso(rec.get("date"))
        if when is not None and when > now:
            rec["date"] = stamp
            repaired += 1
    return repaired


def collect_candidates(results_dir: str) -> Tuple[List[Record], List[str]]:
    """Records from all result files in filename order, plus names of skipped files."""
    candidates: List[Record] = []
    skipped: List[str] = []
    for name, path in list_result_files(results_dir):
        try:
            items = read_json_list(path)
        except Exception as exc:
            logger.error("Error processing %s: %s", name, exc)
            skipped.append(name)
            continue
        candidates.extend(r for r in items if isinstance(r, dict))
    return candidates, skipped


def merge_records(existing: Iterable[Record], candidates: Iterable[Record], stamp: str) -> Tuple[List[Record], int]:
    """Append unseen candidates to ``existing``, stamped with ``stamp``.

    Existing records keep their date. Duplicate urls already present in
    ``existing`` are collapsed to their first occurrence.
    """
    merged: List[Record] = []
    seen: set = set()
    for rec in existing:
        url = _record_url(rec)
        if url and url in seen:
            continue
        if url:
            seen.add(url)
        merged.append(rec)

    new_count = 0
    for rec in candidates:
        url = _record_url(rec)
        if not url or url in seen:
            continue
        seen.add(url)
        merged.append({**rec, "url": url, "date": stamp})
        new_count += 1
    return merged, new_count


def sort_and_truncate(records: Iterable[Record], max_items: int) -> List[Record]:
    # sorted() is stable with reverse=True: equal dates keep insertion order
    ordered = sorted(records, key=lambda r: str(r.get("date") or ""), reverse=True)
    return ordered[: max(0, int(max_items))]


def publish(records: List[Record], settings: Settings, *, now: datetime, report: BuildReport) -> None:
    domain = settings.domain
    steps = [
        (settings.dataset_path, lambda: write_json_atomic(settings.dataset_path, records, indent=2)),
        (
            settings.rss_path,
            lambda: write_text_atomic(
                settings.rss_path,
                render_rss(records, domain=domain, base_url=settings.base_url, feed_items=settings.feed_items, now=now),
            ),
        ),
        (settings.html_path, lambda: write_text_atomic(settings.html_path, render_html(domain))),
    ]
    for path, write in steps:
        try:
            report.written.append(write())
        except Exception as exc:
            logger.exception("Failed to write %s", path)
            report.errors.append(f"write {path}: {exc}")


def build_feed(settings: Optional[Settings] = None, *, now: Optional[datetime] = None) -> BuildReport:
    """Run the merge & publish pipeline once and report counts."""
    report = BuildReport()
    try:
        settings = settings or load_settings()
    except Exception as exc:
        logger.error("Invalid configuration: %s", exc)
        report.errors.append(f"config: {exc}")
        return report

    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    stamp = iso_now(now)

    existing = load_dataset(settings.dataset_path)
    try:
        report.repaired = repair_future_dates(existing, now)
    except Exception as exc:
        logger.exception("Date repair failed")
        report.errors.append(f"repair: {exc}")
    if report.repaired:
        logger.info("Clamped %d future date(s) to %s", report.repaired, stamp)

    try:
        candidates, report.skipped_files = collect_candidates(settings.results_dir)
    except Exception as exc:
        logger.exception("Collecting results from %s failed", settings.results_dir)
        report.errors.append(f"collect: {exc}")
        candidates = []

    try:
        merged, report.new = merge_records(existing, candidates, stamp)
        recent = sort_and_truncate(merged, settings.max_items)
    except Exception as exc:
        logger.exception("Merge failed; republishing previous dataset")
        report.errors.append(f"merge: {exc}")
        report.new = 0
        recent = existing[: settings.max_items]

    report.total = len(recent)
    publish(recent, settings, now=now, report=report)
    logger.info(
        "Built feed with %d total %s (%d new)", report.total, settings.domain.noun_plural, report.new
    )
    return report
