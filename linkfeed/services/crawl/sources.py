"""Static source registries.

Each entry is a (name, url, selector) triple. The name doubles as the result
file stem under ``results/``, so it must be unique within a registry.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .base import Source


JOB_SOURCES: List[Source] = [
    Source("hn", "https://news.ycombinator.com/jobs", ".titleline>a"),
    Source("wwr", "https://weworkremotely.com/remote-jobs", ".feature a"),
    Source("remoteok", "https://remoteok.io/", ".job a"),
    Source("dice", "https://www.dice.com/jobs", "[data-testid='job-search-job-detail-link']"),
    Source("jobspresso", "https://jobspresso.co/", ".job_listing-clickbox"),
    Source("outsite", "https://www.outsite.co/jobs", "a[href^='/jobs/']"),
    Source("yc", "https://www.workatastartup.com/jobs", "a[href^='/jobs/']"),
    Source("otta", "https://otta.com", "a[href^='/jobs/']"),
    Source("arc", "https://arc.dev/remote-jobs", "a[href^='/remote-jobs/']"),
    Source("remoteleads", "https://remoteleads.io/", "a[href^='/leads/']"),
]

SHOW_SOURCES: List[Source] = [
    Source("el-rey", "https://showbams.com/tag/el-rey-theatre/", "article h2 a, .entry-title a"),
    Source("showlist-la", "https://showlist.la/", "a[href*='http']"),
    Source("troubadour", "https://troubadour.com/", "a[href*='/events/'], .event a, h3 a"),
    Source("grimy-goods", "https://www.grimygoods.com/", "article h2 a, .entry-title a"),
    Source("spaceland-presents", "https://www.spacelandpresents.com/", ".show-info a, .event-link, .artist-name a"),
]


def find_source(sources: List[Source], name: str) -> Optional[Source]:
    for s in sources:
        if s.name == name:
            return s
    return None


def registry_by_name(sources: List[Source]) -> Dict[str, Source]:
    out: Dict[str, Source] = {}
    for s in sources:
        if s.name in out:
            raise ValueError(f"Duplicate source name: {s.name}")
        out[s.name] = s
    return out
