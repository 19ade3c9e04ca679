"""Domain profiles.

The job board and the show board run the same crawl -> extract -> merge ->
publish flow. Everything that differs between them (record schema, prompt,
file names, page labels, source registry) lives in a ``DomainProfile`` so the
rest of the code stays generic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from linkfeed.models.records import JobRecord, ShowRecord
from .crawl.base import Source
from .crawl.sources import JOB_SOURCES, SHOW_SOURCES


@dataclass(frozen=True)
class DomainProfile:
    key: str
    record_model: Type[BaseModel]
    collection_key: str
    secondary_field: str
    dataset_filename: str
    site_title: str
    site_description: str
    repo_slug: str
    noun: str
    noun_plural: str
    prompt: str
    sources: List[Source] = field(default_factory=list)
    venue_field: Optional[str] = None

    def secondary(self, rec: Dict[str, Any]) -> str:
        return str(rec.get(self.secondary_field) or "")

    def item_title(self, rec: Dict[str, Any]) -> str:
        return f"{rec.get('title') or ''} at {self.secondary(rec)}"

    def item_description(self, rec: Dict[str, Any]) -> str:
        secondary = self.secondary(rec)
        location = rec.get("location")
        return f"{secondary} - {location}" if location else secondary


JOB_DOMAIN = DomainProfile(
    key="job",
    record_model=JobRecord,
    collection_key="jobs",
    secondary_field="company",
    dataset_filename="jobs.json",
    site_title="AI Jobs Daily",
    site_description="Fresh tech jobs scraped by AI",
    repo_slug="job-board",
    noun="job",
    noun_plural="jobs",
    prompt=(
        "Extract job listings from these links. "
        "Only include actual job postings, not navigation or unrelated links."
    ),
    sources=JOB_SOURCES,
)

SHOW_DOMAIN = DomainProfile(
    key="show",
    record_model=ShowRecord,
    collection_key="shows",
    secondary_field="artist",
    venue_field="venue",
    dataset_filename="shows.json",
    site_title="LA Shows Daily",
    site_description="Upcoming live music in Los Angeles, scraped by AI",
    repo_slug="show-board",
    noun="show",
    noun_plural="shows",
    prompt=(
        "Extract live music shows from these links. "
        "Only include actual concerts or performances, not navigation, articles or unrelated links. "
        "Use the headlining performer as the artist and the venue name as the venue."
    ),
    sources=SHOW_SOURCES,
)

DOMAINS: Dict[str, DomainProfile] = {d.key: d for d in (JOB_DOMAIN, SHOW_DOMAIN)}


def get_domain(key: Optional[str]) -> DomainProfile:
    k = (key or "job").strip().lower()
    try:
        return DOMAINS[k]
    except KeyError:
        raise ValueError(f"Unknown domain {key!r}; expected one of: {', '.join(sorted(DOMAINS))}")
