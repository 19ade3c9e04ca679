"""Crawling subsystem.

Structure:
- base.py: common types (Source, CrawlOutcome), errors and timestamp helpers
- sources.py: static (name, url, selector) registries per domain
- spiders/: page fetch + selector-based link harvesting
- pipeline.py: per-source JSON result store with atomic writes
- runner.py: CLI entrypoint for single, batch, probe, mock and build runs

Pages are fetched with httpx and parsed with selectolax; record extraction
from the harvested links is delegated to the LLM (services/record_extractor).
"""

__all__ = [
    "base",
    "pipeline",
    "sources",
]
