from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

from linkfeed.services.domains import DomainProfile
from linkfeed.services.feed_builder import build_feed
from linkfeed.services.mock_shows import mock_results_by_source
from linkfeed.services.record_extractor import extract_records
from linkfeed.services.settings import Settings, load_settings
from .base import STATUS_FAILED, STATUS_OK, ConfigError, CrawlOutcome, FetchError, Source
from .pipeline import write_result
from .sources import find_source, registry_by_name
from .spiders.link_spider import LinkSpider

logger = logging.getLogger(__name__)

PROBE_LIMIT = 10


def harvest(
    source: Source,
    *,
    domain: DomainProfile,
    spider: Optional[LinkSpider] = None,
    client: Any = None,
) -> CrawlOutcome:
    """Fetch one source and extract its records. Does not touch the result store."""
    spider = spider or LinkSpider()
    try:
        links = spider.fetch(source.url, source.selector)
    except FetchError as exc:
        logger.error("%s: %s", source.name, exc)
        return CrawlOutcome.failure(source.name, str(exc))
    except Exception as exc:
        logger.error("%s: parsing %s failed: %s", source.name, source.url, exc)
        return CrawlOutcome.failure(source.name, f"parse error: {exc}")

    if not links:
        logger.warning("%s: no links found with selector: %s", source.name, source.selector)
        return CrawlOutcome.empty(source.name, f"no links matched selector {source.selector!r}")

    result = extract_records(links, base_url=source.url, domain=domain, client=client, source_name=source.name)
    if not result.ok:
        return CrawlOutcome.failure(source.name, result.error or "extraction failed")
    return CrawlOutcome.ok(source.name, result.records)


def store_outcome(results_dir: str, outcome: CrawlOutcome) -> None:
    try:
        write_result(results_dir, outcome.source, outcome.records)
    except OSError as exc:
        logger.error("%s: could not write result file: %s", outcome.source, exc)
        if not outcome.failed:
            outcome.status = STATUS_FAILED
            outcome.reason = f"write error: {exc}"


async def crawl_source(
    source: Source,
    *,
    domain: DomainProfile,
    results_dir: str,
    timeout: float,
    spider: Optional[LinkSpider] = None,
    client: Any = None,
) -> CrawlOutcome:
    """Harvest one source in a worker thread under a deadline and store the outcome.

    On timeout the source degrades to an empty result; the abandoned worker's
    output is discarded since only this coroutine writes the result file.
    """
    logger.info("Crawling %s (%s)", source.name, source.url)
    try:
        outcome = await asyncio.wait_for(
            asyncio.to_thread(harvest, source, domain=domain, spider=spider, client=client),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error("%s: timed out after %.0fs", source.name, timeout)
        outcome = CrawlOutcome.failure(source.name, f"timed out after {timeout:.0f}s")
    store_outcome(results_dir, outcome)
    if outcome.status == STATUS_OK:
        logger.info("%s: found %d %s", source.name, outcome.count, domain.noun_plural)
    return outcome


async def crawl_all(
    sources: Sequence[Source],
    *,
    domain: DomainProfile,
    results_dir: str,
    timeout: float,
    spider: Optional[LinkSpider] = None,
    client: Any = None,
) -> List[CrawlOutcome]:
    """Crawl every source concurrently; one failure never cancels the others."""
    registry_by_name(list(sources))
    results = await asyncio.gather(
        *(
            crawl_source(s, domain=domain, results_dir=results_dir, timeout=timeout, spider=spider, client=client)
            for s in sources
        ),
        return_exceptions=True,
    )
    outcomes: List[CrawlOutcome] = []
    for source, res in zip(sources, results):
        if isinstance(res, BaseException):
            logger.error("%s: crawl crashed: %s", source.name, res)
            outcome = CrawlOutcome.failure(source.name, str(res) or type(res).__name__)
            store_outcome(results_dir, outcome)
            outcomes.append(outcome)
        else:
            outcomes.append(res)
    return outcomes


async def probe_all(sources: Sequence[Source], *, spider: LinkSpider, timeout: float) -> List[Dict[str, Any]]:
    """Fetch and select only (no model) to check that selectors still match."""

    async def _probe(source: Source) -> Dict[str, Any]:
        try:
            links = await asyncio.wait_for(asyncio.to_thread(spider.fetch, source.url, source.selector), timeout=timeout)
        except Exception as exc:
            return {"source": source.name, "count": 0, "success": False, "error": str(exc) or type(exc).__name__}
        links = links[:PROBE_LIMIT]
        return {
            "source": source.name,
            "count": len(links),
            "success": True,
            "samples": [(link.text[:50], link.href[:60]) for link in links[:3]],
        }

    return list(await asyncio.gather(*(_probe(s) for s in sources)))


def seed_mock(results_dir: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for name, shows in mock_results_by_source().items():
        write_result(results_dir, name, shows)
        counts[name] = len(shows)
    return counts


def format_summary(outcomes: Sequence[CrawlOutcome], noun_plural: str) -> List[str]:
    lines = ["Crawl summary:"]
    for o in outcomes:
        mark = "FAIL" if o.failed else ("ok" if o.count else "empty")
        suffix = f" ({o.reason})" if o.reason and o.status != STATUS_OK else ""
        lines.append(f"  [{mark}] {o.source}: {o.count} {noun_plural}{suffix}")
    total = sum(o.count for o in outcomes)
    failed = sum(1 for o in outcomes if o.failed)
    lines.append(f"Total: {total} {noun_plural} from {len(outcomes)} sources ({failed} failed)")
    return lines


def resolve_single_source(
    settings: Settings, *, url: Optional[str], name: Optional[str], selector: Optional[str]
) -> Source:
    url = url or os.getenv("SOURCE_URL")
    name = name or os.getenv("SOURCE_NAME")
    selector = selector or os.getenv("SELECTOR")
    if name and not url:
        known = find_source(settings.domain.sources, name)
        if known is not None:
            return Source(known.name, known.url, selector or known.selector)
    if not url or not name:
        raise ConfigError("Missing SOURCE_URL or SOURCE_NAME")
    return Source(name, url, selector or "a")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Crawl listing pages and publish the merged feed")
    parser.add_argument("--domain", choices=["job", "show"], help="Record domain (env LINKFEED_DOMAIN, default job)")
    parser.add_argument("--results-dir", help="Per-source result directory (env LINKFEED_RESULTS_DIR)")
    parser.add_argument("--docs-dir", help="Publish directory (env LINKFEED_DOCS_DIR)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    crawl = sub.add_parser("crawl", help="Crawl one source (flags or SOURCE_URL/SOURCE_NAME/SELECTOR)")
    crawl.add_argument("--url", help="Listing page URL")
    crawl.add_argument("--name", help="Source name; also the result file stem")
    crawl.add_argument("--selector", help="CSS selector for candidate links (default: a)")

    crawl_all_p = sub.add_parser("crawl-all", help="Crawl every registered source concurrently")
    crawl_all_p.add_argument("--only", nargs="*", help="Restrict to these source names")

    sub.add_parser("probe", help="Check that source selectors still match links (no model calls)")
    sub.add_parser("seed-mock", help="Write bundled mock show records into the result directory")
    sub.add_parser("build", help="Merge results into the published dataset, RSS and HTML")

    args = parser.parse_args(argv)
    try:
        settings = load_settings(domain=args.domain, results_dir=args.results_dir, docs_dir=args.docs_dir)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    _setup_logging(settings.log_level)
    domain = settings.domain
    spider = LinkSpider(timeout=settings.fetch_timeout)

    if args.cmd == "crawl":
        try:
            source = resolve_single_source(settings, url=args.url, name=args.name, selector=args.selector)
        except ConfigError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        outcome = asyncio.run(
            crawl_source(source, domain=domain, results_dir=settings.results_dir, timeout=settings.source_timeout, spider=spider)
        )
        print("\n".join(format_summary([outcome], domain.noun_plural)))
        return 0

    if args.cmd == "crawl-all":
        sources = list(domain.sources)
        if args.only:
            wanted = set(args.only)
            sources = [s for s in sources if s.name in wanted]
        print(f"Crawling {len(sources)} {domain.noun} sources...")
        outcomes = asyncio.run(
            crawl_all(sources, domain=domain, results_dir=settings.results_dir, timeout=settings.source_timeout, spider=spider)
        )
        print("\n".join(format_summary(outcomes, domain.noun_plural)))
        return 0

    if args.cmd == "probe":
        results = asyncio.run(probe_all(domain.sources, spider=spider, timeout=settings.source_timeout))
        for r in results:
            mark = "ok" if r["success"] else "FAIL"
            detail = f" ({r['error']})" if r.get("error") else ""
            print(f"  [{mark}] {r['source']}: {r['count']} links{detail}")
            for i, (text, href) in enumerate(r.get("samples") or [], start=1):
                print(f"      {i}. {text} -> {href}")
        working = sum(1 for r in results if r["success"])
        total_links = sum(r["count"] for r in results)
        print(f"Results: {total_links} links from {working}/{len(results)} working sources")
        return 0

    if args.cmd == "seed-mock":
        if domain.key != "show":
            print("error: mock data is only bundled for the show domain (use --domain show)", file=sys.stderr)
            return 2
        counts = seed_mock(settings.results_dir)
        for name, n in counts.items():
            print(f"  {name}: generated {n} shows")
        print(f"Total: {sum(counts.values())} shows across {len(counts)} venues")
        return 0

    if args.cmd == "build":
        report = build_feed(settings)
        print(f"Built feed with {report.total} total {domain.noun_plural} ({report.new} new)")
        for name in report.skipped_files:
            print(f"  skipped unreadable result file: {name}")
        return 1 if report.errors else 0

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
