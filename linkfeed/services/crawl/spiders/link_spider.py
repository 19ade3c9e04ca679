from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import urljoin

import httpx
from selectolax.lexbor import LexborHTMLParser

from linkfeed.models.records import CandidateLink
from ..base import FetchError


DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
}

MAX_LINKS = 100
CONTEXT_CHARS = 200


class LinkSpider:
    """Selector-driven link harvester for listing pages.

    Fetches a page, applies a CSS selector and returns candidate links as
    (text, absolute href, parent context). Candidates without text or href are
    dropped and the result is capped in document order.

    The parser is separate from the fetch so pages can be parsed from local
    files or fixtures without network access.
    """

    name = "link_spider"

    def __init__(
        self,
        *,
        timeout: float = 20.0,
        headers: Optional[Dict[str, str]] = None,
        limit: int = MAX_LINKS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout = float(timeout)
        self.headers = headers or dict(DEFAULT_HEADERS)
        self.limit = max(1, int(limit))
        self._transport = transport

    # --- Public API ---
    def fetch(self, url: str, selector: Optional[str] = None) -> List[CandidateLink]:
        html = self._get(url)
        return self.parse_html(html, page_url=url, selector=selector, limit=self.limit)

    @staticmethod
    def parse_html(
        html: str,
        *,
        page_url: str,
        selector: Optional[str] = None,
        limit: int = MAX_LINKS,
    ) -> List[CandidateLink]:
        doc = LexborHTMLParser(html or "")
        links: List[CandidateLink] = []
        for node in doc.css(selector or "a") or []:
            text = (node.text(deep=True) or "").strip()
            href = LinkSpider._resolve_href(node.attributes.get("href"), page_url)
            if not text or not href:
                continue
            parent = node.parent
            context = (parent.text(deep=True) or "").strip()[:CONTEXT_CHARS] if parent is not None else ""
            links.append(CandidateLink(text=text, href=href, context=context))
            if len(links) >= limit:
                break
        return links

    # --- Internals ---
    @staticmethod
    def _resolve_href(raw: Optional[str], page_url: str) -> str:
        href = (raw or "").strip()
        if not href:
            return ""
        if href.startswith("http"):
            return href
        return urljoin(page_url, href)

    def _get(self, url: str) -> str:
        try:
            with httpx.Client(
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                r = client.get(url)
                r.raise_for_status()
                return r.text
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc
