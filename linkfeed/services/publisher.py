"""Static artifacts for the published dataset: RSS 2.0 and a single HTML page."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import format_datetime
from html import escape
from typing import Any, Dict, List, Optional, Sequence

from .crawl.base import parse_iso
from .domains import DomainProfile


ATOM_NS = "http://www.w3.org/2005/Atom"
ET.register_namespace("atom", ATOM_NS)

GENERATOR = "linkfeed"


def _sub(parent: ET.Element, tag: str, text: Optional[str] = None, **attrs: str) -> ET.Element:
    el = ET.SubElement(parent, tag, attrs)
    if text is not None:
        el.text = text
    return el


def feed_entries(records: Sequence[Dict[str, Any]], feed_items: int) -> List[Dict[str, Any]]:
    """The feed is always a prefix of the published dataset."""
    return list(records[: max(0, int(feed_items))])


def render_rss(
    records: Sequence[Dict[str, Any]],
    *,
    domain: DomainProfile,
    base_url: str,
    feed_items: int = 50,
    now: Optional[datetime] = None,
) -> str:
    base = base_url.rstrip("/")
    built = now or datetime.now(timezone.utc)

    rss = ET.Element("rss", {"version": "2.0"})
    channel = _sub(rss, "channel")
    _sub(channel, "title", domain.site_title)
    _sub(channel, "link", f"{base}/")
    _sub(channel, "description", domain.site_description)
    _sub(channel, "language", "en")
    _sub(channel, "copyright", f"© {built.year}")
    _sub(channel, "generator", GENERATOR)
    _sub(channel, "lastBuildDate", format_datetime(built.astimezone(timezone.utc), usegmt=True))
    _sub(channel, "docs", "https://validator.w3.org/feed/docs/rss2.html")
    _sub(channel, f"{{{ATOM_NS}}}link", href=f"{base}/rss.xml", rel="self", type="application/rss+xml")

    for rec in feed_entries(records, feed_items):
        url = str(rec.get("url") or "")
        item = _sub(channel, "item")
        _sub(item, "title", domain.item_title(rec))
        _sub(item, "link", url)
        _sub(item, "guid", url, isPermaLink="true")
        _sub(item, "description", domain.item_description(rec))
        published = parse_iso(rec.get("date"))
        if published is not None:
            _sub(item, "pubDate", format_datetime(published.astimezone(timezone.utc), usegmt=True))

    ET.indent(rss, space="  ")
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(rss, encoding="unicode") + "\n"


def _script_json(obj: Any) -> str:
    return json.dumps(obj).replace("</", "<\\/")


def render_html(domain: DomainProfile) -> str:
    """Self-contained page; the inline script fetches the dataset and renders it."""
    title = escape(domain.site_title)
    config = _script_json(
        {
            "dataset": domain.dataset_filename,
            "noun": domain.noun_plural,
            "secondary": domain.secondary_field,
            "venue": domain.venue_field,
        }
    )
    styles = """
    * { box-sizing: border-box }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', system-ui, sans-serif;
           max-width: 900px; margin: 0 auto; padding: 2rem 1rem; line-height: 1.6; color: #333; background: #fafafa }
    h1 { font-size: 2rem; margin: 0 0 1rem; font-weight: 600 }
    .header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 2rem; flex-wrap: wrap; gap: 1rem }
    .stats { font-size: 0.875rem; color: #666 }
    .item { background: white; padding: 1.25rem; margin-bottom: 0.75rem; border-radius: 8px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1); transition: transform 0.2s, box-shadow 0.2s }
    .item:hover { transform: translateY(-2px); box-shadow: 0 4px 12px rgba(0,0,0,0.15) }
    .item-title { font-size: 1.125rem; color: #0066cc; text-decoration: none; font-weight: 500 }
    .item-title:hover { text-decoration: underline }
    .meta { color: #666; font-size: 0.875rem; margin-top: 0.25rem }
    .date { color: #999; font-size: 0.75rem }
    .rss-link { background: #ff6600; color: white; padding: 0.5rem 1rem; border-radius: 4px; text-decoration: none; font-size: 0.875rem }
    .rss-link:hover { background: #e55500 }
    #loading { text-align: center; padding: 3rem; color: #666 }
    """

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta name="generator" content="{GENERATOR}">
  <title>{title}</title>
  <link rel="alternate" type="application/rss+xml" title="{title}" href="rss.xml">
  <style>{styles}</style>
</head>
<body>
  <div class="header">
    <div>
      <h1>{title}</h1>
      <div class="stats" id="stats"></div>
    </div>
    <a href="rss.xml" class="rss-link">RSS Feed</a>
  </div>
  <div id="loading">Loading {escape(domain.noun_plural)}...</div>
  <div id="items"></div>
  <script>
    const CONFIG = {config}
    const DAY_MS = 1000 * 60 * 60 * 24
    function esc(s) {{
      return String(s == null ? '' : s).replace(/[&<>"']/g, c =>
        ({{'&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;'}})[c])
    }}
    function dayLabel(days) {{
      return days === 0 ? 'Today' : days === 1 ? 'Yesterday' : days + ' days ago'
    }}
    function meta(r) {{
      const parts = [esc(r[CONFIG.secondary])]
      if (CONFIG.venue && r[CONFIG.venue]) parts.push(esc(r[CONFIG.venue]))
      if (r.location) parts.push(esc(r.location))
      return parts.join(' • ')
    }}
    function row(r, now) {{
      const head = '<div class="item">' +
        '<a href="' + esc(r.url) + '" target="_blank" rel="noopener" class="item-title">' + esc(r.title) + '</a>' +
        '<div class="meta">' + meta(r)
      const date = new Date(r.date)
      if (!r.date || isNaN(date.getTime())) return head + '</div></div>'
      const days = Math.max(0, Math.floor((now - date) / DAY_MS))
      return head + '<span class="date"> • ' + dayLabel(days) + '</span></div></div>'
    }}
    fetch(CONFIG.dataset)
      .then(r => {{
        if (!r.ok) throw new Error('HTTP ' + r.status)
        return r.json()
      }})
      .then(items => {{
        const now = new Date()
        document.getElementById('stats').textContent =
          items.length + ' ' + CONFIG.noun + ' • Updated ' + now.toLocaleDateString()
        document.getElementById('loading').style.display = 'none'
        document.getElementById('items').innerHTML = items.map(r => row(r, now)).join('')
      }})
      .catch(e => {{
        console.error(e)
        document.getElementById('loading').textContent = 'Error loading ' + CONFIG.noun + '. Please refresh the page.'
      }})
  </script>
</body>
</html>
"""
