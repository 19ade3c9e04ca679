import xml.etree.ElementTree as ET
from datetime import datetime, timezone

from linkfeed.services.domains import JOB_DOMAIN, SHOW_DOMAIN
from linkfeed.services.publisher import ATOM_NS, render_html, render_rss


NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def test_render_rss_channel_and_items():
    records = [
        {"title": "Python Dev", "company": "Acme", "url": "https://acme.example/1", "location": "Remote", "date": "2026-01-15T11:00:00.000Z"},
        {"title": "Go Dev", "company": "Globex", "url": "https://globex.example/2", "date": "not a date"},
    ]
    xml_text = render_rss(records, domain=JOB_DOMAIN, base_url="https://octocat.github.io/job-board/", now=NOW)
    assert xml_text.startswith('<?xml version="1.0" encoding="utf-8"?>')

    root = ET.fromstring(xml_text)
    assert root.tag == "rss" and root.get("version") == "2.0"
    channel = root.find("channel")
    assert channel.findtext("title") == "AI Jobs Daily"
    assert channel.findtext("link") == "https://octocat.github.io/job-board/"
    assert channel.findtext("copyright") == "© 2026"
    self_link = channel.find(f"{{{ATOM_NS}}}link")
    assert self_link.get("href") == "https://octocat.github.io/job-board/rss.xml"

    items = channel.findall("item")
    assert items[0].findtext("title") == "Python Dev at Acme"
    assert items[0].findtext("link") == "https://acme.example/1"
    assert items[0].findtext("description") == "Acme - Remote"
    assert items[0].findtext("pubDate") == "Thu, 15 Jan 2026 11:00:00 GMT"
    assert items[1].findtext("description") == "Globex"
    assert items[1].find("pubDate") is None


def test_render_rss_limits_items_and_escapes_text():
    records = [
        {"title": f"R&D <{i}>", "company": "A & B", "url": f"https://x.example/{i}?a=1&b=2", "date": "2026-01-01T00:00:00.000Z"}
        for i in range(60)
    ]
    root = ET.fromstring(render_rss(records, domain=JOB_DOMAIN, base_url="http://localhost:3000", feed_items=50, now=NOW))
    items = root.findall("./channel/item")
    assert len(items) == 50
    assert items[0].findtext("title") == "R&D <0> at A & B"
    assert items[0].findtext("guid") == "https://x.example/0?a=1&b=2"


def test_render_rss_show_domain_uses_artist():
    records = [{"title": "Indie Night", "artist": "Phoebe Bridgers", "venue": "The Troubadour", "url": "https://example.com/phoebe", "location": "West Hollywood, CA", "date": "2026-01-15T11:00:00.000Z"}]
    root = ET.fromstring(render_rss(records, domain=SHOW_DOMAIN, base_url="http://localhost:3000", now=NOW))
    item = root.find("./channel/item")
    assert item.findtext("title") == "Indie Night at Phoebe Bridgers"
    assert item.findtext("description") == "Phoebe Bridgers - West Hollywood, CA"


def test_render_html_is_self_contained():
    html = render_html(JOB_DOMAIN)
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>AI Jobs Daily</title>" in html
    assert '"dataset": "jobs.json"' in html
    assert 'href="rss.xml"' in html
    assert "Yesterday" in html and "days ago" in html
    assert "Error loading" in html
    assert "<style>" in html


def test_render_html_show_domain_renders_venue():
    html = render_html(SHOW_DOMAIN)
    assert '"dataset": "shows.json"' in html
    assert '"venue": "venue"' in html
    assert "LA Shows Daily" in html


def test_render_html_rows_without_parseable_date_have_no_label():
    html = render_html(JOB_DOMAIN)
    assert "if (!r.date || isNaN(date.getTime())) return head + '</div></div>'" in html
    # The labelled branch is only reached after the guard
    assert html.index("isNaN(date.getTime())") < html.index("' + dayLabel(days) + '")
    assert "Math.max(0, Math.floor((now - date) / DAY_MS))" in html
