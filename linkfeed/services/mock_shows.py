from __future__ import annotations

from typing import Dict, List, Optional

from .crawl.base import iso_now


_SHOWS = [
    ("House Nation presents Carl Cox", "Carl Cox", "Exchange LA", "carl-cox", "Los Angeles, CA"),
    ("Tame Impala Live", "Tame Impala", "Greek Theatre", "tame-impala", "Los Angeles, CA"),
    ("Punk Rock Night", "Bad Religion", "The Roxy", "bad-religion", "West Hollywood, CA"),
    ("Jazz at the Bowl", "Kamasi Washington", "Hollywood Bowl", "kamasi", "Hollywood, CA"),
    ("Electronic Underground", "Burial", "1720", "burial", "Los Angeles, CA"),
    ("Indie Night", "Phoebe Bridgers", "The Troubadour", "phoebe", "West Hollywood, CA"),
    ("Hip-Hop Showcase", "Tyler, The Creator", "The Shrine", "tyler", "Los Angeles, CA"),
    ("Rock Revival", "Arctic Monkeys", "The Wiltern", "arctic-monkeys", "Los Angeles, CA"),
    ("Latin Night", "Rosalía", "El Rey Theatre", "rosalia", "Los Angeles, CA"),
    ("Techno Tuesday", "Charlotte de Witte", "Sound Nightclub", "charlotte", "Los Angeles, CA"),
    ("Alternative Rock", "Radiohead", "The Forum", "radiohead", "Inglewood, CA"),
    ("Experimental Electronic", "Aphex Twin", "Echoplex", "aphex-twin", "Los Angeles, CA"),
]

MOCK_VENUES = ["troubadour", "el-rey", "showlist-la", "grimy-goods"]


def get_mock_shows(now: Optional[str] = None) -> List[Dict[str, str]]:
    """Deterministic show records for demos and local runs without a model key."""
    stamp = now or iso_now()
    return [
        {
            "title": title,
            "artist": artist,
            "venue": venue,
            "url": f"https://example.com/{slug}",
            "date": stamp,
            "location": location,
        }
        for title, artist, venue, slug, location in _SHOWS
    ]


def mock_results_by_source(per_source: int = 3, now: Optional[str] = None) -> Dict[str, List[Dict[str, str]]]:
    """Split the mock shows across venue result files, ``per_source`` each."""
    shows = get_mock_shows(now)
    out: Dict[str, List[Dict[str, str]]] = {}
    for i, venue in enumerate(MOCK_VENUES):
        out[venue] = shows[i * per_source:(i + 1) * per_source]
    return out
