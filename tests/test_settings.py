import pytest

from linkfeed.services.settings import load_settings


def test_defaults(monkeypatch):
    for name in ("LINKFEED_DOMAIN", "LINKFEED_BASE_URL", "GH_USER", "LINKFEED_MAX_ITEMS", "LINKFEED_FEED_ITEMS"):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.domain.key == "job"
    assert s.base_url == "http://localhost:3000"
    assert s.max_items == 500 and s.feed_items == 50
    assert s.dataset_path.endswith("jobs.json")


def test_base_url_from_github_user(monkeypatch):
    monkeypatch.delenv("LINKFEED_BASE_URL", raising=False)
    monkeypatch.setenv("GH_USER", "octocat")
    assert load_settings(domain="job").base_url == "https://octocat.github.io/job-board"
    assert load_settings(domain="show").base_url == "https://octocat.github.io/show-board"


def test_explicit_base_url_wins(monkeypatch):
    monkeypatch.setenv("GH_USER", "octocat")
    monkeypatch.setenv("LINKFEED_BASE_URL", "https://feeds.example.org/")
    assert load_settings().base_url == "https://feeds.example.org"


def test_show_domain_from_env(monkeypatch):
    monkeypatch.setenv("LINKFEED_DOMAIN", "show")
    s = load_settings(docs_dir="public")
    assert s.domain.collection_key == "shows"
    assert s.dataset_path.replace("\\", "/") == "public/shows.json"


def test_invalid_values_rejected(monkeypatch):
    monkeypatch.setenv("LINKFEED_MAX_ITEMS", "lots")
    with pytest.raises(ValueError):
        load_settings()
    monkeypatch.setenv("LINKFEED_MAX_ITEMS", "0")
    with pytest.raises(ValueError):
        load_settings()
    monkeypatch.delenv("LINKFEED_MAX_ITEMS")
    with pytest.raises(ValueError):
        load_settings(domain="podcast")
