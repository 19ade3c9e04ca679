import json

from linkfeed.models.records import CandidateLink
from linkfeed.services import record_extractor
from linkfeed.services.domains import JOB_DOMAIN, SHOW_DOMAIN
from linkfeed.services.record_extractor import build_messages, extract_records


LINKS = [
    CandidateLink(text="Senior Python Engineer", href="https://acme.example/jobs/1", context="Acme - Remote"),
    CandidateLink(text="About us", href="https://acme.example/about", context=""),
]


class _FakeLLM:
    def __init__(self, reply=None, exc=None):
        self.reply = reply
        self.exc = exc
        self.calls = []

    def generate(self, messages, *, temperature=0.0, max_tokens=4000, json_mode=False, model=None):
        self.calls.append({"messages": messages, "json_mode": json_mode})
        if self.exc is not None:
            raise self.exc
        return self.reply, {"total_tokens": 3}, model or "fake-model"


def test_build_messages_includes_prompt_base_url_and_links():
    messages = build_messages(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN)
    user = messages[-1]["content"]
    assert user.startswith("Extract job listings from these links.")
    assert "Base URL: https://acme.example/jobs" in user
    assert "https://acme.example/jobs/1" in user
    assert '"jobs"' in messages[0]["content"]


def test_extract_records_validates_items():
    reply = json.dumps(
        {
            "jobs": [
                {"title": "Senior Python Engineer", "company": "Acme", "url": "https://acme.example/jobs/1", "location": "Remote"},
                {"title": "Missing company", "url": "https://acme.example/jobs/2"},
                {"title": "  ", "company": "Blank", "url": "https://acme.example/jobs/3"},
                "not an object",
            ]
        }
    )
    llm = _FakeLLM(reply=reply)
    result = extract_records(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=llm, source_name="acme")
    assert result.ok
    assert result.rejected == 3
    assert result.records == [
        {"title": "Senior Python Engineer", "company": "Acme", "url": "https://acme.example/jobs/1", "location": "Remote"}
    ]
    assert llm.calls[0]["json_mode"] is True


def test_extract_records_accepts_fenced_array_for_shows():
    reply = "```json\n" + json.dumps(
        [{"title": "Indie Night", "artist": "Phoebe Bridgers", "venue": "The Troubadour", "url": "https://example.com/phoebe"}]
    ) + "\n```"
    result = extract_records(LINKS, base_url="https://troubadour.com/", domain=SHOW_DOMAIN, client=_FakeLLM(reply=reply))
    assert result.ok
    assert result.records[0]["artist"] == "Phoebe Bridgers"
    assert result.records[0]["venue"] == "The Troubadour"


def test_extract_records_degrades_to_empty_on_client_error():
    result = extract_records(
        LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=_FakeLLM(exc=TimeoutError("rate limited"))
    )
    assert result.records == []
    assert not result.ok
    assert "rate limited" in result.error


def test_extract_records_degrades_to_empty_on_malformed_output():
    result = extract_records(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=_FakeLLM(reply="Sure! Here are the jobs"))
    assert result.records == []
    assert result.error


def test_extract_records_wrong_collection_key_is_an_error():
    reply = json.dumps({"shows": []})
    result = extract_records(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=_FakeLLM(reply=reply))
    assert result.records == []
    assert "jobs" in result.error


def test_extract_records_without_links_skips_model():
    llm = _FakeLLM(reply="{}")
    result = extract_records([], base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=llm)
    assert result.ok and result.records == []
    assert llm.calls == []


def test_extract_records_missing_api_key_is_not_raised(monkeypatch):
    def _broken_client():
        raise RuntimeError("Missing LLM API key. Set LLM_API_KEY or OPENAI_API_KEY.")

    monkeypatch.setattr(record_extractor, "get_llm_client", _broken_client)
    result = extract_records(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, source_name="acme")
    assert result.records == []
    assert "API key" in result.error


def test_extract_records_rejects_non_http_urls():
    reply = json.dumps(
        {
            "jobs": [
                {"title": "t", "company": "c", "url": "javascript:alert(document.cookie)"},
                {"title": "t", "company": "c", "url": "/jobs/relative"},
                {"title": "t", "company": "c", "url": "data:text/html,<script>1</script>"},
                {"title": "ok", "company": "c", "url": "HTTPS://acme.example/jobs/9"},
            ]
        }
    )
    result = extract_records(LINKS, base_url="https://acme.example/jobs", domain=JOB_DOMAIN, client=_FakeLLM(reply=reply))
    assert result.rejected == 3
    assert [r["url"] for r in result.records] == ["HTTPS://acme.example/jobs/9"]
