"""LLM-powered record extraction.

Turns a list of candidate links harvested from a listing page into validated
job or show records. The model is asked for a JSON object keyed by the
domain's collection name (``jobs`` / ``shows``); every item is validated
against the domain's pydantic model and invalid items are dropped.

Errors never escape ``extract_records``: callers get an ``ExtractionResult``
with an empty record list and the error text, so one bad source cannot abort
its siblings.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from linkfeed.models.records import CandidateLink
from .crawl.base import canonical_json
from .domains import DomainProfile
from .llm_client import get_llm_client

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class ExtractionResult:
    records: List[Dict[str, Any]] = field(default_factory=list)
    rejected: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_messages(
    links: Sequence[CandidateLink], *, base_url: str, domain: DomainProfile
) -> List[Dict[str, str]]:
    schema = domain.record_model.model_json_schema()
    system = (
        "You extract structured records from scraped links and reply with JSON only.\n"
        f'Reply with an object of the form {{"{domain.collection_key}": [...]}} where each item '
        f"matches this JSON schema:\n{json.dumps(schema)}\n"
        "Use absolute URLs. Return an empty list when nothing qualifies."
    )
    payload = [link.model_dump() for link in links]
    user = f"{domain.prompt}\nBase URL: {base_url}\nLinks: {canonical_json(payload)}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def parse_model_output(text: str, domain: DomainProfile) -> List[Any]:
    """Pull the raw item list out of the model's reply.

    Accepts ``{"<collection>": [...]}``, a bare JSON array, or either one
    wrapped in a Markdown code fence. Raises ValueError for anything else.
    """
    cleaned = _FENCE_RE.sub("", (text or "").strip())
    if not cleaned:
        raise ValueError("empty model response")
    parsed = json.loads(cleaned)
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        items = parsed.get(domain.collection_key)
        if isinstance(items, list):
            return items
        raise ValueError(f"model response has no '{domain.collection_key}' list")
    raise ValueError(f"unexpected model response type: {type(parsed).__name__}")


def validate_items(items: Sequence[Any], domain: DomainProfile) -> ExtractionResult:
    result = ExtractionResult()
    for item in items:
        if not isinstance(item, dict):
            result.rejected += 1
            continue
        try:
            rec = domain.record_model.model_validate(item)
        except ValidationError:
            result.rejected += 1
            continue
        result.records.append(rec.model_dump(exclude_none=True))
    return result


def extract_records(
    links: Sequence[CandidateLink],
    *,
    base_url: str,
    domain: DomainProfile,
    client: Any = None,
    source_name: str = "",
) -> ExtractionResult:
    """Ask the model for records and validate them.

    client: anything with ``generate(messages, **kw) -> (text, usage, model)``;
    defaults to the shared OpenAI-compatible client.
    """
    if not links:
        return ExtractionResult()
    label = source_name or base_url
    try:
        llm = client or get_llm_client()
        text, usage, model = llm.generate(
            build_messages(links, base_url=base_url, domain=domain),
            temperature=0.0,
            json_mode=True,
        )
        items = parse_model_output(text, domain)
    except Exception as exc:
        logger.error("%s: record extraction failed: %s", label, exc)
        return ExtractionResult(error=str(exc) or type(exc).__name__)

    result = validate_items(items, domain)
    if result.rejected:
        logger.warning("%s: dropped %d item(s) failing schema validation", label, result.rejected)
    logger.debug("%s: model %s returned %d valid record(s)", label, model, len(result.records))
    return result
