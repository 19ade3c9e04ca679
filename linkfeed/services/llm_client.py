"""LLM client wrapper for OpenAI-compatible endpoints.

Works with OpenAI itself or any OpenAI-compatible base_url (Mistral, local
gateways, etc.).

Configuration via environment variables:

- LLM_API_KEY / OPENAI_API_KEY
- API_URL_BASE / LLM_BASE_URL (optional alternate endpoint)
- API_MODEL / LLM_MODEL (default: mistral-small-latest)
- LLM_TIMEOUT (seconds, default: 60)

Usage:
    from linkfeed.services.llm_client import get_llm_client
    client = get_llm_client()
    text, usage, model = client.generate([
        {"role": "system", "content": "Return JSON."},
        {"role": "user", "content": "..."},
    ], json_mode=True)
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

from openai import OpenAI


DEFAULT_MODEL = "mistral-small-latest"


class LLMClient:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise RuntimeError("Missing LLM API key. Set LLM_API_KEY or OPENAI_API_KEY.")

        base = base_url or os.getenv("API_URL_BASE") or os.getenv("LLM_BASE_URL")
        self.base_url = base.strip() if base and base.strip() else None
        self.model = model or os.getenv("API_MODEL") or os.getenv("LLM_MODEL") or DEFAULT_MODEL
        self.timeout = float(timeout if timeout is not None else os.getenv("LLM_TIMEOUT") or 60.0)

        if self.base_url:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        else:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)

    def generate(
        self,
        messages: List[Dict[str, Any]],
        *,
        temperature: float = 0.0,
        max_tokens: int = 4000,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any], str]:
        """Generate a chat completion and return (text, usage, model).

        json_mode asks the endpoint for a JSON object response; callers still
        validate the payload since not every compatible endpoint enforces it.
        """
        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": float(temperature),
            "max_tokens": int(max_tokens),
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        resp = self._client.chat.completions.create(**payload)
        text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        usage = getattr(resp, "usage", None)
        usage_dict = usage.model_dump() if hasattr(usage, "model_dump") else (usage or {})
        return text, usage_dict, getattr(resp, "model", payload["model"]) or payload["model"]


_client_cache: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    global _client_cache
    if _client_cache is None:
        _client_cache = LLMClient()
    return _client_cache
