from pydantic import BaseModel, Field, field_validator
from typing import Optional
from urllib.parse import urlparse


def _require_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


def _require_http_url(v: str) -> str:
    v = v.strip()
    parsed = urlparse(v)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute http(s) URL")
    return v


class CandidateLink(BaseModel):
    text: str
    href: str
    context: str = Field("", description="Up to 200 chars of the parent element's text")


class JobRecord(BaseModel):
    title: str
    company: str
    url: str = Field(..., description="Canonical identity key")
    location: Optional[str] = None
    date: Optional[str] = Field(None, description="ISO-8601 discovery timestamp")

    @field_validator("title", "company")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        return _require_http_url(v)


class ShowRecord(BaseModel):
    title: str
    artist: str
    url: str = Field(..., description="Canonical identity key")
    venue: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = Field(None, description="ISO-8601 discovery timestamp")

    @field_validator("title", "artist")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        return _require_http_url(v)
