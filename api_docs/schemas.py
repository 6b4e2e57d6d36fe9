from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from api_docs.catalog import EndpointTemplate, HeaderPair
from api_docs.composer import ResolvedRequest
from api_docs.dispatcher import DispatchFailure, DispatchOutcome, DispatchRejected, DispatchSuccess


class RequestOverridesIn(BaseModel):
    bearer_token: str = Field(default="", max_length=4096)
    base_url: str | None = Field(default=None, max_length=500, description="Defaults to the configured base URL")
    form_values: dict[str, str] = Field(default_factory=dict)
    body_override: str | None = None


class EndpointSummaryRead(BaseModel):
    id: str
    name: str
    method: str
    path: str
    category: str
    info_only: bool


class EndpointDetailRead(BaseModel):
    endpoint: EndpointTemplate
    category: str
    example_body: str | None
    path_params: list[str]


class ResolvedRequestRead(BaseModel):
    method: str
    url: str
    headers: dict[str, str]
    body: str | None
    unresolved_placeholders: list[str]
    display_headers: list[HeaderPair]
    curl: str

    @classmethod
    def from_resolved(
        cls,
        resolved: ResolvedRequest,
        *,
        display_headers: list[HeaderPair],
        curl: str,
    ) -> "ResolvedRequestRead":
        return cls(
            method=resolved.method,
            url=resolved.url,
            headers=dict(resolved.headers),
            body=resolved.body,
            unresolved_placeholders=list(resolved.unresolved_placeholders),
            display_headers=display_headers,
            curl=curl,
        )


class DispatchOutcomeRead(BaseModel):
    outcome: Literal["success", "failure", "rejected"]
    status_code: int
    status_text: str = ""
    body: str = ""
    elapsed_ms: int = 0
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: DispatchOutcome) -> "DispatchOutcomeRead":
        if isinstance(outcome, DispatchSuccess):
            return cls(
                outcome="success",
                status_code=outcome.status_code,
                status_text=outcome.status_text,
                body=outcome.body_text,
                elapsed_ms=outcome.elapsed_ms,
            )
        if isinstance(outcome, DispatchFailure):
            return cls(
                outcome="failure",
                status_code=outcome.status_code,
                elapsed_ms=outcome.elapsed_ms,
                error=outcome.reason,
            )
        if isinstance(outcome, DispatchRejected):
            return cls(
                outcome="rejected",
                status_code=outcome.status_code,
                elapsed_ms=outcome.elapsed_ms,
                error=outcome.reason,
            )
        raise TypeError(f"Unsupported dispatch outcome: {outcome!r}")
