from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from api_docs.composer import BODY_METHODS, ResolvedRequest


DEFAULT_FAILURE_REASON = "Network error or CORS issue"
DEFAULT_RELAY_PATH = "/api/proxy"
FAILURE_STATUS_CODE = 0

logger = logging.getLogger("api_docs.dispatcher")

UrlGuard = Callable[[str], bool]


class RedirectNotAllowedError(httpx.RequestError):
    def __init__(self, url: str, *, request: httpx.Request) -> None:
        super().__init__(f"Redirect to {url} is not allowed", request=request)
        self.url = url


@dataclass(frozen=True, slots=True)
class DispatchSuccess:
    status_code: int
    status_text: str
    body_text: str
    elapsed_ms: int

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True)
class DispatchFailure:
    reason: str
    elapsed_ms: int

    @property
    def status_code(self) -> int:
        return FAILURE_STATUS_CODE


@dataclass(frozen=True, slots=True)
class DispatchRejected:
    """Relay refused the request before any network attempt (400 or 403)."""

    status_code: int
    reason: str
    elapsed_ms: int = 0


DispatchOutcome = DispatchSuccess | DispatchFailure | DispatchRejected


@dataclass(frozen=True, slots=True)
class UpstreamResponse:
    status_code: int
    status_text: str
    body_text: str
    elapsed_ms: int


def attachable_body(method: str, body: str | None) -> str | None:
    if not body or method.upper() not in BODY_METHODS:
        return None
    return body


def format_body_for_display(text: str) -> str:
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _elapsed_ms(start: float) -> int:
    return max(0, round((time.perf_counter() - start) * 1000.0))


def _failure_reason(exc: BaseException) -> str:
    return str(exc).strip() or DEFAULT_FAILURE_REASON


class Dispatcher:
    """Sends resolved requests straight to their destination with httpx."""

    def __init__(
        self,
        *,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(timeout=timeout, transport=transport, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def _follow_guarded(self, response: httpx.Response, url_guard: UrlGuard) -> httpx.Response:
        hops = 0
        while response.next_request is not None:
            next_request = response.next_request
            target = str(next_request.url)
            if not url_guard(target):
                raise RedirectNotAllowedError(target, request=next_request)
            hops += 1
            if hops > self._client.max_redirects:
                raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=next_request)
            response = self._client.send(next_request, follow_redirects=False)
        return response

    def send(self, resolved: ResolvedRequest, *, url_guard: UrlGuard | None = None) -> UpstreamResponse:
        """
        Issue ``resolved`` and return the raw response text. Transport errors propagate.

        With ``url_guard`` every redirect target must pass the guard before it is
        requested; a refused hop raises ``RedirectNotAllowedError``.
        """

        body = attachable_body(resolved.method, resolved.body)
        start = time.perf_counter()
        response = self._client.request(
            resolved.method.upper(),
            resolved.url,
            headers=resolved.headers,
            content=body.encode("utf-8") if body is not None else None,
            follow_redirects=url_guard is None,
        )
        if url_guard is not None:
            response = self._follow_guarded(response, url_guard)
        elapsed_ms = _elapsed_ms(start)

        return UpstreamResponse(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            body_text=response.text,
            elapsed_ms=elapsed_ms,
        )

    def dispatch(
        self,
        resolved: ResolvedRequest,
        *,
        url_guard: UrlGuard | None = None,
    ) -> DispatchSuccess | DispatchFailure:
        start = time.perf_counter()
        try:
            upstream = self.send(resolved, url_guard=url_guard)
        except Exception as exc:
            elapsed_ms = _elapsed_ms(start)
            logger.warning(
                "dispatch_failed method=%s url=%s error_type=%s elapsed_ms=%s",
                resolved.method,
                resolved.url,
                type(exc).__name__,
                elapsed_ms,
            )
            return DispatchFailure(reason=_failure_reason(exc), elapsed_ms=elapsed_ms)

        outcome = DispatchSuccess(
            status_code=upstream.status_code,
            status_text=upstream.status_text,
            body_text=format_body_for_display(upstream.body_text),
            elapsed_ms=upstream.elapsed_ms,
        )
        logger.info(
            "dispatch_completed method=%s url=%s status=%s ok=%s elapsed_ms=%s",
            resolved.method,
            resolved.url,
            outcome.status_code,
            outcome.is_success,
            outcome.elapsed_ms,
        )
        return outcome


class RelayDispatcher:
    """
    Sends resolved requests through the same-origin relay endpoint.

    ``client`` is any ``httpx.Client`` pointed at the docs server; a
    ``fastapi.testclient.TestClient`` works as well.
    """

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        base_url: str = "",
        relay_path: str = DEFAULT_RELAY_PATH,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._relay_path = relay_path

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RelayDispatcher":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def dispatch(self, resolved: ResolvedRequest) -> DispatchOutcome:
        payload: dict[str, Any] = {
            "url": resolved.url,
            "method": resolved.method,
            "headers": dict(resolved.headers),
        }
        if resolved.body is not None:
            payload["requestBody"] = resolved.body

        start = time.perf_counter()
        try:
            response = self._client.post(self._relay_path, json=payload)
        except Exception as exc:
            return DispatchFailure(reason=_failure_reason(exc), elapsed_ms=_elapsed_ms(start))
        elapsed_ms = _elapsed_ms(start)

        try:
            envelope = response.json()
        except ValueError:
            return DispatchFailure(
                reason=f"Relay returned a non-JSON response (HTTP {response.status_code})",
                elapsed_ms=elapsed_ms,
            )
        if not isinstance(envelope, dict):
            envelope = {}

        if response.status_code == 200:
            return DispatchSuccess(
                status_code=int(envelope.get("status", FAILURE_STATUS_CODE)),
                status_text=str(envelope.get("statusText", "")),
                body_text=format_body_for_display(str(envelope.get("body", ""))),
                elapsed_ms=int(envelope.get("time", elapsed_ms)),
            )

        if response.status_code in {400, 403}:
            return DispatchRejected(
                status_code=response.status_code,
                reason=str(envelope.get("error") or response.reason_phrase),
            )

        reason = (
            envelope.get("message")
            or envelope.get("error")
            or envelope.get("detail")
            or DEFAULT_FAILURE_REASON
        )
        return DispatchFailure(reason=str(reason), elapsed_ms=elapsed_ms)
