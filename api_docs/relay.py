from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from api_docs.composer import ResolvedRequest
from api_docs.dispatcher import Dispatcher


MISSING_FIELDS_ERROR = "Missing url or method"
URL_NOT_ALLOWED_ERROR = "URL not allowed"
PROXY_FAILED_ERROR = "Proxy request failed"

_ORIGIN_BOUNDARY_CHARS = ("/", "?", "#")

logger = logging.getLogger("api_docs.relay")


class OriginAllowList:
    """Destination prefixes the relay is permitted to forward to."""

    def __init__(self, origins: Iterable[str]) -> None:
        self.origins = tuple(origin.strip().rstrip("/") for origin in origins if origin.strip())

    def allows(self, url: str) -> bool:
        for origin in self.origins:
            if not url.startswith(origin):
                continue
            remainder = url[len(origin):]
            if not remainder or remainder.startswith(_ORIGIN_BOUNDARY_CHARS):
                return True
        return False


@dataclass(frozen=True, slots=True)
class RelayReply:
    status_code: int
    content: dict[str, Any]


def _coerce_headers(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(key): str(value) for key, value in raw.items() if value is not None}


def _coerce_body(raw: Any) -> str | None:
    if raw is None or (isinstance(raw, (str, bool, int, float)) and not raw):
        return None
    if isinstance(raw, str):
        return raw
    return json.dumps(raw)


def parse_relay_payload(payload: Any) -> ResolvedRequest | None:
    """Turn a relay request document into a request, or None when url/method are missing."""

    if not isinstance(payload, dict):
        return None

    url = payload.get("url")
    method = payload.get("method")
    if not isinstance(url, str) or not url.strip():
        return None
    if not isinstance(method, str) or not method.strip():
        return None

    return ResolvedRequest(
        method=method.strip().upper(),
        url=url.strip(),
        headers=_coerce_headers(payload.get("headers")),
        body=_coerce_body(payload.get("requestBody")),
    )


def proxy_failure_reply(exc: BaseException) -> RelayReply:
    return RelayReply(
        status_code=500,
        content={"error": PROXY_FAILED_ERROR, "message": str(exc) or type(exc).__name__},
    )


def relay_request(payload: Any, *, allow_list: OriginAllowList, dispatcher: Dispatcher) -> RelayReply:
    resolved = parse_relay_payload(payload)
    if resolved is None:
        logger.info("relay_rejected reason=missing_fields")
        return RelayReply(status_code=400, content={"error": MISSING_FIELDS_ERROR})

    if not allow_list.allows(resolved.url):
        logger.warning("relay_rejected reason=url_not_allowed url=%s", resolved.url)
        return RelayReply(status_code=403, content={"error": URL_NOT_ALLOWED_ERROR})

    try:
        upstream = dispatcher.send(resolved, url_guard=allow_list.allows)
    except Exception as exc:
        logger.warning(
            "relay_failed method=%s url=%s error_type=%s",
            resolved.method,
            resolved.url,
            type(exc).__name__,
        )
        return proxy_failure_reply(exc)

    logger.info(
        "relay_completed method=%s url=%s status=%s elapsed_ms=%s",
        resolved.method,
        resolved.url,
        upstream.status_code,
        upstream.elapsed_ms,
    )
    return RelayReply(
        status_code=200,
        content={
            "status": upstream.status_code,
            "statusText": upstream.status_text,
            "body": upstream.body_text,
            "time": upstream.elapsed_ms,
        },
    )
