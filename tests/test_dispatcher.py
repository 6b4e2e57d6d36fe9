from __future__ import annotations

import httpx
import pytest

from api_docs.composer import ResolvedRequest
from api_docs.dispatcher import (
    DEFAULT_FAILURE_REASON,
    DispatchFailure,
    DispatchSuccess,
    Dispatcher,
    RedirectNotAllowedError,
    attachable_body,
    format_body_for_display,
)

PING_URL = "https://api.penguimpay.com/api/ping"


def _dispatcher(handler) -> Dispatcher:
    return Dispatcher(transport=httpx.MockTransport(handler))


def test_http_500_with_text_body_is_a_success_outcome() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(ResolvedRequest(method="GET", url=PING_URL, headers={}))

    assert isinstance(outcome, DispatchSuccess)
    assert outcome.status_code == 500
    assert outcome.status_text == "Internal Server Error"
    assert outcome.body_text == "Internal Server Error"
    assert outcome.elapsed_ms >= 0
    assert outcome.is_success is False


def test_json_body_is_reindented_for_display() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True, "transactionId": "tx_1"})

    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(ResolvedRequest(method="GET", url=PING_URL, headers={}))

    assert isinstance(outcome, DispatchSuccess)
    assert outcome.status_text == "OK"
    assert outcome.body_text == '{\n  "ok": true,\n  "transactionId": "tx_1"\n}'
    assert outcome.is_success is True


def test_transport_error_becomes_failure_with_zero_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("fetch failed", request=request)

    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(ResolvedRequest(method="POST", url=PING_URL, headers={}, body="{}"))

    assert isinstance(outcome, DispatchFailure)
    assert outcome.reason == "fetch failed"
    assert outcome.status_code == 0
    assert outcome.elapsed_ms >= 0


def test_failure_without_message_uses_default_reason() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("", request=request)

    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(ResolvedRequest(method="GET", url=PING_URL, headers={}))

    assert outcome == DispatchFailure(reason=DEFAULT_FAILURE_REASON, elapsed_ms=outcome.elapsed_ms)


def test_post_sends_headers_and_body_verbatim() -> None:
    captured: dict[str, object] = {}
    body = '{\n  "amount": 12.34\n}'

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["authorization"] = request.headers.get("Authorization")
        captured["content"] = request.content
        return httpx.Response(201, json={"id": "tx_9"})

    resolved = ResolvedRequest(
        method="POST",
        url="https://api.penguimpay.com/api/external/pix/deposit",
        headers={"Authorization": "Bearer pk_test", "Content-Type": "application/json"},
        body=body,
    )
    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(resolved)

    assert isinstance(outcome, DispatchSuccess)
    assert outcome.status_code == 201
    assert captured == {
        "method": "POST",
        "url": "https://api.penguimpay.com/api/external/pix/deposit",
        "authorization": "Bearer pk_test",
        "content": body.encode("utf-8"),
    }


def test_get_request_never_carries_a_body() -> None:
    captured: dict[str, bytes] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["content"] = request.content
        return httpx.Response(204)

    with _dispatcher(handler) as dispatcher:
        outcome = dispatcher.dispatch(
            ResolvedRequest(method="GET", url=PING_URL, headers={}, body='{"ignored": true}')
        )

    assert captured["content"] == b""
    assert isinstance(outcome, DispatchSuccess)
    assert outcome.body_text == ""


def test_send_returns_raw_text_and_propagates_transport_errors() -> None:
    def ok_handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text='{"a":1}')

    with _dispatcher(ok_handler) as dispatcher:
        upstream = dispatcher.send(ResolvedRequest(method="GET", url=PING_URL, headers={}))
    assert upstream.body_text == '{"a":1}'

    def failing_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _dispatcher(failing_handler) as dispatcher:
        with pytest.raises(httpx.ReadTimeout):
            dispatcher.send(ResolvedRequest(method="GET", url=PING_URL, headers={}))


@pytest.mark.parametrize(
    ("method", "body", "expected"),
    [
        ("POST", "{}", "{}"),
        ("put", "x", "x"),
        ("PATCH", "", None),
        ("POST", None, None),
        ("GET", "{}", None),
        ("DELETE", "{}", None),
    ],
)
def test_attachable_body(method: str, body: str | None, expected: str | None) -> None:
    assert attachable_body(method, body) == expected


def test_format_body_for_display_keeps_non_json_text() -> None:
    assert format_body_for_display("<html>oops</html>") == "<html>oops</html>"
    assert format_body_for_display("") == ""
    assert format_body_for_display('{"b":[1,2]}') == '{\n  "b": [\n    1,\n    2\n  ]\n}'


def _redirect_handler(seen: list[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.host == "api.penguimpay.com":
            return httpx.Response(302, headers={"Location": "https://elsewhere.example.com/landing"})
        return httpx.Response(200, text="elsewhere")

    return handler


def test_unguarded_dispatch_follows_redirects() -> None:
    seen: list[str] = []
    with _dispatcher(_redirect_handler(seen)) as dispatcher:
        outcome = dispatcher.dispatch(ResolvedRequest(method="GET", url=PING_URL, headers={}))

    assert isinstance(outcome, DispatchSuccess)
    assert outcome.body_text == "elsewhere"
    assert seen == [PING_URL, "https://elsewhere.example.com/landing"]


def test_guarded_send_refuses_redirect_before_requesting_it() -> None:
    seen: list[str] = []
    with _dispatcher(_redirect_handler(seen)) as dispatcher:
        with pytest.raises(RedirectNotAllowedError, match="elsewhere.example.com"):
            dispatcher.send(
                ResolvedRequest(method="GET", url=PING_URL, headers={}),
                url_guard=lambda url: url.startswith("https://api.penguimpay.com/"),
            )

        outcome = dispatcher.dispatch(
            ResolvedRequest(method="GET", url=PING_URL, headers={}),
            url_guard=lambda url: url.startswith("https://api.penguimpay.com/"),
        )

    assert isinstance(outcome, DispatchFailure)
    assert outcome.reason == "Redirect to https://elsewhere.example.com/landing is not allowed"
    assert seen == [PING_URL, PING_URL]


def test_guarded_send_gives_up_on_redirect_loops() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": PING_URL})

    with _dispatcher(handler) as dispatcher:
        with pytest.raises(httpx.TooManyRedirects):
            dispatcher.send(
                ResolvedRequest(method="GET", url=PING_URL, headers={}),
                url_guard=lambda url: True,
            )
