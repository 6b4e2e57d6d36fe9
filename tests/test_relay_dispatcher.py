from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

import api_docs.main as app_main
from api_docs.composer import RequestOverrides, ResolvedRequest, SessionContext, resolve
from api_docs.catalog import load_catalog
from api_docs.dispatcher import DispatchFailure, DispatchRejected, DispatchSuccess, Dispatcher, RelayDispatcher


class Upstream:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(201, text='{"transactionId":"tx_1","qrCode":"000201"}')


@pytest.fixture()
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture()
def relay(monkeypatch: pytest.MonkeyPatch, upstream: Upstream):
    monkeypatch.setenv("API_DOCS_APP_ENV", "development")
    monkeypatch.setenv("API_DOCS_RATE_LIMIT_ENABLED", "0")
    monkeypatch.delenv("API_DOCS_RELAY_ALLOWED_ORIGINS", raising=False)

    def override_get_dispatcher():
        with Dispatcher(transport=httpx.MockTransport(upstream)) as dispatcher:
            yield dispatcher

    app_main._rate_limiter = None
    app_main._rate_limiter_rpm = None
    app_main.app.dependency_overrides[app_main.get_dispatcher] = override_get_dispatcher
    with TestClient(app_main.app) as test_client:
        with RelayDispatcher(client=test_client) as relay_dispatcher:
            yield relay_dispatcher
    app_main.app.dependency_overrides.clear()


def _deposit_request(base: str = "https://api.penguimpay.com") -> ResolvedRequest:
    template = load_catalog().find_endpoint("tx-pix-deposit")
    overrides = RequestOverrides(
        session=SessionContext(base_origin=base, bearer_token="pk_test"),
        form_values={"amount": "12.34"},
    )
    return resolve(template, overrides)


def test_relay_round_trip_returns_display_ready_success(relay: RelayDispatcher, upstream: Upstream) -> None:
    outcome = relay.dispatch(_deposit_request())

    assert isinstance(outcome, DispatchSuccess)
    assert outcome.status_code == 201
    assert outcome.status_text == "Created"
    assert outcome.body_text == '{\n  "transactionId": "tx_1",\n  "qrCode": "000201"\n}'
    assert outcome.elapsed_ms >= 0

    [request] = upstream.requests
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer pk_test"
    assert b'"amount": 12.34' in request.content


def test_relay_policy_rejection(relay: RelayDispatcher, upstream: Upstream) -> None:
    outcome = relay.dispatch(_deposit_request(base="https://evil.example.com"))

    assert outcome == DispatchRejected(status_code=403, reason="URL not allowed")
    assert upstream.requests == []


def test_relay_validation_rejection(relay: RelayDispatcher) -> None:
    outcome = relay.dispatch(ResolvedRequest(method="", url="https://api.penguimpay.com/api/ping", headers={}))
    assert outcome == DispatchRejected(status_code=400, reason="Missing url or method")


def test_relay_upstream_failure(relay: RelayDispatcher, upstream: Upstream) -> None:
    upstream.error = httpx.ConnectError("fetch failed")
    outcome = relay.dispatch(_deposit_request())

    assert isinstance(outcome, DispatchFailure)
    assert outcome.reason == "fetch failed"
    assert outcome.status_code == 0


def test_unreachable_relay_is_a_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with RelayDispatcher(base_url="http://docs.local", transport=httpx.MockTransport(handler)) as relay:
        outcome = relay.dispatch(_deposit_request())

    assert isinstance(outcome, DispatchFailure)
    assert outcome.reason == "connection refused"


def test_non_json_relay_response_is_a_failure() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    with RelayDispatcher(base_url="http://docs.local", transport=httpx.MockTransport(handler)) as relay:
        outcome = relay.dispatch(_deposit_request())

    assert isinstance(outcome, DispatchFailure)
    assert "502" in outcome.reason
