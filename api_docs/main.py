from __future__ import annotations

import ipaddress
import logging
import time
import uuid
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse

from api_docs import schemas
from api_docs.catalog import Catalog, EndpointTemplate, UnknownEndpointError, get_catalog
from api_docs.composer import (
    InformationalEndpointError,
    RequestOverrides,
    ResolvedRequest,
    SessionContext,
    UnresolvedPlaceholderError,
    build_curl,
    masked_headers,
    resolve,
)
from api_docs.config import Settings, get_settings
from api_docs.dispatcher import Dispatcher
from api_docs.docs_ui import DOCS_UI_HTML
from api_docs.rate_limit import SlidingWindowLimiter
from api_docs.relay import OriginAllowList, proxy_failure_reply, relay_request

logger = logging.getLogger("api_docs.api")
_rate_limiter: SlidingWindowLimiter | None = None
_rate_limiter_rpm: int | None = None
_RATE_LIMITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _validate_runtime_configuration(settings: Settings) -> None:
    safety_errors = settings.production_safety_errors()
    if not safety_errors:
        return

    for error in safety_errors:
        logger.error("unsafe_production_config error=%s", error)
    raise RuntimeError("Unsafe production configuration; see logs for details")


def _extract_client_ip_from_request(request: Request, settings: Settings) -> str:
    direct_client_ip = request.client.host if request.client else "unknown"

    if settings.rate_limit_trust_proxy_headers:
        if direct_client_ip not in settings.parsed_trusted_proxy_ips():
            return direct_client_ip

        x_forwarded_for = request.headers.get("X-Forwarded-For", "")
        if x_forwarded_for:
            candidate = x_forwarded_for.split(",")[0].strip()
            try:
                ipaddress.ip_address(candidate)
                return candidate
            except ValueError:
                logger.warning("Ignoring invalid X-Forwarded-For IP: %s", candidate)

    return direct_client_ip


def _check_rate_limit(request: Request, settings: Settings) -> JSONResponse | None:
    global _rate_limiter, _rate_limiter_rpm

    if not settings.rate_limit_enabled or request.method.upper() not in _RATE_LIMITED_METHODS:
        return None

    if _rate_limiter is None or _rate_limiter_rpm != settings.rate_limit_requests_per_minute:
        _rate_limiter = SlidingWindowLimiter(requests_per_minute=settings.rate_limit_requests_per_minute)
        _rate_limiter_rpm = settings.rate_limit_requests_per_minute

    client_ip = _extract_client_ip_from_request(request, settings)
    decision = _rate_limiter.allow(f"ip:{client_ip}")
    if decision.allowed:
        return None
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded"},
        headers={"Retry-After": str(decision.retry_after_sec)},
    )


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _validate_runtime_configuration(settings)
    catalog = get_catalog()
    logger.info(
        "API reference startup complete endpoints=%s allowed_origins=%s",
        len(catalog.endpoints()),
        ",".join(settings.parsed_relay_allowed_origins()),
    )
    yield


app = FastAPI(
    title="PenguimPay API Reference",
    version="1.0.0",
    description=(
        "Interactive reference for the PenguimPay payment API: endpoint catalog, "
        "request composer, and a same-origin relay for trying endpoints live."
    ),
    lifespan=lifespan,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", "").strip() or uuid.uuid4().hex
    start = time.perf_counter()

    limited = _check_rate_limit(request, get_settings())
    if limited is not None:
        limited.headers["X-Request-ID"] = request_id
        return limited

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000.0
        logger.exception(
            "request_failed method=%s path=%s request_id=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            request_id,
            duration_ms,
        )
        raise

    duration_ms = (time.perf_counter() - start) * 1000.0
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "request_completed method=%s path=%s status=%s request_id=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        request_id,
        duration_ms,
    )
    return response


def get_dispatcher() -> Iterator[Dispatcher]:
    settings = get_settings()
    with Dispatcher(timeout=settings.upstream_timeout_sec) as dispatcher:
        yield dispatcher


def get_allow_list() -> OriginAllowList:
    return OriginAllowList(get_settings().parsed_relay_allowed_origins())


def _get_endpoint_or_404(catalog: Catalog, endpoint_id: str) -> EndpointTemplate:
    try:
        return catalog.find_endpoint(endpoint_id)
    except UnknownEndpointError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _resolve_or_http_error(
    template: EndpointTemplate,
    payload: schemas.RequestOverridesIn,
    settings: Settings,
) -> ResolvedRequest:
    session = SessionContext(
        base_origin=payload.base_url or settings.default_base_url,
        bearer_token=payload.bearer_token.strip(),
    )
    overrides = RequestOverrides(
        session=session,
        form_values=payload.form_values,
        body_override=payload.body_override,
    )
    try:
        return resolve(template, overrides, strict_placeholders=settings.strict_path_params)
    except InformationalEndpointError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except UnresolvedPlaceholderError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.get("/", response_class=HTMLResponse)
def docs_page() -> str:
    if not get_settings().docs_ui_enabled:
        raise HTTPException(status_code=404, detail="Docs UI is disabled")
    return DOCS_UI_HTML


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live")
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/api/config")
def public_config() -> dict[str, object]:
    settings = get_settings()
    return {
        "default_base_url": settings.default_base_url,
        "allowed_origins": list(settings.parsed_relay_allowed_origins()),
    }


@app.get("/api/catalog", response_model=Catalog)
def read_catalog(
    search: str | None = Query(default=None, max_length=200),
    catalog: Catalog = Depends(get_catalog),
) -> Catalog:
    return catalog.filter(search)


@app.get("/api/endpoints", response_model=list[schemas.EndpointSummaryRead])
def list_endpoints(catalog: Catalog = Depends(get_catalog)) -> list[schemas.EndpointSummaryRead]:
    return [
        schemas.EndpointSummaryRead(
            id=endpoint.id,
            name=endpoint.name,
            method=endpoint.method,
            path=endpoint.path,
            category=catalog.category_name_for(endpoint.id),
            info_only=endpoint.info_only,
        )
        for endpoint in catalog.endpoints()
    ]


@app.get("/api/endpoints/{endpoint_id}", response_model=schemas.EndpointDetailRead)
def read_endpoint(endpoint_id: str, catalog: Catalog = Depends(get_catalog)) -> schemas.EndpointDetailRead:
    endpoint = _get_endpoint_or_404(catalog, endpoint_id)
    return schemas.EndpointDetailRead(
        endpoint=endpoint,
        category=catalog.category_name_for(endpoint.id),
        example_body=endpoint.example_body_text(),
        path_params=list(endpoint.path_params),
    )


@app.post("/api/endpoints/{endpoint_id}/preview", response_model=schemas.ResolvedRequestRead)
def preview_request(
    endpoint_id: str,
    payload: schemas.RequestOverridesIn,
    catalog: Catalog = Depends(get_catalog),
) -> schemas.ResolvedRequestRead:
    endpoint = _get_endpoint_or_404(catalog, endpoint_id)
    resolved = _resolve_or_http_error(endpoint, payload, get_settings())
    return schemas.ResolvedRequestRead.from_resolved(
        resolved,
        display_headers=masked_headers(endpoint.headers, payload.bearer_token.strip()),
        curl=build_curl(resolved),
    )


@app.post("/api/endpoints/{endpoint_id}/send", response_model=schemas.DispatchOutcomeRead)
def send_request(
    endpoint_id: str,
    payload: schemas.RequestOverridesIn,
    catalog: Catalog = Depends(get_catalog),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    allow_list: OriginAllowList = Depends(get_allow_list),
) -> schemas.DispatchOutcomeRead:
    endpoint = _get_endpoint_or_404(catalog, endpoint_id)
    resolved = _resolve_or_http_error(endpoint, payload, get_settings())

    if not allow_list.allows(resolved.url):
        logger.warning("send_rejected endpoint_id=%s url=%s", endpoint_id, resolved.url)
        raise HTTPException(status_code=403, detail="URL not allowed")

    outcome = dispatcher.dispatch(resolved, url_guard=allow_list.allows)
    return schemas.DispatchOutcomeRead.from_outcome(outcome)


@app.post("/api/proxy")
async def proxy(
    request: Request,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    allow_list: OriginAllowList = Depends(get_allow_list),
) -> JSONResponse:
    try:
        payload = await request.json()
    except ValueError as exc:
        reply = proxy_failure_reply(exc)
    else:
        reply = await run_in_threadpool(
            relay_request,
            payload,
            allow_list=allow_list,
            dispatcher=dispatcher,
        )
    return JSONResponse(status_code=reply.status_code, content=reply.content)
