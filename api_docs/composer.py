from __future__ import annotations

import copy
import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from api_docs.catalog import PLACEHOLDER_PATTERN, EndpointTemplate, FormField, HeaderPair, QueryParam


AUTHORIZATION_HEADER = "Authorization"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
MASKED_TOKEN_PREFIX_LENGTH = 10

_WHITESPACE_RUN = re.compile(r"\s+")
_DECIMAL_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INTEGER_NUMBER = re.compile(r"[+-]?[0-9]+")


class InformationalEndpointError(ValueError):
    """Raised when an informational-only template is asked to produce a request."""

    def __init__(self, endpoint_id: str) -> None:
        self.endpoint_id = endpoint_id
        super().__init__(f"Endpoint `{endpoint_id}` is informational only and cannot be sent")


class UnresolvedPlaceholderError(ValueError):
    """Raised in strict mode when a path placeholder has no value."""

    def __init__(self, names: tuple[str, ...]) -> None:
        self.names = names
        joined = ", ".join(f":{name}" for name in names)
        super().__init__(f"Missing value for path placeholder(s): {joined}")


@dataclass(frozen=True, slots=True)
class SessionContext:
    base_origin: str
    bearer_token: str = ""


@dataclass(frozen=True, slots=True)
class RequestOverrides:
    session: SessionContext
    form_values: Mapping[str, str] = field(default_factory=dict)
    body_override: str | None = None

    @property
    def bearer_token(self) -> str:
        return self.session.bearer_token

    @property
    def base_origin(self) -> str:
        return self.session.base_origin


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: str | None = None
    unresolved_placeholders: tuple[str, ...] = ()


def substitute_path_params(
    path: str,
    values: Mapping[str, str],
    *,
    strict: bool = False,
) -> tuple[str, tuple[str, ...]]:
    """
    Replace ``:name`` segments with ``values[name]`` verbatim.

    Placeholders without a non-blank value are left in place and reported in
    the returned tuple; with ``strict=True`` they raise instead.
    """

    unresolved: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = values.get(name)
        if value is None or not str(value).strip():
            if name not in unresolved:
                unresolved.append(name)
            return match.group(0)
        return str(value)

    resolved_path = PLACEHOLDER_PATTERN.sub(_replace, path)
    if unresolved and strict:
        raise UnresolvedPlaceholderError(tuple(unresolved))
    return resolved_path, tuple(unresolved)


def build_query_string(query_params: tuple[QueryParam, ...]) -> str:
    # Example values are emitted literally, without percent-encoding.
    return "&".join(f"{param.key}={param.value}" for param in query_params)


def build_url(base_origin: str, path: str, query_params: tuple[QueryParam, ...] = ()) -> str:
    url = f"{base_origin.strip().rstrip('/')}{path}"
    query = build_query_string(query_params)
    if query:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{query}"
    return url


def resolve_headers(headers: tuple[HeaderPair, ...], bearer_token: str) -> dict[str, str]:
    resolved: dict[str, str] = {}
    for header in headers:
        if header.key == AUTHORIZATION_HEADER and bearer_token:
            resolved[header.key] = f"Bearer {bearer_token}"
        else:
            resolved[header.key] = header.value
    return resolved


def masked_headers(headers: tuple[HeaderPair, ...], bearer_token: str) -> list[HeaderPair]:
    masked: list[HeaderPair] = []
    for header in headers:
        if header.key == AUTHORIZATION_HEADER and bearer_token:
            value = f"Bearer {bearer_token[:MASKED_TOKEN_PREFIX_LENGTH]}..."
            masked.append(HeaderPair(key=header.key, value=value))
        else:
            masked.append(header)
    return masked


def coerce_form_value(form_field: FormField, raw: str) -> Any:
    if form_field.type != "number":
        return raw

    text = str(raw).strip()
    if _INTEGER_NUMBER.fullmatch(text):
        return int(text)
    if not _DECIMAL_NUMBER.fullmatch(text):
        return 0

    number = float(text)
    if not math.isfinite(number):
        return 0
    return number


def synthesize_form_body(template: EndpointTemplate, form_values: Mapping[str, str]) -> dict[str, Any]:
    body: dict[str, Any] = copy.deepcopy(template.body) if isinstance(template.body, dict) else {}

    for form_field in template.form_fields:
        if form_field.key not in form_values:
            continue
        value = coerce_form_value(form_field, form_values[form_field.key])

        if form_field.nested:
            group = body.get(form_field.nested)
            if not isinstance(group, dict):
                group = {}
                body[form_field.nested] = group
            group[form_field.key] = value
        else:
            body[form_field.key] = value

    return body


def serialize_body(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def resolve_body(template: EndpointTemplate, overrides: RequestOverrides) -> str | None:
    if overrides.body_override is not None:
        return overrides.body_override
    if template.form_fields:
        return serialize_body(synthesize_form_body(template, overrides.form_values))
    return template.example_body_text()


def resolve(
    template: EndpointTemplate,
    overrides: RequestOverrides,
    *,
    strict_placeholders: bool = False,
) -> ResolvedRequest:
    """Build the concrete request for ``template``. Performs no I/O."""

    if template.info_only:
        raise InformationalEndpointError(template.id)

    path, unresolved = substitute_path_params(
        template.path,
        overrides.form_values,
        strict=strict_placeholders,
    )
    return ResolvedRequest(
        method=template.method,
        url=build_url(overrides.base_origin, path, template.query_params),
        headers=resolve_headers(template.headers, overrides.bearer_token),
        body=resolve_body(template, overrides),
        unresolved_placeholders=unresolved,
    )


def build_curl(resolved: ResolvedRequest) -> str:
    command = f"curl -X {resolved.method} '{resolved.url}'"
    for key, value in resolved.headers.items():
        command += f" \\\n  -H '{key}: {value}'"

    if resolved.body and resolved.method.upper() in BODY_METHODS:
        compact = _WHITESPACE_RUN.sub(" ", resolved.body.replace("\n", ""))
        command += f" \\\n  -d '{compact}'"
    return command
