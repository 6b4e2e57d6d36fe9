from __future__ import annotations

import json
import re
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_CATALOG_PATH = Path(__file__).with_name("catalog.json")
PLACEHOLDER_PATTERN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


class UnknownEndpointError(ValueError):
    """Raised when an endpoint id is not present in the catalog."""

    def __init__(self, endpoint_id: str) -> None:
        self.endpoint_id = endpoint_id
        super().__init__(f"Unknown endpoint: {endpoint_id}")


class HeaderPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class QueryParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class FormField(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    placeholder: str = ""
    type: Literal["text", "number"] = "text"
    nested: str | None = None


class EndpointTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["endpoint"] = "endpoint"
    id: str = Field(min_length=1)
    name: str
    method: HttpMethod
    path: str
    description: str | None = None
    headers: tuple[HeaderPair, ...] = ()
    body: Any = None
    query_params: tuple[QueryParam, ...] = ()
    form_fields: tuple[FormField, ...] = ()
    info_only: bool = False

    @property
    def path_params(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(PLACEHOLDER_PATTERN.findall(self.path)))

    def example_body_text(self) -> str | None:
        if self.body is None:
            return None
        return json.dumps(self.body, indent=2, ensure_ascii=False)


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["category"] = "category"
    name: str
    children: tuple[CatalogNode, ...] = ()


CatalogNode = Annotated[Union[EndpointTemplate, Category], Field(discriminator="kind")]
Category.model_rebuild()


class Catalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...] = ()

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "Catalog":
        seen: set[str] = set()
        for endpoint in flatten_endpoints(self.categories):
            if endpoint.id in seen:
                raise ValueError(f"Duplicate endpoint id in catalog: {endpoint.id}")
            seen.add(endpoint.id)
        return self

    def endpoints(self) -> list[EndpointTemplate]:
        return flatten_endpoints(self.categories)

    def find_endpoint(self, endpoint_id: str) -> EndpointTemplate:
        for endpoint in _walk(self.categories):
            if endpoint.id == endpoint_id:
                return endpoint
        raise UnknownEndpointError(endpoint_id)

    def category_name_for(self, endpoint_id: str) -> str:
        """Name of the innermost category holding ``endpoint_id``, or ``""``."""

        for category in self.categories:
            name = _category_name_for(category, endpoint_id)
            if name is not None:
                return name
        return ""

    def filter(self, search: str | None) -> "Catalog":
        term = (search or "").strip().lower()
        if not term:
            return self
        filtered = (_filter_category(category, term) for category in self.categories)
        return Catalog(categories=tuple(category for category in filtered if category is not None))


def _walk(nodes: tuple[CatalogNode, ...]) -> Iterator[EndpointTemplate]:
    for node in nodes:
        if isinstance(node, EndpointTemplate):
            yield node
        else:
            yield from _walk(node.children)


def flatten_endpoints(nodes: tuple[CatalogNode, ...]) -> list[EndpointTemplate]:
    """Depth-first list of every endpoint, whatever the nesting depth."""

    return list(_walk(nodes))


def _category_name_for(category: Category, endpoint_id: str) -> str | None:
    for child in category.children:
        if isinstance(child, EndpointTemplate):
            if child.id == endpoint_id:
                return category.name
            continue
        nested = _category_name_for(child, endpoint_id)
        if nested is not None:
            return nested
    return None


def _matches(endpoint: EndpointTemplate, term: str) -> bool:
    return (
        term in endpoint.name.lower()
        or term in endpoint.path.lower()
        or term in endpoint.method.lower()
    )


def _filter_category(category: Category, term: str) -> Category | None:
    children: list[CatalogNode] = []
    for child in category.children:
        if isinstance(child, EndpointTemplate):
            if _matches(child, term):
                children.append(child)
            continue
        nested = _filter_category(child, term)
        if nested is not None:
            children.append(nested)

    if not children:
        return None
    return Category(name=category.name, children=tuple(children))


def load_catalog(path: Path | str | None = None) -> Catalog:
    catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    return Catalog.model_validate(payload)


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog()
