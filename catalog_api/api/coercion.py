"""Request body coercion.

Category and product bodies arrive as JSON or multipart form data, so
every field may be a string. These helpers turn such loosely-typed
payloads into the typed commands the catalog engine accepts.

Fields are read by their snake_case name, falling back to the camelCase
spelling used by older clients (``originalPrice``, ``categoryIds``, ...).
"""

import math
from collections.abc import Mapping
from typing import Any

from catalog_api.application.membership import normalize_category_ids
from catalog_api.domain.commands import (
    UNSET,
    CategoryDraft,
    CategoryPatch,
    ProductDraft,
    ProductPatch,
)
from catalog_api.domain.entities import (
    PRODUCT_FLAG_FIELDS,
    PRODUCT_PRICE_FIELDS,
    PRODUCT_TEXT_FIELDS,
    ProductStatus,
)
from catalog_api.domain.exceptions import ValidationError


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def lookup(payload: Mapping[str, Any], name: str) -> Any:
    """Value of a field under either spelling, or ``UNSET`` if absent."""
    if name in payload:
        return payload[name]
    alias = camel_case(name)
    if alias in payload:
        return payload[alias]
    return UNSET


# ============================================================================
# Field parsers
# ============================================================================


def parse_price(field: str, value: Any) -> float | None:
    """Parse a numeric field.

    Falsy input (None, "", 0) means absent and yields None, never 0.
    """
    if not value:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(field, f"{value!r} is not a number") from e
    if not math.isfinite(number):
        raise ValidationError(field, f"{value!r} is not a number")
    return number


def parse_flag(value: Any) -> bool:
    """Only ``True`` and the literal string ``"true"`` are true."""
    return value is True or value == "true"


def parse_features(value: Any) -> list[str]:
    """Features from a comma-separated string or a sequence."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def parse_image_urls(value: Any) -> list[str]:
    """Image URLs from a sequence or a comma-separated string."""
    return parse_features(value)


def parse_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _product_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce every product field present in the payload."""
    values: dict[str, Any] = {}

    name = lookup(payload, "name")
    if name is not UNSET:
        values["name"] = "" if name is None else str(name)

    for key in PRODUCT_PRICE_FIELDS:
        raw = lookup(payload, key)
        if raw is not UNSET:
            values[key] = parse_price(key, raw)

    for key in PRODUCT_FLAG_FIELDS:
        raw = lookup(payload, key)
        if raw is not UNSET:
            values[key] = parse_flag(raw)

    for key in PRODUCT_TEXT_FIELDS:
        raw = lookup(payload, key)
        if raw is not UNSET:
            values[key] = parse_text(raw)

    raw = lookup(payload, "features")
    if raw is not UNSET:
        values["features"] = parse_features(raw)

    raw = lookup(payload, "image_urls")
    if raw is not UNSET:
        values["image_urls"] = parse_image_urls(raw)

    raw = lookup(payload, "category_ids")
    if raw is not UNSET:
        values["category_ids"] = normalize_category_ids(raw)

    raw = lookup(payload, "status")
    if raw is not UNSET:
        values["status"] = ProductStatus.coerce(raw)

    return values


# ============================================================================
# Commands
# ============================================================================


def product_draft_from_payload(payload: Mapping[str, Any]) -> ProductDraft:
    """Build a create command; a missing status means active."""
    values = _product_fields(payload)
    values.setdefault("name", "")
    return ProductDraft(**values)


def product_patch_from_payload(payload: Mapping[str, Any]) -> ProductPatch:
    """Build an update command holding only the fields present in the payload."""
    return ProductPatch(**_product_fields(payload))


def category_draft_from_payload(payload: Mapping[str, Any]) -> CategoryDraft:
    name = lookup(payload, "name")
    return CategoryDraft(
        name="" if name in (UNSET, None) else str(name),
        parent_id=parse_text(lookup(payload, "parent_id") or None),
        comment=parse_text(lookup(payload, "comment") or None),
        image_url=parse_text(lookup(payload, "image_url") or None),
    )


def category_patch_from_payload(payload: Mapping[str, Any]) -> CategoryPatch:
    patch = CategoryPatch()
    for key in ("name", "parent_id", "comment", "image_url"):
        raw = lookup(payload, key)
        if raw is not UNSET:
            setattr(patch, key, parse_text(raw))
    return patch
