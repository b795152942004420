"""Product API endpoints.

Provides endpoints for products and their category links:
- GET /api/products - products visible to the caller
- GET /api/products/{id} - a visible product
- POST /api/products - create (JSON or multipart with ``images`` files)
- PUT /api/products/{id} - update (JSON or multipart with ``images`` files)
- DELETE /api/products/{id} - delete
- POST /api/products/{id}/categories/{category_id} - link a category
- DELETE /api/products/{id}/categories/{category_id} - unlink a category

Anonymous callers only see active products and products without a status.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from catalog_api.api.coercion import product_draft_from_payload, product_patch_from_payload
from catalog_api.api.dependencies import (
    RequestPayload,
    caller_is_admin,
    get_engine,
    read_payload,
    require_user,
)
from catalog_api.api.errors import raise_for_failure
from catalog_api.api.schemas import ErrorResponse, ProductDeleteResponse, ProductResponse
from catalog_api.application.catalog_engine import CatalogEngine
from catalog_api.domain.entities import Product, User

router = APIRouter(prefix="/api/products", tags=["Products"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Product or category not found"},
    409: {"model": ErrorResponse, "description": "Conflict"},
    502: {"model": ErrorResponse, "description": "Image upload failed"},
}


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product to ProductResponse."""
    return ProductResponse(**product.to_dict())


@router.get("", response_model=list[ProductResponse])
async def list_products(
    request: Request,
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[ProductResponse]:
    """List products visible to the caller."""
    result = await engine.list_products(is_admin=caller_is_admin(request))
    if not result.success:
        raise_for_failure(result)
    return [product_to_response(p) for p in result.value]


@router.get("/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def get_product(
    product_id: str,
    request: Request,
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductResponse:
    """Get a product. Products hidden from the caller read as 404."""
    result = await engine.get_product(product_id, is_admin=caller_is_admin(request))
    if not result.success:
        raise_for_failure(result)
    return product_to_response(result.value)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_product(
    _user: Annotated[User, Depends(require_user)],
    payload: Annotated[RequestPayload, Depends(read_payload)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductResponse:
    """Create a product.

    Every category id must exist; otherwise the request fails with
    UNKNOWN_CATEGORIES and nothing is stored.
    """
    draft = product_draft_from_payload(payload.fields)
    result = await engine.create_product(draft, images=await payload.images("images"))
    if not result.success:
        raise_for_failure(result)
    return product_to_response(result.value)


@router.put("/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def update_product(
    product_id: str,
    _user: Annotated[User, Depends(require_user)],
    payload: Annotated[RequestPayload, Depends(read_payload)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductResponse:
    """Update a product.

    Unknown category ids are dropped as long as at least one supplied id
    exists. Omitted fields, status included, are left unchanged.
    """
    patch = product_patch_from_payload(payload.fields)
    result = await engine.update_product(product_id, patch, images=await payload.images("images"))
    if not result.success:
        raise_for_failure(result)
    return product_to_response(result.value)


@router.delete("/{product_id}", response_model=ProductDeleteResponse, responses=ERROR_RESPONSES)
async def delete_product(
    product_id: str,
    _user: Annotated[User, Depends(require_user)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductDeleteResponse:
    """Delete a product."""
    result = await engine.delete_product(product_id)
    if not result.success:
        raise_for_failure(result)
    return ProductDeleteResponse(message="Product deleted successfully", product_id=product_id)


@router.post(
    "/{product_id}/categories/{category_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
)
async def add_category(
    product_id: str,
    category_id: str,
    _user: Annotated[User, Depends(require_user)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductResponse:
    """Link an existing category to a product."""
    result = await engine.add_category_to_product(product_id, category_id)
    if not result.success:
        raise_for_failure(result)
    return product_to_response(result.value)


@router.delete(
    "/{product_id}/categories/{category_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
)
async def remove_category(
    product_id: str,
    category_id: str,
    _user: Annotated[User, Depends(require_user)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> ProductResponse:
    """Unlink a category from a product. The category may no longer exist."""
    result = await engine.remove_category_from_product(product_id, category_id)
    if not result.success:
        raise_for_failure(result)
    return product_to_response(result.value)
