"""Category API endpoints.

Provides endpoints for the category tree:
- GET /api/categories - every category with parent and direct children
- GET /api/categories/hierarchy - roots with two levels of children
- GET /api/categories/{id} - a category with its full subtree
- GET /api/categories/{id}/subcategories - direct children
- GET /api/categories/{id}/products - products referencing the category
- POST /api/categories - create (JSON or multipart with an ``image`` file)
- PUT /api/categories/{id} - update (JSON or multipart with an ``image`` file)
- DELETE /api/categories/{id} - delete, optionally cascading
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from catalog_api.api.coercion import category_draft_from_payload, category_patch_from_payload
from catalog_api.api.dependencies import (
    RequestPayload,
    caller_is_admin,
    get_engine,
    read_payload,
    require_user,
)
from catalog_api.api.errors import raise_for_failure
from catalog_api.api.products import product_to_response
from catalog_api.api.schemas import (
    CategoryDeleteResponse,
    CategoryResponse,
    CategorySchema,
    ErrorResponse,
    ProductResponse,
)
from catalog_api.application.catalog_engine import CatalogEngine
from catalog_api.domain.entities import Category, CategoryNode, User

router = APIRouter(prefix="/api/categories", tags=["Categories"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Category not found"},
    409: {"model": ErrorResponse, "description": "Conflict"},
}


# ============================================================================
# Converters
# ============================================================================


def category_to_schema(category: Category) -> CategorySchema:
    """Convert Category to CategorySchema."""
    return CategorySchema(**category.to_dict())


def node_to_response(node: CategoryNode) -> CategoryResponse:
    """Convert CategoryNode to CategoryResponse, children included."""
    return CategoryResponse(
        **node.category.to_dict(),
        parent=category_to_schema(node.parent) if node.parent else None,
        children=[node_to_response(child) for child in node.children],
    )


# ============================================================================
# Reads
# ============================================================================


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[CategoryResponse]:
    """List every category with its parent and direct children."""
    result = await engine.list_categories()
    if not result.success:
        raise_for_failure(result)
    return [node_to_response(node) for node in result.value]


@router.get("/hierarchy", response_model=list[CategoryResponse])
async def get_hierarchy(
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[CategoryResponse]:
    """Root categories with children and grandchildren."""
    result = await engine.get_hierarchy()
    if not result.success:
        raise_for_failure(result)
    return [node_to_response(node) for node in result.value]


@router.get("/{category_id}", response_model=CategoryResponse, responses=ERROR_RESPONSES)
async def get_category(
    category_id: str,
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> CategoryResponse:
    """Get a category with its parent and full subtree."""
    result = await engine.get_category(category_id)
    if not result.success:
        raise_for_failure(result)
    return node_to_response(result.value)


@router.get(
    "/{category_id}/subcategories",
    response_model=list[CategoryResponse],
    responses=ERROR_RESPONSES,
)
async def get_subcategories(
    category_id: str,
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[CategoryResponse]:
    """Direct children of a category. 404 when there are none."""
    result = await engine.get_subcategories(category_id)
    if not result.success:
        raise_for_failure(result)
    return [node_to_response(node) for node in result.value]


@router.get("/{category_id}/products", response_model=list[ProductResponse])
async def list_category_products(
    category_id: str,
    request: Request,
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> list[ProductResponse]:
    """Products referencing a category, filtered by the caller's visibility."""
    result = await engine.list_products_by_category(category_id, is_admin=caller_is_admin(request))
    if not result.success:
        raise_for_failure(result)
    return [product_to_response(p) for p in result.value]


# ============================================================================
# Writes
# ============================================================================


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_category(
    _user: Annotated[User, Depends(require_user)],
    payload: Annotated[RequestPayload, Depends(read_payload)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> CategoryResponse:
    """Create a category.

    Only root categories may carry an image, supplied either as
    ``image_url`` or as an uploaded ``image`` file.
    """
    images = await payload.images("image")
    result = await engine.create_category(
        category_draft_from_payload(payload.fields),
        image=images[0] if images else None,
    )
    if not result.success:
        raise_for_failure(result)
    return node_to_response(result.value)


@router.put("/{category_id}", response_model=CategoryResponse, responses=ERROR_RESPONSES)
async def update_category(
    category_id: str,
    _user: Annotated[User, Depends(require_user)],
    payload: Annotated[RequestPayload, Depends(read_payload)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
) -> CategoryResponse:
    """Update a category. Omitted fields are left unchanged."""
    images = await payload.images("image")
    result = await engine.update_category(
        category_id,
        category_patch_from_payload(payload.fields),
        image=images[0] if images else None,
    )
    if not result.success:
        raise_for_failure(result)
    return node_to_response(result.value)


@router.delete("/{category_id}", response_model=CategoryDeleteResponse, responses=ERROR_RESPONSES)
async def delete_category(
    category_id: str,
    _user: Annotated[User, Depends(require_user)],
    engine: Annotated[CatalogEngine, Depends(get_engine)],
    cascade: Annotated[bool, Query(description="Delete all descendants too")] = False,
    detach_products: Annotated[
        bool, Query(description="Remove deleted category ids from products")
    ] = False,
) -> CategoryDeleteResponse:
    """Delete a category.

    Without ``cascade`` a category with children is rejected with
    HAS_CHILDREN. Products keep their references to deleted categories
    unless ``detach_products`` is set.
    """
    result = await engine.delete_category(
        category_id,
        cascade=cascade,
        detach_products=detach_products,
    )
    if not result.success:
        raise_for_failure(result)

    deletion = result.value
    return CategoryDeleteResponse(
        message="Category deleted successfully",
        category_id=deletion.category_id,
        deleted_ids=deletion.deleted_ids,
        detached_product_count=deletion.detached_product_count,
        detach_failed=deletion.detach_failed,
    )
