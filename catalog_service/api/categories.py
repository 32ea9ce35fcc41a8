"""Category API endpoints.

Provides endpoints for creating categories and browsing the tree.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_service.api.deps import CatalogServices, get_catalog, parse_id
from catalog_service.api.products import product_to_response
from catalog_service.api.schemas import (
    ERROR_RESPONSES,
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryTreeNodeResponse,
    CategoryTreeResponse,
    ProductListResponse,
)
from catalog_service.domain.entities import Category, CategoryTreeNode
from catalog_service.domain.value_objects import CategoryId

router = APIRouter(prefix="/categories", tags=["Categories"])


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category entity to response schema."""
    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        slug=category.slug,
        parent_id=str(category.parent_id) if category.parent_id else None,
        level=category.level,
        path=category.path,
        sort_order=category.sort_order,
        is_active=category.is_active,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def tree_node_to_response(node: CategoryTreeNode) -> CategoryTreeNodeResponse:
    """Convert a tree node and its descendants to response schema."""
    return CategoryTreeNodeResponse(
        **category_to_response(node.category).model_dump(),
        children=[tree_node_to_response(child) for child in node.children],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create category",
)
async def create_category(
    body: CategoryCreateRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> CategoryResponse:
    """Create a root category, or a child when parent_id is given."""
    parent_id = parse_id(CategoryId, body.parent_id, "category") if body.parent_id else None
    category = await catalog.categories.create_category(
        name=body.name,
        slug=body.slug,
        parent_id=parent_id,
        sort_order=body.sort_order,
        is_active=body.is_active,
    )
    return category_to_response(category)


@router.get(
    "/tree",
    response_model=CategoryTreeResponse,
    summary="Get category tree",
)
async def get_category_tree(
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> CategoryTreeResponse:
    """Get the nested category tree, siblings sorted by (sort_order, name)."""
    tree = await catalog.categories.get_category_tree()
    return CategoryTreeResponse(items=[tree_node_to_response(node) for node in tree])


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses=ERROR_RESPONSES,
    summary="Get category",
)
async def get_category(
    category_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> CategoryResponse:
    """Get a category by ID."""
    category = await catalog.categories.get_category(parse_id(CategoryId, category_id, "category"))
    return category_to_response(category)


@router.get(
    "/{category_id}/children",
    response_model=CategoryListResponse,
    responses=ERROR_RESPONSES,
    summary="List child categories",
)
async def list_children(
    category_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> CategoryListResponse:
    """List direct children of a category."""
    parent_id = parse_id(CategoryId, category_id, "category")
    await catalog.categories.get_category(parent_id)
    children = await catalog.categories.list_children(parent_id)
    return CategoryListResponse(items=[category_to_response(c) for c in children])


@router.get(
    "/{category_id}/products",
    response_model=ProductListResponse,
    responses=ERROR_RESPONSES,
    summary="List products in category",
)
async def list_category_products(
    category_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> ProductListResponse:
    """List products assigned to a category, sorted by name."""
    products = await catalog.products.list_products_by_category(
        parse_id(CategoryId, category_id, "category")
    )
    return ProductListResponse(items=[product_to_response(p) for p in products])
