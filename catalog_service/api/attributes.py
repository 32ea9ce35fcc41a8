"""Attribute schema API endpoints.

Provides endpoints for category attribute definitions and the options
of select attributes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_service.api.deps import CatalogServices, get_catalog, parse_id
from catalog_service.api.schemas import (
    ERROR_RESPONSES,
    AttributeCreateRequest,
    AttributeListResponse,
    AttributeResponse,
    OptionCreateRequest,
    OptionListResponse,
    OptionResponse,
)
from catalog_service.domain.entities import AttributeOption, CategoryAttribute
from catalog_service.domain.value_objects import AttributeId, CategoryId

router = APIRouter(tags=["Attributes"])


# ============================================================================
# Converters
# ============================================================================


def attribute_to_response(attribute: CategoryAttribute) -> AttributeResponse:
    """Convert CategoryAttribute entity to response schema."""
    return AttributeResponse(
        id=str(attribute.id),
        category_id=str(attribute.category_id),
        name=attribute.name,
        code=attribute.code,
        type=attribute.type.value,
        required=attribute.required,
        is_variant_axis=attribute.is_variant_axis,
        is_filterable=attribute.is_filterable,
        sort_order=attribute.sort_order,
        created_at=attribute.created_at,
    )


def option_to_response(option: AttributeOption) -> OptionResponse:
    """Convert AttributeOption entity to response schema."""
    return OptionResponse(
        id=str(option.id),
        attribute_id=str(option.attribute_id),
        value=option.value,
        label=option.label,
        sort_order=option.sort_order,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/categories/{category_id}/attributes",
    response_model=AttributeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Define category attribute",
)
async def create_category_attribute(
    category_id: str,
    body: AttributeCreateRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> AttributeResponse:
    """Define an attribute on a category's schema."""
    attribute = await catalog.attributes.create_category_attribute(
        category_id=parse_id(CategoryId, category_id, "category"),
        name=body.name,
        code=body.code,
        type=body.type,
        required=body.required,
        is_variant_axis=body.is_variant_axis,
        is_filterable=body.is_filterable,
        sort_order=body.sort_order,
    )
    return attribute_to_response(attribute)


@router.get(
    "/categories/{category_id}/attributes",
    response_model=AttributeListResponse,
    responses=ERROR_RESPONSES,
    summary="List category attributes",
)
async def list_category_attributes(
    category_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> AttributeListResponse:
    """List a category's attributes sorted by (sort_order, code)."""
    attributes = await catalog.attributes.list_category_attributes(
        parse_id(CategoryId, category_id, "category")
    )
    return AttributeListResponse(items=[attribute_to_response(a) for a in attributes])


@router.get(
    "/attributes/{attribute_id}",
    response_model=AttributeResponse,
    responses=ERROR_RESPONSES,
    summary="Get attribute",
)
async def get_attribute(
    attribute_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> AttributeResponse:
    """Get an attribute definition by ID."""
    attribute = await catalog.attributes.get_attribute(
        parse_id(AttributeId, attribute_id, "attribute")
    )
    return attribute_to_response(attribute)


@router.post(
    "/attributes/{attribute_id}/options",
    response_model=OptionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Add attribute option",
)
async def add_attribute_option(
    attribute_id: str,
    body: OptionCreateRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> OptionResponse:
    """Add an option to a select attribute."""
    option = await catalog.attributes.add_attribute_option(
        attribute_id=parse_id(AttributeId, attribute_id, "attribute"),
        value=body.value,
        label=body.label,
        sort_order=body.sort_order,
    )
    return option_to_response(option)


@router.get(
    "/attributes/{attribute_id}/options",
    response_model=OptionListResponse,
    responses=ERROR_RESPONSES,
    summary="List attribute options",
)
async def list_attribute_options(
    attribute_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> OptionListResponse:
    """List an attribute's options sorted by (sort_order, value)."""
    options = await catalog.attributes.list_attribute_options(
        parse_id(AttributeId, attribute_id, "attribute")
    )
    return OptionListResponse(items=[option_to_response(o) for o in options])
