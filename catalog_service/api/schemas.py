"""API schemas for the catalog service.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# OpenAPI error responses shared by the catalog routers
ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL segment, unique among siblings")
    parent_id: str | None = Field(default=None, description="Parent category, omit for a root")
    sort_order: int = Field(default=0, description="Position among siblings")
    is_active: bool = Field(default=True, description="Whether the category is visible")


class CategoryResponse(BaseModel):
    """A category."""

    id: str = Field(..., description="Category identifier")
    name: str
    slug: str
    parent_id: str | None = None
    level: int = Field(..., description="Depth in the tree (0 = root)")
    path: str = Field(..., description="Materialized path, e.g. /apparel/shoes")
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryTreeNodeResponse(CategoryResponse):
    """A category with its nested children."""

    children: list["CategoryTreeNodeResponse"] = Field(default_factory=list)


class CategoryListResponse(BaseModel):
    """List of categories."""

    items: list[CategoryResponse]


class CategoryTreeResponse(BaseModel):
    """The whole category tree, roots first."""

    items: list[CategoryTreeNodeResponse]


# ============================================================================
# Attribute Schemas
# ============================================================================


class AttributeCreateRequest(BaseModel):
    """Request to define an attribute on a category."""

    name: str
    code: str = Field(..., description="Code, unique within the category")
    type: str = Field(..., description="One of select, text, number, bool")
    required: bool = False
    is_variant_axis: bool = Field(default=False, description="Spans purchasable variants (select only)")
    is_filterable: bool = False
    sort_order: int = 0


class AttributeResponse(BaseModel):
    """A category attribute definition."""

    id: str
    category_id: str
    name: str
    code: str
    type: str
    required: bool
    is_variant_axis: bool
    is_filterable: bool
    sort_order: int
    created_at: datetime


class AttributeListResponse(BaseModel):
    """List of attribute definitions."""

    items: list[AttributeResponse]


class OptionCreateRequest(BaseModel):
    """Request to add an option to a select attribute."""

    value: str = Field(..., description="Option value, unique per attribute (case-insensitive)")
    label: str = Field(..., description="Display label")
    sort_order: int = 0


class OptionResponse(BaseModel):
    """A select option."""

    id: str
    attribute_id: str
    value: str
    label: str
    sort_order: int


class OptionListResponse(BaseModel):
    """List of select options."""

    items: list[OptionResponse]


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str
    slug: str = Field(..., description="Globally unique slug")
    description: str = ""
    primary_category_id: str = Field(..., description="Category whose schema defines variant axes")
    category_ids: list[str] = Field(default_factory=list, description="Additional categories")
    base_price_minor: int = Field(default=0, description="Base price in minor currency units")


class ProductResponse(BaseModel):
    """A product."""

    id: str
    name: str
    slug: str
    description: str
    primary_category_id: str
    category_ids: list[str]
    status: str
    base_price_minor: int
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """List of products."""

    items: list[ProductResponse]


class ProductCategoriesRequest(BaseModel):
    """Request to replace a product's categories."""

    primary_category_id: str
    category_ids: list[str] = Field(default_factory=list, description="Additional categories")


class AttributeValueRequest(BaseModel):
    """One attribute value; exactly one value field must be set."""

    attribute_id: str
    option_id: str | None = None
    value_text: str | None = None
    value_number: float | None = None
    value_boolean: bool | None = None
    value_json: Any | None = None


class SetAttributesRequest(BaseModel):
    """Request to set a product's attribute values."""

    values: list[AttributeValueRequest]


class AttributeValueResponse(BaseModel):
    """A stored product attribute value."""

    id: str
    product_id: str
    attribute_id: str
    kind: str = Field(..., description="option, text, number, bool or json")
    option_id: str | None = None
    value_text: str | None = None
    value_number: float | None = None
    value_boolean: bool | None = None
    value_json: Any | None = None


class AttributeValueListResponse(BaseModel):
    """List of product attribute values."""

    items: list[AttributeValueResponse]


# ============================================================================
# Variant Schemas
# ============================================================================


class VariantAxisRequest(BaseModel):
    """One variant axis: a select attribute and the options to combine."""

    attribute_id: str
    option_ids: list[str] = Field(default_factory=list)


class GenerateVariantsRequest(BaseModel):
    """Request to generate the variant matrix of a product."""

    axes: list[VariantAxisRequest]
    base_price_minor: int | None = Field(
        default=None, description="Variant price, defaults to the product base price"
    )
    initial_stock_qty: int = 0


class VariantOptionSchema(BaseModel):
    """One (attribute, option) pair of a variant."""

    attribute_id: str
    option_id: str


class VariantResponse(BaseModel):
    """A product variant."""

    id: str
    product_id: str
    sku: str | None = None
    price_minor: int
    stock_qty: int
    image_url: str | None = None
    status: str
    combination_key: str
    options: list[VariantOptionSchema]


class VariantListResponse(BaseModel):
    """List of product variants."""

    items: list[VariantResponse]
    total: int
