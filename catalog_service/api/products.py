"""Product API endpoints.

Provides endpoints for products, their attribute values and the
generation of purchasable variants.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_service.api.deps import CatalogServices, get_catalog, parse_id
from catalog_service.api.schemas import (
    AttributeValueListResponse,
    AttributeValueResponse,
    ERROR_RESPONSES,
    GenerateVariantsRequest,
    ProductCategoriesRequest,
    ProductCreateRequest,
    ProductResponse,
    SetAttributesRequest,
    VariantListResponse,
    VariantOptionSchema,
    VariantResponse,
)
from catalog_service.application.product_service import AttributeValueInput
from catalog_service.application.variant_service import VariantAxis
from catalog_service.domain.entities import Product, ProductAttributeValue, ProductVariant
from catalog_service.domain.value_objects import (
    AttributeId,
    CategoryId,
    OptionId,
    ProductId,
)

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product entity to response schema."""
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        slug=product.slug,
        description=product.description,
        primary_category_id=str(product.primary_category_id),
        category_ids=[str(c) for c in product.category_ids],
        status=product.status.value,
        base_price_minor=product.base_price_minor,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def attribute_value_to_response(value: ProductAttributeValue) -> AttributeValueResponse:
    """Convert ProductAttributeValue entity to response schema."""
    tagged = value.value
    return AttributeValueResponse(
        id=str(value.id),
        product_id=str(value.product_id),
        attribute_id=str(value.attribute_id),
        kind=tagged.kind,
        option_id=str(value.option_id) if value.option_id else None,
        value_text=getattr(tagged, "text", None),
        value_number=getattr(tagged, "number", None),
        value_boolean=getattr(tagged, "flag", None),
        value_json=getattr(tagged, "payload", None),
    )


def variant_to_response(variant: ProductVariant) -> VariantResponse:
    """Convert ProductVariant entity to response schema."""
    return VariantResponse(
        id=str(variant.id),
        product_id=str(variant.product_id),
        sku=variant.sku,
        price_minor=variant.price_minor,
        stock_qty=variant.stock_qty,
        image_url=variant.image_url,
        status=variant.status.value,
        combination_key=variant.combination_key,
        options=[VariantOptionSchema(**option.to_dict()) for option in variant.options],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create product",
)
async def create_product(
    body: ProductCreateRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> ProductResponse:
    """Create a draft product in its primary and additional categories."""
    product = await catalog.products.create_product(
        name=body.name,
        slug=body.slug,
        primary_category_id=parse_id(CategoryId, body.primary_category_id, "category"),
        additional_category_ids=[parse_id(CategoryId, c, "category") for c in body.category_ids],
        description=body.description,
        base_price_minor=body.base_price_minor,
    )
    return product_to_response(product)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    summary="Get product",
)
async def get_product(
    product_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> ProductResponse:
    """Get a product by ID."""
    product = await catalog.products.get_product(parse_id(ProductId, product_id, "product"))
    return product_to_response(product)


@router.put(
    "/{product_id}/categories",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    summary="Assign product categories",
)
async def assign_product_categories(
    product_id: str,
    body: ProductCategoriesRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> ProductResponse:
    """Replace a product's primary and additional categories."""
    product = await catalog.products.assign_categories(
        parse_id(ProductId, product_id, "product"),
        primary_category_id=parse_id(CategoryId, body.primary_category_id, "category"),
        additional_category_ids=[parse_id(CategoryId, c, "category") for c in body.category_ids],
    )
    return product_to_response(product)


@router.put(
    "/{product_id}/attributes",
    response_model=AttributeValueListResponse,
    responses=ERROR_RESPONSES,
    summary="Set product attribute values",
)
async def set_product_attributes(
    product_id: str,
    body: SetAttributesRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> AttributeValueListResponse:
    """Upsert non-variant attribute values.

    Each entry must set exactly one of option_id, value_text, value_number,
    value_boolean and value_json. The whole request is validated before
    anything is stored.
    """
    inputs = [
        AttributeValueInput(
            attribute_id=parse_id(AttributeId, item.attribute_id, "attribute"),
            option_id=parse_id(OptionId, item.option_id, "option") if item.option_id else None,
            value_text=item.value_text,
            value_number=item.value_number,
            value_boolean=item.value_boolean,
            value_json=item.value_json,
        )
        for item in body.values
    ]
    values = await catalog.products.set_product_attributes(
        parse_id(ProductId, product_id, "product"), inputs
    )
    return AttributeValueListResponse(items=[attribute_value_to_response(v) for v in values])


@router.get(
    "/{product_id}/attributes",
    response_model=AttributeValueListResponse,
    responses=ERROR_RESPONSES,
    summary="List product attribute values",
)
async def list_product_attributes(
    product_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> AttributeValueListResponse:
    """List a product's attribute values sorted by attribute ID."""
    values = await catalog.products.list_product_attribute_values(
        parse_id(ProductId, product_id, "product")
    )
    return AttributeValueListResponse(items=[attribute_value_to_response(v) for v in values])


@router.post(
    "/{product_id}/variants/generate",
    response_model=VariantListResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Generate variants",
    description="Generate one variant per combination of the given axis options.",
)
async def generate_variants(
    product_id: str,
    body: GenerateVariantsRequest,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> VariantListResponse:
    """Generate and persist the variant matrix of a product.

    The price defaults to the product's base price. Either every
    combination is stored or, on any collision, none is.
    """
    pid = parse_id(ProductId, product_id, "product")
    base_price = body.base_price_minor
    if base_price is None:
        base_price = (await catalog.products.get_product(pid)).base_price_minor

    axes = [
        VariantAxis(
            attribute_id=parse_id(AttributeId, axis.attribute_id, "attribute"),
            option_ids=[parse_id(OptionId, o, "option") for o in axis.option_ids],
        )
        for axis in body.axes
    ]
    variants = await catalog.variants.generate_and_persist(
        product_id=pid,
        axes=axes,
        base_price_minor=base_price,
        initial_stock_qty=body.initial_stock_qty,
    )
    return VariantListResponse(
        items=[variant_to_response(v) for v in variants],
        total=len(variants),
    )


@router.get(
    "/{product_id}/variants",
    response_model=VariantListResponse,
    responses=ERROR_RESPONSES,
    summary="List variants",
)
async def list_variants(
    product_id: str,
    catalog: Annotated[CatalogServices, Depends(get_catalog)],
) -> VariantListResponse:
    """List a product's variants sorted by combination key."""
    variants = await catalog.products.list_product_variants(
        parse_id(ProductId, product_id, "product")
    )
    return VariantListResponse(
        items=[variant_to_response(v) for v in variants],
        total=len(variants),
    )
