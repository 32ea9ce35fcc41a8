"""SQLAlchemy repositories.

Relational implementations of the repository ports, each working on a
caller-provided ``AsyncSession``. Repositories flush but never commit;
the session owner decides the transaction boundary. Uniqueness is checked
with explicit reads first and backed by the table constraints; when a
constraint still fires, the session is rolled back and the matching
domain error is raised.

Example usage:
    async with get_session_factory()() as session:
        products = SqlProductRepository(session)
        variants = await products.list_variants_by_product(product_id)
"""

from collections.abc import Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.domain.entities import (
    AttributeOption,
    Category,
    CategoryAttribute,
    Product,
    ProductAttributeValue,
    ProductVariant,
)
from catalog_service.domain.enums import AttributeType, ProductStatus, VariantStatus
from catalog_service.domain.exceptions import (
    DuplicateSlugUnderParentError,
    DuplicateVariantCombinationError,
    InvalidAttributeError,
    InvalidProductError,
    InvalidVariantAxisError,
    NotFoundError,
)
from catalog_service.domain.value_objects import (
    AttributeId,
    AttributeValueId,
    BooleanValue,
    CategoryId,
    JsonValue,
    NumberValue,
    OptionId,
    OptionValue,
    ProductId,
    TextValue,
    VariantId,
    VariantOptionValue,
    attribute_value_from_fields,
)
from catalog_service.infrastructure.models import (
    ROOT_PARENT_KEY,
    AttributeOptionModel,
    CategoryAttributeModel,
    CategoryModel,
    ProductAttributeValueModel,
    ProductCategoryModel,
    ProductModel,
    ProductVariantModel,
)

logger = structlog.get_logger()


def _aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parent_key(parent_id: CategoryId | None) -> str:
    return str(parent_id) if parent_id is not None else ROOT_PARENT_KEY


# ============================================================================
# Row Mappers
# ============================================================================


def _category_from_row(row: CategoryModel) -> Category:
    return Category(
        id=CategoryId.from_string(row.id),
        name=row.name,
        slug=row.slug,
        parent_id=CategoryId.from_string(row.parent_id) if row.parent_id else None,
        level=row.level,
        path=row.path,
        sort_order=row.sort_order,
        is_active=row.is_active,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _attribute_from_row(row: CategoryAttributeModel) -> CategoryAttribute:
    return CategoryAttribute(
        id=AttributeId.from_string(row.id),
        category_id=CategoryId.from_string(row.category_id),
        name=row.name,
        code=row.code,
        type=AttributeType(row.type),
        required=row.required,
        is_variant_axis=row.is_variant_axis,
        is_filterable=row.is_filterable,
        sort_order=row.sort_order,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _option_from_row(row: AttributeOptionModel) -> AttributeOption:
    return AttributeOption(
        id=OptionId.from_string(row.id),
        attribute_id=AttributeId.from_string(row.attribute_id),
        value=row.value,
        label=row.label,
        sort_order=row.sort_order,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _product_from_row(row: ProductModel, category_ids: list[CategoryId]) -> Product:
    return Product(
        id=ProductId.from_string(row.id),
        name=row.name,
        slug=row.slug,
        description=row.description,
        primary_category_id=CategoryId.from_string(row.primary_category_id),
        category_ids=category_ids,
        status=ProductStatus(row.status),
        base_price_minor=row.base_price_minor,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _value_columns(value: ProductAttributeValue) -> dict:
    """Spread a tagged value over the five value columns."""
    columns: dict = {
        "option_id": None,
        "value_text": None,
        "value_number": None,
        "value_boolean": None,
        "value_json": None,
    }
    tagged = value.value
    if isinstance(tagged, OptionValue):
        columns["option_id"] = str(tagged.option_id)
    elif isinstance(tagged, TextValue):
        columns["value_text"] = tagged.text
    elif isinstance(tagged, NumberValue):
        columns["value_number"] = tagged.number
    elif isinstance(tagged, BooleanValue):
        columns["value_boolean"] = tagged.flag
    elif isinstance(tagged, JsonValue):
        columns["value_json"] = tagged.payload
    return columns


def _attribute_value_from_row(row: ProductAttributeValueModel) -> ProductAttributeValue:
    return ProductAttributeValue(
        id=AttributeValueId.from_string(row.id),
        product_id=ProductId.from_string(row.product_id),
        attribute_id=AttributeId.from_string(row.attribute_id),
        value=attribute_value_from_fields(
            option_id=OptionId.from_string(row.option_id) if row.option_id else None,
            value_text=row.value_text,
            value_number=row.value_number,
            value_boolean=row.value_boolean,
            value_json=row.value_json,
        ),
    )


def _variant_to_row(variant: ProductVariant) -> ProductVariantModel:
    return ProductVariantModel(
        id=str(variant.id),
        product_id=str(variant.product_id),
        sku=variant.sku,
        price_minor=variant.price_minor,
        stock_qty=variant.stock_qty,
        image_url=variant.image_url,
        status=variant.status.value,
        combination_key=variant.combination_key,
        options=[option.to_dict() for option in variant.options],
        created_at=variant.created_at,
        updated_at=variant.updated_at,
    )


def _variant_from_row(row: ProductVariantModel) -> ProductVariant:
    return ProductVariant(
        id=VariantId.from_string(row.id),
        product_id=ProductId.from_string(row.product_id),
        sku=row.sku,
        price_minor=row.price_minor,
        stock_qty=row.stock_qty,
        image_url=row.image_url,
        status=VariantStatus(row.status),
        combination_key=row.combination_key,
        options=[
            VariantOptionValue(
                attribute_id=AttributeId.from_string(item["attribute_id"]),
                option_id=OptionId.from_string(item["option_id"]),
            )
            for item in row.options
        ],
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


# ============================================================================
# Categories
# ============================================================================


class SqlCategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def create(self, category: Category) -> None:
        """Insert a category row.

        Raises:
            DuplicateSlugUnderParentError: If a sibling already uses the slug.
        """
        parent_id = str(category.parent_id) if category.parent_id else None
        if await self.exists_by_parent_and_slug(category.parent_id, category.slug):
            raise DuplicateSlugUnderParentError(category.slug, parent_id)

        self.session.add(
            CategoryModel(
                id=str(category.id),
                name=category.name,
                slug=category.slug,
                parent_id=parent_id,
                parent_key=_parent_key(category.parent_id),
                level=category.level,
                path=category.path,
                sort_order=category.sort_order,
                is_active=category.is_active,
                created_at=category.created_at,
                updated_at=category.updated_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateSlugUnderParentError(category.slug, parent_id) from None

    async def get_by_id(self, category_id: CategoryId) -> Category:
        """Get category by ID."""
        row = await self.session.get(CategoryModel, str(category_id))
        if row is None:
            raise NotFoundError("category", str(category_id))
        return _category_from_row(row)

    async def exists_by_parent_and_slug(self, parent_id: CategoryId | None, slug: str) -> bool:
        """Check whether a sibling already uses the slug."""
        query = select(CategoryModel.id).where(
            CategoryModel.parent_key == _parent_key(parent_id),
            CategoryModel.slug == slug.lower(),
        )
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_children(self, parent_id: CategoryId | None) -> list[Category]:
        """List direct children of a category, or the roots for None."""
        query = select(CategoryModel).where(CategoryModel.parent_key == _parent_key(parent_id))
        result = await self.session.execute(query)
        return [_category_from_row(row) for row in result.scalars().all()]

    async def list_all(self) -> list[Category]:
        """List every category."""
        result = await self.session.execute(select(CategoryModel))
        return [_category_from_row(row) for row in result.scalars().all()]


# ============================================================================
# Attribute Schema
# ============================================================================


class SqlAttributeRepository:
    """Repository for attribute definitions and options."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def create(self, attribute: CategoryAttribute) -> None:
        """Insert an attribute row.

        Raises:
            NotFoundError: If the category does not exist.
            InvalidAttributeError: If the code is taken in the category.
        """
        if await self.session.get(CategoryModel, str(attribute.category_id)) is None:
            raise NotFoundError("category", str(attribute.category_id))
        if await self.exists_by_category_and_code(attribute.category_id, attribute.code):
            raise InvalidAttributeError(
                "Duplicate code in category",
                details={"category_id": str(attribute.category_id), "code": attribute.code},
            )

        self.session.add(
            CategoryAttributeModel(
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
                updated_at=attribute.updated_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise InvalidAttributeError(
                "Duplicate code in category",
                details={"category_id": str(attribute.category_id), "code": attribute.code},
            ) from None

    async def get_by_id(self, attribute_id: AttributeId) -> CategoryAttribute:
        """Get attribute by ID."""
        row = await self.session.get(CategoryAttributeModel, str(attribute_id))
        if row is None:
            raise NotFoundError("attribute", str(attribute_id))
        return _attribute_from_row(row)

    async def get_by_category(self, category_id: CategoryId) -> list[CategoryAttribute]:
        """List attributes defined on a category."""
        query = select(CategoryAttributeModel).where(
            CategoryAttributeModel.category_id == str(category_id)
        )
        result = await self.session.execute(query)
        return [_attribute_from_row(row) for row in result.scalars().all()]

    async def exists_by_category_and_code(self, category_id: CategoryId, code: str) -> bool:
        """Check whether the category already defines the code."""
        query = select(CategoryAttributeModel.id).where(
            CategoryAttributeModel.category_id == str(category_id),
            CategoryAttributeModel.code == code.lower(),
        )
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_option(self, option: AttributeOption) -> None:
        """Insert an option row.

        Raises:
            NotFoundError: If the attribute does not exist.
            InvalidAttributeError: If the value is taken (case-insensitive).
        """
        if await self.session.get(CategoryAttributeModel, str(option.attribute_id)) is None:
            raise NotFoundError("attribute", str(option.attribute_id))

        value_key = option.value.lower()
        duplicate = InvalidAttributeError(
            "Duplicate option value",
            details={"attribute_id": str(option.attribute_id), "value": option.value},
        )
        query = select(AttributeOptionModel.id).where(
            AttributeOptionModel.attribute_id == str(option.attribute_id),
            AttributeOptionModel.value_key == value_key,
        )
        result = await self.session.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            raise duplicate

        self.session.add(
            AttributeOptionModel(
                id=str(option.id),
                attribute_id=str(option.attribute_id),
                value=option.value,
                value_key=value_key,
                label=option.label,
                sort_order=option.sort_order,
                created_at=option.created_at,
                updated_at=option.updated_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise duplicate from None

    async def list_options_by_attribute(self, attribute_id: AttributeId) -> list[AttributeOption]:
        """List options of an attribute."""
        query = select(AttributeOptionModel).where(
            AttributeOptionModel.attribute_id == str(attribute_id)
        )
        result = await self.session.execute(query)
        return [_option_from_row(row) for row in result.scalars().all()]

    async def option_belongs_to_attribute(self, option_id: OptionId, attribute_id: AttributeId) -> bool:
        """Check that the option exists and belongs to the attribute."""
        row = await self.session.get(AttributeOptionModel, str(option_id))
        return row is not None and row.attribute_id == str(attribute_id)


# ============================================================================
# Products
# ============================================================================


class SqlProductRepository:
    """Repository for products, attribute values and variants."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def create(self, product: Product) -> None:
        """Insert a product row.

        Raises:
            InvalidProductError: If the slug is already taken.
        """
        duplicate = InvalidProductError("Duplicate product slug", details={"slug": product.slug})
        result = await self.session.execute(
            select(ProductModel.id).where(ProductModel.slug == product.slug).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise duplicate

        self.session.add(
            ProductModel(
                id=str(product.id),
                name=product.name,
                slug=product.slug,
                description=product.description,
                primary_category_id=str(product.primary_category_id),
                status=product.status.value,
                base_price_minor=product.base_price_minor,
                created_at=product.created_at,
                updated_at=product.updated_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise duplicate from None

    async def get_by_id(self, product_id: ProductId) -> Product:
        """Get product by ID, with its ordered category list."""
        row = await self.session.get(ProductModel, str(product_id))
        if row is None:
            raise NotFoundError("product", str(product_id))
        categories = await self._category_ids_for([row.id])
        return _product_from_row(row, categories.get(row.id, []))

    async def set_categories(
        self,
        product_id: ProductId,
        category_ids: Sequence[CategoryId],
        primary_category_id: CategoryId,
    ) -> None:
        """Replace a product's category associations.

        Raises:
            NotFoundError: If the product or a category does not exist.
        """
        product = await self.session.get(ProductModel, str(product_id))
        if product is None:
            raise NotFoundError("product", str(product_id))

        ordered = [primary_category_id] + [c for c in category_ids if c != primary_category_id]
        wanted = [str(c) for c in ordered]
        result = await self.session.execute(
            select(CategoryModel.id).where(CategoryModel.id.in_(wanted))
        )
        found = set(result.scalars().all())
        for category_id in wanted:
            if category_id not in found:
                raise NotFoundError("category", category_id)

        await self.session.execute(
            delete(ProductCategoryModel).where(ProductCategoryModel.product_id == str(product_id))
        )
        self.session.add_all(
            ProductCategoryModel(
                product_id=str(product_id),
                category_id=category_id,
                position=position,
                is_primary=position == 0,
            )
            for position, category_id in enumerate(wanted)
        )
        product.primary_category_id = str(primary_category_id)
        await self.session.flush()

    async def upsert_attribute_values(
        self,
        product_id: ProductId,
        values: Sequence[ProductAttributeValue],
    ) -> None:
        """Insert or replace values keyed by (product, attribute).

        An updated row keeps its ID, which is written back onto the value.
        """
        if await self.session.get(ProductModel, str(product_id)) is None:
            raise NotFoundError("product", str(product_id))

        result = await self.session.execute(
            select(ProductAttributeValueModel).where(
                ProductAttributeValueModel.product_id == str(product_id)
            )
        )
        existing = {row.attribute_id: row for row in result.scalars().all()}

        for value in values:
            columns = _value_columns(value)
            row = existing.get(str(value.attribute_id))
            if row is None:
                self.session.add(
                    ProductAttributeValueModel(
                        id=str(value.id),
                        product_id=str(product_id),
                        attribute_id=str(value.attribute_id),
                        **columns,
                    )
                )
            else:
                for column, column_value in columns.items():
                    setattr(row, column, column_value)
                value.id = AttributeValueId.from_string(row.id)
        await self.session.flush()

    async def list_attribute_values(self, product_id: ProductId) -> list[ProductAttributeValue]:
        """List a product's attribute values."""
        result = await self.session.execute(
            select(ProductAttributeValueModel).where(
                ProductAttributeValueModel.product_id == str(product_id)
            )
        )
        return [_attribute_value_from_row(row) for row in result.scalars().all()]

    async def list_by_category(self, category_id: CategoryId) -> list[Product]:
        """List products associated with a category."""
        query = (
            select(ProductModel)
            .join(ProductCategoryModel, ProductCategoryModel.product_id == ProductModel.id)
            .where(ProductCategoryModel.category_id == str(category_id))
        )
        result = await self.session.execute(query)
        rows = list(result.scalars().all())
        categories = await self._category_ids_for([row.id for row in rows])
        return [_product_from_row(row, categories.get(row.id, [])) for row in rows]

    async def create_variants(self, variants: Sequence[ProductVariant]) -> None:
        """Insert a batch of variants in one flush.

        Raises:
            NotFoundError: If a variant's product does not exist.
            DuplicateVariantCombinationError: If a combination key collides
                with a stored variant or repeats within the batch.
            InvalidVariantAxisError: If a SKU collides.
        """
        if not variants:
            return

        keys: dict[str, set[str]] = {}
        skus: dict[str, set[str]] = {}
        for variant in variants:
            product_id = str(variant.product_id)
            if product_id not in keys:
                if await self.session.get(ProductModel, product_id) is None:
                    raise NotFoundError("product", product_id)
                result = await self.session.execute(
                    select(ProductVariantModel.combination_key, ProductVariantModel.sku).where(
                        ProductVariantModel.product_id == product_id
                    )
                )
                rows = result.all()
                keys[product_id] = {row.combination_key for row in rows}
                skus[product_id] = {row.sku for row in rows if row.sku}

            if variant.combination_key in keys[product_id]:
                raise DuplicateVariantCombinationError(
                    "Variant combination already exists",
                    details={"product_id": product_id, "combination_key": variant.combination_key},
                )
            keys[product_id].add(variant.combination_key)

            if variant.sku:
                if variant.sku in skus[product_id]:
                    raise InvalidVariantAxisError(
                        "Duplicate SKU for product",
                        details={"product_id": product_id, "sku": variant.sku},
                    )
                skus[product_id].add(variant.sku)

        self.session.add_all([_variant_to_row(variant) for variant in variants])
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Variant batch hit a unique constraint", error=str(e.orig))
            if "sku" in str(e.orig).lower():
                raise InvalidVariantAxisError("Duplicate SKU for product") from None
            raise DuplicateVariantCombinationError("Variant combination already exists") from None

    async def list_variants_by_product(self, product_id: ProductId) -> list[ProductVariant]:
        """List a product's variants."""
        result = await self.session.execute(
            select(ProductVariantModel).where(ProductVariantModel.product_id == str(product_id))
        )
        return [_variant_from_row(row) for row in result.scalars().all()]

    async def _category_ids_for(self, product_ids: list[str]) -> dict[str, list[CategoryId]]:
        """Load ordered category ids for several products."""
        if not product_ids:
            return {}
        result = await self.session.execute(
            select(ProductCategoryModel)
            .where(ProductCategoryModel.product_id.in_(product_ids))
            .order_by(ProductCategoryModel.product_id, ProductCategoryModel.position)
        )
        grouped: dict[str, list[CategoryId]] = {}
        for row in result.scalars().all():
            grouped.setdefault(row.product_id, []).append(CategoryId.from_string(row.category_id))
        return grouped
