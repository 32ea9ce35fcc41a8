"""SQLAlchemy models for the catalog tables.

Provides ORM rows for categories, attribute schemas, products, product
attribute values and product variants. Identifiers are stored as their
string UUID form.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from catalog_service.infrastructure.database import Base

# parent_key value for root categories; NULL would defeat the unique constraint
ROOT_PARENT_KEY = "root"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Category Tree
# ============================================================================


class CategoryModel(Base):
    """Category row.

    Attributes:
        id: Category UUID.
        parent_id: Parent category UUID, NULL for roots.
        parent_key: parent_id or "root", backs the sibling slug constraint.
        level: Depth in the tree (0 = root).
        path: Materialized path, e.g. "/apparel/shoes".
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    parent_key: Mapped[str] = mapped_column(String(36), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    path: Mapped[str] = mapped_column(String(2000), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    __table_args__ = (
        UniqueConstraint("parent_key", "slug", name="uq_categories_parent_slug"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryModel(id={self.id}, path={self.path})>"


# ============================================================================
# Attribute Schema
# ============================================================================


class CategoryAttributeModel(Base):
    """Attribute definition row."""

    __tablename__ = "category_attributes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_variant_axis: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_filterable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    __table_args__ = (
        UniqueConstraint("category_id", "code", name="uq_category_attributes_code"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryAttributeModel(id={self.id}, code={self.code})>"


class AttributeOptionModel(Base):
    """Select option row.

    ``value_key`` is the lowercased value and carries the case-insensitive
    uniqueness per attribute.
    """

    __tablename__ = "attribute_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("category_attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    value_key: Mapped[str] = mapped_column(String(255), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    __table_args__ = (
        UniqueConstraint("attribute_id", "value_key", name="uq_attribute_options_value"),
    )


# ============================================================================
# Products
# ============================================================================


class ProductModel(Base):
    """Product row.

    Attributes:
        id: Product UUID.
        slug: Globally unique slug.
        primary_category_id: Category whose schema defines variant axes.
        status: draft, active or archived.
        base_price_minor: Base price in minor currency units.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    primary_category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", index=True)
    base_price_minor: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, slug={self.slug})>"


class ProductCategoryModel(Base):
    """Association between a product and one of its categories."""

    __tablename__ = "product_categories"

    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ProductAttributeValueModel(Base):
    """A product's value for one attribute; exactly one value column is set."""

    __tablename__ = "product_attribute_values"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("category_attributes.id", ondelete="CASCADE"),
        nullable=False,
    )
    option_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("attribute_options.id"),
        nullable=True,
    )
    value_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    value_number: Mapped[float | None] = mapped_column(Float, nullable=True)
    value_boolean: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    value_json: Mapped[Any | None] = mapped_column(JSON(none_as_null=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("product_id", "attribute_id", name="uq_product_attribute_values"),
    )


# ============================================================================
# Variants
# ============================================================================


class ProductVariantModel(Base):
    """Product variant row.

    Attributes:
        combination_key: Canonical key of the option assignment, unique per product.
        options: JSON list of {"attribute_id", "option_id"} in axis order.
        sku: Optional SKU, unique per product when set.
    """

    __tablename__ = "product_variants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price_minor: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stock_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    combination_key: Mapped[str] = mapped_column(String(2000), nullable=False)
    options: Mapped[list[dict[str, str]]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    __table_args__ = (
        UniqueConstraint("product_id", "combination_key", name="uq_product_variants_combination"),
        UniqueConstraint("product_id", "sku", name="uq_product_variants_sku"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductVariantModel(id={self.id}, combination_key={self.combination_key})>"
