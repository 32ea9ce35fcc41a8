"""Domain entities for the catalog.

Entities are domain objects with identity that persists across state changes.
This module contains the category tree, attribute schemas, products and
their purchasable variants, plus the normalization helpers they share.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from catalog_service.domain.base import AggregateRoot, Entity
from catalog_service.domain.enums import AttributeType, ProductStatus, VariantStatus
from catalog_service.domain.exceptions import (
    InvalidAttributeError,
    InvalidAttributeValueError,
    InvalidCategoryError,
    InvalidCategoryHierarchyError,
    InvalidProductError,
    InvalidVariantAxisError,
)
from catalog_service.domain.value_objects import (
    ATTRIBUTE_VALUE_TYPES,
    AttributeId,
    AttributeValue,
    AttributeValueId,
    CategoryId,
    OptionId,
    OptionValue,
    ProductId,
    VariantId,
    VariantOptionValue,
    build_combination_key,
)


# ============================================================================
# Normalization Helpers
# ============================================================================


def normalize_slug(raw: str) -> str:
    """Trim, lowercase and strip leading/trailing slashes."""
    return raw.strip().lower().strip("/")


def normalize_code(raw: str) -> str:
    """Normalize an attribute code the same way as a slug."""
    return normalize_slug(raw)


def build_category_path(parent_path: str, slug: str) -> str:
    """Append a slug to a parent's materialized path.

    Args:
        parent_path: Materialized path of the parent category.
        slug: Normalized slug of the child.

    Returns:
        Child path, e.g. "/apparel/shoes".
    """
    return parent_path.rstrip("/") + "/" + slug


def normalize_category_ids(
    primary_category_id: CategoryId | None,
    additional: Iterable[CategoryId | None],
) -> list[CategoryId]:
    """Order category ids primary first, dropping None and duplicates.

    Args:
        primary_category_id: Primary category of the product.
        additional: Extra categories in caller order.

    Returns:
        Deduplicated category ids with the primary first.
    """
    result: list[CategoryId] = []
    seen: set[CategoryId] = set()
    for category_id in (primary_category_id, *additional):
        if category_id is None or category_id in seen:
            continue
        seen.add(category_id)
        result.append(category_id)
    return result


def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)


# ============================================================================
# Category Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Category(AggregateRoot[CategoryId]):
    """A node of the category tree.

    Attributes:
        id: Unique category identifier.
        name: Display name.
        slug: Normalized URL segment, unique among siblings.
        parent_id: Parent category, None for root categories.
        level: Depth in the tree (0 = root).
        path: Materialized path, e.g. "/apparel/shoes".
        sort_order: Position among siblings.
        is_active: Whether the category is visible.
    """

    id: CategoryId
    name: str
    slug: str
    parent_id: CategoryId | None = None
    level: int = 0
    path: str = ""
    sort_order: int = 0
    is_active: bool = True

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        parent: "Category | None" = None,
        sort_order: int = 0,
        is_active: bool = True,
        category_id: CategoryId | None = None,
    ) -> "Category":
        """Create a validated category, deriving level and path from the parent.

        Args:
            name: Display name.
            slug: Slug, normalized before use.
            parent: Resolved parent category, None for a root.
            sort_order: Position among siblings.
            is_active: Visibility flag.
            category_id: Optional pre-generated ID.

        Returns:
            New Category instance.

        Raises:
            InvalidCategoryError: If name or slug are invalid.
            InvalidCategoryHierarchyError: If level/path are inconsistent.
        """
        slug = normalize_slug(slug)
        if parent is None:
            level, path = 0, "/" + slug
        else:
            level, path = parent.level + 1, build_category_path(parent.path, slug)

        category = cls(
            id=category_id or CategoryId.generate(),
            name=name.strip(),
            slug=slug,
            parent_id=parent.id if parent else None,
            level=level,
            path=path,
            sort_order=sort_order,
            is_active=is_active,
        )
        category.validate()
        return category

    @property
    def is_root(self) -> bool:
        """Check if this category has no parent."""
        return self.parent_id is None

    def validate(self) -> None:
        """Check category invariants.

        Raises:
            InvalidCategoryError: On a blank name or malformed slug.
            InvalidCategoryHierarchyError: On self-parenting or an inconsistent level/path.
        """
        if not self.name.strip():
            raise InvalidCategoryError("Category name is required", details={"field": "name"})
        if not self.slug:
            raise InvalidCategoryError("Category slug is required", details={"field": "slug"})
        if "/" in self.slug or _has_whitespace(self.slug):
            raise InvalidCategoryError(
                "Category slug must not contain '/' or whitespace",
                details={"slug": self.slug},
            )
        if self.level < 0:
            raise InvalidCategoryError("Category level cannot be negative", details={"level": self.level})
        if self.parent_id is not None and self.parent_id == self.id:
            raise InvalidCategoryHierarchyError(
                "Category cannot be its own parent",
                details={"category_id": str(self.id)},
            )

        if self.is_root:
            if self.level != 0 or self.path != "/" + self.slug:
                raise InvalidCategoryHierarchyError(
                    "Root category must have level 0 and path '/<slug>'",
                    details={"level": self.level, "path": self.path},
                )
        elif self.level < 1 or not self.path.endswith("/" + self.slug) or self.path == "/" + self.slug:
            raise InvalidCategoryHierarchyError(
                "Child category path must extend its parent path",
                details={"level": self.level, "path": self.path},
            )


@dataclass
class CategoryTreeNode:
    """A category with its nested children, as returned by the tree builder."""

    category: Category
    children: list["CategoryTreeNode"] = field(default_factory=list)


# ============================================================================
# Attribute Schema
# ============================================================================


@dataclass(kw_only=True, eq=False)
class CategoryAttribute(AggregateRoot[AttributeId]):
    """Attribute definition attached to a category.

    Attributes:
        id: Unique attribute identifier.
        category_id: Owning category.
        name: Display name.
        code: Normalized code, unique within the category.
        type: Kind of value the attribute holds.
        required: Whether products must set it.
        is_variant_axis: Whether it spans purchasable variants (select only).
        is_filterable: Whether storefronts may filter on it.
        sort_order: Position within the category schema.
    """

    id: AttributeId
    category_id: CategoryId
    name: str
    code: str
    type: AttributeType
    required: bool = False
    is_variant_axis: bool = False
    is_filterable: bool = False
    sort_order: int = 0

    @classmethod
    def create(
        cls,
        category_id: CategoryId,
        name: str,
        code: str,
        type: AttributeType | str,
        required: bool = False,
        is_variant_axis: bool = False,
        is_filterable: bool = False,
        sort_order: int = 0,
    ) -> "CategoryAttribute":
        """Create a validated attribute definition."""
        attribute = cls(
            id=AttributeId.generate(),
            category_id=category_id,
            name=name.strip(),
            code=normalize_code(code),
            type=AttributeType.parse(type),
            required=required,
            is_variant_axis=is_variant_axis,
            is_filterable=is_filterable,
            sort_order=sort_order,
        )
        attribute.validate()
        return attribute

    def validate(self) -> None:
        """Check attribute invariants.

        Raises:
            InvalidAttributeError: On blank name/code or a non-select variant axis.
        """
        if self.category_id is None:
            raise InvalidAttributeError("category_id is required")
        if not self.name.strip() or not self.code.strip():
            raise InvalidAttributeError("Attribute name and code are required")
        AttributeType.parse(self.type)
        if self.is_variant_axis and self.type != AttributeType.SELECT:
            raise InvalidAttributeError(
                "Variant axis must be select type",
                details={"code": self.code, "type": str(self.type.value)},
            )


@dataclass(kw_only=True, eq=False)
class AttributeOption(AggregateRoot[OptionId]):
    """A selectable value of a select-type attribute."""

    id: OptionId
    attribute_id: AttributeId
    value: str
    label: str
    sort_order: int = 0

    @classmethod
    def create(
        cls,
        attribute_id: AttributeId,
        value: str,
        label: str,
        sort_order: int = 0,
    ) -> "AttributeOption":
        """Create a validated option with trimmed value and label."""
        option = cls(
            id=OptionId.generate(),
            attribute_id=attribute_id,
            value=value.strip(),
            label=label.strip(),
            sort_order=sort_order,
        )
        option.validate()
        return option

    def validate(self) -> None:
        """Check option invariants.

        Raises:
            InvalidAttributeError: On blank value or label.
        """
        if self.attribute_id is None:
            raise InvalidAttributeError("attribute_id is required")
        if not self.value.strip() or not self.label.strip():
            raise InvalidAttributeError("Option value and label are required")


# ============================================================================
# Product Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(AggregateRoot[ProductId]):
    """A sellable product.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        slug: Globally unique slug.
        description: Free-form description.
        primary_category_id: Category whose schema defines the variant axes.
        category_ids: All categories, primary first.
        status: Lifecycle status (starts as DRAFT).
        base_price_minor: Base price in minor currency units.
    """

    id: ProductId
    name: str
    slug: str
    description: str = ""
    primary_category_id: CategoryId
    category_ids: list[CategoryId] = field(default_factory=list)
    status: ProductStatus = ProductStatus.DRAFT
    base_price_minor: int = 0

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        primary_category_id: CategoryId,
        additional_category_ids: Sequence[CategoryId | None] = (),
        description: str = "",
        base_price_minor: int = 0,
    ) -> "Product":
        """Create a validated draft product."""
        product = cls(
            id=ProductId.generate(),
            name=name.strip(),
            slug=normalize_slug(slug),
            description=description.strip(),
            primary_category_id=primary_category_id,
            category_ids=normalize_category_ids(primary_category_id, additional_category_ids),
            status=ProductStatus.DRAFT,
            base_price_minor=base_price_minor,
        )
        product.validate()
        return product

    def assign_categories(
        self,
        primary_category_id: CategoryId,
        additional_category_ids: Sequence[CategoryId | None] = (),
    ) -> list[CategoryId]:
        """Replace the category set, keeping the primary first.

        Returns:
            The normalized category ids.
        """
        self.primary_category_id = primary_category_id
        self.category_ids = normalize_category_ids(primary_category_id, additional_category_ids)
        self._touch()
        return self.category_ids

    def validate(self) -> None:
        """Check product invariants.

        Raises:
            InvalidProductError: On missing fields, negative price or unknown status.
        """
        if self.primary_category_id is None:
            raise InvalidProductError("primary_category_id is required")
        if not self.name.strip() or not self.slug.strip():
            raise InvalidProductError("Product name and slug are required")
        if self.base_price_minor < 0:
            raise InvalidProductError(
                "Base price cannot be negative",
                details={"base_price_minor": self.base_price_minor},
            )
        ProductStatus.parse(self.status)
        if self.category_ids and self.category_ids[0] != self.primary_category_id:
            raise InvalidProductError("Primary category must be listed first")


@dataclass(kw_only=True, eq=False)
class ProductAttributeValue(Entity[AttributeValueId]):
    """A product's value for one non-variant attribute."""

    id: AttributeValueId
    product_id: ProductId
    attribute_id: AttributeId
    value: AttributeValue

    @classmethod
    def create(
        cls,
        product_id: ProductId,
        attribute_id: AttributeId,
        value: AttributeValue,
    ) -> "ProductAttributeValue":
        """Create a validated attribute value."""
        attribute_value = cls(
            id=AttributeValueId.generate(),
            product_id=product_id,
            attribute_id=attribute_id,
            value=value,
        )
        attribute_value.validate()
        return attribute_value

    @property
    def option_id(self) -> OptionId | None:
        """Referenced option, if the value is an option reference."""
        if isinstance(self.value, OptionValue):
            return self.value.option_id
        return None

    def validate(self) -> None:
        """Check value invariants.

        Raises:
            InvalidAttributeValueError: On missing ids or an unknown value kind.
        """
        if self.product_id is None or self.attribute_id is None:
            raise InvalidAttributeValueError("product_id and attribute_id are required")
        if not isinstance(self.value, ATTRIBUTE_VALUE_TYPES):
            raise InvalidAttributeValueError("Exactly one value must be set")


# ============================================================================
# Product Variant
# ============================================================================


@dataclass(kw_only=True, eq=False)
class ProductVariant(AggregateRoot[VariantId]):
    """A purchasable combination of variant-axis options.

    Attributes:
        id: Unique variant identifier.
        product_id: Parent product.
        sku: Optional SKU, unique per product when set.
        price_minor: Price in minor currency units.
        stock_qty: Units in stock.
        image_url: Optional image.
        status: Availability.
        combination_key: Canonical key derived from options.
        options: One (attribute, option) pair per axis.
    """

    id: VariantId
    product_id: ProductId
    sku: str | None = None
    price_minor: int = 0
    stock_qty: int = 0
    image_url: str | None = None
    status: VariantStatus = VariantStatus.ACTIVE
    combination_key: str = ""
    options: list[VariantOptionValue] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        product_id: ProductId,
        options: Sequence[VariantOptionValue],
        price_minor: int = 0,
        stock_qty: int = 0,
        sku: str | None = None,
    ) -> "ProductVariant":
        """Create a validated active variant with its combination key."""
        variant = cls(
            id=VariantId.generate(),
            product_id=product_id,
            sku=sku.strip() if sku and sku.strip() else None,
            price_minor=price_minor,
            stock_qty=stock_qty,
            status=VariantStatus.ACTIVE,
            combination_key=build_combination_key(options),
            options=list(options),
        )
        variant.validate()
        return variant

    def validate(self) -> None:
        """Check variant invariants.

        Raises:
            InvalidVariantAxisError: On negative price/stock, no options,
                unknown status or a mismatched combination key.
            DuplicateVariantCombinationError: If two options share an attribute.
        """
        if self.id is None or self.product_id is None:
            raise InvalidVariantAxisError("Variant id and product id are required")
        if self.price_minor < 0 or self.stock_qty < 0:
            raise InvalidVariantAxisError(
                "Negative price/stock is not allowed",
                details={"price_minor": self.price_minor, "stock_qty": self.stock_qty},
            )
        VariantStatus.parse(self.status)
        if not self.options:
            raise InvalidVariantAxisError("Variant requires at least one option")
        key = build_combination_key(self.options)
        if self.combination_key and self.combination_key != key:
            raise InvalidVariantAxisError(
                "Combination key mismatch",
                details={"expected": key, "actual": self.combination_key},
            )
