"""Attribute schema application service.

Manages per-category attribute definitions and the options of
select-type attributes.
"""

import structlog

from catalog_service.application.ports import AttributeRepository, CategoryRepository
from catalog_service.domain.entities import (
    AttributeOption,
    CategoryAttribute,
    normalize_code,
)
from catalog_service.domain.enums import AttributeType
from catalog_service.domain.exceptions import InvalidAttributeError
from catalog_service.domain.value_objects import AttributeId, CategoryId

logger = structlog.get_logger()


class AttributeSchemaService:
    """Application service for category attribute schemas."""

    def __init__(
        self,
        attributes: AttributeRepository,
        categories: CategoryRepository,
    ) -> None:
        """Initialize service.

        Args:
            attributes: Attribute repository.
            categories: Category repository used for existence checks.
        """
        self.attributes = attributes
        self.categories = categories

    async def create_category_attribute(
        self,
        category_id: CategoryId,
        name: str,
        code: str,
        type: AttributeType | str,
        required: bool = False,
        is_variant_axis: bool = False,
        is_filterable: bool = False,
        sort_order: int = 0,
    ) -> CategoryAttribute:
        """Define a new attribute on a category.

        Args:
            category_id: Owning category.
            name: Display name.
            code: Code, normalized and unique within the category.
            type: One of select, text, number, bool.
            required: Whether products must set the attribute.
            is_variant_axis: Whether the attribute spans variants (select only).
            is_filterable: Whether storefronts may filter on it.
            sort_order: Position within the schema.

        Returns:
            The persisted attribute.

        Raises:
            NotFoundError: If the category does not exist.
            InvalidAttributeError: On an empty or duplicate code, an unknown
                type, or a variant axis that is not select.
        """
        if category_id is None:
            raise InvalidAttributeError("category_id is required")
        await self.categories.get_by_id(category_id)

        normalized = normalize_code(code)
        if not normalized:
            raise InvalidAttributeError("Attribute code is required", details={"field": "code"})
        if await self.attributes.exists_by_category_and_code(category_id, normalized):
            raise InvalidAttributeError(
                "Duplicate code in category",
                details={"category_id": str(category_id), "code": normalized},
            )

        attribute_type = AttributeType.parse(type)
        if is_variant_axis and attribute_type != AttributeType.SELECT:
            raise InvalidAttributeError(
                "Variant axis must be select type",
                details={"code": normalized, "type": attribute_type.value},
            )

        attribute = CategoryAttribute.create(
            category_id=category_id,
            name=name,
            code=normalized,
            type=attribute_type,
            required=required,
            is_variant_axis=is_variant_axis,
            is_filterable=is_filterable,
            sort_order=sort_order,
        )
        await self.attributes.create(attribute)

        logger.info(
            "Category attribute created",
            attribute_id=str(attribute.id),
            category_id=str(category_id),
            code=attribute.code,
            type=attribute.type.value,
            is_variant_axis=attribute.is_variant_axis,
        )
        return attribute

    async def add_attribute_option(
        self,
        attribute_id: AttributeId,
        value: str,
        label: str,
        sort_order: int = 0,
    ) -> AttributeOption:
        """Add a selectable option to a select attribute.

        Raises:
            NotFoundError: If the attribute does not exist.
            InvalidAttributeError: If the attribute is not select, value or
                label is blank, or the value already exists (case-insensitive).
        """
        attribute = await self.attributes.get_by_id(attribute_id)
        if attribute.type != AttributeType.SELECT:
            raise InvalidAttributeError(
                "Options only allowed for select attributes",
                details={"attribute_id": str(attribute_id), "type": attribute.type.value},
            )

        option = AttributeOption.create(
            attribute_id=attribute_id,
            value=value,
            label=label,
            sort_order=sort_order,
        )

        existing = await self.attributes.list_options_by_attribute(attribute_id)
        if any(o.value.lower() == option.value.lower() for o in existing):
            raise InvalidAttributeError(
                "Duplicate option value",
                details={"attribute_id": str(attribute_id), "value": option.value},
            )

        await self.attributes.create_option(option)
        logger.info(
            "Attribute option added",
            attribute_id=str(attribute_id),
            option_id=str(option.id),
            value=option.value,
        )
        return option

    async def get_attribute(self, attribute_id: AttributeId) -> CategoryAttribute:
        """Get attribute by ID."""
        return await self.attributes.get_by_id(attribute_id)

    async def list_category_attributes(self, category_id: CategoryId) -> list[CategoryAttribute]:
        """List a category's attributes sorted by (sort_order, code)."""
        await self.categories.get_by_id(category_id)
        attributes = await self.attributes.get_by_category(category_id)
        return sorted(attributes, key=lambda a: (a.sort_order, a.code))

    async def list_attribute_options(self, attribute_id: AttributeId) -> list[AttributeOption]:
        """List an attribute's options sorted by (sort_order, value)."""
        await self.attributes.get_by_id(attribute_id)
        options = await self.attributes.list_options_by_attribute(attribute_id)
        return sorted(options, key=lambda o: (o.sort_order, o.value))
