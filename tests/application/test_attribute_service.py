"""Tests for the attribute schema service."""

import pytest
import pytest_asyncio

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.domain import AttributeId, AttributeType, Category, CategoryId
from catalog_service.domain.exceptions import InvalidAttributeError, NotFoundError


@pytest_asyncio.fixture
async def shoes(category_service: CategoryHierarchyService) -> Category:
    """Create a shoes category."""
    return await category_service.create_category(name="Shoes", slug="shoes")


class TestCreateCategoryAttribute:
    """Tests for create_category_attribute."""

    @pytest.mark.asyncio
    async def test_create_variant_axis(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """A select attribute can be a variant axis."""
        size = await attribute_service.create_category_attribute(
            category_id=shoes.id,
            name="Size",
            code="/Size/",
            type="SELECT",
            is_variant_axis=True,
        )
        assert size.code == "size"
        assert size.type == AttributeType.SELECT
        assert size.is_variant_axis

    @pytest.mark.asyncio
    async def test_missing_category(self, attribute_service: AttributeSchemaService) -> None:
        """An unknown category is reported as not found."""
        with pytest.raises(NotFoundError):
            await attribute_service.create_category_attribute(
                category_id=CategoryId.generate(), name="Size", code="size", type="select"
            )

    @pytest.mark.asyncio
    async def test_empty_code_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """A code that normalizes to nothing is rejected."""
        with pytest.raises(InvalidAttributeError):
            await attribute_service.create_category_attribute(
                category_id=shoes.id, name="Size", code=" / ", type="select"
            )

    @pytest.mark.asyncio
    async def test_duplicate_code_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Codes are unique per category, case-insensitively."""
        await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Size", code="size", type="select"
        )
        with pytest.raises(InvalidAttributeError):
            await attribute_service.create_category_attribute(
                category_id=shoes.id, name="Size again", code="SIZE", type="text"
            )

    @pytest.mark.asyncio
    async def test_text_variant_axis_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """A variant axis must be of select type."""
        with pytest.raises(InvalidAttributeError):
            await attribute_service.create_category_attribute(
                category_id=shoes.id,
                name="Material",
                code="material",
                type="text",
                is_variant_axis=True,
            )

    @pytest.mark.asyncio
    async def test_unknown_type_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Unsupported types are rejected."""
        with pytest.raises(InvalidAttributeError):
            await attribute_service.create_category_attribute(
                category_id=shoes.id, name="Weight", code="weight", type="decimal"
            )


class TestAttributeOptions:
    """Tests for add_attribute_option and the listings."""

    @pytest.mark.asyncio
    async def test_add_and_list_options(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Options are listed by (sort_order, value)."""
        size = await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Size", code="size", type="select"
        )
        await attribute_service.add_attribute_option(size.id, value="43", label="EU 43", sort_order=1)
        await attribute_service.add_attribute_option(size.id, value="42", label="EU 42", sort_order=1)
        await attribute_service.add_attribute_option(size.id, value="44", label="EU 44", sort_order=0)

        options = await attribute_service.list_attribute_options(size.id)
        assert [o.value for o in options] == ["44", "42", "43"]

    @pytest.mark.asyncio
    async def test_duplicate_value_case_insensitive(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Option values are unique per attribute, ignoring case."""
        color = await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Color", code="color", type="select"
        )
        await attribute_service.add_attribute_option(color.id, value="Red", label="Red")
        with pytest.raises(InvalidAttributeError):
            await attribute_service.add_attribute_option(color.id, value=" red ", label="Red")

    @pytest.mark.asyncio
    async def test_option_on_text_attribute_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Only select attributes take options."""
        material = await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Material", code="material", type="text"
        )
        with pytest.raises(InvalidAttributeError):
            await attribute_service.add_attribute_option(material.id, value="Mesh", label="Mesh")

    @pytest.mark.asyncio
    async def test_blank_value_fails(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Blank option values are rejected."""
        size = await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Size", code="size", type="select"
        )
        with pytest.raises(InvalidAttributeError):
            await attribute_service.add_attribute_option(size.id, value="  ", label="Empty")

    @pytest.mark.asyncio
    async def test_option_on_missing_attribute(self, attribute_service: AttributeSchemaService) -> None:
        """An unknown attribute is reported as not found."""
        with pytest.raises(NotFoundError):
            await attribute_service.add_attribute_option(AttributeId.generate(), value="42", label="42")

    @pytest.mark.asyncio
    async def test_list_category_attributes_sorted(
        self, attribute_service: AttributeSchemaService, shoes: Category
    ) -> None:
        """Attributes are listed by (sort_order, code)."""
        await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Width", code="width", type="select", sort_order=1
        )
        await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Color", code="color", type="select", sort_order=1
        )
        await attribute_service.create_category_attribute(
            category_id=shoes.id, name="Size", code="size", type="select", sort_order=0
        )
        attributes = await attribute_service.list_category_attributes(shoes.id)
        assert [a.code for a in attributes] == ["size", "color", "width"]

    @pytest.mark.asyncio
    async def test_list_on_missing_category(self, attribute_service: AttributeSchemaService) -> None:
        """Listing attributes of an unknown category fails."""
        with pytest.raises(NotFoundError):
            await attribute_service.list_category_attributes(CategoryId.generate())
