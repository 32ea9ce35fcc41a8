"""Tests for the variant combination service."""

import pytest

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.product_service import ProductCatalogService
from catalog_service.application.variant_service import (
    DEFAULT_MAX_GENERATED_VARIANTS,
    VariantAxis,
    VariantCombinationService,
    iter_combinations,
)
from catalog_service.domain import AttributeId, OptionId, ProductId, VariantStatus
from catalog_service.domain.exceptions import (
    DuplicateVariantCombinationError,
    InvalidVariantAxisError,
    NotFoundError,
)


def make_axis(option_count: int) -> VariantAxis:
    """Build an axis with fresh ids."""
    return VariantAxis(
        attribute_id=AttributeId.generate(),
        option_ids=[OptionId.generate() for _ in range(option_count)],
    )


# ============================================================================
# Enumeration
# ============================================================================


class TestIterCombinations:
    """Tests for the combination counter."""

    def test_last_axis_varies_fastest(self) -> None:
        """Combinations follow a depth-first walk over the axes."""
        first, second = make_axis(2), make_axis(3)
        combos = [
            tuple(pair.option_id for pair in combo)
            for combo in iter_combinations([first, second])
        ]
        a1, a2 = first.option_ids
        b1, b2, b3 = second.option_ids
        assert combos == [(a1, b1), (a1, b2), (a1, b3), (a2, b1), (a2, b2), (a2, b3)]

    def test_pairs_in_axis_order(self) -> None:
        """Each combination lists one pair per axis in input order."""
        axes = [make_axis(1), make_axis(1), make_axis(1)]
        (combo,) = list(iter_combinations(axes))
        assert [pair.attribute_id for pair in combo] == [axis.attribute_id for axis in axes]

    def test_no_axes(self) -> None:
        """No axes yield nothing."""
        assert list(iter_combinations([])) == []


# ============================================================================
# Matrix Generation
# ============================================================================


class TestGenerateMatrix:
    """Tests for generate_matrix without repositories."""

    def test_cartesian_product(self) -> None:
        """Axes of 2 and 3 options give 6 distinct variants."""
        service = VariantCombinationService(None, None)
        variants = service.generate_matrix(
            ProductId.generate(), [make_axis(2), make_axis(3)], base_price_minor=500, initial_stock_qty=3
        )
        assert len(variants) == 6
        assert len({v.combination_key for v in variants}) == 6
        assert all(v.price_minor == 500 and v.stock_qty == 3 for v in variants)
        assert all(v.status == VariantStatus.ACTIVE for v in variants)

    def test_same_attribute_twice(self) -> None:
        """An attribute may appear in only one axis."""
        service = VariantCombinationService(None, None)
        axis = make_axis(2)
        repeated = VariantAxis(attribute_id=axis.attribute_id, option_ids=[OptionId.generate()])
        with pytest.raises(InvalidVariantAxisError):
            service.generate_matrix(ProductId.generate(), [axis, repeated])

    def test_matrix_too_large(self) -> None:
        """The running product is checked against the ceiling."""
        service = VariantCombinationService(None, None, max_variants=4)
        with pytest.raises(InvalidVariantAxisError) as exc_info:
            service.generate_matrix(ProductId.generate(), [make_axis(3), make_axis(2)])
        assert "Matrix too large" in exc_info.value.message
        assert exc_info.value.details == {"total": 6, "max_variants": 4}

    def test_at_ceiling(self) -> None:
        """Exactly the ceiling is allowed."""
        service = VariantCombinationService(None, None, max_variants=6)
        assert len(service.generate_matrix(ProductId.generate(), [make_axis(3), make_axis(2)])) == 6

    def test_no_axes(self) -> None:
        """At least one axis is required."""
        service = VariantCombinationService(None, None)
        with pytest.raises(InvalidVariantAxisError):
            service.generate_matrix(ProductId.generate(), [])

    def test_axis_without_options(self) -> None:
        """Every axis needs options."""
        service = VariantCombinationService(None, None)
        with pytest.raises(InvalidVariantAxisError):
            service.generate_matrix(ProductId.generate(), [make_axis(0)])

    def test_missing_option_id(self) -> None:
        """None option ids are rejected."""
        service = VariantCombinationService(None, None)
        axis = VariantAxis(attribute_id=AttributeId.generate(), option_ids=[None])  # type: ignore[list-item]
        with pytest.raises(InvalidVariantAxisError):
            service.generate_matrix(ProductId.generate(), [axis])

    def test_missing_product_id(self) -> None:
        """A product id is required."""
        service = VariantCombinationService(None, None)
        with pytest.raises(InvalidVariantAxisError):
            service.generate_matrix(None, [make_axis(1)])  # type: ignore[arg-type]

    def test_set_max_variants_ignores_non_positive(self) -> None:
        """Zero or negative limits leave the ceiling unchanged."""
        service = VariantCombinationService(None, None)
        service.set_max_variants(0)
        service.set_max_variants(-3)
        assert service.max_variants == DEFAULT_MAX_GENERATED_VARIANTS
        service.set_max_variants(10)
        assert service.max_variants == 10


# ============================================================================
# Generate And Persist
# ============================================================================


class TestGenerateAndPersist:
    """Tests for generate_and_persist against the in-memory store."""

    @pytest.mark.asyncio
    async def test_single_size(
        self,
        variant_service: VariantCombinationService,
        product_service: ProductCatalogService,
        shoe_catalog,
    ) -> None:
        """Generating shoes in size 42 stores one variant."""
        product_id = shoe_catalog.product.id
        axes = [VariantAxis(shoe_catalog.size.id, [shoe_catalog.sizes[0].id])]

        variants = await variant_service.generate_and_persist(
            product_id, axes, base_price_minor=9999, initial_stock_qty=5
        )
        assert len(variants) == 1
        assert variants[0].combination_key == f"{shoe_catalog.size.id}:{shoe_catalog.sizes[0].id}"

        stored = await product_service.list_product_variants(product_id)
        assert [v.id for v in stored] == [variants[0].id]
        assert stored[0].stock_qty == 5

    @pytest.mark.asyncio
    async def test_repeat_fails_without_writing(
        self,
        variant_service: VariantCombinationService,
        product_service: ProductCatalogService,
        shoe_catalog,
    ) -> None:
        """Repeating a stored combination fails and stores nothing new."""
        product_id = shoe_catalog.product.id
        size_42, size_43 = shoe_catalog.sizes[0].id, shoe_catalog.sizes[1].id
        await variant_service.generate_and_persist(
            product_id, [VariantAxis(shoe_catalog.size.id, [size_42])]
        )

        with pytest.raises(DuplicateVariantCombinationError):
            await variant_service.generate_and_persist(
                product_id, [VariantAxis(shoe_catalog.size.id, [size_42])]
            )
        with pytest.raises(DuplicateVariantCombinationError):
            await variant_service.generate_and_persist(
                product_id, [VariantAxis(shoe_catalog.size.id, [size_43, size_42])]
            )

        assert len(await product_service.list_product_variants(product_id)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_option_within_axis(
        self,
        variant_service: VariantCombinationService,
        product_service: ProductCatalogService,
        shoe_catalog,
    ) -> None:
        """An option listed twice in one axis collides within the batch."""
        size_42 = shoe_catalog.sizes[0].id
        with pytest.raises(DuplicateVariantCombinationError):
            await variant_service.generate_and_persist(
                shoe_catalog.product.id, [VariantAxis(shoe_catalog.size.id, [size_42, size_42])]
            )
        assert await product_service.list_product_variants(shoe_catalog.product.id) == []

    @pytest.mark.asyncio
    async def test_two_axes(
        self,
        variant_service: VariantCombinationService,
        product_service: ProductCatalogService,
        shoe_catalog,
    ) -> None:
        """Size and color combine into every pair."""
        axes = [
            VariantAxis(shoe_catalog.size.id, [o.id for o in shoe_catalog.sizes]),
            VariantAxis(shoe_catalog.color.id, [o.id for o in shoe_catalog.colors]),
        ]
        variants = await variant_service.generate_and_persist(shoe_catalog.product.id, axes)
        assert len(variants) == 6

        stored = await product_service.list_product_variants(shoe_catalog.product.id)
        keys = [v.combination_key for v in stored]
        assert keys == sorted(keys)
        assert set(keys) == {v.combination_key for v in variants}

    @pytest.mark.asyncio
    async def test_non_axis_attribute(self, variant_service: VariantCombinationService, shoe_catalog) -> None:
        """Attributes that are not variant axes are rejected."""
        with pytest.raises(InvalidVariantAxisError):
            await variant_service.generate_and_persist(
                shoe_catalog.product.id,
                [VariantAxis(shoe_catalog.material.id, [OptionId.generate()])],
            )

    @pytest.mark.asyncio
    async def test_attribute_outside_primary_category(
        self,
        variant_service: VariantCombinationService,
        attribute_service: AttributeSchemaService,
        shoe_catalog,
    ) -> None:
        """Axes must come from the product's primary category."""
        fit = await attribute_service.create_category_attribute(
            category_id=shoe_catalog.apparel.id,
            name="Fit",
            code="fit",
            type="select",
            is_variant_axis=True,
        )
        slim = await attribute_service.add_attribute_option(fit.id, value="slim", label="Slim")
        with pytest.raises(InvalidVariantAxisError):
            await variant_service.generate_and_persist(
                shoe_catalog.product.id, [VariantAxis(fit.id, [slim.id])]
            )

    @pytest.mark.asyncio
    async def test_option_of_other_attribute(
        self, variant_service: VariantCombinationService, shoe_catalog
    ) -> None:
        """Options must belong to the axis attribute."""
        with pytest.raises(InvalidVariantAxisError):
            await variant_service.generate_and_persist(
                shoe_catalog.product.id,
                [VariantAxis(shoe_catalog.size.id, [shoe_catalog.colors[0].id])],
            )

    @pytest.mark.asyncio
    async def test_unknown_product(self, variant_service: VariantCombinationService) -> None:
        """Unknown products are reported as not found."""
        with pytest.raises(NotFoundError):
            await variant_service.generate_and_persist(ProductId.generate(), [make_axis(1)])

    @pytest.mark.asyncio
    async def test_ceiling_applies(
        self,
        product_repo,
        attribute_repo,
        product_service: ProductCatalogService,
        shoe_catalog,
    ) -> None:
        """A persisted batch above the ceiling is rejected before writing."""
        service = VariantCombinationService(product_repo, attribute_repo, max_variants=4)
        axes = [
            VariantAxis(shoe_catalog.size.id, [o.id for o in shoe_catalog.sizes]),
            VariantAxis(shoe_catalog.color.id, [o.id for o in shoe_catalog.colors]),
        ]
        with pytest.raises(InvalidVariantAxisError):
            await service.generate_and_persist(shoe_catalog.product.id, axes)
        assert await product_service.list_product_variants(shoe_catalog.product.id) == []
