"""Variant combination application service.

Expands variant axes into the cartesian product of their options, gives
every combination a canonical key, and persists the batch atomically.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

import structlog

from catalog_service.application.ports import AttributeRepository, ProductRepository
from catalog_service.domain.entities import ProductVariant
from catalog_service.domain.exceptions import DomainError, InvalidVariantAxisError
from catalog_service.domain.value_objects import (
    AttributeId,
    OptionId,
    ProductId,
    VariantOptionValue,
)

logger = structlog.get_logger()

DEFAULT_MAX_GENERATED_VARIANTS = 500


@dataclass
class VariantAxis:
    """One variant dimension: a select attribute and the options to combine."""

    attribute_id: AttributeId
    option_ids: list[OptionId] = field(default_factory=list)


def iter_combinations(axes: Sequence[VariantAxis]) -> Iterator[list[VariantOptionValue]]:
    """Enumerate every combination with a mixed-radix counter.

    The last axis varies fastest, which matches a depth-first walk over the
    axes in input order. Each combination holds one pair per axis, in axis
    order.

    Args:
        axes: Axes with at least one option each.

    Yields:
        Option pairs of one combination.
    """
    if not axes:
        return
    radices = [len(axis.option_ids) for axis in axes]
    digits = [0] * len(axes)
    while True:
        yield [
            VariantOptionValue(attribute_id=axis.attribute_id, option_id=axis.option_ids[digit])
            for axis, digit in zip(axes, digits)
        ]
        position = len(digits) - 1
        while position >= 0:
            digits[position] += 1
            if digits[position] < radices[position]:
                break
            digits[position] = 0
            position -= 1
        if position < 0:
            return


class VariantCombinationService:
    """Application service that generates product variants from attribute axes.

    Example usage:
        service = VariantCombinationService(product_repo, attribute_repo)
        variants = await service.generate_and_persist(
            product_id=product.id,
            axes=[VariantAxis(size.id, [eu_42.id, eu_43.id])],
            base_price_minor=9999,
            initial_stock_qty=10,
        )
    """

    def __init__(
        self,
        products: ProductRepository | None,
        attributes: AttributeRepository | None,
        max_variants: int | None = None,
    ) -> None:
        """Initialize service.

        Args:
            products: Product repository, may be None for pure matrix generation.
            attributes: Attribute repository, may be None for pure matrix generation.
            max_variants: Ceiling on combinations per call.
        """
        self.products = products
        self.attributes = attributes
        self.max_variants = DEFAULT_MAX_GENERATED_VARIANTS
        if max_variants is not None:
            self.set_max_variants(max_variants)

    def set_max_variants(self, limit: int) -> None:
        """Change the combination ceiling; non-positive limits are ignored."""
        if limit > 0:
            self.max_variants = limit

    def generate_matrix(
        self,
        product_id: ProductId,
        axes: Sequence[VariantAxis],
        base_price_minor: int = 0,
        initial_stock_qty: int = 0,
    ) -> list[ProductVariant]:
        """Build every variant of the axes without persisting anything.

        Args:
            product_id: Product the variants belong to.
            axes: Variant axes, each attribute at most once.
            base_price_minor: Price given to every variant.
            initial_stock_qty: Stock given to every variant.

        Returns:
            One validated variant per combination.

        Raises:
            InvalidVariantAxisError: On no axes, an incomplete or repeated
                axis, or more combinations than the ceiling allows.
            DuplicateVariantCombinationError: If a combination repeats an attribute.
        """
        if product_id is None:
            raise InvalidVariantAxisError("product_id is required")
        if not axes:
            raise InvalidVariantAxisError("At least one axis is required")

        seen_axes: set[AttributeId] = set()
        total = 1
        for axis in axes:
            if axis.attribute_id is None or not axis.option_ids:
                raise InvalidVariantAxisError("Axis must have attribute_id and options")
            if any(option_id is None for option_id in axis.option_ids):
                raise InvalidVariantAxisError(
                    "option_id is required",
                    details={"attribute_id": str(axis.attribute_id)},
                )
            if axis.attribute_id in seen_axes:
                raise InvalidVariantAxisError(
                    "Duplicate axis attribute",
                    details={"attribute_id": str(axis.attribute_id)},
                )
            seen_axes.add(axis.attribute_id)
            total *= len(axis.option_ids)
            if total > self.max_variants:
                raise InvalidVariantAxisError(
                    f"Matrix too large ({total} > {self.max_variants})",
                    details={"total": total, "max_variants": self.max_variants},
                )

        return [
            ProductVariant.create(
                product_id=product_id,
                options=options,
                price_minor=base_price_minor,
                stock_qty=initial_stock_qty,
            )
            for options in iter_combinations(axes)
        ]

    async def generate_and_persist(
        self,
        product_id: ProductId,
        axes: Sequence[VariantAxis],
        base_price_minor: int = 0,
        initial_stock_qty: int = 0,
    ) -> list[ProductVariant]:
        """Validate axes against the catalog, generate the matrix and store it.

        The batch is written in a single repository call, so either every
        variant is stored or none is.

        Raises:
            NotFoundError: If the product or an axis attribute does not exist.
            InvalidVariantAxisError: If an attribute is not a variant axis, is
                outside the product's primary category, or an option belongs
                to another attribute.
            DuplicateVariantCombinationError: If a combination already exists.
        """
        await self._validate_business_rules(product_id, axes)
        variants = self.generate_matrix(
            product_id=product_id,
            axes=axes,
            base_price_minor=base_price_minor,
            initial_stock_qty=initial_stock_qty,
        )
        if self.products is None:
            return variants

        try:
            await self.products.create_variants(variants)
        except DomainError as e:
            logger.warning(
                "Variant batch rejected",
                product_id=str(product_id),
                variant_count=len(variants),
                error_code=e.code,
                error=e.message,
            )
            raise

        logger.info(
            "Variants generated",
            product_id=str(product_id),
            axis_count=len(axes),
            variant_count=len(variants),
        )
        return variants

    async def _validate_business_rules(
        self,
        product_id: ProductId,
        axes: Sequence[VariantAxis],
    ) -> None:
        """Check the product and axes against stored catalog data."""
        if self.products is None or self.attributes is None:
            return

        product = await self.products.get_by_id(product_id)
        for axis in axes:
            attribute = await self.attributes.get_by_id(axis.attribute_id)
            if not attribute.is_variant_axis:
                raise InvalidVariantAxisError(
                    f"Attribute {attribute.code} is not a variant axis",
                    details={"attribute_id": str(attribute.id)},
                )
            if attribute.category_id != product.primary_category_id:
                raise InvalidVariantAxisError(
                    f"Attribute {attribute.code} does not belong to product primary category",
                    details={
                        "attribute_id": str(attribute.id),
                        "primary_category_id": str(product.primary_category_id),
                    },
                )
            for option_id in axis.option_ids:
                belongs = await self.attributes.option_belongs_to_attribute(
                    option_id, axis.attribute_id
                )
                if not belongs:
                    raise InvalidVariantAxisError(
                        "Option does not belong to attribute",
                        details={
                            "attribute_id": str(axis.attribute_id),
                            "option_id": str(option_id),
                        },
                    )
