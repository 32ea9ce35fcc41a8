"""Tests for the in-memory repositories."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from catalog_service.domain import (
    AttributeId,
    AttributeOption,
    Category,
    CategoryAttribute,
    CategoryId,
    OptionId,
    Product,
    ProductAttributeValue,
    ProductId,
    ProductVariant,
    TextValue,
    VariantOptionValue,
)
from catalog_service.domain.exceptions import (
    DuplicateSlugUnderParentError,
    DuplicateVariantCombinationError,
    InvalidAttributeError,
    InvalidProductError,
    InvalidVariantAxisError,
    NotFoundError,
)
from catalog_service.infrastructure.memory_repository import (
    InMemoryAttributeRepository,
    InMemoryCategoryRepository,
    InMemoryProductRepository,
    InMemoryStore,
)


async def stored_product(
    category_repo: InMemoryCategoryRepository,
    product_repo: InMemoryProductRepository,
) -> Product:
    """Store a category and a product in it."""
    category = Category.create(name="Shoes", slug="shoes")
    await category_repo.create(category)
    product = Product.create(name="Trail Runner", slug="trail-runner", primary_category_id=category.id)
    await product_repo.create(product)
    await product_repo.set_categories(product.id, product.category_ids, category.id)
    return product


def single_option_variant(product_id: ProductId, sku: str | None = None) -> ProductVariant:
    """Build a variant with one fresh option pair."""
    pair = VariantOptionValue(AttributeId.generate(), OptionId.generate())
    return ProductVariant.create(product_id, [pair], sku=sku)


class TestInMemoryCategoryRepository:
    """Tests for InMemoryCategoryRepository."""

    @pytest.mark.asyncio
    async def test_duplicate_sibling_slug(self, category_repo: InMemoryCategoryRepository) -> None:
        """The store rejects a second sibling with the same slug."""
        await category_repo.create(Category.create(name="Shoes", slug="shoes"))
        with pytest.raises(DuplicateSlugUnderParentError):
            await category_repo.create(Category.create(name="Shoes", slug="shoes"))

    @pytest.mark.asyncio
    async def test_returns_copies(self, category_repo: InMemoryCategoryRepository) -> None:
        """Mutating a returned category does not change the store."""
        category = Category.create(name="Shoes", slug="shoes")
        await category_repo.create(category)

        fetched = await category_repo.get_by_id(category.id)
        fetched.name = "Changed"
        category.name = "Changed too"

        assert (await category_repo.get_by_id(category.id)).name == "Shoes"

    @pytest.mark.asyncio
    async def test_exists_is_case_insensitive(self, category_repo: InMemoryCategoryRepository) -> None:
        """Slug lookups ignore case."""
        await category_repo.create(Category.create(name="Shoes", slug="shoes"))
        assert await category_repo.exists_by_parent_and_slug(None, "SHOES")
        assert not await category_repo.exists_by_parent_and_slug(CategoryId.generate(), "shoes")

    @pytest.mark.asyncio
    async def test_missing(self, category_repo: InMemoryCategoryRepository) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await category_repo.get_by_id(CategoryId.generate())


class TestInMemoryAttributeRepository:
    """Tests for InMemoryAttributeRepository."""

    @pytest.mark.asyncio
    async def test_attribute_needs_category(self, attribute_repo: InMemoryAttributeRepository) -> None:
        """Attributes cannot reference an unknown category."""
        attribute = CategoryAttribute.create(
            category_id=CategoryId.generate(), name="Size", code="size", type="select"
        )
        with pytest.raises(NotFoundError):
            await attribute_repo.create(attribute)

    @pytest.mark.asyncio
    async def test_duplicate_code_and_option(
        self,
        category_repo: InMemoryCategoryRepository,
        attribute_repo: InMemoryAttributeRepository,
    ) -> None:
        """Codes and option values are unique in the store."""
        category = Category.create(name="Shoes", slug="shoes")
        await category_repo.create(category)
        size = CategoryAttribute.create(category_id=category.id, name="Size", code="size", type="select")
        await attribute_repo.create(size)

        with pytest.raises(InvalidAttributeError):
            await attribute_repo.create(
                CategoryAttribute.create(category_id=category.id, name="Size", code="size", type="select")
            )

        await attribute_repo.create_option(AttributeOption.create(size.id, value="XL", label="XL"))
        with pytest.raises(InvalidAttributeError):
            await attribute_repo.create_option(AttributeOption.create(size.id, value="xl", label="XL"))

    @pytest.mark.asyncio
    async def test_option_belongs_to_attribute(
        self,
        category_repo: InMemoryCategoryRepository,
        attribute_repo: InMemoryAttributeRepository,
    ) -> None:
        """Ownership checks compare the option's attribute."""
        category = Category.create(name="Shoes", slug="shoes")
        await category_repo.create(category)
        size = CategoryAttribute.create(category_id=category.id, name="Size", code="size", type="select")
        await attribute_repo.create(size)
        option = AttributeOption.create(size.id, value="42", label="42")
        await attribute_repo.create_option(option)

        assert await attribute_repo.option_belongs_to_attribute(option.id, size.id)
        assert not await attribute_repo.option_belongs_to_attribute(option.id, AttributeId.generate())
        assert not await attribute_repo.option_belongs_to_attribute(OptionId.generate(), size.id)


class TestInMemoryProductRepository:
    """Tests for InMemoryProductRepository."""

    @pytest.mark.asyncio
    async def test_duplicate_slug(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """Product slugs are unique."""
        product = await stored_product(category_repo, product_repo)
        clone = Product.create(
            name="Clone", slug="trail-runner", primary_category_id=product.primary_category_id
        )
        with pytest.raises(InvalidProductError):
            await product_repo.create(clone)

    @pytest.mark.asyncio
    async def test_set_categories_unknown_category(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """Associations cannot reference unknown categories."""
        product = await stored_product(category_repo, product_repo)
        with pytest.raises(NotFoundError):
            await product_repo.set_categories(
                product.id,
                [product.primary_category_id, CategoryId.generate()],
                product.primary_category_id,
            )

    @pytest.mark.asyncio
    async def test_batch_is_atomic(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """A collision anywhere in the batch stores nothing."""
        product = await stored_product(category_repo, product_repo)
        first = single_option_variant(product.id)
        await product_repo.create_variants([first])

        repeat = ProductVariant.create(product.id, first.options)
        with pytest.raises(DuplicateVariantCombinationError):
            await product_repo.create_variants([single_option_variant(product.id), repeat])

        stored = await product_repo.list_variants_by_product(product.id)
        assert [v.id for v in stored] == [first.id]

    @pytest.mark.asyncio
    async def test_duplicate_sku(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """SKUs are unique per product."""
        product = await stored_product(category_repo, product_repo)
        await product_repo.create_variants([single_option_variant(product.id, sku="TR-42")])
        with pytest.raises(InvalidVariantAxisError):
            await product_repo.create_variants([single_option_variant(product.id, sku="TR-42")])

    @pytest.mark.asyncio
    async def test_variants_need_product(self, product_repo: InMemoryProductRepository) -> None:
        """Variants of unknown products are rejected."""
        with pytest.raises(NotFoundError):
            await product_repo.create_variants([single_option_variant(ProductId.generate())])

    @pytest.mark.asyncio
    async def test_clear(
        self,
        store: InMemoryStore,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """Clearing the store drops every record."""
        await stored_product(category_repo, product_repo)
        store.clear()
        assert await category_repo.list_all() == []
        assert store.products == {}

    @pytest.mark.asyncio
    async def test_replaced_value_keeps_stored_id(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """Replacing a value keeps the stored id and writes it back."""
        product = await stored_product(category_repo, product_repo)
        attribute_id = AttributeId.generate()
        first = ProductAttributeValue.create(product.id, attribute_id, TextValue("mesh"))
        await product_repo.upsert_attribute_values(product.id, [first])

        second = ProductAttributeValue.create(product.id, attribute_id, TextValue("leather"))
        await product_repo.upsert_attribute_values(product.id, [second])

        stored = await product_repo.list_attribute_values(product.id)
        assert second.id == first.id
        assert [(v.id, v.value) for v in stored] == [(first.id, TextValue("leather"))]


class TestInMemoryStoreLocking:
    """Tests for reads and writes sharing the store lock."""

    def test_read_waits_for_lock(
        self,
        store: InMemoryStore,
        category_repo: InMemoryCategoryRepository,
    ) -> None:
        """A read blocks while another thread holds the store lock."""
        results: list[list[Category]] = []
        reader = threading.Thread(
            target=lambda: results.append(asyncio.run(category_repo.list_all()))
        )

        with store.lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert results == []

        reader.join(timeout=5)
        assert results == [[]]

    def test_concurrent_reads_and_writes(
        self,
        category_repo: InMemoryCategoryRepository,
        product_repo: InMemoryProductRepository,
    ) -> None:
        """Listings stay consistent while other threads insert."""
        category = Category.create(name="Shoes", slug="shoes")
        asyncio.run(category_repo.create(category))

        def write(index: int) -> None:
            product = Product.create(
                name=f"Runner {index}", slug=f"runner-{index}", primary_category_id=category.id
            )
            asyncio.run(product_repo.create(product))
            asyncio.run(product_repo.set_categories(product.id, [category.id], category.id))

        def read(_: int) -> int:
            return len(asyncio.run(product_repo.list_by_category(category.id)))

        with ThreadPoolExecutor(max_workers=8) as pool:
            writes = [pool.submit(write, i) for i in range(200)]
            reads = [pool.submit(read, i) for i in range(200)]
            for future in writes + reads:
                future.result()

        assert read(0) == 200
