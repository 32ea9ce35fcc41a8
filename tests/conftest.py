"""Shared fixtures for catalog tests."""

import pytest

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.application.product_service import ProductCatalogService
from catalog_service.application.variant_service import VariantCombinationService
from catalog_service.infrastructure.memory_repository import (
    InMemoryAttributeRepository,
    InMemoryCategoryRepository,
    InMemoryProductRepository,
    InMemoryStore,
)


@pytest.fixture
def store() -> InMemoryStore:
    """Create an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def category_repo(store: InMemoryStore) -> InMemoryCategoryRepository:
    """Create category repository over the store."""
    return InMemoryCategoryRepository(store)


@pytest.fixture
def attribute_repo(store: InMemoryStore) -> InMemoryAttributeRepository:
    """Create attribute repository over the store."""
    return InMemoryAttributeRepository(store)


@pytest.fixture
def product_repo(store: InMemoryStore) -> InMemoryProductRepository:
    """Create product repository over the store."""
    return InMemoryProductRepository(store)


@pytest.fixture
def category_service(category_repo: InMemoryCategoryRepository) -> CategoryHierarchyService:
    """Create category hierarchy service."""
    return CategoryHierarchyService(category_repo)


@pytest.fixture
def attribute_service(
    attribute_repo: InMemoryAttributeRepository,
    category_repo: InMemoryCategoryRepository,
) -> AttributeSchemaService:
    """Create attribute schema service."""
    return AttributeSchemaService(attribute_repo, category_repo)


@pytest.fixture
def product_service(
    product_repo: InMemoryProductRepository,
    category_repo: InMemoryCategoryRepository,
    attribute_repo: InMemoryAttributeRepository,
) -> ProductCatalogService:
    """Create product catalog service."""
    return ProductCatalogService(product_repo, category_repo, attribute_repo)


@pytest.fixture
def variant_service(
    product_repo: InMemoryProductRepository,
    attribute_repo: InMemoryAttributeRepository,
) -> VariantCombinationService:
    """Create variant combination service with the default ceiling."""
    return VariantCombinationService(product_repo, attribute_repo)
