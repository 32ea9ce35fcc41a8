"""Service wiring for the HTTP layer.

Builds the catalog services on top of the configured repository backend:
a process-wide in-memory store, or a SQLAlchemy session per request.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import TypeVar

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.application.ports import (
    AttributeRepository,
    CategoryRepository,
    ProductRepository,
)
from catalog_service.application.product_service import ProductCatalogService
from catalog_service.application.variant_service import VariantCombinationService
from catalog_service.domain.exceptions import NotFoundError
from catalog_service.domain.value_objects import EntityId
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import get_session_factory
from catalog_service.infrastructure.memory_repository import (
    InMemoryAttributeRepository,
    InMemoryCategoryRepository,
    InMemoryProductRepository,
    InMemoryStore,
)
from catalog_service.infrastructure.sql_repository import (
    SqlAttributeRepository,
    SqlCategoryRepository,
    SqlProductRepository,
)

IdT = TypeVar("IdT", bound=EntityId)


@dataclass
class CatalogServices:
    """The four catalog services sharing one set of repositories."""

    categories: CategoryHierarchyService
    attributes: AttributeSchemaService
    products: ProductCatalogService
    variants: VariantCombinationService

    @classmethod
    def build(
        cls,
        categories: CategoryRepository,
        attributes: AttributeRepository,
        products: ProductRepository,
    ) -> "CatalogServices":
        """Wire services over the given repositories."""
        return cls(
            categories=CategoryHierarchyService(categories),
            attributes=AttributeSchemaService(attributes, categories),
            products=ProductCatalogService(products, categories, attributes),
            variants=VariantCombinationService(
                products,
                attributes,
                max_variants=settings.max_generated_variants,
            ),
        )


# Global store instance
_memory_store: InMemoryStore | None = None


def get_memory_store() -> InMemoryStore:
    """Get in-memory store singleton."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryStore()
    return _memory_store


def reset_memory_store() -> None:
    """Reset the in-memory store (for testing)."""
    global _memory_store
    _memory_store = None


async def get_catalog() -> AsyncGenerator[CatalogServices, None]:
    """FastAPI dependency yielding the catalog services.

    With the SQL backend the request runs in one session that is committed
    on success and rolled back on error.

    Yields:
        CatalogServices for the request.
    """
    if settings.repository_backend == "sql":
        async with get_session_factory()() as session:
            try:
                yield CatalogServices.build(
                    SqlCategoryRepository(session),
                    SqlAttributeRepository(session),
                    SqlProductRepository(session),
                )
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        return

    store = get_memory_store()
    yield CatalogServices.build(
        InMemoryCategoryRepository(store),
        InMemoryAttributeRepository(store),
        InMemoryProductRepository(store),
    )


def parse_id(id_type: type[IdT], raw: str, entity_type: str) -> IdT:
    """Parse a path or body identifier.

    Raises:
        NotFoundError: If the value is not a UUID.
    """
    try:
        return id_type.from_string(raw)
    except (ValueError, TypeError, AttributeError):
        raise NotFoundError(entity_type, str(raw)) from None
