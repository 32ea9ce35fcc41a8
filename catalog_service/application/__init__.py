"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and the repository ports.
"""

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.application.ports import (
    AttributeRepository,
    CategoryRepository,
    ProductRepository,
)
from catalog_service.application.product_service import (
    AttributeValueInput,
    ProductCatalogService,
)
from catalog_service.application.taxonomy_import import (
    ImportResult,
    TaxonomyEntry,
    TaxonomyImporter,
    TaxonomyParser,
)
from catalog_service.application.variant_service import (
    DEFAULT_MAX_GENERATED_VARIANTS,
    VariantAxis,
    VariantCombinationService,
)

__all__ = [
    # Ports
    "AttributeRepository",
    "CategoryRepository",
    "ProductRepository",
    # Services
    "AttributeSchemaService",
    "AttributeValueInput",
    "CategoryHierarchyService",
    "ProductCatalogService",
    "DEFAULT_MAX_GENERATED_VARIANTS",
    "VariantAxis",
    "VariantCombinationService",
    # Taxonomy
    "ImportResult",
    "TaxonomyEntry",
    "TaxonomyImporter",
    "TaxonomyParser",
]
