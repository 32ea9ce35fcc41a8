"""Google Product Taxonomy import.

Google Product Taxonomy is a hierarchical categorization system used for
product classification. This module parses it and materializes it as a
category tree.

Taxonomy format example:
    1 - Animals & Pet Supplies
    2 - Animals & Pet Supplies > Live Animals
    3 - Animals & Pet Supplies > Pet Supplies
    4 - Animals & Pet Supplies > Pet Supplies > Bird Supplies
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.domain.entities import Category
from catalog_service.domain.value_objects import CategoryId

logger = structlog.get_logger()

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Turn a taxonomy segment into a category slug.

    Example: "Food, Beverages & Tobacco" -> "food-beverages-and-tobacco".
    """
    lowered = name.strip().lower().replace("&", " and ")
    return _NON_SLUG_CHARS.sub("-", lowered).strip("-")


@dataclass
class TaxonomyEntry:
    """One line of the taxonomy file.

    Attributes:
        taxonomy_id: Numeric id from the taxonomy file.
        full_path: Full path, e.g. "Electronics > Computers > Laptops".
    """

    taxonomy_id: int
    full_path: str

    @property
    def path_parts(self) -> list[str]:
        """Category names from root to this entry."""
        return [part.strip() for part in self.full_path.split(">")]

    @property
    def name(self) -> str:
        """Leaf segment name."""
        return self.path_parts[-1]

    @property
    def level(self) -> int:
        """Depth in the taxonomy tree (1 = root)."""
        return len(self.path_parts)

    @property
    def parent_path(self) -> str | None:
        """Full path of the parent entry, None for roots."""
        if self.level == 1:
            return None
        return " > ".join(self.path_parts[:-1])


class TaxonomyParser:
    """Parser for Google Product Taxonomy files.

    The taxonomy file contains lines in format:
        ID - Category > Subcategory > Sub-subcategory

    Example usage:
        parser = TaxonomyParser()
        entries = parser.parse_file("taxonomy.txt")
    """

    # Embedded subset of Google Product Taxonomy for offline use
    # Full taxonomy: https://www.google.com/basepages/producttype/taxonomy-with-ids.en-US.txt
    EMBEDDED_TAXONOMY = '''
1 - Animals & Pet Supplies
3 - Animals & Pet Supplies > Pet Supplies
4 - Animals & Pet Supplies > Pet Supplies > Bird Supplies
5 - Animals & Pet Supplies > Pet Supplies > Cat Supplies
6 - Animals & Pet Supplies > Pet Supplies > Dog Supplies
222 - Apparel & Accessories
1604 - Apparel & Accessories > Clothing
5322 - Apparel & Accessories > Clothing > Shirts & Tops
1581 - Apparel & Accessories > Clothing > Pants
2271 - Apparel & Accessories > Clothing > Dresses
1594 - Apparel & Accessories > Clothing > Outerwear
5182 - Apparel & Accessories > Clothing > Outerwear > Coats & Jackets
187 - Apparel & Accessories > Shoes
537 - Electronics
264 - Electronics > Audio
3622 - Electronics > Audio > Headphones
543 - Electronics > Computers
328 - Electronics > Computers > Laptops
1928 - Electronics > Computers > Tablets
2082 - Electronics > Mobile Phones
436 - Furniture
443 - Furniture > Chairs
442 - Furniture > Tables
469 - Home & Garden
2334 - Home & Garden > Kitchen & Dining
783 - Sporting Goods
499844 - Sporting Goods > Exercise & Fitness
1011 - Sporting Goods > Outdoor Recreation
772 - Toys & Games
1253 - Toys & Games > Games
1266 - Toys & Games > Games > Board Games
'''.strip()

    def parse_embedded(self) -> list[TaxonomyEntry]:
        """Parse the embedded taxonomy subset."""
        return self.parse_lines(self.EMBEDDED_TAXONOMY.splitlines())

    def parse_file(self, path: str | Path) -> list[TaxonomyEntry]:
        """Parse taxonomy from file.

        Args:
            path: Path to taxonomy file.

        Returns:
            Parsed entries in file order.
        """
        with open(path, encoding="utf-8") as f:
            return self.parse_lines(f.readlines())

    def parse_lines(self, lines: Iterable[str]) -> list[TaxonomyEntry]:
        """Parse taxonomy lines, skipping blanks, comments and malformed lines.

        Args:
            lines: Lines from a taxonomy file.

        Returns:
            Parsed entries in input order.
        """
        entries: list[TaxonomyEntry] = []
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            # Parse "ID - Category > Subcategory > ..."
            if " - " not in line:
                continue
            id_part, path_part = line.split(" - ", 1)
            try:
                taxonomy_id = int(id_part.strip())
            except ValueError:
                continue

            full_path = " > ".join(part.strip() for part in path_part.split(">"))
            if not all(full_path.split(" > ")):
                continue
            entries.append(TaxonomyEntry(taxonomy_id=taxonomy_id, full_path=full_path))
        return entries


@dataclass
class ImportResult:
    """Outcome of a taxonomy import."""

    created: int = 0
    reused: int = 0
    skipped: int = 0
    categories: dict[str, CategoryId] = field(default_factory=dict)


class TaxonomyImporter:
    """Creates the category tree for parsed taxonomy entries.

    Parents are created before children. A category whose slug already
    exists under the same parent is reused, so importing twice is harmless.

    Example usage:
        importer = TaxonomyImporter(category_service)
        result = await importer.import_entries(TaxonomyParser().parse_embedded())
    """

    def __init__(self, categories: CategoryHierarchyService) -> None:
        """Initialize importer.

        Args:
            categories: Service used to look up and create categories.
        """
        self.categories = categories

    async def import_entries(self, entries: Iterable[TaxonomyEntry]) -> ImportResult:
        """Create a category per entry.

        Args:
            entries: Parsed taxonomy entries, in any order.

        Returns:
            Counts plus a mapping from full taxonomy path to category id.
        """
        result = ImportResult()
        for position, entry in sorted(
            enumerate(entries), key=lambda item: (item[1].level, item[0])
        ):
            parent_id: CategoryId | None = None
            if entry.parent_path is not None:
                parent_id = result.categories.get(entry.parent_path)
                if parent_id is None:
                    logger.warning(
                        "Taxonomy entry without parent skipped",
                        taxonomy_id=entry.taxonomy_id,
                        path=entry.full_path,
                    )
                    result.skipped += 1
                    continue

            slug = slugify(entry.name)
            existing = await self._find_child(parent_id, slug)
            if existing is not None:
                result.categories[entry.full_path] = existing.id
                result.reused += 1
                continue

            category = await self.categories.create_category(
                name=entry.name,
                slug=slug,
                parent_id=parent_id,
                sort_order=position,
            )
            result.categories[entry.full_path] = category.id
            result.created += 1

        logger.info(
            "Taxonomy imported",
            created=result.created,
            reused=result.reused,
            skipped=result.skipped,
        )
        return result

    async def _find_child(self, parent_id: CategoryId | None, slug: str) -> Category | None:
        for child in await self.categories.list_children(parent_id):
            if child.slug == slug:
                return child
        return None
