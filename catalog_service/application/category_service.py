"""Category hierarchy application service.

Creates categories with derived level and materialized path, lists
siblings, and assembles the nested category tree.
"""

from collections import defaultdict

import structlog

from catalog_service.application.ports import CategoryRepository
from catalog_service.domain.entities import Category, CategoryTreeNode, normalize_slug
from catalog_service.domain.exceptions import (
    DuplicateSlugUnderParentError,
    InvalidCategoryError,
    InvalidCategoryHierarchyError,
)
from catalog_service.domain.value_objects import CategoryId

logger = structlog.get_logger()

ROOT_KEY = "root"


def _sibling_order(category: Category) -> tuple[int, str]:
    return (category.sort_order, category.name)


class CategoryHierarchyService:
    """Application service for the category tree.

    Example usage:
        service = CategoryHierarchyService(category_repo)
        shoes = await service.create_category(name="Shoes", slug="shoes")
        running = await service.create_category(
            name="Running", slug="running", parent_id=shoes.id
        )
    """

    def __init__(self, categories: CategoryRepository) -> None:
        """Initialize service.

        Args:
            categories: Category repository.
        """
        self.categories = categories

    async def create_category(
        self,
        name: str,
        slug: str,
        parent_id: CategoryId | None = None,
        sort_order: int = 0,
        is_active: bool = True,
    ) -> Category:
        """Create a category under an optional parent.

        Args:
            name: Display name.
            slug: Slug, normalized (trimmed, lowercased, slashes stripped).
            parent_id: Parent category, None for a root category.
            sort_order: Position among siblings.
            is_active: Visibility flag.

        Returns:
            The persisted category.

        Raises:
            InvalidCategoryError: If the slug is empty or malformed.
            DuplicateSlugUnderParentError: If a sibling already uses the slug.
            NotFoundError: If the parent does not exist.
            InvalidCategoryHierarchyError: If the parent's ancestry loops.
        """
        normalized = normalize_slug(slug)
        if not normalized:
            raise InvalidCategoryError("Category slug is required", details={"field": "slug"})

        if await self.categories.exists_by_parent_and_slug(parent_id, normalized):
            raise DuplicateSlugUnderParentError(
                normalized, str(parent_id) if parent_id else None
            )

        category_id = CategoryId.generate()
        parent: Category | None = None
        if parent_id is not None:
            parent = await self.categories.get_by_id(parent_id)
            await self._ensure_acyclic_ancestry(parent, category_id)

        category = Category.create(
            name=name,
            slug=normalized,
            parent=parent,
            sort_order=sort_order,
            is_active=is_active,
            category_id=category_id,
        )
        await self.categories.create(category)

        logger.info(
            "Category created",
            category_id=str(category.id),
            parent_id=str(parent_id) if parent_id else None,
            path=category.path,
            level=category.level,
        )
        return category

    async def get_category(self, category_id: CategoryId) -> Category:
        """Get category by ID.

        Raises:
            NotFoundError: If the category does not exist.
        """
        return await self.categories.get_by_id(category_id)

    async def list_children(self, parent_id: CategoryId | None = None) -> list[Category]:
        """List direct children of a category, or the roots when parent_id is None.

        Returns:
            Children sorted by (sort_order, name).
        """
        children = await self.categories.list_children(parent_id)
        return sorted(children, key=_sibling_order)

    async def get_category_tree(self) -> list[CategoryTreeNode]:
        """Build the nested category tree from one flat read.

        Categories are grouped by parent and each sibling group is sorted by
        (sort_order, name). Categories unreachable from a root are left out.

        Returns:
            Root nodes with their descendants attached.
        """
        categories = await self.categories.list_all()

        children_by_parent: dict[str, list[Category]] = defaultdict(list)
        for category in categories:
            parent_key = str(category.parent_id) if category.parent_id else ROOT_KEY
            children_by_parent[parent_key].append(category)

        placed = 0
        branch: set[str] = set()

        def build(parent_key: str) -> list[CategoryTreeNode]:
            nonlocal placed
            nodes = []
            for category in sorted(children_by_parent.get(parent_key, []), key=_sibling_order):
                key = str(category.id)
                if key in branch:
                    raise InvalidCategoryHierarchyError(
                        "Category tree contains a cycle",
                        details={"category_id": key},
                    )
                placed += 1
                branch.add(key)
                nodes.append(CategoryTreeNode(category=category, children=build(key)))
                branch.discard(key)
            return nodes

        tree = build(ROOT_KEY)
        if placed != len(categories):
            logger.warning(
                "Categories unreachable from any root",
                total=len(categories),
                placed=placed,
            )
        return tree

    async def _ensure_acyclic_ancestry(self, parent: Category, child_id: CategoryId) -> None:
        """Walk the parent's ancestor chain and reject loops.

        Raises:
            InvalidCategoryHierarchyError: If the chain revisits a category
                or reaches the child being attached.
        """
        seen: set[CategoryId] = {child_id}
        node: Category | None = parent
        while node is not None:
            if node.id in seen:
                raise InvalidCategoryHierarchyError(
                    "Category ancestry contains a cycle",
                    details={"category_id": str(node.id)},
                )
            seen.add(node.id)
            if node.parent_id is None:
                return
            node = await self.categories.get_by_id(node.parent_id)
