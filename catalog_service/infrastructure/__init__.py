"""Infrastructure layer module.

Contains configuration, logging setup, database access and the
repository implementations (in-memory and SQLAlchemy).
"""

from catalog_service.infrastructure.config import Settings, settings
from catalog_service.infrastructure.database import (
    Base,
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from catalog_service.infrastructure.logging_config import configure_logging
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

__all__ = [
    # Config
    "Settings",
    "settings",
    "configure_logging",
    # Database
    "Base",
    "create_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Repositories
    "InMemoryAttributeRepository",
    "InMemoryCategoryRepository",
    "InMemoryProductRepository",
    "InMemoryStore",
    "SqlAttributeRepository",
    "SqlCategoryRepository",
    "SqlProductRepository",
]
