"""Catalog service.

Category hierarchy, per-category attribute schemas, products and the
variant combination engine.
"""

__version__ = "0.1.0"
