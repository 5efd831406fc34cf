"""
Catalog discovery strategies.
"""
from functools import lru_cache

from spannerdb.strategy.base import CatalogStrategy as CatalogStrategy
from spannerdb.strategy.spanner import SpannerStrategy as SpannerStrategy
from spannerdb.strategy.spanner import scan_schema_column as scan_schema_column


@lru_cache(maxsize=1)
def get_strategy() -> CatalogStrategy:
    """Get the cached strategy instance."""
    return SpannerStrategy()
