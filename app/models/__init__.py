"""Models package - DDL, entities and the dataset catalogue."""

from app.models.common import (
    CACHE_DDL,
    CACHE_META_DDL,
    MARKER_DDL,
    BaseEntity,
    CacheEntry,
    CacheInfo,
)
from app.models.vocabulary import (
    DATASETS,
    FLAT_DATASETS,
    GROUPED_DATASETS,
    Dataset,
    get_dataset,
    parameterized_key,
)

ALL_DDL = [
    # Cache
    CACHE_META_DDL,
    CACHE_DDL,
    # Warmup
    MARKER_DDL,
]

__all__ = [
    # Common
    "BaseEntity",
    "CacheEntry",
    "CacheInfo",
    "CACHE_DDL",
    "CACHE_META_DDL",
    "MARKER_DDL",
    # Vocabulary
    "DATASETS",
    "FLAT_DATASETS",
    "GROUPED_DATASETS",
    "Dataset",
    "get_dataset",
    "parameterized_key",
    # All DDL
    "ALL_DDL",
]
