"""Vocabulary models - the dataset catalogue."""

from app.models.vocabulary.catalog import (
    CATEGORIES_SUFFIX,
    DATASETS,
    FLAT_DATASETS,
    GROUPED_DATASETS,
    Dataset,
    get_dataset,
    parameterized_key,
)

__all__ = [
    "CATEGORIES_SUFFIX",
    "DATASETS",
    "FLAT_DATASETS",
    "GROUPED_DATASETS",
    "Dataset",
    "get_dataset",
    "parameterized_key",
]
