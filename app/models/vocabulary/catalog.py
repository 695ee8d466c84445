"""Dataset catalogue - every vocabulary table the cache knows about.

Flat tables are a single fetchable resource keyed by their name. Grouped
tables have three key shapes:

    food              every row of the table
    food-categories   the category list
    food-{category}   rows of one category (e.g. ``food-Fruits``)

Keys only depend on names, so cache entries stay addressable across runs.
"""

from dataclasses import dataclass

from app.errors import UnknownDatasetError

CATEGORIES_SUFFIX = "categories"

FLAT_DATASETS = (
    "adjectives",
    "adverbs",
    "numbers",
    "prepositions",
    "verbs",
    "transportation",
    "buildings",
    "colours",
    "hobbies",
    "wardrobe",
    "culture",
)

GROUPED_DATASETS = (
    "food",
    "family",
    "home",
    "nature",
    "ict",
    "shopping",
    "education",
    "work",
    "body",
)


def parameterized_key(base: str, param: str) -> str:
    """Composite key of a parameterized dataset."""
    return f"{base}-{param}"


@dataclass(frozen=True)
class Dataset:
    """One logical vocabulary table."""

    name: str
    grouped: bool = False

    @property
    def key(self) -> str:
        return self.name

    @property
    def categories_key(self) -> str:
        if not self.grouped:
            raise UnknownDatasetError(parameterized_key(self.name, CATEGORIES_SUFFIX))
        return parameterized_key(self.name, CATEGORIES_SUFFIX)

    def category_key(self, category: str) -> str:
        if not self.grouped:
            raise UnknownDatasetError(parameterized_key(self.name, category))
        return parameterized_key(self.name, category)


DATASETS: dict[str, Dataset] = {
    **{name: Dataset(name) for name in FLAT_DATASETS},
    **{name: Dataset(name, grouped=True) for name in GROUPED_DATASETS},
}


def get_dataset(name: str) -> Dataset:
    """Look up a dataset by name."""
    try:
        return DATASETS[name]
    except KeyError:
        raise UnknownDatasetError(name) from None
