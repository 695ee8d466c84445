"""Base entity class for rows read back from DuckDB."""

from collections.abc import Sequence
from dataclasses import asdict, dataclass, fields
from typing import Any, Self


@dataclass
class BaseEntity:
    """Base class for all entities.

    Field order matches the column order of the query that loads the entity.
    """

    @classmethod
    def columns(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> Self:
        """Build an entity from a row in field order."""
        return cls(**dict(zip(cls.columns(), row, strict=True)))

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary."""
        return asdict(self)
