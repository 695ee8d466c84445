"""Vocabulary API schemas."""

from pydantic import BaseModel, ConfigDict


class WordSchema(BaseModel):
    """One vocabulary row (word + meaning, optionally categorised)."""

    model_config = ConfigDict(extra="allow")

    word: str
    meaning: str
    category: str | None = None


class CategorySchema(BaseModel):
    """Category of a grouped vocabulary table."""

    id: int
    name: str
