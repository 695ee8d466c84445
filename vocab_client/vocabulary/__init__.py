"""Vocabulary API client."""

from vocab_client.vocabulary.client import NETWORK_ERRORS, VocabularyClient
from vocab_client.vocabulary.schemas import CategorySchema, WordSchema

__all__ = ["VocabularyClient", "NETWORK_ERRORS", "WordSchema", "CategorySchema"]
