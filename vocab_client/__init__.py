"""Vocabulary API client package."""

from vocab_client.base import BaseClient
from vocab_client.vocabulary import NETWORK_ERRORS, VocabularyClient

__all__ = [
    # Base
    "BaseClient",
    # Clients
    "VocabularyClient",
    "NETWORK_ERRORS",
]
