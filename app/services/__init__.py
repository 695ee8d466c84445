"""Services package - service class exports."""

from app.services.cache import VocabularyCacheService
from app.services.host import EventBus, HostEnvironment
from app.services.warmup import WarmupController, WarmupState

__all__ = [
    "EventBus",
    "HostEnvironment",
    "VocabularyCacheService",
    "WarmupController",
    "WarmupState",
]
