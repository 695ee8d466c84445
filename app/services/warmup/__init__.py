"""Cache warmup."""

from app.services.warmup.controller import WarmupController, WarmupState

__all__ = ["WarmupController", "WarmupState"]
