"""API router package for endpoint composition."""

from .batches import api_create_batch_router
from .health import api_create_health_router
from .positions import api_create_position_router

__all__ = ["api_create_batch_router", "api_create_health_router", "api_create_position_router"]
