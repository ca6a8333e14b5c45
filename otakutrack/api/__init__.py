"""
Catalog API Layer.

This package handles all communication with the remote anime catalog,
including response normalization and offline fallback data.
"""

from .client import CatalogClient
from .rate_limiter import AdaptiveRateLimiter

__all__ = ["AdaptiveRateLimiter", "CatalogClient"]
