"""
Core data models for the kit creator.
"""

from .models import (
    AspectRatio,
    GeneratedAsset,
    GenerationMode,
    GenerationRequest,
    ImageOptions,
    ImageSize,
    ItemOutcome,
    KitResult,
    ProductType,
    RetryPolicy,
)

__all__ = [
    "AspectRatio",
    "GeneratedAsset",
    "GenerationMode",
    "GenerationRequest",
    "ImageOptions",
    "ImageSize",
    "ItemOutcome",
    "KitResult",
    "ProductType",
    "RetryPolicy",
]
