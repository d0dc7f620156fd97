"""
Data models for the kit creator.

Contains the enums and dataclasses that describe one user request and
the assets produced for it.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, TypeVar

from ..config import QUOTA_COOLDOWN_SECONDS

T = TypeVar("T")


class ProductType(str, Enum):
    """Kind of print-on-demand product the kit is written for."""
    TSHIRT = "TSHIRT"
    INVITATION = "INVITATION"


class GenerationMode(str, Enum):
    """
    Model selection for the kit call.

    A single enum keeps "thinking" and "fast" mutually exclusive.
    """
    DEFAULT = "default"
    THINKING = "thinking"
    FAST = "fast"


class ImageSize(str, Enum):
    SIZE_1K = "1K"
    SIZE_2K = "2K"
    SIZE_4K = "4K"


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT_2_3 = "2:3"
    LANDSCAPE_3_2 = "3:2"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"
    ULTRAWIDE_21_9 = "21:9"


class ItemOutcome(str, Enum):
    """Result of one call in a sequential image batch."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ImageOptions:
    """Image quality settings for preview generation."""
    use_high_quality: bool = False
    size: Optional[ImageSize] = None  # Only sent on the high-quality path
    aspect_ratio: AspectRatio = AspectRatio.SQUARE


@dataclass(frozen=True)
class GenerationRequest:
    """
    One user action: an idea and/or reference image plus generation settings.

    Immutable once handed to the pipeline.
    """
    input_text: str = ""
    product_type: ProductType = ProductType.TSHIRT
    image_data_url: Optional[str] = None  # data:<mime>;base64,<data>
    mode: GenerationMode = GenerationMode.DEFAULT
    image_options: ImageOptions = field(default_factory=ImageOptions)


@dataclass(frozen=True)
class GeneratedAsset:
    """One generated image and the prompt that produced it."""
    url: str  # data:<mime>;base64,<data>
    prompt: str


@dataclass
class KitResult:
    """
    Markdown kit document plus the assets generated for it.

    Assets are appended in completion order as they stream in.
    """
    markdown: str
    assets: List[GeneratedAsset] = field(default_factory=list)

    def add_asset(self, asset: GeneratedAsset) -> None:
        self.assets.append(asset)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry settings for one call site (delays in seconds)."""
    max_attempts: int
    initial_delay: float
    quota_delay: float = QUOTA_COOLDOWN_SECONDS

    def execute(
        self,
        operation: Callable[[], T],
        on_cooldown: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        """Run operation under this policy (see api.retry.execute_with_retry)."""
        from ..api.retry import execute_with_retry

        return execute_with_retry(
            operation,
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            on_cooldown=on_cooldown,
            quota_delay=self.quota_delay,
            sleep=sleep,
        )
