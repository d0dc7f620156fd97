"""
Processing module for kit and image generation workflows.

Handles the kit document call, prompt extraction, sequential image
generation/editing, image analysis, pacing and image file utilities.
"""

from .pacing import (
    PacingPolicy,
    NoPacing,
    FixedIntervalPacing,
)

from .kit_generator import (
    generate_kit,
    select_kit_model,
    build_kit_generation_config,
)

from .prompt_extractor import extract_prompts

from .image_generator import (
    generate_preview_images,
    edit_image_with_gemini,
    select_image_model,
    build_image_generation_config,
)

from .image_analyzer import analyze_image

from .image_utils import (
    load_image_as_data_url,
    data_url_to_bytes,
    save_image_bytes_as_png,
    save_asset_as_png,
    get_unique_folder_name,
)

__all__ = [
    # Pacing
    "PacingPolicy",
    "NoPacing",
    "FixedIntervalPacing",
    # Kit generation
    "generate_kit",
    "select_kit_model",
    "build_kit_generation_config",
    "extract_prompts",
    # Images
    "generate_preview_images",
    "edit_image_with_gemini",
    "select_image_model",
    "build_image_generation_config",
    "analyze_image",
    # Image utilities
    "load_image_as_data_url",
    "data_url_to_bytes",
    "save_image_bytes_as_png",
    "save_asset_as_png",
    "get_unique_folder_name",
]
