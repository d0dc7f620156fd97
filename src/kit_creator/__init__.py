"""
AI POD Kit Creator

Print-on-demand sales kit generator using Google Gemini models.
Turns an idea or reference image into listing copy, SEO metadata and
six design images.

Package Structure:
    core/       - Data models
    api/        - Gemini API integration, retry policy, prompts
    processing/ - Kit, prompt extraction, image generation/editing/analysis
    pipeline    - Request validation, orchestration and CLI
"""

__version__ = "1.0.0"


# Lazy imports so `import kit_creator` stays light
def __getattr__(name):
    if name in ("generate_kit", "generate_preview_images", "edit_image_with_gemini", "analyze_image"):
        from . import processing
        return getattr(processing, name)
    if name in ("run_kit_generation", "run_image_edit", "run_image_analysis"):
        from . import pipeline
        return getattr(pipeline, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "generate_kit",
    "generate_preview_images",
    "edit_image_with_gemini",
    "analyze_image",
    "run_kit_generation",
    "run_image_edit",
    "run_image_analysis",
]
