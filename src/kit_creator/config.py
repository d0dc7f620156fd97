#!/usr/bin/env python3
"""
config.py

All global paths, model identifiers and timing constants for the POD kit creator.
"""

from pathlib import Path
from typing import List, Tuple

# ═══════════════════════════════════════════════════════════════════════════════
# APPLICATION INFO
# ═══════════════════════════════════════════════════════════════════════════════
APP_NAME = "AI POD Kit Creator"
APP_VERSION = "1.0.0"

# Paths for configuration files
CONFIG_PATH = Path.home() / ".kit_creator_config.json"
APP_HOME_DIR = Path.home() / ".kit_creator"

# Page where users can create a personal Gemini API key
API_KEY_PAGE_URL = "https://aistudio.google.com/app/apikey"

# ═══════════════════════════════════════════════════════════════════════════════
# GEMINI API
# ═══════════════════════════════════════════════════════════════════════════════
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
HTTP_TIMEOUT_SECONDS = 300

# Text models used for the kit document
KIT_MODEL_THINKING = "gemini-3-pro-preview"      # Highest capability, extended reasoning
KIT_MODEL_FAST = "gemini-flash-lite-latest"      # Lowest latency / cost
KIT_MODEL_DEFAULT = "gemini-3-flash-preview"     # Balanced

# Image analysis always uses the highest-capability text model
ANALYSIS_MODEL = "gemini-3-pro-preview"

# Image models
IMAGE_MODEL_HIGH_QUALITY = "gemini-3-pro-image-preview"
IMAGE_MODEL_STANDARD = "gemini-2.5-flash-image"
IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"

# Sampling / reasoning
KIT_TEMPERATURE = 1.0
THINKING_BUDGET = 32768

# ═══════════════════════════════════════════════════════════════════════════════
# RETRY & PACING
# ═══════════════════════════════════════════════════════════════════════════════
# (max_attempts, initial_delay_seconds) per call site
KIT_RETRY: Tuple[int, float] = (3, 5.0)
IMAGE_RETRY: Tuple[int, float] = (2, 65.0)
ANALYSIS_RETRY: Tuple[int, float] = (2, 5.0)

# Fixed wait after a quota (429 / RESOURCE_EXHAUSTED) error
QUOTA_COOLDOWN_SECONDS = 75.0

# Fixed wait between successive image calls (remote per-minute rate limit)
INTER_CALL_DELAY_SECONDS = 45.0

# ═══════════════════════════════════════════════════════════════════════════════
# KIT CONTENT
# ═══════════════════════════════════════════════════════════════════════════════
MAX_IMAGE_PROMPTS = 6
EDIT_VARIATION_COUNT = 6

# Header marker of the prompt table in the kit document
PROMPT_TABLE_HEADER = "| VARIATION | IMAGE PROMPT |"

# Aesthetic categories every kit must span (one prompt each)
STYLE_CATEGORIES: List[Tuple[str, str]] = [
    ("Vintage Retro", "70s/80s nostalgia"),
    ("Minimalist Line Art", "Modern chic"),
    ("Hand-drawn Watercolor", "Soft/Dreamy"),
    ("Bold Distressed Typography", "Urban/Street"),
    ("Cyberpunk / Neon", "Futuristic"),
    ("Boho Chic / Earthy", "Nature/Organic"),
]

# Fallback strings returned instead of empty responses
KIT_FALLBACK_TEXT = "Error generating the kit content."
ANALYSIS_FALLBACK_TEXT = "Could not analyze image."

# Default MIME type for reference images given as bare base64
DEFAULT_IMAGE_MIME = "image/jpeg"
