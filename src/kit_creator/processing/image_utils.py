"""
Image utility functions for loading reference images and saving generated assets.
"""

import base64
import binascii
from io import BytesIO
from pathlib import Path

from PIL import Image

from ..api.gemini_client import split_data_url, to_data_url
from ..core.models import GeneratedAsset


def load_image_as_data_url(path: Path) -> str:
    """
    Load an image from disk and return it as a data URL.

    JPEG sources stay JPEG; everything else is re-encoded as PNG so the API
    always receives a format it accepts.

    Args:
        path: Path to image file.

    Returns:
        data:<mime>;base64,<data> string.
    """
    img = Image.open(path)
    buffer = BytesIO()
    if img.format == "JPEG":
        img.convert("RGB").save(buffer, format="JPEG", quality=95)
        mime_type = "image/jpeg"
    else:
        img.convert("RGBA").save(buffer, format="PNG", compress_level=0, optimize=False)
        mime_type = "image/png"
    return to_data_url(base64.b64encode(buffer.getvalue()).decode("utf-8"), mime_type)


def data_url_to_bytes(data_url: str) -> bytes:
    """
    Decode the binary payload of a data URL.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    _, data = split_data_url(data_url)
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def save_image_bytes_as_png(image_bytes: bytes, dest_stem: Path) -> Path:
    """
    Save raw image bytes as PNG to dest_stem.png.

    Args:
        image_bytes: Raw image data.
        dest_stem: Destination path without extension.

    Returns:
        Path to saved PNG file.
    """
    dest_stem = Path(dest_stem)
    dest_stem.parent.mkdir(parents=True, exist_ok=True)
    img = Image.open(BytesIO(image_bytes)).convert("RGBA")
    out_path = dest_stem.with_suffix(".png")
    img.save(out_path, format="PNG", compress_level=0, optimize=False)
    return out_path


def save_asset_as_png(asset: GeneratedAsset, dest_stem: Path) -> Path:
    """Decode a generated asset's data URL and write it as dest_stem.png."""
    return save_image_bytes_as_png(data_url_to_bytes(asset.url), dest_stem)


def get_unique_folder_name(base_path: Path, desired_name: str) -> str:
    """
    Ensure folder name is unique within base_path by appending a counter.

    Args:
        base_path: Parent directory.
        desired_name: Desired folder name.

    Returns:
        Unique folder name (may have _2, _3, etc. appended).
    """
    candidate = desired_name
    counter = 1
    while (base_path / candidate).exists():
        counter += 1
        candidate = f"{desired_name}_{counter}"
    return candidate
