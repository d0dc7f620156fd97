#!/usr/bin/env python3
"""
pipeline.py

POD sales kit builder using Gemini.

This is the orchestrator the front end calls into. It validates a request
before any remote call, then runs:

  - kit document generation (one text call)
  - prompt extraction from the kit's variation table
  - sequential preview image generation, streaming each asset back

Image editing and image analysis are separate entry points. The CLI at the
bottom writes kit.md, design-N.png and a kit.yml manifest to an output folder.
"""

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from .api.exceptions import GeminiAPIError, KitValidationError, MissingEntitlementError
from .api.gemini_client import (
    GeminiClient,
    get_api_key,
    get_client,
    has_personal_api_key,
    interactive_api_key_setup,
    require_api_key,
)
from .config import APP_NAME, APP_VERSION
from .core.models import (
    AspectRatio,
    GeneratedAsset,
    GenerationMode,
    GenerationRequest,
    ImageOptions,
    ImageSize,
    KitResult,
    ProductType,
)
from .logging_utils import (
    get_log_contents,
    get_log_file_path,
    log_error,
    log_exception,
    log_info,
    log_warning,
    setup_logging,
)
from .processing import (
    PacingPolicy,
    analyze_image,
    edit_image_with_gemini,
    extract_prompts,
    generate_kit,
    generate_preview_images,
    get_unique_folder_name,
    load_image_as_data_url,
    save_asset_as_png,
)


# =============================================================================
# Validation
# =============================================================================

def validate_kit_request(request: GenerationRequest, api_key: Optional[str] = None) -> None:
    """
    Check a kit request before any remote call is made.

    Raises:
        KitValidationError: If neither text nor a reference image was given.
        MissingEntitlementError: If high-quality images were requested without
            a personal API key.
    """
    if not request.input_text.strip() and not request.image_data_url:
        raise KitValidationError("Provide a vision description or upload an image.")
    if request.image_options.use_high_quality and not (api_key or has_personal_api_key()):
        raise MissingEntitlementError("Ultra Pro models require a personal API key.")


# =============================================================================
# Entry Points
# =============================================================================

def run_kit_generation(
    request: GenerationRequest,
    api_key: Optional[str] = None,
    on_markdown_ready: Optional[Callable[[KitResult], None]] = None,
    on_asset_ready: Optional[Callable[[GeneratedAsset], None]] = None,
    on_cooldown: Optional[Callable[[str], None]] = None,
    pacing: Optional[PacingPolicy] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> KitResult:
    """
    Generate a full kit: markdown document, then one preview image per prompt.

    The returned KitResult is the same object handed to on_markdown_ready; its
    assets list grows as each image arrives (before on_asset_ready fires).

    Raises:
        KitValidationError: On missing input or entitlement (no remote call made).
        GeminiAPIError: If the kit call itself fails. Image failures are
            skipped, not raised.
    """
    validate_kit_request(request, api_key)
    key = require_api_key(api_key)

    markdown = generate_kit(
        request.input_text,
        request.product_type,
        mode=request.mode,
        image_data_url=request.image_data_url,
        api_key=key,
        client_factory=client_factory,
        sleep=sleep,
    )
    prompts = extract_prompts(markdown)
    log_info(f"Extracted {len(prompts)} image prompts from kit document")

    result = KitResult(markdown=markdown)
    if on_markdown_ready:
        on_markdown_ready(result)

    def asset_ready(asset: GeneratedAsset) -> None:
        result.add_asset(asset)
        if on_asset_ready:
            on_asset_ready(asset)

    generate_preview_images(
        prompts,
        request.image_options,
        on_asset_ready=asset_ready,
        on_cooldown_start=on_cooldown,
        api_key=key,
        pacing=pacing,
        client_factory=client_factory,
        sleep=sleep,
    )
    return result


def run_image_edit(
    image_data_url: Optional[str],
    instruction: str,
    api_key: Optional[str] = None,
    pacing: Optional[PacingPolicy] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> KitResult:
    """Six edited variations of a reference image, wrapped as a KitResult."""
    if not image_data_url or not instruction.strip():
        raise KitValidationError("Upload an image and type an instruction.")
    key = require_api_key(api_key)

    assets = edit_image_with_gemini(
        image_data_url,
        instruction,
        api_key=key,
        pacing=pacing,
        client_factory=client_factory,
        sleep=sleep,
    )
    return KitResult(markdown=f"**AI Edit Results**\n\nInstruction: {instruction}", assets=assets)


def run_image_analysis(
    image_data_url: Optional[str],
    api_key: Optional[str] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> KitResult:
    """Free-text analysis of a reference image, wrapped as a KitResult with no assets."""
    if not image_data_url:
        raise KitValidationError("Upload an image to analyze.")
    key = require_api_key(api_key)

    analysis = analyze_image(image_data_url, api_key=key, client_factory=client_factory, sleep=sleep)
    return KitResult(markdown=f"**Image Analysis**\n\n{analysis}")


# =============================================================================
# Output
# =============================================================================

class KitOutputWriter:
    """
    Writes a kit to a folder as it is produced.

    Layout:
        <folder>/kit.md        markdown document
        <folder>/design-N.png  one file per asset, in arrival order
        <folder>/kit.yml       manifest (request options, prompts, files)
    """

    def __init__(self, folder: Path, markdown_name: str = "kit.md"):
        self.folder = Path(folder)
        self.markdown_name = markdown_name
        self.asset_entries: List[dict] = []

    def write_markdown(self, result: KitResult) -> Path:
        self.folder.mkdir(parents=True, exist_ok=True)
        path = self.folder / self.markdown_name
        path.write_text(result.markdown, encoding="utf-8")
        return path

    def write_asset(self, asset: GeneratedAsset) -> Path:
        index = len(self.asset_entries) + 1
        path = save_asset_as_png(asset, self.folder / f"design-{index}")
        self.asset_entries.append({"file": path.name, "prompt": asset.prompt})
        return path

    def try_write_asset(self, asset: GeneratedAsset) -> Optional[Path]:
        """
        Write an asset, or log and skip it if its data is not a decodable image.

        Skipped assets do not use up a design-N number.
        """
        try:
            return self.write_asset(asset)
        except (OSError, ValueError) as e:
            log_warning(f"Skipping undecodable design for prompt {asset.prompt!r}: {e}")
            return None

    def write_manifest(self, result: KitResult, request: Optional[GenerationRequest] = None) -> Path:
        data = {
            "app": APP_NAME,
            "version": APP_VERSION,
            "created": datetime.now().isoformat(timespec="seconds"),
            "markdown": self.markdown_name,
        }
        if request is not None:
            data["request"] = {
                "input_text": request.input_text,
                "product_type": request.product_type.value,
                "mode": request.mode.value,
                "reference_image": bool(request.image_data_url),
                "use_high_quality": request.image_options.use_high_quality,
                "size": request.image_options.size.value if request.image_options.size else None,
                "aspect_ratio": request.image_options.aspect_ratio.value,
            }
            data["prompts"] = extract_prompts(result.markdown)
        data["assets"] = list(self.asset_entries)

        self.folder.mkdir(parents=True, exist_ok=True)
        path = self.folder / "kit.yml"
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, sort_keys=False, allow_unicode=True)
        return path


def write_kit_outputs(
    result: KitResult,
    output_dir: Path,
    request: Optional[GenerationRequest] = None,
    markdown_name: str = "kit.md",
) -> Path:
    """Write a finished KitResult (markdown, PNGs, manifest) into output_dir."""
    writer = KitOutputWriter(output_dir, markdown_name)
    writer.write_markdown(result)
    for asset in result.assets:
        writer.try_write_asset(asset)
    writer.write_manifest(result, request)
    return Path(output_dir)


# =============================================================================
# CLI Entry Point
# =============================================================================

def _make_output_folder(output_root: Path, name: str) -> Path:
    output_root.mkdir(parents=True, exist_ok=True)
    return output_root / get_unique_folder_name(output_root, name)


def _print_cooldown(message: str) -> None:
    print(f"[WAIT] {message}")


def _print_log_tail(lines: int = 10) -> None:
    """Echo the end of the log file so a failure can be diagnosed without opening it."""
    tail = get_log_contents().splitlines()[-lines:]
    print(f"[INFO] Last log lines ({get_log_file_path()}):")
    for line in tail:
        print(f"    {line}")


def _cmd_kit(args: argparse.Namespace) -> int:
    image_data_url = load_image_as_data_url(args.image) if args.image else None
    request = GenerationRequest(
        input_text=args.idea or "",
        product_type=ProductType(args.product.upper()),
        image_data_url=image_data_url,
        mode=GenerationMode(args.mode),
        image_options=ImageOptions(
            use_high_quality=args.high_quality,
            size=ImageSize(args.size) if args.size else None,
            aspect_ratio=AspectRatio(args.aspect_ratio),
        ),
    )

    folder = _make_output_folder(args.output_dir, "kit")
    writer = KitOutputWriter(folder)

    def on_markdown_ready(result: KitResult) -> None:
        path = writer.write_markdown(result)
        print(f"[INFO] Kit document written to {path}")
        print("[INFO] Generating preview images (one at a time to respect rate limits)...")

    def on_asset_ready(asset: GeneratedAsset) -> None:
        path = writer.try_write_asset(asset)
        if path is None:
            print("[WARN] A returned design could not be decoded; skipped.")
            return
        print(f"[INFO] Design saved: {path.name}")

    result = run_kit_generation(
        request,
        on_markdown_ready=on_markdown_ready,
        on_asset_ready=on_asset_ready,
        on_cooldown=_print_cooldown,
    )
    writer.write_manifest(result, request)
    print(f"\n[INFO] Kit complete: {len(writer.asset_entries)} design(s) in {folder}")
    return 0


def _cmd_edit(args: argparse.Namespace) -> int:
    image_data_url = load_image_as_data_url(args.image)
    result = run_image_edit(image_data_url, args.instruction)
    folder = _make_output_folder(args.output_dir, "edit")
    write_kit_outputs(result, folder, markdown_name="edit.md")
    print(f"\n[INFO] Edit complete: {len(result.assets)} variation(s) in {folder}")
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    image_data_url = load_image_as_data_url(args.image)
    result = run_image_analysis(image_data_url)
    print(result.markdown)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kit-creator",
        description=(
            "Print-on-demand sales kit builder using Google Gemini:\n"
            "  kit     - copy, SEO metadata and six design images from an idea or image\n"
            "  edit    - six edited variations of an existing design\n"
            "  analyze - visual elements, audience and keyword ideas for an image\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    kit = subparsers.add_parser("kit", help="Generate a full sales kit.")
    kit.add_argument("idea", nargs="?", default="", help="Description of the design idea.")
    kit.add_argument("--image", type=Path, default=None, help="Optional reference image.")
    kit.add_argument(
        "--product",
        choices=[p.value.lower() for p in ProductType],
        default="tshirt",
        help="Product type (default: tshirt).",
    )
    kit.add_argument(
        "--mode",
        choices=[m.value for m in GenerationMode],
        default=GenerationMode.DEFAULT.value,
        help="thinking = deeper reasoning, fast = lower latency.",
    )
    kit.add_argument(
        "--high-quality",
        action="store_true",
        help="Use the high-quality image model (requires a personal API key).",
    )
    kit.add_argument(
        "--size",
        choices=[s.value for s in ImageSize],
        default=ImageSize.SIZE_1K.value,
        help="Image resolution for --high-quality (default: 1K).",
    )
    kit.add_argument(
        "--aspect-ratio",
        choices=[r.value for r in AspectRatio],
        default=AspectRatio.SQUARE.value,
    )
    kit.add_argument("--output-dir", type=Path, default=Path.cwd(), help="Where to write the kit folder.")
    kit.set_defaults(handler=_cmd_kit)

    edit = subparsers.add_parser("edit", help="Generate six edited variations of an image.")
    edit.add_argument("image", type=Path, help="Image to edit.")
    edit.add_argument("instruction", help="How to change the image.")
    edit.add_argument("--output-dir", type=Path, default=Path.cwd(), help="Where to write the edit folder.")
    edit.set_defaults(handler=_cmd_edit)

    analyze = subparsers.add_parser("analyze", help="Analyze an image for POD research.")
    analyze.add_argument("image", type=Path, help="Image to analyze.")
    analyze.set_defaults(handler=_cmd_analyze)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line entry point.

    Returns:
        Process exit code: 0 on success, 2 on invalid input, 1 on API or file failure.
    """
    args = build_parser().parse_args(argv)
    setup_logging()

    print(f"\n{'=' * 60}")
    print(f"  {APP_NAME} v{APP_VERSION}")
    print(f"{'=' * 60}\n")

    # Offer key setup up front; the pipeline resolves the key itself
    if get_api_key() is None and sys.stdin.isatty():
        interactive_api_key_setup()

    try:
        return args.handler(args)
    except KitValidationError as e:
        log_error("Request rejected", str(e))
        print(f"[ERROR] {e}")
        return 2
    except GeminiAPIError as e:
        log_error("Generation failed", str(e))
        print(f"[ERROR] {e}")
        _print_log_tail()
        return 1
    except (OSError, ValueError) as e:
        log_exception("Could not read or write an image file")
        print(f"[ERROR] {e}")
        _print_log_tail()
        return 1


if __name__ == "__main__":
    sys.exit(main())
