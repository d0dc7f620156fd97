"""
Prompt builders for Gemini API requests.

All prompt text for kit generation, image editing and image analysis.
The kit instruction fixes the output grammar that processing.prompt_extractor
parses, so the table header here must stay in sync with PROMPT_TABLE_HEADER.
"""

from typing import List, Optional

from ..config import PROMPT_TABLE_HEADER, STYLE_CATEGORIES
from ..core.models import ProductType
from .gemini_client import inline_image_part


# =============================================================================
# Kit System Instruction
# =============================================================================

_TSHIRT_VISUAL_RULES = """
- For T-shirts and Stickers, the design MUST be the raw artwork on a solid white background.
- ALWAYS add to the prompt: "isolated on white background", "No background", "Clean edges", "Vector style", "High contrast", "Professional graphic", "300 DPI print quality", "Ultra-detailed textures".
- NO mockups, NO models, NO hangers. Just the flat design."""

_INVITATION_VISUAL_RULES = """
- For Invitation Cards, the design MUST be a standard 5x7 inch vertical or horizontal layout.
- The prompts should describe a complete, beautiful card layout including decorative borders or background patterns suitable for printing.
- Mention "5x7 inch layout", "high resolution 300 DPI print quality", "elegant typography placement", "Sharp focus"."""

_CARD_TEMPLATE_BLOCK = """
**CARD TEMPLATE TEXT:**
Join us for: [Event Name]
Date: [Date Placeholder]
Time: [Time Placeholder]
Location: [Address Placeholder]
RSVP to: [Contact Placeholder]"""


def _style_list() -> str:
    return "\n".join(
        f"{i}. {name} ({flavor})" for i, (name, flavor) in enumerate(STYLE_CATEGORIES, start=1)
    )


def build_system_instruction(product_type: ProductType) -> str:
    """
    Build the fixed system instruction for the kit call.

    Deterministic for a given product type: IP-safety rules, the product's
    visual rules, the six style categories and the exact output format
    (prompt table, SEO block, description block, card template for invitations).

    Args:
        product_type: TSHIRT or INVITATION.

    Returns:
        The system instruction text.
    """
    product_type = ProductType(product_type)
    is_tshirt = product_type == ProductType.TSHIRT
    visual_rules = _TSHIRT_VISUAL_RULES if is_tshirt else _INVITATION_VISUAL_RULES
    product_label = "T-shirt" if is_tshirt else "5x7 Inch Invitation Card"
    card_block = _CARD_TEMPLATE_BLOCK if product_type == ProductType.INVITATION else ""

    return f"""You are a world-class Print-on-Demand (POD) expert, Etsy SEO specialist, and intellectual property attorney.

YOUR OBJECTIVE:
Based on an image or an idea provided by the user (Invitation or T-shirt), you must generate a complete sales kit in English targeted at high-converting e-commerce platforms like Etsy and Shopify.

COPYRIGHT GOLDEN RULE:
If the input contains copyrighted elements (Brands, Disney, Marvel, Bands, Famous Characters), you MUST create an "Inspired by" design that is legally safe.
- Keep the concept, emotion, colors, and style.
- Remove logos, proper names, and exact faces.
- Transform specific elements into generic artistic archetypes.

VISUAL GOLDEN RULE (POD):
{visual_rules}

STYLE DIVERSITY RULE:
Generate exactly {len(STYLE_CATEGORIES)} HIGHLY DISTINCT image prompts in ENGLISH to maximize Etsy conversion across different buyer personas. They should cover these {len(STYLE_CATEGORIES)} distinct styles:
{_style_list()}

FORMAT YOUR RESPONSE EXACTLY LIKE THIS:

{PROMPT_TABLE_HEADER}
| :--- | :--- |
| 1 | [Prompt 1] |
| 2 | [Prompt 2] |
... and so on until {len(STYLE_CATEGORIES)} ...

---
**TITLE & SEO (Etsy/Google)**
**Main Title (140 chars):** [Optimized title with keywords first]
**Keywords (Tags):** [13 long-tail tags separated by commas]

---
**PRODUCT DESCRIPTION**
**Hook:** [Emotional hook]
**Details:** [Usage, aesthetic, and quality for {product_label}]
{card_block}
**Why you'll love it:**
✅ [Benefit 1]
✅ [Benefit 2]
✅ [Benefit 3]"""


# =============================================================================
# Content Parts
# =============================================================================

def build_kit_parts(
    input_text: str,
    product_type: ProductType,
    image_data_url: Optional[str] = None,
) -> List[dict]:
    """
    Build the content parts for the kit call: the user's text, plus the
    reference image as inline data when one was uploaded.
    """
    product_type = ProductType(product_type)
    parts: List[dict] = [
        {"text": f"User Input: {input_text}\nProduct Type: {product_type.value}"}
    ]
    if image_data_url:
        parts.append(inline_image_part(image_data_url))
    return parts


def clean_image_prompt(prompt: str) -> str:
    """Strip bold markers and square brackets before sending a prompt to the image model."""
    return prompt.replace("**", "").replace("[", "").replace("]", "").strip()


def build_edit_prompt(instruction: str, variation_number: int) -> str:
    """Edit instruction tagged with its variation ordinal and an output-format directive."""
    return f"{instruction}. Variation {variation_number}. Ensure output is PNG format."


def build_analysis_prompt() -> str:
    return (
        "Analyze this image for a Print-on-Demand business. What are the key visual "
        "elements, the target audience, and potential Etsy keywords?"
    )
