"""
Extraction of image prompts from the kit document's markdown table.

Best-effort structural parse: malformed tables give fewer prompts, never an error.
"""

from typing import List

from ..config import MAX_IMAGE_PROMPTS, PROMPT_TABLE_HEADER


def extract_prompts(markdown: str) -> List[str]:
    """
    Pull the IMAGE PROMPT column out of the kit's variation table.

    Rules:
      - The table starts at the line containing the header marker (that line is skipped).
      - Inside the table, any line with '|' is split on '|'; the third column
        is the candidate. It is trimmed and kept unless empty, a '---'
        separator, or a repeat of the header text. '**' markers are removed.
      - The first blank line after at least one prompt ends the table.
      - At most MAX_IMAGE_PROMPTS prompts are returned, in document order.
    """
    prompts: List[str] = []
    in_table = False

    for line in markdown.split("\n"):
        if PROMPT_TABLE_HEADER in line:
            in_table = True
            continue

        if in_table and "|" in line:
            columns = line.split("|")
            if len(columns) >= 3:
                prompt = columns[2].strip()
                if prompt and "---" not in prompt and "IMAGE PROMPT" not in prompt:
                    prompts.append(prompt.replace("**", ""))

        if in_table and line.strip() == "" and prompts:
            in_table = False

    return prompts[:MAX_IMAGE_PROMPTS]
