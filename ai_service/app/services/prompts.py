"""
prompts.py

Builds the instruction sent with every OCR request and
decodes the text that comes back.

What this file does:
- Keeps one fixed configuration per OCRMode (model, prompt, penalty)
- Fills the figure language into the v1.5 prompt
- Unwraps the JSON envelope used by the default/structure modes

This file does NOT talk to the network.
"""

import json
import logging
from dataclasses import dataclass

from app.schemas.ocr import FigureLanguage, OCRMode

logger = logging.getLogger(__name__)

# Field that holds the page text in JSON-wrapped modes
NATURAL_TEXT_KEY = "natural_text"


V1_5_PROMPT = """Extract all text from the image.
Instructions:
- Only return the clean Markdown.
- Do not include any explanation or extra text.
- You must include all information on the page.

Formatting Rules:
- Tables: Render tables using <table>...</table> in clean HTML format.
- Equations: Render equations using LaTeX syntax with inline ($...$) and block ($$...$$).
- Images/Charts: Wrap visual areas in:
<figure>
Describe the image's main elements, note contextual clues, mention visible text, provide deeper analysis.
Describe in {language}.
</figure>
- Page Numbers: Wrap in <page_number>...</page_number>
- Checkboxes: Use ☐ for unchecked and ☑ for checked boxes."""


DEFAULT_PROMPT = """Below is an image of a document page along with its dimensions. Simply return the markdown representation of this document, presenting tables in markdown format as they naturally appear.
If the document contains images, use a placeholder like dummy.png for each image.
Your final output must be in JSON format with a single key "natural_text" containing the response."""


STRUCTURE_PROMPT = """Below is an image of a document page. Your task is to return the markdown representation of this document, presenting tables in HTML format as they naturally appear.
If the document contains images or figures, analyze them and include the tag <figure>IMAGE_ANALYSIS</figure> in the appropriate location.
Your final output must be in JSON format with a single key "natural_text" containing the response."""


@dataclass(frozen=True)
class ModeConfig:
    """Fixed settings for one recognition mode."""

    model: str
    prompt_template: str
    repetition_penalty: float
    json_wrapped: bool


MODE_CONFIGS = {
    OCRMode.V1_5: ModeConfig(
        model="typhoon-ocr",
        prompt_template=V1_5_PROMPT,
        repetition_penalty=1.1,
        json_wrapped=False,
    ),
    OCRMode.DEFAULT: ModeConfig(
        model="typhoon-ocr-preview",
        prompt_template=DEFAULT_PROMPT,
        repetition_penalty=1.2,
        json_wrapped=True,
    ),
    OCRMode.STRUCTURE: ModeConfig(
        model="typhoon-ocr-preview",
        prompt_template=STRUCTURE_PROMPT,
        repetition_penalty=1.2,
        json_wrapped=True,
    ),
}


def get_mode_config(mode: OCRMode) -> ModeConfig:
    return MODE_CONFIGS[OCRMode(mode)]


def build_prompt(mode: OCRMode, language: FigureLanguage = FigureLanguage.THAI) -> str:
    """
    Build the instruction text for a mode.

    Only the v1.5 template has a language slot; the other
    templates come back unchanged.
    """

    config = get_mode_config(mode)
    if "{language}" in config.prompt_template:
        return config.prompt_template.format(language=FigureLanguage(language).value)
    return config.prompt_template


def decode_response(raw_text: str, mode: OCRMode) -> str:
    """
    Turn the provider's completion into the extracted text.

    What happens here:
    1. v1.5 output is already markdown, so it is returned as-is
    2. default/structure output should be {"natural_text": "..."}
    3. If that JSON cannot be read, the raw text is used instead

    Parameters:
    - raw_text: completion content from the provider
    - mode: mode the request was made with

    Returns:
    - extracted text
    """

    if not get_mode_config(mode).json_wrapped:
        return raw_text

    try:
        parsed = json.loads(raw_text)
    except (TypeError, ValueError):
        logger.debug("Response for mode %s is not JSON, using raw text", OCRMode(mode).value)
        return raw_text

    if isinstance(parsed, dict):
        natural_text = parsed.get(NATURAL_TEXT_KEY)
        if isinstance(natural_text, str) and natural_text:
            return natural_text

    return raw_text
