from typing import Optional

from langchain_core.prompts import PromptTemplate

from newsletter_studio.config import get_settings
from newsletter_studio.models.newsletter_models import GenerationOptions

# Image models take a plain description, so this is a PromptTemplate rather than a chat prompt.
HEADER_IMAGE_PROMPT = PromptTemplate.from_template(
    "A professional and visually appealing header image for a newsletter from {company_name} "
    "about \"{topics}\". The style should be: {visual_keywords}. "
    "Abstract and suitable for a {industry} audience. Avoid text."
)

NO_TEXT_SUFFIX = ". Avoid text."


def build_image_prompt(options: GenerationOptions, fallback_keywords: Optional[str] = None) -> str:
    """
    Returns the user's custom image prompt when filled, otherwise a prompt derived from the form.
    Both variants tell the model not to render text.
    """
    custom_prompt = (options.custom_image_prompt or "").strip()
    if custom_prompt:
        if "avoid text" in custom_prompt.lower():
            return custom_prompt
        return custom_prompt.rstrip(" .") + NO_TEXT_SUFFIX

    visual_keywords = (
        options.visual_keywords.strip()
        or (fallback_keywords or "").strip()
        or get_settings().DEFAULT_VISUAL_KEYWORDS
    )
    return HEADER_IMAGE_PROMPT.format(
        company_name=options.company_name,
        topics=", ".join(options.topics),
        visual_keywords=visual_keywords,
        industry=options.industry,
    )
