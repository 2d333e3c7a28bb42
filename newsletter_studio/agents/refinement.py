from typing import Sequence

from newsletter_studio.models.newsletter_models import NewsArticle, RefinementDirective
from newsletter_studio.prompts.refinement_prompts import build_refinement_prompt
from newsletter_studio.utils import logger, parse_refinement_response


def refinement_agent(client, current_html: str, articles: Sequence[NewsArticle], user_directive: str) -> RefinementDirective:
    """
    Refinement Agent: Sends the user's change request and classifies the answer.
    Returns an ImageDirective (new header image wanted) or an HtmlDirective (full replacement body).
    """
    logger.info(f"---REFINEMENT AGENT: Processing request '{user_directive[:120]}'---")
    prompt = build_refinement_prompt(current_html, articles, user_directive)
    raw_text = client.generate_text(prompt)
    directive = parse_refinement_response(raw_text)
    logger.info(f"---REFINEMENT AGENT: Model answered with a '{directive.kind}' directive---")
    return directive
