from typing import List

from newsletter_studio.config import get_settings
from newsletter_studio.models.newsletter_models import NewsArticle
from newsletter_studio.prompts.research_prompts import build_news_query
from newsletter_studio.state import WorkflowState
from newsletter_studio.utils import logger, parse_news_articles, require_articles


def research_agent_node(state: WorkflowState, *, client) -> WorkflowState:
    """
    Research Agent node: Finds recent news for the configured topics.
    - Asks the search-grounded model for a JSON array of articles.
    - Extracts and validates the array (fences and chatter are tolerated).
    - Fails the cycle with EmptyResultError when nothing usable came back.
    - Updates the 'articles' field in the state.
    """
    logger.info("---RESEARCH AGENT: Starting news research---")
    settings = get_settings()
    options = state["options"]

    prompt = build_news_query(options.topics, options.min_articles, recency_hours=settings.NEWS_RECENCY_HOURS)
    logger.info(f"RESEARCH AGENT: Searching news for {len(options.topics)} topics (min {options.min_articles} articles).")
    raw_text = client.generate_text(prompt, use_search=True)

    articles: List[NewsArticle] = require_articles(parse_news_articles(raw_text))
    if len(articles) < options.min_articles:
        logger.warning(f"RESEARCH AGENT: Model returned {len(articles)} articles, fewer than the requested {options.min_articles}.")

    logger.info(f"---RESEARCH AGENT: Found {len(articles)} articles---")
    new_state = state.copy()
    new_state["articles"] = articles
    return new_state
