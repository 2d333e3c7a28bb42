from newsletter_studio.prompts.generation_prompts import build_draft_prompt
from newsletter_studio.state import WorkflowState
from newsletter_studio.utils import extract_html_body, logger


def generation_agent_node(state: WorkflowState, *, client) -> WorkflowState:
    """
    Generation Agent node: Drafts the newsletter HTML from the researched articles.
    """
    logger.info("---GENERATION AGENT: Starting newsletter draft---")
    articles = state["articles"]
    options = state["options"]

    prompt = build_draft_prompt(articles, options)
    raw_text = client.generate_text(prompt)
    body_html = extract_html_body(raw_text)

    if not body_html.lower().startswith("<h1"):
        # Still usable; the preview renders whatever came back
        logger.warning(f"GENERATION AGENT: Draft does not start with <h1>. Starts with: '{body_html[:80]}'")

    logger.info(f"---GENERATION AGENT: Draft ready ({len(body_html)} chars)---")
    new_state = state.copy()
    new_state["body_html"] = body_html
    return new_state
