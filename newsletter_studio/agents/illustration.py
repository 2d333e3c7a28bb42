from newsletter_studio.config import get_settings
from newsletter_studio.exceptions import NewsletterError
from newsletter_studio.prompts.illustration_prompts import build_image_prompt
from newsletter_studio.state import WorkflowState
from newsletter_studio.tools.llm_interface import to_data_uri
from newsletter_studio.utils import logger


def generate_header_image(client, prompt: str) -> str:
    """Generates a header image and returns it as a data: URI."""
    image_bytes = client.generate_image(prompt)
    return to_data_uri(image_bytes, get_settings().IMAGE_MIME_TYPE)


def illustration_agent_node(state: WorkflowState, *, client) -> WorkflowState:
    """
    Illustration Agent node: Generates the header image for a finished draft.
    A failure here keeps the draft; the error is recorded in 'image_error' for the orchestrator to report.
    """
    logger.info("---ILLUSTRATION AGENT: Starting header image generation---")
    options = state["options"]
    new_state = state.copy()

    prompt = build_image_prompt(options)
    try:
        new_state["header_image_data_uri"] = generate_header_image(client, prompt)
        new_state["image_error"] = None
        logger.info("---ILLUSTRATION AGENT: Header image ready---")
    except NewsletterError as e:
        logger.error(f"ILLUSTRATION AGENT: Header image failed, keeping draft without image: {e}", exc_info=True)
        new_state["header_image_data_uri"] = None
        new_state["image_error"] = e.user_message
    return new_state


def should_illustrate(state: WorkflowState) -> str:
    if state["options"].generate_image and state.get("body_html"):
        return "illustrate"
    logger.info("ORCHESTRATOR: Header image disabled. Skipping Illustration Agent.")
    return "finish"
