import threading
from typing import Callable, Optional

from newsletter_studio.agents.illustration import generate_header_image
from newsletter_studio.agents.refinement import refinement_agent
from newsletter_studio.exceptions import NewsletterError, ValidationError
from newsletter_studio.main import create_generation_workflow
from newsletter_studio.models.newsletter_models import GenerationOptions, ImageDirective, NewsletterDocument
from newsletter_studio.state import SessionState, SessionStatus, initial_workflow_state
from newsletter_studio.utils import logger

ProgressCallback = Callable[[str], None]

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

# Loading messages shown while each step runs
RESEARCH_MESSAGE = "Researching trending news..."
DRAFT_MESSAGE = "Crafting your newsletter..."
IMAGE_MESSAGE = "Generating header image..."
REFINE_MESSAGE = "Refining your newsletter..."
REFINE_IMAGE_MESSAGE = "Generating new header image..."


class NewsletterOrchestrator:
    """
    Runs generation and refinement cycles for one user session.

    Only one cycle may be in flight: while generating or refining, both entry points return the
    session unchanged. Every failure ends the cycle and is stored as a single message in
    ``session.error``; nothing propagates to the caller.
    """

    def __init__(self, client):
        self.client = client
        self.workflow = create_generation_workflow(client)
        self.session = SessionState()
        self._cycle_lock = threading.Lock()

    # --- helpers ---
    def _report(self, message: str, on_progress: Optional[ProgressCallback]):
        self.session.loading_message = message
        if on_progress:
            on_progress(message)

    def _fail(self, error: Exception):
        if isinstance(error, NewsletterError):
            logger.error(f"ORCHESTRATOR: {type(error).__name__}: {error}", exc_info=True)
            self.session.error = error.user_message
        else:
            logger.critical(f"ORCHESTRATOR: Unexpected error: {error}", exc_info=True)
            self.session.error = UNKNOWN_ERROR_MESSAGE

    def _reject(self, error: ValidationError) -> SessionState:
        logger.warning(f"ORCHESTRATOR: Rejected request: {error}")
        self.session.error = error.user_message
        self.session.warning = None
        return self.snapshot()

    def _finish(self):
        self.session.status = SessionStatus.IDLE
        self.session.loading_message = ""

    def snapshot(self) -> SessionState:
        return self.session.model_copy(deep=True)

    @property
    def is_busy(self) -> bool:
        return self.session.is_busy

    # --- generation ---
    def run_generation(self, options: GenerationOptions, on_progress: Optional[ProgressCallback] = None) -> SessionState:
        """
        Researches news, drafts the newsletter and (optionally) its header image.
        Replaces all previous session content.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("ORCHESTRATOR: A cycle is already running. Ignoring generation request.")
            return self.snapshot()
        try:
            if not options.topics:
                return self._reject(ValidationError("empty topic list", user_message="Please add at least one topic."))

            # Full reset: nothing from a previous cycle may survive into this one
            self.session = SessionState(status=SessionStatus.GENERATING, options=options)
            logger.info(f"ORCHESTRATOR: Starting generation for topics {options.topics}.")

            try:
                self._report(RESEARCH_MESSAGE, on_progress)
                start_state = initial_workflow_state(options)
                final_state = dict(start_state)
                for update in self.workflow.stream(start_state):
                    for node_name, node_state in update.items():
                        logger.debug(f"ORCHESTRATOR: '{node_name}' finished.")
                        final_state.update(node_state)
                        if node_name == "research":
                            self.session.articles = list(final_state["articles"])
                            self._report(DRAFT_MESSAGE, on_progress)
                        elif node_name == "generation" and options.generate_image:
                            self._report(IMAGE_MESSAGE, on_progress)

                self.session.articles = list(final_state["articles"])
                self.session.document = NewsletterDocument(
                    body_html=final_state["body_html"],
                    header_image_data_uri=final_state.get("header_image_data_uri"),
                )
                if final_state.get("image_error"):
                    self.session.warning = f"The newsletter was drafted, but the header image failed: {final_state['image_error']}"
                logger.info("ORCHESTRATOR: Generation completed.")
            except Exception as e:
                self._fail(e)
            finally:
                self._finish()
            return self.snapshot()
        finally:
            self._cycle_lock.release()

    # --- refinement ---
    def run_refinement(self, directive_text: str, on_progress: Optional[ProgressCallback] = None) -> SessionState:
        """
        Applies a natural-language change request to the current newsletter.
        An image request replaces only the header image; anything else replaces only the body.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("ORCHESTRATOR: A cycle is already running. Ignoring refinement request.")
            return self.snapshot()
        try:
            document = self.session.document
            if document is None:
                return self._reject(ValidationError("no document to refine", user_message="Generate a newsletter before refining it."))
            if not (directive_text or "").strip():
                return self._reject(ValidationError("empty refinement directive", user_message="Please describe the changes you want."))

            self.session.status = SessionStatus.REFINING
            self.session.error = None
            self.session.warning = None
            logger.info("ORCHESTRATOR: Starting refinement.")

            try:
                self._report(REFINE_MESSAGE, on_progress)
                directive = refinement_agent(self.client, document.body_html, self.session.articles, directive_text)

                if isinstance(directive, ImageDirective):
                    self._report(REFINE_IMAGE_MESSAGE, on_progress)
                    image_uri = generate_header_image(self.client, directive.prompt)
                    self.session.document = document.with_header_image(image_uri)
                else:
                    self.session.document = document.with_body(directive.body)
                logger.info(f"ORCHESTRATOR: Refinement applied ({directive.kind}).")
            except Exception as e:
                self._fail(e)
            finally:
                self._finish()
            return self.snapshot()
        finally:
            self._cycle_lock.release()
