from enum import Enum
from typing import List, Optional, TypedDict

from pydantic import BaseModel, Field

from newsletter_studio.models.newsletter_models import GenerationOptions, NewsArticle, NewsletterDocument


class WorkflowState(TypedDict):
    """
    Represents the shared state of one generation cycle.
    This state is passed between the LangGraph nodes.
    """
    options: GenerationOptions # Snapshot taken when the cycle started
    articles: List[NewsArticle] # Populated by Research Agent
    body_html: Optional[str] # Populated by Generation Agent
    header_image_data_uri: Optional[str] # Populated by Illustration Agent
    image_error: Optional[str] # Set by Illustration Agent when the image could not be generated


class SessionStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    REFINING = "refining"


class SessionState(BaseModel):
    """
    What the presentation layer renders: the active action, the last error and the current document.
    """
    status: SessionStatus = SessionStatus.IDLE
    error: Optional[str] = None
    warning: Optional[str] = None
    loading_message: str = ""
    articles: List[NewsArticle] = Field(default_factory=list)
    document: Optional[NewsletterDocument] = None
    options: Optional[GenerationOptions] = None

    @property
    def is_busy(self) -> bool:
        return self.status != SessionStatus.IDLE


def initial_workflow_state(options: GenerationOptions) -> WorkflowState:
    return {
        "options": options,
        "articles": [],
        "body_html": None,
        "header_image_data_uri": None,
        "image_error": None,
    }
