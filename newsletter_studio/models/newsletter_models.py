from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NewsArticle(BaseModel):
    """
    A news article found by the Research Agent. Passed unchanged into draft and refinement prompts.
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Headline of the article.")
    summary: str = Field("", description="Brief summary of the article.")
    source: str = Field("", description="Name of the publishing website.")
    link: str = Field("", description="Direct URL to the article.")
    date: str = Field("", description="Publication date as reported by the model.")

    @field_validator("title", "summary", "source", "link", "date", mode="before")
    @classmethod
    def coerce_to_text(cls, value):
        # Models occasionally emit null or numbers for these fields
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class Tone(str, Enum):
    PROFESSIONAL = "Professional"
    CASUAL = "Casual"
    OPTIMISTIC = "Optimistic"
    FORMAL = "Formal"
    ENTHUSIASTIC = "Enthusiastic"


class NewsFormat(str, Enum):
    PARAGRAPH = "paragraph"
    BULLETS = "bullets"


class GenerationOptions(BaseModel):
    """
    Immutable snapshot of the form, taken when a generation cycle starts.
    """
    model_config = ConfigDict(frozen=True)

    topics: List[str] = Field(default_factory=list, description="Ordered, deduplicated topics to research.")
    industry: str = Field("Technology", description="Industry or domain of the audience.")
    company_name: str = Field("Innovate Inc.", description="Company the newsletter is written for.")
    tone: Tone = Field(Tone.PROFESSIONAL, description="Writing tone.")
    news_format: NewsFormat = Field(NewsFormat.PARAGRAPH, description="Paragraph or bullet summaries.")
    word_length: int = Field(100, gt=0, description="Approximate words per article summary.")
    min_articles: int = Field(5, gt=0, description="Minimum number of articles to research across all topics.")
    additional_instructions: Optional[str] = Field(None, description="Free-form extra instructions for the writer.")
    visual_keywords: str = Field("", description="Style keywords for the header image.")
    custom_image_prompt: Optional[str] = Field(None, description="Overrides the derived image prompt when filled.")
    generate_image: bool = Field(True, description="Whether to generate a header image.")

    @field_validator("topics", mode="before")
    @classmethod
    def normalise_topics(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen = set()
        topics = []
        for topic in value:
            cleaned = str(topic).strip()
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                topics.append(cleaned)
        return topics


class NewsletterDocument(BaseModel):
    """
    The generated newsletter. Never edited in place: every change produces a new document.
    """
    model_config = ConfigDict(frozen=True)

    body_html: str = Field(..., description="HTML fragment starting with <h1>.")
    header_image_data_uri: Optional[str] = Field(None, description="data: URI of the header image, if any.")

    def with_body(self, body_html: str) -> "NewsletterDocument":
        return self.model_copy(update={"body_html": body_html})

    def with_header_image(self, header_image_data_uri: Optional[str]) -> "NewsletterDocument":
        return self.model_copy(update={"header_image_data_uri": header_image_data_uri})


class ImageDirective(BaseModel):
    """Refinement asked for a new header image."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    prompt: str


class HtmlDirective(BaseModel):
    """Refinement returned a full replacement body."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["html"] = "html"
    body: str


RefinementDirective = Annotated[Union[ImageDirective, HtmlDirective], Field(discriminator="kind")]
