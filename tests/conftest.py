"""Shared fixtures: a scripted stand-in for the Gemini client and ready-made options."""

import os

# Keep test runs from writing log files; must be set before the package reads its settings
os.environ.setdefault("LOG_TO_FILE", "false")

from typing import List, Optional

import pytest

from newsletter_studio.exceptions import TransportError
from newsletter_studio.models.newsletter_models import GenerationOptions

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"

NEWS_RESPONSE = (
    "```json\n"
    '[{"title":"T","summary":"S","source":"Src","link":"http://x","date":"2024-01-01"}]\n'
    "```"
)

DRAFT_RESPONSE = "```html\n<h1>Title</h1><p>Body</p>\n```"


class FakeGeminiClient:
    """
    Replays queued text responses and records every call.
    Queue an Exception instance to make that call fail.
    """

    def __init__(self, text_responses: Optional[List] = None, image_responses: Optional[List] = None):
        self.text_responses = list(text_responses or [])
        self.image_responses = list(image_responses or [])
        self.text_calls = []
        self.image_calls = []

    @property
    def call_count(self) -> int:
        return len(self.text_calls) + len(self.image_calls)

    def generate_text(self, prompt: str, use_search: bool = False) -> str:
        self.text_calls.append({"prompt": prompt, "use_search": use_search})
        if not self.text_responses:
            raise TransportError("no scripted text response left")
        response = self.text_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def generate_image(self, prompt: str) -> bytes:
        self.image_calls.append(prompt)
        if not self.image_responses:
            return PNG_BYTES
        response = self.image_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def options():
    return GenerationOptions(
        topics=["Quantum Computing"],
        industry="Technology",
        company_name="Innovate Inc.",
        tone="Professional",
        news_format="paragraph",
        word_length=100,
        min_articles=1,
        visual_keywords="abstract, blue",
        generate_image=False,
    )
