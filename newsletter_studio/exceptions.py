"""Error kinds raised by the newsletter core.

Every error carries a ``user_message`` that the orchestrator stores in the
session state; ``str(error)`` keeps the technical detail for the logs.
"""

from typing import Optional


class NewsletterError(Exception):
    """Base class for all newsletter generation failures."""

    default_message = "An unknown error occurred."

    def __init__(self, detail: Optional[str] = None, user_message: Optional[str] = None):
        self.user_message = user_message or self.default_message
        super().__init__(detail or self.user_message)


class ConfigurationError(NewsletterError):
    """Required configuration (e.g. the Gemini API key) is missing."""

    default_message = "The AI service is not configured. Set GEMINI_API_KEY and reload the app."


class ValidationError(NewsletterError):
    """User input does not allow the requested action to start."""

    default_message = "The request is incomplete."


class EmptyResultError(NewsletterError):
    """The AI service answered, but with nothing usable."""

    default_message = "Could not find any relevant news articles. Try different topics."


class ExtractionError(NewsletterError):
    """No structured payload could be located in a model response."""

    default_message = "The AI returned data in an unexpected format. Could not find the expected content."


class ParseError(ExtractionError):
    """A payload was located but is not valid JSON."""

    default_message = "Failed to parse the data returned by the AI. The format was invalid."


class TransportError(NewsletterError):
    """The call to the AI service itself failed (network, auth, quota)."""

    default_message = "Failed to reach the AI service. Check the API key or try again later."


class UnexpectedShapeError(NewsletterError):
    """Parsed JSON does not have the fields the caller needs."""

    default_message = "AI response was not in the expected format. Please rephrase."
