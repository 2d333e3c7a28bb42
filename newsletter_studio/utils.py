import json
import logging
import os
import re
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from newsletter_studio.config import get_settings
from newsletter_studio.exceptions import EmptyResultError, ExtractionError, ParseError, UnexpectedShapeError
from newsletter_studio.models.newsletter_models import HtmlDirective, ImageDirective, NewsArticle, RefinementDirective

# Define log file path relative to the project root
LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'logs')

# Define log file name with current date
log_file_name = datetime.now().strftime('newsletter_studio_%Y-%m-%d.log')
LOG_FILE_PATH = os.path.join(LOG_DIR, log_file_name)

# A fenced block anywhere in the text, optionally tagged json/html
_FENCE_PATTERN = r"```(?:{langs})?[ \t]*\r?\n?\s*([\s\S]*?)\s*```"
_FENCED_ARRAY_PATTERN = re.compile(r"```(?:json|html)?\s*(\[[\s\S]*\])\s*```", re.IGNORECASE)


def setup_logging():
    """
    Sets up a centralized logging configuration for the application.
    Logs to console and, unless disabled in settings, to a daily file.
    """
    settings = get_settings()
    logger = logging.getLogger('newsletter_studio')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        c_handler = logging.StreamHandler()
        c_handler.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        c_format = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        c_handler.setFormatter(c_format)
        logger.addHandler(c_handler)

        if settings.LOG_TO_FILE:
            os.makedirs(LOG_DIR, exist_ok=True)
            f_handler = logging.FileHandler(LOG_FILE_PATH)
            f_handler.setLevel(logging.DEBUG) # more verbosely to file for debugging
            f_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s')
            f_handler.setFormatter(f_format)
            logger.addHandler(f_handler)

    return logger

logger = setup_logging()

# Id of the UI session whose cycle is running in the current thread/context
_log_session: ContextVar[Optional[str]] = ContextVar("newsletter_studio_log_session", default=None)


class SessionLogHandler(logging.Handler):
    """
    Collects the log lines of one UI session for its activity log.
    Records emitted while another session (or no session) is active are dropped.
    """

    def __init__(self, session_id: str, max_lines: int = 200):
        super().__init__()
        self.session_id = session_id
        self.max_lines = max_lines
        self.log_messages: List[str] = []
        self.addFilter(self._belongs_to_session)

    def _belongs_to_session(self, record: logging.LogRecord) -> bool:
        return _log_session.get() == self.session_id

    def emit(self, record):
        self.log_messages.append(f"[{record.levelname}] {self.format(record)}")
        self.log_messages = self.log_messages[-self.max_lines:]


@contextmanager
def capture_session_logs(handler: SessionLogHandler):
    """
    Attaches ``handler`` to the app logger for the duration of one cycle and marks the
    current context as its session. The handler is always detached afterwards.
    """
    token = _log_session.set(handler.session_id)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        _log_session.reset(token)


def _normalise(text: str) -> str:
    current_str = (text or "").replace('\ufeff', '').replace('\u200b', '')
    return current_str.strip()


def strip_code_fences(text: str, languages: Sequence[str] = ("json", "html")) -> str:
    """
    Returns the contents of the first markdown code block in ``text`` (optionally tagged with one of
    ``languages``), trimmed. Text without a fenced block is returned trimmed but otherwise unchanged.
    """
    current_str = _normalise(text)
    pattern = _FENCE_PATTERN.format(langs="|".join(re.escape(lang) for lang in languages))
    match = re.search(pattern, current_str, re.IGNORECASE)
    if match:
        logger.debug("strip_code_fences: Extracted payload from markdown code block.")
        return match.group(1).strip()
    return current_str


def extract_json_array(text: str) -> List[Any]:
    """
    Extracts and parses the JSON array in a model response.

    A fenced ```json block wins; otherwise everything from the first '[' to the last ']' is taken.
    Raises ExtractionError when no array can be located and ParseError when the located text is not
    valid JSON (or is valid JSON but not an array).
    """
    current_str = _normalise(text)

    match = _FENCED_ARRAY_PATTERN.search(current_str)
    if match:
        json_text = match.group(1)
        logger.debug("extract_json_array: Extracted JSON array from markdown code block.")
    else:
        start_bracket = current_str.find('[')
        end_bracket = current_str.rfind(']')
        if start_bracket == -1 or end_bracket == -1 or end_bracket < start_bracket:
            logger.error(f"extract_json_array: Could not find a JSON array in the response. Response (first 500 chars): '{current_str[:500]}'")
            raise ExtractionError(
                "no JSON array boundaries in model response",
                user_message="The AI returned data in an unexpected format. Could not find a JSON array.",
            )
        json_text = current_str[start_bracket:end_bracket + 1]
        logger.debug("extract_json_array: Extracted JSON array using outermost brackets.")

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.error(f"extract_json_array: JSONDecodeError: {e}. Candidate (first 500 chars): '{json_text[:500]}'")
        raise ParseError(f"invalid JSON array: {e}") from e

    if not isinstance(parsed, list):
        raise ParseError(f"expected a JSON array, got {type(parsed).__name__}")
    return parsed


def parse_news_articles(text: str) -> List[NewsArticle]:
    """
    Turns a news search response into NewsArticle objects. An empty array yields an empty list;
    deciding whether that is acceptable is up to the caller.
    """
    items = extract_json_array(text)
    articles: List[NewsArticle] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise UnexpectedShapeError(
                f"news item {index} is a {type(item).__name__}, not an object",
                user_message="Failed to parse the news data from the AI. The format was invalid.",
            )
        try:
            articles.append(NewsArticle.model_validate(item))
        except PydanticValidationError as e:
            raise UnexpectedShapeError(
                f"news item {index} is malformed: {e}",
                user_message="Failed to parse the news data from the AI. The format was invalid.",
            ) from e
    return articles


def extract_html_body(text: str) -> str:
    """
    Strips ```html fences (if any) from a draft response and returns the HTML fragment.
    """
    html = strip_code_fences(text, languages=("html",))
    if not html:
        raise ExtractionError(
            "empty newsletter response",
            user_message="The AI returned an empty response for the newsletter.",
        )
    return html


def parse_refinement_response(text: str) -> RefinementDirective:
    """
    Classifies a refinement response as an image directive (a JSON object) or a replacement HTML body.
    """
    result_text = strip_code_fences(text)
    if not result_text:
        raise ExtractionError(
            "empty refinement response",
            user_message="The AI returned an empty response for the refinement request.",
        )

    if not (result_text.startswith('{') and result_text.endswith('}')):
        return HtmlDirective(body=result_text)

    try:
        payload = json.loads(result_text)
    except json.JSONDecodeError as e:
        logger.error(f"parse_refinement_response: JSONDecodeError: {e}. Candidate (first 500 chars): '{result_text[:500]}'")
        raise ParseError(
            f"invalid refinement JSON: {e}",
            user_message="AI response was not in the expected format. Please rephrase.",
        ) from e

    new_prompt = payload.get("newImagePrompt")
    if payload.get("requestType") != "image" or not isinstance(new_prompt, str) or not new_prompt.strip():
        logger.warning(f"parse_refinement_response: Unexpected JSON directive: {payload}")
        raise UnexpectedShapeError("AI returned an unexpected JSON format.")

    return ImageDirective(prompt=new_prompt.strip())


def require_articles(articles: List[NewsArticle]) -> List[NewsArticle]:
    if not articles:
        raise EmptyResultError("model returned an empty article array")
    return articles


def add_topic(topics: Sequence[str], new_topic: str) -> List[str]:
    """Appends a trimmed topic unless it is blank or already present."""
    cleaned = (new_topic or "").strip()
    if not cleaned or cleaned in topics:
        return list(topics)
    return [*topics, cleaned]


def remove_topic(topics: Sequence[str], topic_to_remove: str) -> List[str]:
    return [topic for topic in topics if topic != topic_to_remove]
