"""
Tests for pulling JSON arrays, refinement directives and HTML bodies out of raw model text.
"""

import pytest

from newsletter_studio.exceptions import ExtractionError, ParseError, UnexpectedShapeError
from newsletter_studio.models.newsletter_models import GenerationOptions, HtmlDirective, ImageDirective, NewsArticle
from newsletter_studio.utils import (
    add_topic,
    extract_html_body,
    extract_json_array,
    parse_news_articles,
    parse_refinement_response,
    remove_topic,
    strip_code_fences,
)


class TestExtractJsonArray:
    """Locating and parsing the news array."""

    def test_fenced_array_with_surrounding_prose(self):
        text = 'Here are the results:\n```json\n[{"a": 1}, {"a": 2}]\n```\nLet me know if you need more.'
        assert extract_json_array(text) == [{"a": 1}, {"a": 2}]

    def test_untagged_fence(self):
        assert extract_json_array("```\n[1, 2, 3]\n```") == [1, 2, 3]

    def test_uppercase_fence_wins_over_brackets_in_prose(self):
        text = 'Top [3] stories:\n```JSON\n[{"a": 1}]\n```'
        assert extract_json_array(text) == [{"a": 1}]

    def test_bare_array_between_first_and_last_bracket(self):
        text = 'Sure! [{"title": "A", "tags": ["x", "y"]}] Hope this helps.'
        assert extract_json_array(text) == [{"title": "A", "tags": ["x", "y"]}]

    def test_no_bracket_is_extraction_error(self):
        with pytest.raises(ExtractionError) as exc_info:
            extract_json_array("I could not find any news today.")
        assert not isinstance(exc_info.value, ParseError)
        assert "Could not find a JSON array" in exc_info.value.user_message

    def test_reversed_brackets_is_extraction_error(self):
        with pytest.raises(ExtractionError):
            extract_json_array("] nothing here [")

    def test_malformed_json_is_parse_error(self):
        with pytest.raises(ParseError):
            extract_json_array('[{"title": "A",}]')

    def test_empty_array_is_returned_as_is(self):
        assert extract_json_array("```json\n[]\n```") == []

    def test_input_string_is_left_untouched(self):
        text = '  [{"a": 1}]  '
        extract_json_array(text)
        assert text == '  [{"a": 1}]  '


class TestParseNewsArticles:

    def test_fenced_single_article(self):
        text = '```json\n[{"title":"T","summary":"S","source":"Src","link":"http://x","date":"2024-01-01"}]\n```'
        articles = parse_news_articles(text)
        assert articles == [NewsArticle(title="T", summary="S", source="Src", link="http://x", date="2024-01-01")]

    def test_missing_and_null_fields_become_empty_strings(self):
        articles = parse_news_articles('[{"title": "Only a title", "date": null}]')
        assert articles[0].title == "Only a title"
        assert articles[0].date == ""
        assert articles[0].link == ""

    def test_non_object_item_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShapeError):
            parse_news_articles('["just a headline"]')

    def test_empty_array_yields_no_articles(self):
        assert parse_news_articles("[]") == []


class TestExtractHtmlBody:

    def test_html_fences_are_stripped(self):
        assert extract_html_body("```html\n<h1>Title</h1><p>Body</p>\n```") == "<h1>Title</h1><p>Body</p>"

    def test_unfenced_html_is_trimmed(self):
        assert extract_html_body("\n\n  <h1>Hi</h1>\n ") == "<h1>Hi</h1>"

    def test_empty_response_is_extraction_error(self):
        with pytest.raises(ExtractionError):
            extract_html_body("   ")

    def test_strip_code_fences_without_fence_returns_trimmed_text(self):
        assert strip_code_fences("  plain text ") == "plain text"


class TestParseRefinementResponse:

    def test_image_directive(self):
        directive = parse_refinement_response('{"requestType":"image","newImagePrompt":"mountains at dawn"}')
        assert directive == ImageDirective(prompt="mountains at dawn")
        assert directive.kind == "image"

    def test_fenced_image_directive(self):
        directive = parse_refinement_response('```json\n{"requestType": "image", "newImagePrompt": "a calm sea"}\n```')
        assert isinstance(directive, ImageDirective)
        assert directive.prompt == "a calm sea"

    def test_html_body(self):
        directive = parse_refinement_response("<h1>New</h1><p>Updated</p>")
        assert directive == HtmlDirective(body="<h1>New</h1><p>Updated</p>")
        assert directive.kind == "html"

    def test_fenced_html_body(self):
        directive = parse_refinement_response("```html\n<h1>New</h1>\n```")
        assert directive == HtmlDirective(body="<h1>New</h1>")

    def test_object_without_directive_fields_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShapeError):
            parse_refinement_response('{"requestType": "text", "body": "<h1>x</h1>"}')

    def test_image_directive_with_blank_prompt_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShapeError):
            parse_refinement_response('{"requestType": "image", "newImagePrompt": "  "}')

    def test_broken_object_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_refinement_response('{"requestType": "image", newImagePrompt: }')

    def test_empty_response_is_extraction_error(self):
        with pytest.raises(ExtractionError):
            parse_refinement_response("")


class TestTopicHelpers:

    def test_add_topic_trims_and_appends(self):
        assert add_topic(["AI"], "  Robotics ") == ["AI", "Robotics"]

    def test_add_topic_ignores_blank_and_duplicates(self):
        assert add_topic(["AI"], "   ") == ["AI"]
        assert add_topic(["AI"], "AI") == ["AI"]

    def test_remove_topic(self):
        assert remove_topic(["AI", "Robotics"], "AI") == ["Robotics"]

    def test_options_dedupe_topics_in_order(self):
        options = GenerationOptions(topics=[" AI", "Robotics", "AI", "", "ai"])
        assert options.topics == ["AI", "Robotics", "ai"]

    def test_options_accept_a_single_topic_string(self):
        assert GenerationOptions(topics="AI in healthcare").topics == ["AI in healthcare"]
