"""
Tests for the prompt builders.
"""

from newsletter_studio.models.newsletter_models import GenerationOptions, NewsArticle, NewsFormat
from newsletter_studio.prompts.generation_prompts import build_draft_prompt
from newsletter_studio.prompts.illustration_prompts import build_image_prompt
from newsletter_studio.prompts.refinement_prompts import build_refinement_prompt
from newsletter_studio.prompts.research_prompts import build_news_query

ARTICLES = [
    NewsArticle(title="Qubits scale up", summary="A new chip.", source="Tech Daily", link="https://example.com/q", date="2024-01-01"),
]


def test_news_query_mentions_topics_window_and_minimum():
    prompt = build_news_query(["Quantum Computing", "Fusion"], 7, recency_hours=48)
    assert "Quantum Computing, Fusion" in prompt
    assert "last 48 hours" in prompt
    assert "at least 7" in prompt


def test_news_query_demands_bare_json_array_with_exact_fields():
    prompt = build_news_query(["AI"], 1)
    assert '"title", "summary", "source", "link", and "date"' in prompt
    assert "JSON array" in prompt
    assert "Do not include any introductory text" in prompt
    assert "```json" in prompt


def test_news_query_is_deterministic():
    assert build_news_query(["AI"], 3) == build_news_query(["AI"], 3)


def test_draft_prompt_carries_options_and_articles(options):
    prompt = build_draft_prompt(ARTICLES, options.model_copy(update={"additional_instructions": "Open with a quote."}))
    assert "Innovate Inc." in prompt
    assert "Technology" in prompt
    assert "Professional" in prompt
    assert "single paragraph" in prompt
    assert "approximately 100 words" in prompt
    assert "Open with a quote." in prompt
    assert "https://example.com/q" in prompt
    assert "starting with <h1>" in prompt
    assert "do not include <style> blocks" in prompt


def test_draft_prompt_without_additional_instructions_says_none(options):
    prompt = build_draft_prompt(ARTICLES, options)
    assert "**Additional Instructions:** None" in prompt


def test_draft_prompt_bullets_format(options):
    prompt = build_draft_prompt(ARTICLES, options.model_copy(update={"news_format": NewsFormat.BULLETS}))
    assert "single bullets" in prompt


def test_refinement_prompt_offers_image_json_or_full_html():
    prompt = build_refinement_prompt("<h1>Current</h1>", ARTICLES, "  change image to mountains ")
    assert '"change image to mountains"' in prompt
    assert "<h1>Current</h1>" in prompt
    assert '{"requestType": "image", "newImagePrompt":' in prompt
    assert "FULL, complete, updated HTML" in prompt
    assert "Never mix the two." in prompt
    assert "Tech Daily" in prompt


def test_image_prompt_from_form_fields():
    opts = GenerationOptions(topics=["AI", "Robotics"], company_name="FutureTech", industry="Manufacturing", visual_keywords="neon, grid")
    prompt = build_image_prompt(opts)
    assert "FutureTech" in prompt
    assert '"AI, Robotics"' in prompt
    assert "neon, grid" in prompt
    assert "Manufacturing audience" in prompt
    assert prompt.endswith("Avoid text.")


def test_image_prompt_uses_fallback_keywords_when_form_is_blank():
    opts = GenerationOptions(topics=["AI"], visual_keywords="  ")
    assert "watercolor, soft" in build_image_prompt(opts, fallback_keywords="watercolor, soft")


def test_custom_image_prompt_overrides_and_still_avoids_text():
    opts = GenerationOptions(topics=["AI"], custom_image_prompt="A lighthouse at night", visual_keywords="neon")
    prompt = build_image_prompt(opts)
    assert prompt == "A lighthouse at night. Avoid text."


def test_custom_image_prompt_that_already_avoids_text_is_untouched():
    opts = GenerationOptions(topics=["AI"], custom_image_prompt="A lighthouse. Avoid text in the image.")
    assert build_image_prompt(opts) == "A lighthouse. Avoid text in the image."
