"""
Tests for the copy/print/download helpers.
"""

from datetime import datetime

from newsletter_studio.agents.delivery import (
    compose_newsletter_html,
    newsletter_filename,
    newsletter_title,
    render_printable_html,
)
from newsletter_studio.models.newsletter_models import NewsletterDocument

IMAGE_URI = "data:image/png;base64,AAAA"


def test_compose_without_image_is_just_the_body():
    document = NewsletterDocument(body_html="<h1>Title</h1><p>Body</p>")
    assert compose_newsletter_html(document) == "<h1>Title</h1><p>Body</p>"


def test_compose_puts_image_tag_first():
    document = NewsletterDocument(body_html="<h1>Title</h1>", header_image_data_uri=IMAGE_URI)
    composed = compose_newsletter_html(document)

    assert composed.startswith(f'<img src="{IMAGE_URI}" alt="Newsletter Header"')
    assert composed.endswith("<h1>Title</h1>")


def test_title_comes_from_first_h1():
    document = NewsletterDocument(body_html='<h1 class="x">The <em>Weekly</em> &amp; More</h1><h1>Other</h1>')
    assert newsletter_title(document) == "The Weekly & More"


def test_title_missing_without_h1():
    assert newsletter_title(NewsletterDocument(body_html="<p>No heading</p>")) is None


def test_printable_html_inlines_print_styles():
    document = NewsletterDocument(body_html="<h1>Title</h1><p>Read <a href='http://x'>more</a></p>")
    page = render_printable_html(document)

    assert "<title>Title</title>" in page
    assert "<style" not in page
    assert "color:#007bff" in page.replace(" ", "")
    assert "Title</h1>" in page


def test_printable_html_uses_explicit_title():
    page = render_printable_html(NewsletterDocument(body_html="<p>x</p>"), title="Issue <1>")
    assert "<title>Issue &lt;1&gt;</title>" in page


def test_filename_from_title_and_date():
    document = NewsletterDocument(body_html="<h1>The Week in AI: Agents!</h1>")
    assert newsletter_filename(document, today=datetime(2024, 1, 1)) == "the-week-in-ai-agents-2024-01-01.html"


def test_filename_falls_back_to_newsletter():
    document = NewsletterDocument(body_html="<p>nothing</p>")
    assert newsletter_filename(document, suffix=".txt", today=datetime(2024, 3, 9)) == "newsletter-2024-03-09.txt"
