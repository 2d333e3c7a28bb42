import html
import re
from datetime import datetime
from typing import Optional

import premailer

from newsletter_studio.models.newsletter_models import NewsletterDocument
from newsletter_studio.utils import logger

HEADER_IMAGE_TAG = (
    '<img src="{src}" alt="Newsletter Header" '
    'style="width:100%;height:auto;margin-bottom:24px;border-radius:8px;" />\n'
)

# --- Print-friendly page. Premailer inlines these rules so the file renders the same anywhere. ---
PRINTABLE_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style type="text/css">
        body {{ font-family: sans-serif; line-height: 1.6; color: #111; }}
        img {{ max-width: 100%; height: auto; }}
        a {{ color: #007bff; text-decoration: none; }}
        h1, h2, h3, h4, h5, h6 {{ color: #333; }}
        hr {{ border: 0; border-top: 1px solid #ccc; }}
    </style>
</head>
<body>
{content_html}
</body>
</html>
"""

_H1_PATTERN = re.compile(r"<h1[^>]*>([\s\S]*?)</h1>", re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<[^>]+>")


def compose_newsletter_html(document: NewsletterDocument) -> str:
    """
    Returns the HTML a user would paste into their mail tool: the header image (if any) followed by the body.
    """
    final_html = ""
    if document.header_image_data_uri:
        final_html += HEADER_IMAGE_TAG.format(src=document.header_image_data_uri)
    final_html += document.body_html
    return final_html


def newsletter_title(document: NewsletterDocument) -> Optional[str]:
    """Plain text of the first <h1>, if the body has one."""
    match = _H1_PATTERN.search(document.body_html)
    if not match:
        return None
    title = html.unescape(_TAG_PATTERN.sub("", match.group(1))).strip()
    return title or None


def render_printable_html(document: NewsletterDocument, title: Optional[str] = None) -> str:
    """
    Wraps the newsletter in a standalone page with print styles, inlined with Premailer.
    """
    page_title = title or newsletter_title(document) or "Newsletter"
    page = PRINTABLE_HTML_TEMPLATE.format(
        title=html.escape(page_title),
        content_html=compose_newsletter_html(document),
    )
    inlined = premailer.transform(page)
    logger.info("DELIVERY AGENT: CSS inlined successfully using Premailer.")
    return inlined


def newsletter_filename(document: NewsletterDocument, suffix: str = "html", today: Optional[datetime] = None) -> str:
    """
    File name for downloads, e.g. 'the-week-in-ai-2024-01-01.html'.
    """
    title = newsletter_title(document) or "newsletter"
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")[:60].strip("-") or "newsletter"
    date_part = (today or datetime.now()).strftime("%Y-%m-%d")
    return f"{slug}-{date_part}.{suffix.lstrip('.')}"
