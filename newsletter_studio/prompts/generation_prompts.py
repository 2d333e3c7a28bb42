import json
from typing import Sequence

from langchain_core.prompts import ChatPromptTemplate

from newsletter_studio.models.newsletter_models import GenerationOptions, NewsArticle

# Prompt for drafting the newsletter body.
# Output is an HTML fragment (no <html>/<body>, no <style>) so it can be previewed and pasted anywhere.
GENERATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an expert content creator for \"{company_name}\", a leading voice in the {industry} sector. "
            "Your task is to generate a professional newsletter. "
            "The audience is savvy and expects high-quality, relevant information."
        ),
        (
            "human",
            "**Newsletter Specifications:**\n"
            "- **Company:** {company_name}\n"
            "- **Industry:** {industry}\n"
            "- **Tone:** {tone}. The writing must reflect this tone consistently.\n"
            "- **News Format:** Each news summary should be a single {news_format}.\n"
            "- **Summary Length:** Each summary should be approximately {word_length} words.\n"
            "- **Additional Instructions:** {additional_instructions}\n\n"
            "**Instructions:**\n"
            "1. **Main Title:** Create one compelling title for the newsletter that reflects the key themes.\n"
            "2. **Introduction:** Write a short, engaging introduction (2-3 sentences) that sets the stage.\n"
            "3. **Article Sections:** For each article, create a section with:\n"
            "   - A clear, bolded heading (<h4>) with the publication date next to it in a smaller, subtle format "
            "(e.g., using a <small> tag).\n"
            "   - A summary of the article, adhering to the specified format ({news_format}) and length (~{word_length} words).\n"
            "   - A \"Read More\" link (<a>) to the original article, using the source name as the link text.\n"
            "4. **Closing:** Add a brief closing remark.\n"
            "5. **Styling:** Generate clean, modern HTML. Prioritize semantic tags like <h1>, <h2>, <p>, <h4>, <a>, "
            "<strong>, <em>, <ul>, <li>, and <hr>. You may use tasteful inline CSS for styling, "
            "but do not include <style> blocks.\n"
            "6. **Output:** Provide a single block of HTML code, starting with <h1>.\n\n"
            "**News Articles Data (with publication dates):**\n"
            "{articles_json}"
        ),
    ]
)


def articles_to_json(articles: Sequence[NewsArticle]) -> str:
    return json.dumps([article.model_dump() for article in articles], indent=2, ensure_ascii=False)


def build_draft_prompt(articles: Sequence[NewsArticle], options: GenerationOptions) -> str:
    additional = (options.additional_instructions or "").strip()
    return GENERATION_PROMPT.format(
        company_name=options.company_name,
        industry=options.industry,
        tone=options.tone.value,
        news_format=options.news_format.value,
        word_length=options.word_length,
        additional_instructions=additional or "None",
        articles_json=articles_to_json(articles),
    )
