from typing import Sequence

from langchain_core.prompts import ChatPromptTemplate

# Prompt for the search-grounded news lookup.
# The model is asked for a bare JSON array; extract_json_array still copes with fences and chatter.
NEWS_SEARCH_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a news researcher with access to web search. You find recent, significant news "
            "and report it as structured data."
        ),
        (
            "human",
            "Find the most recent (within the last {recency_hours} hours), top trending news articles for the "
            "following topics: {topics}.\n"
            "Focus on significant developments and announcements. For each article, find its title, a brief summary, "
            "the source website, a direct link, and its publication date.\n"
            "Return at least {min_articles} diverse articles in total across all topics. Ensure the links are valid.\n"
            "Format the output as a valid JSON array of objects, where each object has exactly these keys: "
            "\"title\", \"summary\", \"source\", \"link\", and \"date\".\n"
            "Do not include any introductory text, closing text, or markdown formatting like ```json. "
            "The entire response should be only the JSON array."
        ),
    ]
)


def build_news_query(topics: Sequence[str], min_article_count: int, recency_hours: int = 48) -> str:
    return NEWS_SEARCH_PROMPT.format(
        topics=", ".join(topics),
        min_articles=min_article_count,
        recency_hours=recency_hours,
    )
