from typing import Sequence

from langchain_core.prompts import ChatPromptTemplate

from newsletter_studio.models.newsletter_models import NewsArticle
from newsletter_studio.prompts.generation_prompts import articles_to_json

# Prompt for iterative refinement.
# The answer is either the image JSON object or the full replacement HTML; parse_refinement_response tells them apart.
REFINEMENT_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an AI assistant helping a user refine a newsletter. You will be given the current newsletter HTML, "
            "the original news articles it was based on, and a user's request for changes. "
            "Your task is to process the request and provide an updated newsletter."
        ),
        (
            "human",
            "**User Request:** \"{user_directive}\"\n\n"
            "**Current Newsletter HTML:**\n"
            "{current_html}\n\n"
            "**Original News Articles (for context, including publication dates):**\n"
            "{articles_json}\n\n"
            "**Instructions:**\n"
            "1. **Analyze the User Request:** Understand what the user wants to change. This could be content, style, "
            "structure, or even the header image.\n"
            "2. **Handle Image Requests:** If the user asks for a new image (e.g., \"change the image to be about space "
            "exploration\"), you MUST ONLY respond with a JSON object of this exact format: "
            "{{\"requestType\": \"image\", \"newImagePrompt\": \"a detailed prompt for the new image based on the user request\"}}. "
            "Do not return any HTML or other text.\n"
            "3. **Handle Content/Data Requests:** If the user asks to add information like dates, use the "
            "\"Original News Articles\" data. For example, if asked to add dates, modify the HTML to include them next "
            "to the article headings.\n"
            "4. **Handle Style/Theme Changes:** For requests involving visual changes (e.g., \"make it look more futuristic\", "
            "\"change the colors\"), add or modify inline CSS styles directly on the HTML elements. "
            "Do not add <style> blocks.\n"
            "5. **Return Full HTML:** For any request that is not an image change, you must return the FULL, complete, "
            "updated HTML for the newsletter body. Never return a diff or only the changed part.\n"
            "6. **Output Format:**\n"
            "   - If it's an image request, output ONLY the JSON object described in step 2.\n"
            "   - For all other requests, output ONLY the updated HTML.\n"
            "   - Never mix the two.\n\n"
            "Now, generate the response based on the user's request."
        ),
    ]
)


def build_refinement_prompt(current_html: str, articles: Sequence[NewsArticle], user_directive: str) -> str:
    return REFINEMENT_PROMPT.format(
        user_directive=user_directive.strip(),
        current_html=current_html,
        articles_json=articles_to_json(articles),
    )
