import logging
import uuid

import streamlit as st
import streamlit.components.v1 as components

from newsletter_studio.agents.delivery import compose_newsletter_html, newsletter_filename, render_printable_html
from newsletter_studio.config import get_settings
from newsletter_studio.exceptions import ConfigurationError
from newsletter_studio.models.newsletter_models import GenerationOptions, NewsFormat, Tone
from newsletter_studio.orchestrator import NewsletterOrchestrator
from newsletter_studio.state import SessionState
from newsletter_studio.tools.llm_interface import get_default_client
from newsletter_studio.utils import SessionLogHandler, add_topic, capture_session_logs, remove_topic

# --- Streamlit App Configuration ---
st.set_page_config(
    page_title="Newsletter Studio",
    page_icon="🗞️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("🗞️ Newsletter Studio")
st.markdown(
    "Pick your topics and style. The app researches the latest news with **Gemini + Google Search**, "
    "drafts an HTML newsletter, paints a header image and lets you refine the result in plain English."
)

settings = get_settings()


@st.cache_resource
def get_ai_client():
    """Caches the Gemini client for the whole server process."""
    return get_default_client()


def get_orchestrator() -> NewsletterOrchestrator:
    if "orchestrator" not in st.session_state:
        st.session_state["orchestrator"] = NewsletterOrchestrator(get_ai_client())
    return st.session_state["orchestrator"]


# Collects this session's log lines for the "Activity log" expander. It is attached only while a cycle runs.
def get_log_handler() -> SessionLogHandler:
    if "log_handler" not in st.session_state:
        handler = SessionLogHandler(session_id=str(uuid.uuid4()))
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        handler.setLevel(logging.INFO)
        st.session_state["log_handler"] = handler
    return st.session_state["log_handler"]


try:
    orchestrator = get_orchestrator()
except ConfigurationError as e:
    st.error(e.user_message)
    st.stop()

log_handler = get_log_handler()

# --- Form state defaults ---
if "topics" not in st.session_state:
    st.session_state["topics"] = settings.get_default_topics_list()
if "refinement_prompt" not in st.session_state:
    st.session_state["refinement_prompt"] = ""


def handle_add_topic():
    st.session_state["topics"] = add_topic(st.session_state["topics"], st.session_state.get("new_topic", ""))
    st.session_state["new_topic"] = ""


def handle_remove_topic(topic: str):
    st.session_state["topics"] = remove_topic(st.session_state["topics"], topic)


def handle_refine():
    with capture_session_logs(get_log_handler()), st.spinner("Refining your newsletter..."):
        orchestrator.run_refinement(st.session_state["refinement_prompt"])
    # The instruction box is cleared whatever the outcome
    st.session_state["refinement_prompt"] = ""


# --- Sidebar ---
with st.sidebar:
    st.header("Configuration")
    st.info("Settings come from Streamlit secrets, environment variables or a `.env` file.")
    st.write(f"**Text model:** `{settings.TEXT_MODEL_NAME}`")
    st.write(f"**Image model:** `{settings.IMAGE_MODEL_NAME}`")
    st.write(f"**News window:** last {settings.NEWS_RECENCY_HOURS} hours")
    if st.button("Reset Session"):
        for key in ("orchestrator", "topics", "refinement_prompt", "log_handler"):
            st.session_state.pop(key, None)
        st.rerun()
    st.markdown("---")
    st.caption("Newsletter Studio v1.0")


# --- Command Center ---
session: SessionState = orchestrator.snapshot()

st.header("Command Center")
st.caption("Configure the parameters for your AI-powered newsletter.")

st.subheader("Newsletter Topics")
topic_col, add_col = st.columns([4, 1])
with topic_col:
    st.text_input("Add a topic", key="new_topic", placeholder="e.g., Quantum Computing", label_visibility="collapsed")
with add_col:
    st.button("Add Topic", on_click=handle_add_topic, use_container_width=True)

if st.session_state["topics"]:
    chip_cols = st.columns(min(len(st.session_state["topics"]), 4))
    for index, topic in enumerate(st.session_state["topics"]):
        with chip_cols[index % len(chip_cols)]:
            st.button(f"✕ {topic}", key=f"remove_topic_{index}", on_click=handle_remove_topic, args=(topic,))
else:
    st.caption("No topics yet. Add at least one to generate.")

left, right = st.columns(2)
with left:
    industry = st.text_input("Industry / Domain", value=settings.DEFAULT_INDUSTRY, placeholder="e.g., Artificial Intelligence")
    min_articles = st.number_input("Min. News Articles", min_value=1, max_value=10, value=settings.DEFAULT_MIN_ARTICLES)
    tone_values = [tone.value for tone in Tone]
    tone = st.selectbox(
        "Tone",
        tone_values,
        index=tone_values.index(settings.DEFAULT_TONE) if settings.DEFAULT_TONE in tone_values else 0,
    )
with right:
    company_name = st.text_input("Company Name", value=settings.DEFAULT_COMPANY_NAME, placeholder="e.g., FutureTech")
    word_length = st.number_input("Word Length / Summary", min_value=20, step=10, value=settings.DEFAULT_WORD_LENGTH)
    format_values = [news_format.value for news_format in NewsFormat]
    news_format = st.selectbox(
        "News Format",
        format_values,
        index=format_values.index(settings.DEFAULT_NEWS_FORMAT) if settings.DEFAULT_NEWS_FORMAT in format_values else 0,
        format_func=str.capitalize,
    )

visual_keywords = st.text_input("Visual Design Keywords", value=settings.DEFAULT_VISUAL_KEYWORDS, placeholder="modern, abstract, tech, vibrant")
custom_image_prompt = st.text_area("Custom Image Prompt (Optional)", placeholder="Overrides visual keywords if filled.", height=70)
additional_instructions = st.text_area("Additional Instructions (Optional)", placeholder="e.g., Start with a quote about AI.", height=70)
generate_image = st.checkbox("Generate Header Image", value=True)

generate_clicked = st.button(
    "🚀 GENERATE",
    type="primary",
    disabled=session.is_busy or not st.session_state["topics"],
    use_container_width=True,
)

if generate_clicked:
    options = GenerationOptions(
        topics=st.session_state["topics"],
        industry=industry,
        company_name=company_name,
        tone=tone,
        news_format=news_format,
        word_length=int(word_length),
        min_articles=int(min_articles),
        additional_instructions=additional_instructions or None,
        visual_keywords=visual_keywords,
        custom_image_prompt=custom_image_prompt or None,
        generate_image=generate_image,
    )
    with capture_session_logs(log_handler), st.status("Starting...", expanded=False) as status_box:
        result = orchestrator.run_generation(options, on_progress=lambda message: status_box.update(label=message))
        status_box.update(label="Failed" if result.error else "Done", state="error" if result.error else "complete")

session = orchestrator.snapshot()

if session.error:
    st.error(f"**Error:** {session.error}")
if session.warning:
    st.warning(session.warning)


# --- Preview & Refinement ---
def render_preview(session: SessionState):
    document = session.document
    st.header("Preview")

    download_col, print_col = st.columns(2)
    with download_col:
        st.download_button(
            "Download HTML",
            data=compose_newsletter_html(document),
            file_name=newsletter_filename(document),
            mime="text/html",
            use_container_width=True,
        )
    with print_col:
        st.download_button(
            "Download Printable Page",
            data=render_printable_html(document),
            file_name=newsletter_filename(document, suffix="print.html"),
            mime="text/html",
            use_container_width=True,
        )

    components.html(compose_newsletter_html(document), height=900, scrolling=True)

    with st.expander("Copy HTML source"):
        st.code(compose_newsletter_html(document), language="html")

    with st.expander(f"Researched Articles ({len(session.articles)})"):
        for i, article in enumerate(session.articles):
            st.markdown(f"**{i+1}. {article.title}**")
            st.write(f"{article.source} · {article.date}")
            if article.link:
                st.write(f"URL: [{article.link}]({article.link})")
            st.write(article.summary)
            st.markdown("---")


if session.document is not None:
    render_preview(session)

    st.header("Refine with AI")
    st.caption('Describe any changes. e.g., "Make the intro more exciting", "Change the header image to be about renewable energy"')
    st.text_area("Your instructions", key="refinement_prompt", placeholder="Enter your instructions...", height=100, disabled=session.is_busy)
    st.button(
        "Refine Newsletter",
        on_click=handle_refine,
        disabled=session.is_busy,
    )

with st.expander("Activity log"):
    st.text("\n".join(log_handler.log_messages) or "No activity yet.")
