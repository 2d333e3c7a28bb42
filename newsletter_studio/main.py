import sys
from functools import partial

from langgraph.graph import END, StateGraph

from newsletter_studio.agents.generation import generation_agent_node
from newsletter_studio.agents.illustration import illustration_agent_node, should_illustrate
from newsletter_studio.agents.research import research_agent_node
from newsletter_studio.config import get_settings
from newsletter_studio.models.newsletter_models import GenerationOptions
from newsletter_studio.state import WorkflowState
from newsletter_studio.utils import logger


# --- Define the graph ---
def create_generation_workflow(client):
    """
    Defines and compiles the LangGraph workflow for one generation cycle:
    research -> generation -> (optional) illustration.
    """
    workflow = StateGraph(WorkflowState)

    # 1. Add Nodes for each Agent, bound to the injected AI client
    workflow.add_node("research", partial(research_agent_node, client=client))
    workflow.add_node("generation", partial(generation_agent_node, client=client))
    workflow.add_node("illustration", partial(illustration_agent_node, client=client))

    # 2. Set Entry Point
    workflow.set_entry_point("research")

    # 3. Define Edges (Transitions). A failing node raises and ends the run.
    workflow.add_edge("research", "generation")
    workflow.add_conditional_edges(
        "generation",
        should_illustrate,
        {
            "illustrate": "illustration",
            "finish": END,
        }
    )
    workflow.add_edge("illustration", END)

    # 4. Compile the graph
    app = workflow.compile()
    logger.info("LangGraph workflow compiled successfully.")
    return app


def _default_options(topics):
    settings = get_settings()
    return GenerationOptions(
        topics=topics or settings.get_default_topics_list(),
        industry=settings.DEFAULT_INDUSTRY,
        company_name=settings.DEFAULT_COMPANY_NAME,
        tone=settings.DEFAULT_TONE,
        news_format=settings.DEFAULT_NEWS_FORMAT,
        word_length=settings.DEFAULT_WORD_LENGTH,
        min_articles=settings.DEFAULT_MIN_ARTICLES,
        visual_keywords=settings.DEFAULT_VISUAL_KEYWORDS,
        generate_image=False,
    )


# --- Main execution logic ---
if __name__ == "__main__":
    from newsletter_studio.orchestrator import NewsletterOrchestrator
    from newsletter_studio.tools.llm_interface import get_default_client

    logger.info("--- Starting Newsletter Studio generation ---")
    orchestrator = NewsletterOrchestrator(get_default_client())
    session = orchestrator.run_generation(_default_options(sys.argv[1:]), on_progress=logger.info)

    if session.error:
        print(f"\n**FAILURE: {session.error}**")
        sys.exit(1)
    if session.warning:
        print(f"\n**WARNING: {session.warning}**")
    print(f"\nResearched {len(session.articles)} articles.\n")
    print(session.document.body_html)
