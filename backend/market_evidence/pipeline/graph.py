from langgraph.graph import StateGraph, START, END

from .state import EvidenceState
from .nodes import (
    build_queries,
    fetch_web,
    fetch_forum,
    extract_competitors_node,
    normalize,
    score,
)
from .timing import log_timing


def create_evidence_graph() -> StateGraph:
    """
    Create the evidence pipeline graph.

    Structure:
    START -> build_queries
          -> [fetch_web, fetch_forum] (parallel, each under its own deadline)
          -> extract_competitors
          -> normalize
          -> score
          -> END
    """
    log_timing("graph", "Creating evidence graph")

    graph = StateGraph(EvidenceState)

    graph.add_node("build_queries", build_queries)
    graph.add_node("fetch_web", fetch_web)
    graph.add_node("fetch_forum", fetch_forum)
    graph.add_node("extract_competitors", extract_competitors_node)
    graph.add_node("normalize", normalize)
    graph.add_node("score", score)

    graph.add_edge(START, "build_queries")

    # Both sources start together once queries exist
    graph.add_edge("build_queries", "fetch_web")
    graph.add_edge("build_queries", "fetch_forum")

    # Join: extraction waits for both fetches
    graph.add_edge(["fetch_web", "fetch_forum"], "extract_competitors")

    graph.add_edge("extract_competitors", "normalize")
    graph.add_edge("normalize", "score")
    graph.add_edge("score", END)

    return graph


evidence_graph = create_evidence_graph().compile()
