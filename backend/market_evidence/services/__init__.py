from .keyword_deriver import derive_keywords
from .query_builder import build_search_queries
from .web_search_client import search, search_many
from .forum_search_client import search_forum
from .competitor_extractor import extract_competitors
from .competitor_cleaner import filter_competitors, normalize_competitors
from .evidence_normalizer import normalize_evidence, generate_competitor_summary
from .signal_scorer import compute_signals, empty_signals

__all__ = [
    "derive_keywords",
    "build_search_queries",
    "search",
    "search_many",
    "search_forum",
    "extract_competitors",
    "filter_competitors",
    "normalize_competitors",
    "normalize_evidence",
    "generate_competitor_summary",
    "compute_signals",
    "empty_signals",
]
