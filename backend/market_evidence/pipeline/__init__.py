# Evidence pipeline package
from .graph import evidence_graph, create_evidence_graph
from .orchestrator import build_evidence, build_evidence_for_request
from .timing import with_timeout

__all__ = [
    "evidence_graph",
    "create_evidence_graph",
    "build_evidence",
    "build_evidence_for_request",
    "with_timeout",
]
