from .evidence import router as evidence_router

__all__ = ["evidence_router"]
