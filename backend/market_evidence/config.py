"""Runtime configuration helpers.

Exposes ONLY non-sensitive values: whether each provider has credentials.
Secret values are read by the clients themselves at call time.
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel

logger = logging.getLogger(__name__)

SERPER_API_KEY_ENV = "SERPER_API_KEY"
GOOGLE_CSE_API_KEY_ENV = "GOOGLE_CSE_API_KEY"
GOOGLE_CSE_CX_ENV = "GOOGLE_CSE_CX"

_has_logged_diagnostics = False


class SearchEnv(BaseModel):
    """Credential presence flags for the web-search providers."""

    serper_configured: bool
    google_cse_configured: bool

    @property
    def configured(self) -> bool:
        return self.serper_configured or self.google_cse_configured


def _present(name: str) -> bool:
    return bool(os.getenv(name, "").strip())


def get_search_env() -> SearchEnv:
    """Snapshot which web-search providers have credentials set."""
    return SearchEnv(
        serper_configured=_present(SERPER_API_KEY_ENV),
        google_cse_configured=_present(GOOGLE_CSE_API_KEY_ENV) and _present(GOOGLE_CSE_CX_ENV),
    )


def log_runtime_env_diagnostics_once(context: str) -> None:
    """Log a one-time snapshot of provider configuration (booleans only)."""
    global _has_logged_diagnostics
    if _has_logged_diagnostics:
        return
    _has_logged_diagnostics = True

    env = get_search_env()
    logger.info("[Config] Runtime env diagnostics context=%s", context)
    logger.info("[Config] Serper.dev configured=%s", env.serper_configured)
    logger.info("[Config] Google CSE configured=%s", env.google_cse_configured)
    logger.info("[Config] Hacker News configured=True (no credentials required)")
