"""Structured logging for vendor provider calls."""

import logging
from typing import Any

from backend.app.tools.executor import ProviderCallContext

logger = logging.getLogger(__name__)


class StructuredProviderLogger:
    """Emits one record per provider attempt; failures at WARNING."""

    def log_attempt(
        self,
        ctx: ProviderCallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        structured: dict[str, Any] = {
            "session_id": ctx.session_id,
            "category": ctx.category,
            "provider": ctx.provider,
            "attempt": attempt,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }
        if error_reason:
            structured["error_reason"] = error_reason

        level = logging.INFO if outcome == "success" else logging.WARNING
        logger.log(
            level,
            f"Provider call: {ctx.provider} - {outcome}",
            extra={"structured": structured},
        )
