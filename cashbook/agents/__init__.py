"""AI Agents package."""

from cashbook.agents.ai_agents import (
    AdvisorAgent,
    AdvisorError,
    AIServiceError,
    ReceiptScanAgent,
    ReceiptScanError,
    expense_categories_hint,
    extract_json,
    summarize_for_prompt,
)

__all__ = [
    "AdvisorAgent",
    "AdvisorError",
    "AIServiceError",
    "ReceiptScanAgent",
    "ReceiptScanError",
    "expense_categories_hint",
    "extract_json",
    "summarize_for_prompt",
]
