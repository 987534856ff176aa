"""
AI Agents for Cashbook

Gemini is treated as an external request/response service. The agents
build a prompt, ask for JSON, and parse the answer into Pydantic models.

CRITICAL BOUNDARIES:

1. RECEIPT SCAN AGENT:
   - CAN: Read merchant, date, amount and a category suggestion from a receipt image
   - CANNOT: Create a transaction (the user confirms, the ledger service records)
   - MUST: Raise ReceiptScanError when the answer is unusable

2. ADVISOR AGENT:
   - CAN: Summarise and give tips FROM the transactions it is shown
   - CANNOT: See more than the configured sample of transactions
   - CANNOT: Change any data

The LLM is an ASSISTANT, not a BOOKKEEPER.
Every figure in the ledger comes from the user or a confirmed scan.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import google.generativeai as genai
import structlog
from pydantic import ValidationError

from cashbook.config import GeminiSettings, get_settings
from cashbook.models.ledger import (
    FinancialAdvice,
    ReceiptScan,
    ReportAnalysis,
    Transaction,
)
from cashbook.models.report import Totals
from cashbook.reports.aggregator import summarize


logger = structlog.get_logger(__name__)


class AIServiceError(Exception):
    """Base exception for AI service calls."""
    pass


class ReceiptScanError(AIServiceError):
    """The receipt could not be read."""
    pass


class AdvisorError(AIServiceError):
    """Advice or report analysis could not be generated."""
    pass


def extract_json(text: Optional[str]) -> dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    Models sometimes wrap JSON in prose or code fences, so we take the
    text between the first "{" and the last "}".

    Raises:
        ValueError: If there is no parseable object
    """
    text = (text or "").strip()
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object in model response")
    data = json.loads(text[start:end])
    if not isinstance(data, dict):
        raise ValueError("Model response is not a JSON object")
    return data


def summarize_for_prompt(
    transactions: Iterable[Transaction],
    limit: int = 50,
    currency: str = "IDR",
) -> str:
    """One line per transaction, at most `limit` lines."""
    lines = []
    for t in list(transactions)[:limit]:
        lines.append(f"{t.date or 'no date'}: {t.type.value} - {currency} {t.amount} ({t.category})")
    return "\n".join(lines) or "(no transactions)"


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        # Thousands separators ("12,500")
        if isinstance(value, str):
            value = value.replace(",", "").replace(" ", "")
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


class _GeminiAgent:
    """Shared Gemini setup. The client is configured on first use."""

    max_output_tokens: Optional[int] = None

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
    ):
        self._settings = settings
        self._model = model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        settings = self._settings or get_settings().gemini
        genai.configure(api_key=settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": self.max_output_tokens or settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    @property
    def model(self):
        if self._model is None:
            self._configure_genai()
        return self._model

    async def _ask_json(self, contents: Any) -> dict[str, Any]:
        response = await self.model.generate_content_async(contents)
        return extract_json(response.text)


class ReceiptScanAgent(_GeminiAgent):
    """
    Reads a receipt image into a ReceiptScan.

    RESPONSIBILITIES:
    - Extract merchant, date, total amount and a short description
    - Suggest one category from the configured expense categories

    BOUNDARIES:
    - NEVER records a transaction
    - Missing values stay missing (None), the validator reports them
    """

    max_output_tokens = 512

    def _build_prompt(self, categories: list[str]) -> str:
        allowed = ", ".join(f"'{c}'" for c in categories) or "'Other'"
        return f"""Analyse this shopping receipt image.

Extract the following and respond with ONLY a JSON object:
- merchant: store name
- date: receipt date as YYYY-MM-DD
- amount: the total as a plain number
- category: the single best match from: {allowed}
- description: a short summary of the purchased items
- items: list of item names

Format:
{{"merchant": "...", "date": "YYYY-MM-DD", "amount": 0, "category": "...", "description": "...", "items": []}}

If something cannot be read, give your best estimate."""

    async def scan(
        self,
        image_bytes: bytes,
        mime_type: str,
        categories: list[str],
    ) -> ReceiptScan:
        """
        Scan a receipt image.

        Args:
            image_bytes: Raw image data
            mime_type: e.g. "image/jpeg"
            categories: Expense categories the model may choose from

        Raises:
            ReceiptScanError: If the service fails or the answer is unusable
        """
        if not image_bytes:
            raise ReceiptScanError("Empty image")

        contents = [
            {"mime_type": mime_type, "data": image_bytes},
            self._build_prompt(categories),
        ]
        try:
            data = await self._ask_json(contents)
        except ValueError as e:
            raise ReceiptScanError(f"Unreadable scan result: {e}")
        except Exception as e:
            raise ReceiptScanError(f"Receipt scan failed: {e}")

        try:
            scan = ReceiptScan(
                merchant=data.get("merchant") or None,
                date=data.get("date") or None,
                amount=_parse_amount(data.get("amount")),
                category=data.get("category") or None,
                description=data.get("description") or None,
                items=[str(i) for i in data.get("items") or [] if i],
            )
        except (ValidationError, TypeError) as e:
            raise ReceiptScanError(f"Unexpected scan result: {e}")

        logger.info("receipt_scanned", scan_id=scan.scan_id, merchant=scan.merchant)
        return scan


class AdvisorAgent(_GeminiAgent):
    """
    Financial advice over recent transactions.

    BOUNDARIES:
    - Sees at most `sample_size` transactions
    - Works only from the figures it is given
    """

    max_output_tokens = 1024

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
        sample_size: int = 50,
        currency: str = "IDR",
    ):
        super().__init__(settings=settings, model=model)
        self._sample_size = sample_size
        self._currency = currency

    async def get_advice(self, transactions: list[Transaction]) -> FinancialAdvice:
        """
        Short analysis plus three actionable tips.

        Raises:
            AdvisorError: If the service fails or the answer is unusable
        """
        summary = summarize_for_prompt(transactions, self._sample_size, self._currency)
        prompt = f"""Act as a senior financial consultant for a small business.
Here is the recent transaction history (at most {self._sample_size} entries):
{summary}

Give a short analysis and 3 tactical tips that can be applied right away to
increase profit or reduce costs. Use professional but plain language.

Respond with ONLY a JSON object: {{"analysis": "...", "tips": ["...", "...", "..."]}}"""

        try:
            data = await self._ask_json(prompt)
            return FinancialAdvice(
                analysis=str(data.get("analysis") or ""),
                tips=[str(t) for t in data.get("tips") or []],
            )
        except (ValueError, ValidationError) as e:
            raise AdvisorError(f"Unreadable advice result: {e}")
        except Exception as e:
            raise AdvisorError(f"Advice request failed: {e}")

    async def analyze_report(
        self,
        transactions: list[Transaction],
        period_label: str,
        totals: Optional[Totals] = None,
    ) -> ReportAnalysis:
        """
        Two or three summary points about one report period.

        Raises:
            AdvisorError: If the service fails or the answer is unusable
        """
        totals = totals or summarize(transactions)
        summary = summarize_for_prompt(transactions, self._sample_size, self._currency)
        c = self._currency
        prompt = f"""Act as a business financial analyst.
Analyse the following figures for the period: {period_label}.

Period summary:
- Total income: {c} {totals.income}
- Total expense: {c} {totals.expense}
- Net cash flow: {c} {totals.net}

Transactions (sample of the latest {self._sample_size}):
{summary}

Give 2-3 key points about:
1. The trend (is income or expense rising or falling)
2. Anomalies (unusually large expenses)
3. A short efficiency insight

Respond with ONLY a JSON object: {{"summary": ["point 1", "point 2", "point 3"]}}"""

        try:
            data = await self._ask_json(prompt)
            return ReportAnalysis(summary=[str(p) for p in data.get("summary") or []])
        except (ValueError, ValidationError) as e:
            raise AdvisorError(f"Unreadable analysis result: {e}")
        except Exception as e:
            raise AdvisorError(f"Report analysis failed: {e}")


def expense_categories_hint(categories: Iterable[str]) -> list[str]:
    """Categories offered to the scan agent; 'Other' is always available."""
    hint = [c for c in categories if c]
    if "Other" not in hint:
        hint.append("Other")
    return hint
