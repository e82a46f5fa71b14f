"""
AI advisory text for the dashboard and the inventory editor.

Kept entirely outside the register core. Providers may fail for any reason
(missing key, network, bad response); callers go through safe_summarize /
safe_describe, which turn every failure into a fixed advisory message.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence

import requests

from db.models import Transaction
from pos.pricing import format_money
from pos.reports import CatalogStats
from utils.logger import get_logger

_logger = get_logger(__name__)

INSIGHTS_UNAVAILABLE = "Unable to generate insights at this time. Please check your API key."
DESCRIPTION_UNAVAILABLE = "Could not generate description."


class InsightsUnavailable(Exception):
    """Raised by a provider that cannot produce text."""


class InsightsProvider(Protocol):
    def summarize_business(
        self, stats: CatalogStats, recent_transactions: Sequence[Transaction]
    ) -> str: ...

    def describe_product(self, name: str, category: str) -> str: ...


def business_prompt(stats: CatalogStats, recent_transactions: Sequence[Transaction]) -> str:
    return (
        "You are an expert retail analyst. Analyze the following store data and provide "
        "3 concise, actionable bullet points for the store owner.\n"
        "Focus on inventory health, sales trends, and immediate actions needed.\n\n"
        "Data:\n"
        f"- Total Revenue (All Time): {format_money(stats.total_revenue)}\n"
        f"- Low Stock Items (<10 units): {', '.join(stats.low_stock) or 'None'}\n"
        f"- Expired/Expiring Items: {', '.join(stats.expired) or 'None'}\n"
        f"- Recent Transaction Count: {len(recent_transactions)}\n\n"
        "Keep the tone professional yet encouraging."
    )


def product_prompt(name: str, category: str) -> str:
    return (
        "Write a short, catchy 1-sentence product description for a retail point of sale "
        f'display. Product: "{name}", Category: "{category}".'
    )


class GeminiInsightsProvider:
    """
    Calls the Gemini generateContent REST endpoint.
    """

    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def _generate(self, prompt: str) -> str:
        if not self.api_key:
            raise InsightsUnavailable("GEMINI_API_KEY is not configured.")

        try:
            response = self.session.post(
                self.API_URL.format(model=self.model),
                headers={"x-goog-api-key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except requests.RequestException as e:
            _logger.error(f"Gemini request failed: {e}")
            raise InsightsUnavailable(f"Gemini request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            _logger.error(f"Gemini response parsing failed: {e}")
            raise InsightsUnavailable(f"Invalid response from Gemini: {e}") from e

        if not text:
            raise InsightsUnavailable("Gemini returned no text.")
        return text

    def summarize_business(
        self, stats: CatalogStats, recent_transactions: Sequence[Transaction]
    ) -> str:
        return self._generate(business_prompt(stats, recent_transactions))

    def describe_product(self, name: str, category: str) -> str:
        return self._generate(product_prompt(name, category))


async def safe_summarize(
    provider: InsightsProvider,
    stats: CatalogStats,
    recent_transactions: Sequence[Transaction],
) -> str:
    """Run the provider off the event loop; never raises."""
    try:
        return await asyncio.to_thread(
            provider.summarize_business, stats, list(recent_transactions)
        )
    except asyncio.CancelledError:
        raise
    except Exception as e:
        _logger.warning(f"Business insights unavailable: {e}")
        return INSIGHTS_UNAVAILABLE


async def safe_describe(provider: InsightsProvider, name: str, category: str) -> str:
    try:
        return await asyncio.to_thread(provider.describe_product, name, category)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        _logger.warning(f"Product description unavailable: {e}")
        return DESCRIPTION_UNAVAILABLE
