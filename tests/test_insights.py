import unittest
from decimal import Decimal
from unittest import mock

import requests
from helpers import make_transaction

from insights.provider import (
    DESCRIPTION_UNAVAILABLE,
    INSIGHTS_UNAVAILABLE,
    GeminiInsightsProvider,
    InsightsUnavailable,
    business_prompt,
    safe_describe,
    safe_summarize,
)
from pos.reports import CatalogStats

STATS = CatalogStats(
    total_revenue=Decimal("1234.50"),
    low_stock=("Bread", "Apple"),
    expired=(),
    recent_transaction_count=1,
)


def gemini_reply(text):
    response = mock.Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


class GeminiProviderTestCase(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.provider = GeminiInsightsProvider("key-123", model="m-1", session=self.session)

    def test_describe_product(self):
        self.session.post.return_value = gemini_reply("  Crisp and sweet.  ")
        self.assertEqual(self.provider.describe_product("Apple", "Produce"), "Crisp and sweet.")

        args, kwargs = self.session.post.call_args
        self.assertIn("/models/m-1:generateContent", args[0])
        self.assertEqual(kwargs["headers"], {"x-goog-api-key": "key-123"})
        prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
        self.assertIn('"Apple"', prompt)
        self.assertIn("timeout", kwargs)

    def test_missing_key_never_calls_out(self):
        provider = GeminiInsightsProvider(None, session=self.session)
        with self.assertRaises(InsightsUnavailable):
            provider.describe_product("Apple", "Produce")
        self.session.post.assert_not_called()

    def test_http_error(self):
        response = gemini_reply("")
        response.raise_for_status.side_effect = requests.HTTPError("403")
        self.session.post.return_value = response
        with self.assertRaises(InsightsUnavailable):
            self.provider.summarize_business(STATS, [])

    def test_network_error(self):
        self.session.post.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(InsightsUnavailable):
            self.provider.summarize_business(STATS, [])

    def test_malformed_or_empty_reply(self):
        response = mock.Mock()
        response.raise_for_status.return_value = None
        response.json.return_value = {"candidates": []}
        self.session.post.return_value = response
        with self.assertRaises(InsightsUnavailable):
            self.provider.describe_product("Apple", "Produce")

        self.session.post.return_value = gemini_reply("   ")
        with self.assertRaises(InsightsUnavailable):
            self.provider.describe_product("Apple", "Produce")

    def test_business_prompt(self):
        prompt = business_prompt(STATS, [make_transaction()])
        self.assertIn("$1,234.50", prompt)
        self.assertIn("Bread, Apple", prompt)
        self.assertIn("Expired/Expiring Items: None", prompt)
        self.assertIn("Recent Transaction Count: 1", prompt)


class BrokenProvider:
    def summarize_business(self, stats, recent_transactions):
        raise RuntimeError("boom")

    def describe_product(self, name, category):
        raise InsightsUnavailable("no key")


class SafeCallsTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_failures_become_fallback_text(self):
        self.assertEqual(await safe_summarize(BrokenProvider(), STATS, []), INSIGHTS_UNAVAILABLE)
        self.assertEqual(
            await safe_describe(BrokenProvider(), "Apple", "Produce"), DESCRIPTION_UNAVAILABLE
        )

    async def test_missing_key_falls_back(self):
        provider = GeminiInsightsProvider(None)
        self.assertEqual(await safe_summarize(provider, STATS, []), INSIGHTS_UNAVAILABLE)

    async def test_success_passes_through(self):
        session = mock.Mock(spec=requests.Session)
        session.post.return_value = gemini_reply("- Restock bread.")
        provider = GeminiInsightsProvider("k", session=session)
        self.assertEqual(
            await safe_summarize(provider, STATS, [make_transaction()]), "- Restock bread."
        )


if __name__ == "__main__":
    unittest.main()
