import unittest
from datetime import date
from decimal import Decimal

from helpers import make_product, make_transaction

from pos import reports

TODAY = date(2024, 6, 1)


def catalog():
    return [
        make_product(id="1", name="Milk", stock=24, expiry_date=date(2024, 12, 31)),
        make_product(id="2", name="Bread", stock=5, expiry_date=date(2023, 10, 20)),
        make_product(id="3", name="Chocolate", stock=100, expiry_date=date(2025, 5, 15)),
        make_product(id="4", name="Apple", stock=0),
        make_product(id="5", name="Water", stock=9),
    ]


class ReportsTestCase(unittest.TestCase):
    def test_summarize(self):
        txs = [make_transaction(id="a", total="14.58"), make_transaction(id="b", total="5.42")]
        s = reports.summarize(catalog(), txs, as_of=TODAY)
        self.assertEqual(s.total_revenue, Decimal("20.00"))
        self.assertEqual(s.total_transactions, 2)
        self.assertEqual(s.low_stock_count, 3)
        self.assertEqual(s.expired_count, 1)

    def test_summarize_empty(self):
        s = reports.summarize([], [])
        self.assertEqual(s.total_revenue, Decimal("0"))
        self.assertEqual(s.total_transactions, 0)

    def test_attention_items_expired_first_without_duplicates(self):
        items = reports.attention_items(catalog(), as_of=TODAY)
        self.assertEqual(
            [(p.id, status) for p, status in items],
            [("2", "Expired"), ("4", "Out of Stock"), ("5", "Low: 9")],
        )

    def test_attention_items_limit(self):
        products = [make_product(id=str(i), stock=1) for i in range(8)]
        self.assertEqual(len(reports.attention_items(products, as_of=TODAY)), 5)

    def test_catalog_stats(self):
        txs = [make_transaction(id=str(i)) for i in range(12)]
        stats = reports.catalog_stats(catalog(), txs, as_of=TODAY)
        self.assertEqual(stats.low_stock, ("Bread", "Apple", "Water"))
        self.assertEqual(stats.expired, ("Bread",))
        self.assertEqual(stats.recent_transaction_count, reports.RECENT_TRANSACTIONS)
        self.assertEqual(stats.total_revenue, Decimal("10.80") * 12)

    def test_payment_breakdown(self):
        txs = [
            make_transaction(id="a", total="10.00", method="cash"),
            make_transaction(id="b", total="2.50", method="cash"),
            make_transaction(id="c", total="7.00", method="digital"),
        ]
        breakdown = reports.payment_breakdown(txs)
        self.assertEqual(breakdown["cash"], (2, Decimal("12.50")))
        self.assertEqual(breakdown["card"], (0, Decimal("0")))
        self.assertEqual(breakdown["digital"], (1, Decimal("7.00")))


if __name__ == "__main__":
    unittest.main()
