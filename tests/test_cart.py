import unittest
import warnings

from helpers import FAR_FUTURE, LONG_AGO, MemoryStore, make_product

from pos.cart import Cart
from pos.catalog import Catalog
from pos.errors import ExpiredWarning, InvalidState, OutOfStock, StockExceeded


class CartTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        self.catalog = Catalog(self.store)
        await self.catalog.load(
            seed=[
                make_product(id="1", name="Organic Almond Milk", stock=3, expiry_date=FAR_FUTURE),
                make_product(id="2", name="Whole Wheat Sourdough", stock=5, expiry_date=LONG_AGO),
                make_product(id="4", name="Honeycrisp Apple", stock=0),
            ]
        )
        self.cart = Cart(self.catalog)

    def test_add_item_increments_quantity(self):
        milk = self.catalog.get("1")
        self.cart.add_item(milk)
        line = self.cart.add_item(milk)
        self.assertEqual(line.quantity, 2)
        self.assertEqual(len(self.cart), 1)
        self.assertEqual(self.cart.item_count, 2)
        self.assertIn("1", self.cart)

    def test_out_of_stock_leaves_cart_empty(self):
        with self.assertRaises(OutOfStock):
            self.cart.add_item(self.catalog.get("4"))
        self.assertTrue(self.cart.is_empty)

    def test_add_beyond_stock_raises(self):
        milk = self.catalog.get("1")
        for _ in range(3):
            self.cart.add_item(milk)
        with self.assertRaises(StockExceeded) as ctx:
            self.cart.add_item(milk)
        self.assertEqual(ctx.exception.stock, 3)
        self.assertEqual(self.cart.get("1").quantity, 3)

    def test_expired_product_warns_but_is_added(self):
        with self.assertWarns(ExpiredWarning):
            self.cart.add_item(self.catalog.get("2"))
        self.assertEqual(self.cart.get("2").quantity, 1)

    def test_fresh_product_does_not_warn(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            self.cart.add_item(self.catalog.get("1"))
        self.assertEqual(caught, [])

    def test_stock_is_read_from_catalog_not_snapshot(self):
        stale = self.catalog.get("4").with_stock(50)
        with self.assertRaises(OutOfStock):
            self.cart.add_item(stale)

    async def test_quantity_edit_checks_current_stock(self):
        milk = self.catalog.get("1")
        self.cart.add_item(milk)
        self.cart.add_item(milk)
        await self.catalog.update_product(milk.with_stock(1))
        # above stock: ignored
        line = self.cart.set_quantity_delta("1", 1)
        self.assertEqual(line.quantity, 2)

    def test_quantity_delta(self):
        milk = self.catalog.get("1")
        self.cart.add_item(milk)
        self.assertEqual(self.cart.set_quantity_delta("1", 2).quantity, 3)
        # ceiling reached, no change
        self.assertEqual(self.cart.set_quantity_delta("1", 10).quantity, 3)
        self.assertEqual(self.cart.set_quantity_delta("1", -1).quantity, 2)

    def test_quantity_delta_to_zero_removes_line(self):
        self.cart.add_item(self.catalog.get("1"))
        self.assertIsNone(self.cart.set_quantity_delta("1", -1))
        self.assertNotIn("1", self.cart)
        self.assertIsNone(self.cart.set_quantity_delta("1", 1))

    def test_remove_and_clear(self):
        self.cart.add_item(self.catalog.get("1"))
        with self.assertWarns(ExpiredWarning):
            self.cart.add_item(self.catalog.get("2"))
        self.cart.remove_item("1")
        self.assertEqual([line.product_id for line in self.cart], ["2"])
        self.cart.remove_item("missing")
        self.cart.clear()
        self.assertTrue(self.cart.is_empty)

    def test_frozen_cart_rejects_mutations(self):
        milk = self.catalog.get("1")
        self.cart.add_item(milk)
        self.cart.freeze()
        with self.assertRaises(InvalidState):
            self.cart.add_item(milk)
        with self.assertRaises(InvalidState):
            self.cart.set_quantity_delta("1", 1)
        with self.assertRaises(InvalidState):
            self.cart.remove_item("1")
        with self.assertRaises(InvalidState):
            self.cart.clear()
        self.cart.thaw()
        self.cart.clear()
        self.assertTrue(self.cart.is_empty)


if __name__ == "__main__":
    unittest.main()
