import json
import os
import unittest

from helpers import TempStoreMixin, make_product

from db import serde
from db.store import SqliteStore
from main import export_catalog, import_catalog, main, parse_arguments
from pos.catalog import Catalog
from utils.config import Settings


class CatalogTransferTestCase(TempStoreMixin, unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        super().setUp()
        self.settings = Settings(db_path=self.db_path)
        self.json_path = os.path.join(self.temp_dir.name, "catalog.json")

    async def test_export_writes_seeded_catalog(self):
        count = await export_catalog(self.settings, self.json_path)
        self.assertEqual(count, 5)
        with open(self.json_path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data[0]["sku"], "BV-001")

    async def test_import_upserts_by_id(self):
        incoming = [
            make_product(id="1", sku="BV-001", name="Almond Milk 1L", stock=99),
            make_product(id="new", sku="NW-1", name="Granola"),
        ]
        with open(self.json_path, "w", encoding="utf-8") as f:
            f.write(serde.dump_catalog(incoming))

        self.assertEqual(await import_catalog(self.settings, self.json_path), 2)

        catalog = Catalog(SqliteStore(self.db_path))
        await catalog.load()
        self.assertEqual(len(catalog), 6)
        self.assertEqual(catalog.get("1").stock, 99)
        self.assertEqual(catalog.get("new").name, "Granola")


class CliTestCase(TempStoreMixin, unittest.TestCase):
    def test_parse_arguments(self):
        args = parse_arguments(["--db", "x.sqlite", "--debug"])
        self.assertEqual(args.db, "x.sqlite")
        self.assertTrue(args.debug)
        self.assertIsNone(args.export_catalog)

    def test_export_exit_code(self):
        out = os.path.join(self.temp_dir.name, "out.json")
        self.assertEqual(main(["--db", self.db_path, "--export-catalog", out]), 0)
        self.assertTrue(os.path.exists(out))

    def test_import_missing_file_fails(self):
        missing = os.path.join(self.temp_dir.name, "missing.json")
        self.assertEqual(main(["--db", self.db_path, "--import-catalog", missing]), 1)

    def test_import_rejects_non_numeric_price(self):
        path = os.path.join(self.temp_dir.name, "bad.json")
        for price in ("NaN", "twelve"):
            record = {
                "id": "9", "sku": "X-9", "name": "Bad",
                "price": price, "category": "General", "stock": 1,
            }
            with open(path, "w", encoding="utf-8") as f:
                json.dump([record], f)
            self.assertEqual(main(["--db", self.db_path, "--import-catalog", path]), 1)


if __name__ == "__main__":
    unittest.main()
