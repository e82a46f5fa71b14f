import os
import tempfile
import unittest
from unittest import mock

import helpers  # noqa: F401

from utils.config import DEFAULT_DB_PATH, DEFAULT_GEMINI_MODEL, load_settings

ENV_KEYS = ("RETAILPULSE_DB_PATH", "GEMINI_API_KEY", "GEMINI_MODEL", "INSIGHTS_TIMEOUT", "DEBUG")


class SettingsTestCase(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ, {}, clear=False)
        patcher.start()
        self.addCleanup(patcher.stop)
        for key in ENV_KEYS:
            os.environ.pop(key, None)
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        # an empty .env keeps load_dotenv from searching parent directories
        self.empty_env = os.path.join(self.temp_dir.name, ".env")
        open(self.empty_env, "w").close()

    def test_defaults(self):
        s = load_settings(self.empty_env)
        self.assertEqual(s.db_path, DEFAULT_DB_PATH)
        self.assertIsNone(s.gemini_api_key)
        self.assertEqual(s.gemini_model, DEFAULT_GEMINI_MODEL)
        self.assertEqual(s.insights_timeout, 20.0)
        self.assertFalse(s.debug)

    def test_environment(self):
        os.environ.update(
            {
                "RETAILPULSE_DB_PATH": "/tmp/pos.sqlite",
                "GEMINI_API_KEY": "abc",
                "INSIGHTS_TIMEOUT": "5",
                "DEBUG": "1",
            }
        )
        s = load_settings(self.empty_env)
        self.assertEqual(s.db_path, "/tmp/pos.sqlite")
        self.assertEqual(s.gemini_api_key, "abc")
        self.assertEqual(s.insights_timeout, 5.0)
        self.assertTrue(s.debug)

    def test_env_file(self):
        with open(self.empty_env, "w") as f:
            f.write("GEMINI_API_KEY=from-file\nGEMINI_MODEL=gemini-pro\n")
        s = load_settings(self.empty_env)
        self.assertEqual(s.gemini_api_key, "from-file")
        self.assertEqual(s.gemini_model, "gemini-pro")

    def test_bad_timeout_falls_back(self):
        os.environ["INSIGHTS_TIMEOUT"] = "soon"
        self.assertEqual(load_settings(self.empty_env).insights_timeout, 20.0)


if __name__ == "__main__":
    unittest.main()
