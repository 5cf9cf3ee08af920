from __future__ import annotations

import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

import config_manager
from config import DEFAULT_CONFIG


class ConfigManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp, "sub", "config.json")

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_missing_file_is_created_with_defaults(self) -> None:
        cfg = config_manager.load_config(self.path)
        self.assertEqual(cfg, DEFAULT_CONFIG)
        self.assertTrue(os.path.exists(self.path))

    def test_missing_keys_are_migrated_and_saved(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"api_key": "k", "models": {"chat": "custom"}}, f)

        cfg = config_manager.load_config(self.path)
        self.assertEqual(cfg["api_key"], "k")
        self.assertEqual(cfg["models"]["chat"], "custom")
        self.assertEqual(cfg["models"]["analysis"], DEFAULT_CONFIG["models"]["analysis"])
        self.assertIn("window_geometry", cfg)

        with open(self.path, encoding="utf-8") as f:
            self.assertIn("seed_desktop", json.load(f))

    def test_corrupt_file_resets_to_defaults(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertEqual(config_manager.load_config(self.path), DEFAULT_CONFIG)

    def test_save_then_load(self) -> None:
        cfg = config_manager.load_config(self.path)
        cfg["window_geometry"] = "800x600"
        config_manager.save_config(cfg, self.path)
        self.assertEqual(config_manager.load_config(self.path)["window_geometry"], "800x600")

    def test_api_key_prefers_config_then_environment(self) -> None:
        with mock.patch.dict(os.environ, {"GEMINI_API_KEY": "from-env"}, clear=True):
            self.assertEqual(config_manager.get_api_key({"api_key": " cfg "}), "cfg")
            self.assertEqual(config_manager.get_api_key({"api_key": ""}), "from-env")
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(config_manager.get_api_key({}))

    def test_get_model_falls_back_to_default(self) -> None:
        self.assertEqual(config_manager.get_model({"models": {"chat": "x"}}, "chat"), "x")
        self.assertEqual(config_manager.get_model({}, "scenario"), DEFAULT_CONFIG["models"]["scenario"])


if __name__ == "__main__":
    unittest.main()
