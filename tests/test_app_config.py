from __future__ import annotations

import json
import os
import tempfile
import unittest
from unittest import mock

from auth.auth_service import extract_display_name, extract_token
from services import app_config
from services.app_config import AppConfig, clear_app_config_cache, load_app_config, save_app_config


class AppConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "config", "app_config.json")
        env = {k: v for k, v in os.environ.items() if k != "API_BASE_URL"}
        self._env = mock.patch.dict(os.environ, env, clear=True)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()
        clear_app_config_cache()

    def test_missing_file_writes_defaults(self) -> None:
        cfg = load_app_config(self.path)

        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(cfg.api.base_url, "https://api.seregelagebeya.com")
        self.assertEqual(cfg.lists.debounce_ms, 500)
        self.assertEqual(cfg.lists.page_sizes, [5, 10, 20, 50, 100])
        self.assertEqual(cfg.lists.default_page_size, 10)
        self.assertTrue(cfg.errors.redirect_on_server_error)
        self.assertEqual(cfg.auth.token_storage_key, "authToken")
        self.assertEqual(cfg.ui.navigation.main_route, "loans")

        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        self.assertIn("lists", raw)
        self.assertEqual(raw["api"]["timeout_s"], 10.0)

    def test_partial_file_keeps_defaults_for_missing_keys(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"api": {"timeout_s": 3}, "errors": {"redirect_on_server_error": False}}, f)

        cfg = load_app_config(self.path)

        self.assertEqual(cfg.api.timeout_s, 3)
        self.assertEqual(cfg.api.base_url, "https://api.seregelagebeya.com")
        self.assertFalse(cfg.errors.redirect_on_server_error)
        self.assertTrue(cfg.errors.redirect_on_transport_error)

    def test_default_page_size_outside_sizes_is_corrected(self) -> None:
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"lists": {"page_sizes": [25, 50], "default_page_size": 10}}, f)

        cfg = load_app_config(self.path)

        self.assertEqual(cfg.lists.default_page_size, 25)

    def test_env_base_url_override(self) -> None:
        save_app_config(AppConfig(), self.path)
        with mock.patch.dict(os.environ, {"API_BASE_URL": "http://localhost:8000"}):
            cfg = load_app_config(self.path)

        self.assertEqual(cfg.api.base_url, "http://localhost:8000")

    def test_config_path_env(self) -> None:
        clear_app_config_cache()
        with mock.patch.dict(os.environ, {"APP_CONFIG_PATH": self.path}):
            self.assertEqual(app_config.get_config_path(), self.path)
            cfg = app_config.get_app_config()
        self.assertTrue(os.path.exists(self.path))
        self.assertIsInstance(cfg, AppConfig)


class LoginResponseTests(unittest.TestCase):
    def test_token_at_top_level_or_under_data(self) -> None:
        self.assertEqual(extract_token({"token": "abc"}, "token"), "abc")
        self.assertEqual(extract_token({"data": {"token": "xyz"}}, "token"), "xyz")
        self.assertEqual(extract_token({"data": {"access_token": "t"}}, "token"), "t")
        self.assertEqual(extract_token({"data": []}, "token"), "")
        self.assertEqual(extract_token(None, "token"), "")

    def test_display_name(self) -> None:
        payload = {"data": {"token": "abc", "user": {"first_name": "Abebe", "last_name": "Kebede"}}}
        self.assertEqual(extract_display_name(payload), "Abebe Kebede")
        self.assertEqual(extract_display_name({"user": {"name": "Admin"}}), "Admin")
        self.assertEqual(extract_display_name({}), "")


if __name__ == "__main__":
    unittest.main()
