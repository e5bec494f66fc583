import json
import logging
import tempfile
import unittest
from pathlib import Path

from emotionscore.log_utils import CustomFormatter, configure_logging, configure_logging_from_settings
from emotionscore.runtime_settings import (
    build_runtime_settings,
    get_runtime_setting,
    load_config_file,
    load_dotenv_file,
    set_runtime_setting,
)


class TestRuntimeSettings(unittest.TestCase):
    def test_defaults_cover_every_section(self):
        settings = build_runtime_settings(config_data={}, env_data={})
        self.assertEqual(settings["cache"]["capacity"], 1000)
        self.assertEqual(settings["cache"]["ttl_minutes"], 60.0)
        self.assertEqual(settings["cache"]["similarity_threshold"], 0.8)
        self.assertEqual(settings["rate_limit"]["window_ms"], 60000)
        self.assertEqual(settings["rate_limit"]["max_requests"], 20)
        self.assertEqual(settings["affect"]["negation_inversion"], 0.8)
        self.assertEqual(settings["affect"]["negation_dampening"], 0.7)
        self.assertEqual(settings["providers"]["entries"], [])

    def test_build_runtime_settings_uses_config_runtime_overrides(self):
        config_data = {
            "runtime": {
                "cache": {"capacity": 50},
                "rate_limit": {"max_requests": 5},
            }
        }
        settings = build_runtime_settings(config_data=config_data, env_data={})
        self.assertEqual(settings["cache"]["capacity"], 50)
        self.assertEqual(settings["cache"]["ttl_minutes"], 60.0)
        self.assertEqual(settings["rate_limit"]["max_requests"], 5)

    def test_env_overrides_win_over_config(self):
        settings = build_runtime_settings(
            config_data={"runtime": {"cache": {"similarity_threshold": 0.9}}},
            env_data={
                "EMOTIONSCORE_CACHE_SIMILARITY_THRESHOLD": "0.65",
                "EMOTIONSCORE_RATE_LIMIT_WINDOW_MS": "1000",
                "EMOTIONSCORE_LOG_COLORED": "false",
            },
        )
        self.assertEqual(settings["cache"]["similarity_threshold"], 0.65)
        self.assertEqual(settings["rate_limit"]["window_ms"], 1000)
        self.assertFalse(settings["logging"]["colored"])

    def test_prefixed_host_key_takes_precedence_over_legacy_key(self):
        legacy = build_runtime_settings(config_data={}, env_data={"OLLAMA_HOST": "http://legacy:11434"})
        self.assertEqual(legacy["providers"]["default_ollama_host"], "http://legacy:11434")

        overridden = build_runtime_settings(
            config_data={},
            env_data={
                "OLLAMA_HOST": "http://legacy:11434",
                "EMOTIONSCORE_OLLAMA_HOST": "http://preferred:11434",
            },
        )
        self.assertEqual(overridden["providers"]["default_ollama_host"], "http://preferred:11434")

    def test_invalid_env_values_are_ignored(self):
        settings = build_runtime_settings(
            config_data={},
            env_data={"EMOTIONSCORE_CACHE_CAPACITY": "lots"},
        )
        self.assertEqual(settings["cache"]["capacity"], 1000)

    def test_get_and_set_runtime_setting_paths(self):
        settings = {}
        set_runtime_setting(settings, "fallback.seed", 7)
        self.assertEqual(get_runtime_setting(settings, "fallback.seed"), 7)
        self.assertEqual(get_runtime_setting(settings, "fallback.missing", "x"), "x")
        self.assertIsNone(get_runtime_setting(settings, "nothing.here"))

    def test_load_dotenv_file_strips_quotes_and_export(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            dotenv_path = Path(tmp_dir) / ".env"
            dotenv_path.write_text(
                "# comment\nexport EMOTIONSCORE_TEST_A='one'\nEMOTIONSCORE_TEST_B=\"two\"\nnot a pair\n",
                encoding="utf-8",
            )
            loaded = load_dotenv_file(dotenv_path, override=False)
        self.assertEqual(loaded["EMOTIONSCORE_TEST_A"], "one")
        self.assertEqual(loaded["EMOTIONSCORE_TEST_B"], "two")
        self.assertNotIn("not a pair", loaded)

    def test_load_config_file_missing_and_present(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            missing = Path(tmp_dir) / "missing.json"
            self.assertEqual(load_config_file(missing), {})

            config_path = Path(tmp_dir) / "config.json"
            config_path.write_text(json.dumps({"runtime": {"cache": {"capacity": 3}}}), encoding="utf-8")
            settings = build_runtime_settings(config_data=load_config_file(config_path), env_data={})
        self.assertEqual(settings["cache"]["capacity"], 3)


class TestLogUtils(unittest.TestCase):
    def tearDown(self):
        package_logger = logging.getLogger("emotionscore")
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
        package_logger.propagate = True
        package_logger.setLevel(logging.NOTSET)

    def test_configure_logging_installs_single_handler(self):
        configure_logging("DEBUG")
        package_logger = configure_logging("warning", colored=False)
        self.assertEqual(len(package_logger.handlers), 1)
        self.assertEqual(package_logger.level, logging.WARNING)
        self.assertNotIsInstance(package_logger.handlers[0].formatter, CustomFormatter)

    def test_unknown_level_defaults_to_info(self):
        package_logger = configure_logging("chatty")
        self.assertEqual(package_logger.level, logging.INFO)
        self.assertIsInstance(package_logger.handlers[0].formatter, CustomFormatter)

    def test_logging_section_of_settings_is_applied(self):
        settings = build_runtime_settings(
            config_data={"runtime": {"logging": {"level": "ERROR", "colored": False}}},
            env_data={},
        )
        package_logger = configure_logging_from_settings(settings)
        self.assertEqual(package_logger.level, logging.ERROR)
        self.assertEqual(len(package_logger.handlers), 1)
        self.assertNotIsInstance(package_logger.handlers[0].formatter, CustomFormatter)

    def test_disabled_logging_leaves_handlers_alone(self):
        settings = build_runtime_settings(config_data={}, env_data={"EMOTIONSCORE_LOG_ENABLED": "false"})
        before = list(logging.getLogger("emotionscore").handlers)
        self.assertIsNone(configure_logging_from_settings(settings))
        self.assertEqual(logging.getLogger("emotionscore").handlers, before)

    def test_custom_formatter_colours_by_level(self):
        record = logging.LogRecord("emotionscore.test", logging.ERROR, __file__, 1, "boom", None, None)
        formatted = CustomFormatter().format(record)
        self.assertTrue(formatted.startswith(CustomFormatter.red))
        self.assertIn("boom", formatted)


if __name__ == "__main__":
    unittest.main()
