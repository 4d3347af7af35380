import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dmbot import config

_ENV_KEYS = ["DMBOT_TOKEN", "DMBOT_PREFIX", "DMBOT_DB_PATH", "DMBOT_FFMPEG", "LOG_LEVEL"]


class LoadSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._env = patch.dict(os.environ, {}, clear=False)
        self._env.start()
        for key in _ENV_KEYS:
            os.environ.pop(key, None)
        self._dotenv = patch("dmbot.config.dotenv.load_dotenv")
        self.load_dotenv = self._dotenv.start()

    def tearDown(self) -> None:
        self._dotenv.stop()
        self._env.stop()

    def test_missing_token_is_fatal(self) -> None:
        with self.assertRaises(config.ConfigError):
            config.load_settings()
        self.load_dotenv.assert_called_once()

    def test_empty_token_is_fatal(self) -> None:
        os.environ["DMBOT_TOKEN"] = ""
        with self.assertRaises(config.ConfigError):
            config.load_settings()

    def test_defaults(self) -> None:
        os.environ["DMBOT_TOKEN"] = "secret"

        settings = config.load_settings()

        self.assertEqual(settings.token, "secret")
        self.assertEqual(settings.command_prefix, "!")
        self.assertEqual(settings.ffmpeg_executable, "ffmpeg")
        self.assertEqual(settings.log_level, "INFO")
        self.assertEqual(os.path.basename(settings.db_path), "dmbot.db")
        self.assertTrue(os.path.isabs(settings.db_path))

    def test_overrides(self) -> None:
        os.environ.update(
            {
                "DMBOT_TOKEN": "secret",
                "DMBOT_PREFIX": "?",
                "DMBOT_DB_PATH": "/data/songs.db",
                "DMBOT_FFMPEG": "/usr/local/bin/ffmpeg",
                "LOG_LEVEL": "debug",
            }
        )

        settings = config.load_settings()

        self.assertEqual(settings.command_prefix, "?")
        self.assertEqual(settings.db_path, "/data/songs.db")
        self.assertEqual(settings.ffmpeg_executable, "/usr/local/bin/ffmpeg")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_unknown_log_level_falls_back_to_info(self) -> None:
        os.environ.update({"DMBOT_TOKEN": "secret", "LOG_LEVEL": "verbose"})

        with self.assertLogs("dmbot.config", level="WARNING"):
            settings = config.load_settings()

        self.assertEqual(settings.log_level, "INFO")


if __name__ == "__main__":
    unittest.main()
